from celery import shared_task
import logging

from .services import get_membership_manager

logger = logging.getLogger(__name__)


@shared_task
def reconcile_memberships():
    """
    Repair user/organization links left inconsistent.

    Scheduled hourly by Celery beat (config.celery).
    """
    report = get_membership_manager().reconcile_all()
    if report.repairs:
        logger.warning("Reconciliation applied %d repairs", len(report.repairs))
    return {
        "users_checked": report.users_checked,
        "organizations_checked": report.organizations_checked,
        "repairs": len(report.repairs),
    }
