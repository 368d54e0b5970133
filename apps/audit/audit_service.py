"""
Centralized audit logging service.

Use log_action() to record membership and task mutations. A failure to write
the audit row is logged and never breaks the calling request.

Usage:
    from apps.audit.audit_service import log_action, AuditAction

    log_action(
        org_id=org.id,
        action=AuditAction.ADD_MEMBER,
        target_type="User",
        target_id=member.id,
        target_label=member.email,
        performed_by_id=requester.id,
    )
"""
import logging
from uuid import UUID
from typing import Optional

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """
    Canonical string constants for audit log actions.
    """
    # ── Organizations ─────────────────────────────────────────────────
    CREATE_ORGANIZATION = "CREATE_ORGANIZATION"
    ADD_MEMBER = "ADD_MEMBER"
    REMOVE_MEMBER = "REMOVE_MEMBER"

    # ── Tasks ─────────────────────────────────────────────────────────
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"


def log_action(
    *,
    org_id: UUID,
    action: str,
    target_type: str,
    target_id: UUID,
    performed_by_id: Optional[UUID],
    target_label: str = "",
    context: Optional[dict] = None,
) -> Optional[AuditLog]:
    """
    Create an AuditLog entry.

    Args:
        org_id:           Organization UUID for tenant isolation.
        action:           Constant from AuditAction.
        target_type:      Type of the object acted on (e.g. "Task").
        target_id:        Primary key of the object acted on.
        performed_by_id:  Acting user's id, or None for system actions.
        target_label:     Optional human-readable description.
        context:          Optional JSON-serializable metadata.

    Returns:
        The created AuditLog, or None if the write failed.
    """
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                org_id=org_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                target_label=target_label[:255],
                performed_by_id=performed_by_id,
                context=context or {},
            )
    except Exception:
        logger.exception("Failed to write audit log %s for %s %s", action, target_type, target_id)
        return None
