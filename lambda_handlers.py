"""
Lambda Handlers - Entry points for AWS Lambda functions.

This module provides Lambda handlers for:
1. Django API (via Mangum) - HTTP requests through API Gateway
2. Scheduled Events - EventBridge trigger for membership reconciliation

The handlers use Django's setup to access models and services.
"""

import os
import json
import logging

# Configure Django before importing any models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

from mangum import Mangum

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


_asgi_handler = None


def api_handler(event, context):
    """
    AWS Lambda handler for HTTP requests via API Gateway.

    Wraps Django's ASGI application; the wrapper is built once per container.
    """
    global _asgi_handler

    if _asgi_handler is None:
        from config.asgi import application
        _asgi_handler = Mangum(application, lifespan="off")

    return _asgi_handler(event, context)


def scheduled_reconcile_memberships(event, context):
    """
    EventBridge scheduled handler: repair inconsistent memberships.

    Same job Celery beat runs in non-Lambda deployments.
    """
    from apps.organizations.services import get_membership_manager

    logger.info("Running scheduled reconcile_memberships")
    report = get_membership_manager().reconcile_all()

    return {
        'statusCode': 200,
        'body': json.dumps({
            'users_checked': report.users_checked,
            'organizations_checked': report.organizations_checked,
            'repairs': len(report.repairs),
        })
    }
