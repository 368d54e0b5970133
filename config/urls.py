"""
URL configuration for Taskboard project.
"""
import logging

from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI
from ninja.errors import ValidationError as NinjaValidationError

from apps.core.exceptions import DomainError, InternalError, ValidationError

logger = logging.getLogger('apps.api')

api = NinjaAPI(
    title="Taskboard API",
    version="1.0.0",
    description="Multi-tenant task tracking: organizations, members and tasks",
    docs_url="/docs",
)


@api.exception_handler(DomainError)
def on_domain_error(request, exc: DomainError):
    return api.create_response(request, exc.to_dict(), status=exc.status_code)


@api.exception_handler(NinjaValidationError)
def on_request_validation_error(request, exc: NinjaValidationError):
    error = ValidationError("Invalid request body or parameters.")
    body = error.to_dict()
    body["details"] = exc.errors
    return api.create_response(request, body, status=error.status_code)


@api.exception_handler(Exception)
def on_unexpected_error(request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    error = InternalError()
    return api.create_response(request, error.to_dict(), status=error.status_code)


from apps.identity.api import router as identity_router
from apps.organizations.api import router as organizations_router
from apps.tracker.api import router as tracker_router

api.add_router("/auth/", identity_router)
api.add_router("/organizations/", organizations_router)
api.add_router("/tasks/", tracker_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
