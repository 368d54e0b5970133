"""
Domain error taxonomy.

Services raise these; the API layer (config.urls) renders them as
``{"error": <kind>, "message": <message>}`` with the matching status code.

Usage:
    from apps.core.exceptions import NotFound

    if org is None:
        raise NotFound("Organization not found.")
"""


class DomainError(Exception):
    """Base class for every failure surfaced to API clients."""

    kind = "DomainError"
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(DomainError):
    """Malformed or missing input."""
    kind = "ValidationError"
    default_message = "Invalid input."


class AlreadyExists(DomainError):
    kind = "AlreadyExists"
    default_message = "Record already exists."


class DuplicateName(DomainError):
    kind = "DuplicateName"
    default_message = "Organization with this name already exists."


class AlreadyMember(DomainError):
    kind = "AlreadyMember"
    default_message = "User is already part of an organization."


class InvalidOperation(DomainError):
    """Semantically disallowed, e.g. the owner removing themselves."""
    kind = "InvalidOperation"
    default_message = "Operation not allowed."


class AuthenticationFailed(DomainError):
    kind = "AuthenticationFailed"
    default_message = "Invalid credentials."


class NotFound(DomainError):
    kind = "NotFound"
    status_code = 404
    default_message = "Not found."


class Forbidden(DomainError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Permission denied."


class InternalError(DomainError):
    kind = "InternalError"
    status_code = 500
    default_message = "Server error."
