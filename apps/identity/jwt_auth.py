"""
JWT Authentication utilities for Taskboard.

Provides bearer token generation and validation. Tokens are issued at
registration and login only; they are never refreshed when a user's
organization changes, so the ``org_id`` claim is informational. Request
authorization always re-reads the organization from the User record.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
from django.conf import settings


JWT_ALGORITHM = 'HS256'
TOKEN_TYPE_ACCESS = 'access'


def create_access_token(user_id: UUID, org_id: Optional[UUID]) -> str:
    """
    Create an expiry-bounded access token.

    Carries the user id (``sub``) and the organization id at issue time.
    """
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'org_id': str(org_id) if org_id else None,
        'exp': now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        'iat': now,
        'type': TOKEN_TYPE_ACCESS,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload if valid, None if invalid/expired.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[UUID]:
    payload = decode_token(token)
    if payload and payload.get('type') == TOKEN_TYPE_ACCESS and 'sub' in payload:
        try:
            return UUID(payload['sub'])
        except ValueError:
            return None
    return None


def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
