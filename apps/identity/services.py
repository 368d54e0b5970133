"""Services for Identity app."""
import logging
from typing import Dict, Iterable, Optional
from uuid import UUID

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from apps.core.exceptions import AlreadyExists, AuthenticationFailed, ValidationError
from .models import User, UserRole
from .dtos import UserDTO, UserSummary, RegisterIn

logger = logging.getLogger(__name__)


def to_user_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        org_id=user.org_id,
    )


def get_active_user(user_id: UUID) -> Optional[User]:
    return User.objects.filter(id=user_id, is_active=True).first()


def register_user(payload: RegisterIn) -> User:
    """
    Create an unaffiliated user.

    Raises ValidationError for missing/invalid fields and AlreadyExists if
    the email is taken.
    """
    name = (payload.name or "").strip()
    email = (payload.email or "").strip()
    if not name or not email or not payload.password:
        raise ValidationError("Name, email and password are required.")

    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Enter a valid email address.")

    try:
        validate_password(payload.password)
    except DjangoValidationError as e:
        raise ValidationError(" ".join(e.messages))

    if User.objects.filter(email=email).exists():
        raise AlreadyExists("User already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=payload.password,
                name=name,
                role=UserRole.USER,
                org_id=None,
            )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise AlreadyExists("User already exists")

    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(request, email: str, password: str) -> User:
    """Verify credentials; unknown email and wrong password fail identically."""
    user = authenticate(request, email=email, password=password)
    if user is None:
        raise AuthenticationFailed("Invalid credentials")
    return user


def expand_users(user_ids: Iterable[UUID]) -> Dict[UUID, UserSummary]:
    """
    Resolve user references into summaries in one query.

    Ids with no matching user are absent from the result.
    """
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    return {
        u.id: UserSummary(id=u.id, name=u.name, email=u.email)
        for u in User.objects.filter(id__in=ids)
    }
