"""DTOs for Identity app."""
from dataclasses import dataclass
from uuid import UUID
from typing import Optional


@dataclass(frozen=True)
class UserRef:
    """Reference to a user by id only. Never carries user data."""
    id: UUID


@dataclass(frozen=True)
class UserSummary:
    """Expanded user reference, as embedded in organizations and tasks."""
    id: UUID
    name: str
    email: str


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    name: str
    email: str
    role: str
    org_id: Optional[UUID]


from ninja import Schema


class RegisterIn(Schema):
    name: str
    email: str
    password: str


class LoginIn(Schema):
    email: str
    password: str


class UserOut(Schema):
    id: UUID
    name: str
    email: str
    role: str
    org_id: Optional[UUID] = None


class UserSummaryOut(Schema):
    id: UUID
    name: str
    email: str


class AuthResponse(Schema):
    message: str
    token: str
    user: UserOut
