from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import UserRef, UserSummary, UserOut, UserSummaryOut


@dataclass(frozen=True)
class OrganizationDTO:
    """Organization with owner and members as references."""
    id: UUID
    name: str
    owner: UserRef
    members: List[UserRef] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrganizationDetailDTO:
    """Organization with owner and members expanded to user summaries."""
    id: UUID
    name: str
    owner: Optional[UserSummary]
    members: List[UserSummary] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReconcileReport:
    users_checked: int = 0
    organizations_checked: int = 0
    repairs: List[str] = field(default_factory=list)


class OrganizationIn(Schema):
    name: str


class MemberIn(Schema):
    email: str


class UserRefOut(Schema):
    id: UUID


class OrganizationOut(Schema):
    id: UUID
    name: str
    owner: UserRefOut
    members: List[UserRefOut]
    created_at: Optional[datetime] = None


class OrganizationDetailOut(Schema):
    id: UUID
    name: str
    owner: Optional[UserSummaryOut] = None
    members: List[UserSummaryOut]
    created_at: Optional[datetime] = None


class OrganizationCreatedOut(Schema):
    message: str
    organization: OrganizationOut
    user: UserOut


class MemberAddedOut(Schema):
    message: str
    member: UserOut


class MessageOut(Schema):
    message: str
