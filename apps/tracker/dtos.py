from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import UserSummary, UserSummaryOut


@dataclass(frozen=True)
class TaskDTO:
    """Task with its user references expanded for display."""
    id: UUID
    org_id: UUID
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[datetime]
    assigned_to_id: Optional[UUID]
    assigned_to: Optional[UserSummary]
    created_by_id: UUID
    created_by: Optional[UserSummary]
    created_at: datetime
    updated_at: datetime


class TaskIn(Schema):
    title: str
    description: Optional[str] = ""
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[UUID] = None


class TaskUpdateIn(Schema):
    """Partial update: only the fields present in the request body change."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[UUID] = None


class TaskOut(Schema):
    id: UUID
    org_id: UUID
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    assigned_to_id: Optional[UUID] = None
    assigned_to: Optional[UserSummaryOut] = None
    created_by_id: UUID
    created_by: Optional[UserSummaryOut] = None
    created_at: datetime
    updated_at: datetime


class TaskListOut(Schema):
    count: int
    data: List[TaskOut]


class MessageOut(Schema):
    message: str
