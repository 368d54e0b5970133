"""
Task service.

All operations are scoped to the requester's organization as stored on the
User record. Assignment is delegated to the membership manager so the same
membership rule applies everywhere.
"""
import logging
from typing import Dict, List, Optional
from uuid import UUID

from apps.audit.audit_service import AuditAction, log_action
from apps.core.exceptions import NotFound, ValidationError
from apps.core.unit_of_work import UnitOfWork, atomic_unit_of_work
from apps.identity.models import User
from apps.identity.services import expand_users
from apps.organizations.services import MembershipManager, get_membership_manager
from .dtos import TaskDTO, TaskIn
from .models import Task, TaskPriority, TaskStatus
from .repositories import DjangoTaskRepository, TaskRepository

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

NO_ORGANIZATION_MESSAGE = "User is not associated with an organization."
NOT_MEMBER_MESSAGE = "Assigned user is not a member of this organization."
NOT_FOUND_MESSAGE = "Task not found or you do not have access."


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Please add a task title")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title can not be more than {TITLE_MAX_LENGTH} characters")
    return title


def _clean_description(description: Optional[str]) -> str:
    description = description or ""
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description can not be more than {DESCRIPTION_MAX_LENGTH} characters")
    return description


def _clean_choice(value: str, choices, label: str) -> str:
    if value not in choices.values:
        allowed = ", ".join(choices.values)
        raise ValidationError(f"Invalid {label} '{value}'. Allowed: {allowed}")
    return value


class TaskService:

    def __init__(
        self,
        tasks: TaskRepository,
        membership: MembershipManager,
        unit_of_work: UnitOfWork = atomic_unit_of_work,
    ):
        self.tasks = tasks
        self.membership = membership
        self.unit_of_work = unit_of_work

    def list_tasks(
        self,
        requester: User,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[UUID] = None,
    ) -> List[TaskDTO]:
        org_id = self._require_org(requester)
        if status:
            _clean_choice(status, TaskStatus, "status")
        if priority:
            _clean_choice(priority, TaskPriority, "priority")
        return self._expand(self.tasks.list_for_org(org_id, status, priority, assigned_to))

    def get_task(self, requester: User, task_id: UUID) -> TaskDTO:
        return self._expand([self._require_task(requester, task_id)])[0]

    def create_task(self, requester: User, payload: TaskIn) -> TaskDTO:
        org_id = self._require_org(requester)

        fields = {
            "title": _clean_title(payload.title),
            "description": _clean_description(payload.description),
            "status": _clean_choice(payload.status or TaskStatus.TODO, TaskStatus, "status"),
            "priority": _clean_choice(payload.priority or TaskPriority.MEDIUM, TaskPriority, "priority"),
            "due_date": payload.due_date,
        }
        # The assignee check and the insert commit together
        with self.unit_of_work("create_task"):
            if payload.assigned_to is not None:
                self._check_assignable(org_id, payload.assigned_to)
            task = self.tasks.create(
                org_id=org_id,
                created_by_id=requester.id,
                assigned_to_id=payload.assigned_to,
                **fields,
            )

        logger.info("User %s created task %s in organization %s", requester.id, task.id, org_id)
        log_action(
            org_id=org_id,
            action=AuditAction.CREATE_TASK,
            target_type="Task",
            target_id=task.id,
            target_label=task.title,
            performed_by_id=requester.id,
        )
        return self._expand([task])[0]

    def update_task(self, requester: User, task_id: UUID, data: dict) -> TaskDTO:
        """
        Apply a partial update.

        ``data`` holds only the fields the client sent. ``None`` is ignored
        for required fields; for ``assigned_to`` and ``due_date`` it clears
        the value.
        """
        changed = []
        with self.unit_of_work("update_task"):
            task = self._require_task(requester, task_id)

            if data.get("title") is not None:
                task.title = _clean_title(data["title"])
                changed.append("title")
            if data.get("description") is not None:
                task.description = _clean_description(data["description"])
                changed.append("description")
            if data.get("status") is not None:
                task.status = _clean_choice(data["status"], TaskStatus, "status")
                changed.append("status")
            if data.get("priority") is not None:
                task.priority = _clean_choice(data["priority"], TaskPriority, "priority")
                changed.append("priority")
            if "due_date" in data:
                task.due_date = data["due_date"]
                changed.append("due_date")
            if "assigned_to" in data:
                assignee = data["assigned_to"]
                # Only a change of assignee is checked; an existing one is kept as is
                if assignee is not None and assignee != task.assigned_to_id:
                    self._check_assignable(task.org_id, assignee)
                task.assigned_to_id = assignee
                changed.append("assigned_to")

            task = self.tasks.save(task)

        log_action(
            org_id=task.org_id,
            action=AuditAction.UPDATE_TASK,
            target_type="Task",
            target_id=task.id,
            target_label=task.title,
            performed_by_id=requester.id,
            context={"fields": changed},
        )
        return self._expand([task])[0]

    def delete_task(self, requester: User, task_id: UUID) -> None:
        org_id = self._require_org(requester)
        if not self.tasks.delete(org_id, task_id):
            raise NotFound(NOT_FOUND_MESSAGE)

        logger.info("User %s deleted task %s", requester.id, task_id)
        log_action(
            org_id=org_id,
            action=AuditAction.DELETE_TASK,
            target_type="Task",
            target_id=task_id,
            performed_by_id=requester.id,
        )

    def _require_org(self, requester: User) -> UUID:
        if requester.org_id is None:
            raise ValidationError(NO_ORGANIZATION_MESSAGE)
        return requester.org_id

    def _require_task(self, requester: User, task_id: UUID) -> Task:
        task = self.tasks.get(self._require_org(requester), task_id)
        if task is None:
            raise NotFound(NOT_FOUND_MESSAGE)
        return task

    def _check_assignable(self, org_id: UUID, candidate_id: UUID) -> None:
        if not self.membership.is_assignable(org_id, candidate_id, lock=True):
            raise ValidationError(NOT_MEMBER_MESSAGE)

    def _expand(self, tasks: List[Task]) -> List[TaskDTO]:
        ids = set()
        for task in tasks:
            ids.add(task.created_by_id)
            if task.assigned_to_id:
                ids.add(task.assigned_to_id)
        users: Dict = expand_users(ids)

        return [
            TaskDTO(
                id=task.id,
                org_id=task.org_id,
                title=task.title,
                description=task.description,
                status=task.status,
                priority=task.priority,
                due_date=task.due_date,
                assigned_to_id=task.assigned_to_id,
                assigned_to=users.get(task.assigned_to_id),
                created_by_id=task.created_by_id,
                created_by=users.get(task.created_by_id),
                created_at=task.created_at,
                updated_at=task.updated_at,
            )
            for task in tasks
        ]


def get_task_service() -> TaskService:
    """Default wiring: Django ORM task repository and membership manager."""
    return TaskService(tasks=DjangoTaskRepository(), membership=get_membership_manager())
