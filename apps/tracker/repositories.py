"""
Task persistence behind an interface.

Every lookup takes the organization id, so a task outside the requester's
organization is indistinguishable from a missing one.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from .models import Task


class TaskRepository(ABC):

    @abstractmethod
    def list_for_org(
        self,
        org_id: UUID,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[UUID] = None,
    ) -> List[Task]:
        """Tasks of one organization, newest first."""
        pass

    @abstractmethod
    def get(self, org_id: UUID, task_id: UUID) -> Optional[Task]:
        pass

    @abstractmethod
    def create(self, **fields) -> Task:
        pass

    @abstractmethod
    def save(self, task: Task) -> Task:
        pass

    @abstractmethod
    def delete(self, org_id: UUID, task_id: UUID) -> bool:
        pass


class DjangoTaskRepository(TaskRepository):

    def list_for_org(self, org_id, status=None, priority=None, assigned_to=None):
        queryset = Task.objects.filter(org_id=org_id)
        if status:
            queryset = queryset.filter(status=status)
        if priority:
            queryset = queryset.filter(priority=priority)
        if assigned_to:
            queryset = queryset.filter(assigned_to_id=assigned_to)
        return list(queryset.order_by('-created_at'))

    def get(self, org_id, task_id):
        return Task.objects.filter(org_id=org_id, id=task_id).first()

    def create(self, **fields):
        return Task.objects.create(**fields)

    def save(self, task):
        task.save()
        return task

    def delete(self, org_id, task_id):
        deleted, _ = Task.objects.filter(org_id=org_id, id=task_id).delete()
        return deleted > 0
