import uuid
from django.db import models


class TaskStatus(models.TextChoices):
    TODO = 'To Do', 'To Do'
    IN_PROGRESS = 'In Progress', 'In Progress'
    DONE = 'Done', 'Done'
    ARCHIVED = 'Archived', 'Archived'


class TaskPriority(models.TextChoices):
    LOW = 'Low', 'Low'
    MEDIUM = 'Medium', 'Medium'
    HIGH = 'High', 'High'


class Task(models.Model):
    """
    A unit of work scoped to one organization.

    ``org_id`` and ``created_by_id`` never change after creation.
    ``assigned_to_id`` is not cleared when the assignee leaves the
    organization.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.UUIDField(db_index=True)

    title = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO
    )
    priority = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM
    )
    due_date = models.DateTimeField(null=True, blank=True)

    assigned_to_id = models.UUIDField(null=True, blank=True, db_index=True)
    created_by_id = models.UUIDField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.status})"
