import uuid
from django.db import models


class Organization(models.Model):
    """
    Represents a tenant. All tasks are isolated per organization.

    The owner is recorded in ``owner_id`` and also holds a Membership row.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50, unique=True)
    # Immutable after creation; there is no ownership transfer
    owner_id = models.UUIDField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Membership(models.Model):
    """
    One row per member of an organization.

    ``user_id`` is unique across the table: a user can be a member of at most
    one organization, and concurrent invitations of the same user cannot
    both commit.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    org_id = models.UUIDField(db_index=True)
    user_id = models.UUIDField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user_id} in {self.org_id}"
