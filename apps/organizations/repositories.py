"""
Repository interfaces for users, organizations and memberships.

The membership manager only talks to these interfaces, so the storage it
runs against is chosen by whoever constructs it.

Implementations:
- DjangoUserRepository / DjangoOrganizationRepository: Django ORM (default)
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import AlreadyMember, DuplicateName
from apps.identity.models import User, UserRole
from .models import Membership, Organization


class UserRepository(ABC):

    @abstractmethod
    def get(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    def get_for_update(self, user_id: UUID) -> Optional[User]:
        """
        Read a user and lock the row until the enclosing transaction ends.

        Membership writes update the user row, so they wait on the lock.
        """
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Exact (case-sensitive) email lookup."""
        pass

    @abstractmethod
    def get_many(self, user_ids: List[UUID]) -> List[User]:
        pass

    @abstractmethod
    def list_ids(self) -> List[UUID]:
        pass

    @abstractmethod
    def assign_organization(self, user_id: UUID, org_id: UUID, role: str) -> bool:
        """
        Link an unaffiliated user to an organization.

        Compare-and-set: only applies while the stored ``org_id`` is null.
        Returns False if the user was already affiliated (or missing).
        """
        pass

    @abstractmethod
    def clear_organization(self, user_id: UUID, org_id: UUID) -> bool:
        """
        Unlink a user from ``org_id`` and reset the role.

        Compare-and-set: only applies while the stored ``org_id`` equals
        ``org_id``. Returns False otherwise.
        """
        pass

    @abstractmethod
    def set_organization(self, user_id: UUID, org_id: Optional[UUID], role: str) -> None:
        """Unconditional write, used only by reconciliation."""
        pass


class OrganizationRepository(ABC):

    @abstractmethod
    def get(self, org_id: UUID) -> Optional[Organization]:
        pass

    @abstractmethod
    def get_owned_by(self, user_id: UUID) -> Optional[Organization]:
        pass

    @abstractmethod
    def name_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def create(self, name: str, owner_id: UUID) -> Organization:
        """Raises DuplicateName if the name is taken at write time."""
        pass

    @abstractmethod
    def list_ids(self) -> List[UUID]:
        pass

    @abstractmethod
    def member_ids(self, org_id: UUID) -> List[UUID]:
        pass

    @abstractmethod
    def has_member(self, org_id: UUID, user_id: UUID, lock: bool = False) -> bool:
        """
        With ``lock``, the membership row stays locked until the enclosing
        transaction ends and a concurrent removal waits for it.
        """
        pass

    @abstractmethod
    def membership_org_for(self, user_id: UUID) -> Optional[UUID]:
        """The organization holding ``user_id``'s membership row, if any."""
        pass

    @abstractmethod
    def add_member(self, org_id: UUID, user_id: UUID) -> None:
        """Raises AlreadyMember if the user already holds a membership row."""
        pass

    @abstractmethod
    def remove_member(self, org_id: UUID, user_id: UUID) -> bool:
        pass


class DjangoUserRepository(UserRepository):

    def get(self, user_id):
        return User.objects.filter(id=user_id).first()

    def get_for_update(self, user_id):
        return User.objects.select_for_update().filter(id=user_id).first()

    def get_by_email(self, email):
        return User.objects.filter(email=email).first()

    def get_many(self, user_ids):
        return list(User.objects.filter(id__in=user_ids))

    def list_ids(self):
        return list(User.objects.values_list('id', flat=True))

    def assign_organization(self, user_id, org_id, role):
        updated = User.objects.filter(id=user_id, org_id__isnull=True).update(
            org_id=org_id, role=role
        )
        return updated == 1

    def clear_organization(self, user_id, org_id):
        updated = User.objects.filter(id=user_id, org_id=org_id).update(
            org_id=None, role=UserRole.USER
        )
        return updated == 1

    def set_organization(self, user_id, org_id, role):
        User.objects.filter(id=user_id).update(org_id=org_id, role=role)


class DjangoOrganizationRepository(OrganizationRepository):

    def get(self, org_id):
        return Organization.objects.filter(id=org_id).first()

    def get_owned_by(self, user_id):
        return Organization.objects.filter(owner_id=user_id).first()

    def name_exists(self, name):
        return Organization.objects.filter(name=name).exists()

    def create(self, name, owner_id):
        try:
            with transaction.atomic():
                return Organization.objects.create(name=name, owner_id=owner_id)
        except IntegrityError:
            raise DuplicateName("Organization with this name already exists")

    def list_ids(self):
        return list(Organization.objects.values_list('id', flat=True))

    def member_ids(self, org_id):
        return list(Membership.objects.filter(org_id=org_id).values_list('user_id', flat=True))

    def has_member(self, org_id, user_id, lock=False):
        queryset = Membership.objects.filter(org_id=org_id, user_id=user_id)
        if lock:
            return queryset.select_for_update().values_list('id', flat=True).first() is not None
        return queryset.exists()

    def membership_org_for(self, user_id):
        return Membership.objects.filter(user_id=user_id).values_list('org_id', flat=True).first()

    def add_member(self, org_id, user_id):
        try:
            with transaction.atomic():
                Membership.objects.create(org_id=org_id, user_id=user_id)
        except IntegrityError:
            raise AlreadyMember("User is already part of an organization.")
        self._touch(org_id)

    def remove_member(self, org_id, user_id):
        deleted, _ = Membership.objects.filter(org_id=org_id, user_id=user_id).delete()
        if deleted:
            self._touch(org_id)
        return deleted > 0

    def _touch(self, org_id):
        Organization.objects.filter(id=org_id).update(updated_at=timezone.now())
