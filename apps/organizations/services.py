"""
Services for Organizations app.

MembershipManager is the only writer of the user <-> organization link. It
keeps three things consistent:

- ``User.org_id`` / ``User.role``
- ``Organization.owner_id``
- the organization's Membership rows (owner included)

Every operation that touches more than one of them runs inside a single
unit of work. Reconciliation repairs records written before that guarantee
existed, or by hand, and runs on read (get_my_organization) as well as on
a schedule (tasks.reconcile_memberships).
"""
import logging
from typing import List
from uuid import UUID

from apps.audit.audit_service import AuditAction, log_action
from apps.core.exceptions import (
    AlreadyMember,
    DuplicateName,
    Forbidden,
    InvalidOperation,
    NotFound,
    ValidationError,
)
from apps.core.unit_of_work import UnitOfWork, atomic_unit_of_work
from apps.identity.dtos import UserRef, UserSummary
from apps.identity.models import User, UserRole
from .dtos import OrganizationDTO, OrganizationDetailDTO, ReconcileReport
from .models import Organization
from .repositories import (
    DjangoOrganizationRepository,
    DjangoUserRepository,
    OrganizationRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

ORGANIZATION_NAME_MAX_LENGTH = 50


class MembershipManager:
    """
    Enforces the membership rules:

    - a user belongs to at most one organization, for good
    - only the owner mutates the member list
    - the owner can never be removed (there is no ownership transfer)
    - a task can only be assigned to a current member
    """

    def __init__(
        self,
        users: UserRepository,
        organizations: OrganizationRepository,
        unit_of_work: UnitOfWork = atomic_unit_of_work,
    ):
        self.users = users
        self.organizations = organizations
        self.unit_of_work = unit_of_work

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_organization(self, requester: User, name: str) -> OrganizationDTO:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please add an organization name")
        if len(name) > ORGANIZATION_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Name can not be more than {ORGANIZATION_NAME_MAX_LENGTH} characters"
            )

        if self.organizations.name_exists(name):
            raise DuplicateName("Organization with this name already exists")

        current = self._require_user(requester.id)
        if current.is_affiliated:
            raise AlreadyMember("You are already part of an organization.")

        with self.unit_of_work("create_organization"):
            org = self.organizations.create(name=name, owner_id=current.id)
            self.organizations.add_member(org.id, current.id)
            if not self.users.assign_organization(current.id, org.id, UserRole.OWNER):
                # Joined another organization after the check above
                raise AlreadyMember("You are already part of an organization.")

        logger.info("User %s created organization %s (%s)", current.id, org.id, org.name)
        log_action(
            org_id=org.id,
            action=AuditAction.CREATE_ORGANIZATION,
            target_type="Organization",
            target_id=org.id,
            target_label=org.name,
            performed_by_id=current.id,
        )
        return self._to_dto(org)

    def add_member(self, requester: User, org_id: UUID, email: str) -> User:
        org = self._require_owned_organization(requester, org_id)

        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required.")

        target = self.users.get_by_email(email)
        if target is None:
            raise NotFound("User with this email not found.")
        if target.is_affiliated:
            raise AlreadyMember("User is already part of an organization.")

        with self.unit_of_work("add_member"):
            self.organizations.add_member(org.id, target.id)
            if not self.users.assign_organization(target.id, org.id, UserRole.MEMBER):
                raise AlreadyMember("User is already part of an organization.")

        logger.info("User %s added %s to organization %s", requester.id, target.id, org.id)
        log_action(
            org_id=org.id,
            action=AuditAction.ADD_MEMBER,
            target_type="User",
            target_id=target.id,
            target_label=target.email,
            performed_by_id=requester.id,
        )
        return self.users.get(target.id)

    def remove_member(self, requester: User, org_id: UUID, member_id: UUID) -> None:
        org = self._require_owned_organization(requester, org_id)

        if member_id == org.owner_id:
            raise InvalidOperation("Organization owner cannot be removed.")

        if not self.organizations.has_member(org.id, member_id):
            raise NotFound("Member not found in this organization.")

        with self.unit_of_work("remove_member"):
            self.organizations.remove_member(org.id, member_id)
            # The user record may already point elsewhere; the row is still stale
            self.users.clear_organization(member_id, org.id)

        logger.info("User %s removed %s from organization %s", requester.id, member_id, org.id)
        log_action(
            org_id=org.id,
            action=AuditAction.REMOVE_MEMBER,
            target_type="User",
            target_id=member_id,
            performed_by_id=requester.id,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_assignable(self, org_id: UUID, candidate_id: UUID, lock: bool = False) -> bool:
        """
        True if ``candidate_id`` is a current member (owner included).

        With ``lock`` (inside a unit of work) the membership stays locked until
        commit, so the member cannot be removed before the assignment is written.
        """
        if org_id is None or candidate_id is None:
            return False
        return self.organizations.has_member(org_id, candidate_id, lock=lock)

    def get_my_organization(self, requester: User) -> OrganizationDetailDTO:
        org = self._heal_and_get_organization(requester)
        return self._expand(org)

    def list_my_members(self, requester: User) -> List[UserSummary]:
        org = self._heal_and_get_organization(requester)
        return self._expand(org).members

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_user(self, user_id: UUID) -> List[str]:
        """
        Bring one user's record and membership row into agreement.

        The owner of an organization is always re-linked to it; any other
        user is kept only where a matching membership row exists.
        """
        repairs: List[str] = []
        with self.unit_of_work("reconcile_user"):
            # Lock before reading the membership row so a concurrent add or
            # removal is seen either completely or not at all
            user = self.users.get_for_update(user_id)
            if user is None:
                return repairs

            owned = self.organizations.get_owned_by(user.id)
            row_org_id = self.organizations.membership_org_for(user.id)

            if owned is not None:
                if user.org_id != owned.id or user.role != UserRole.OWNER:
                    self.users.set_organization(user.id, owned.id, UserRole.OWNER)
                    repairs.append(f"user {user.id}: re-linked as owner of {owned.id}")
                if row_org_id != owned.id:
                    if row_org_id is not None:
                        self.organizations.remove_member(row_org_id, user.id)
                    self.organizations.add_member(owned.id, user.id)
                    repairs.append(f"user {user.id}: restored owner membership in {owned.id}")

            elif user.org_id is None:
                if user.role != UserRole.USER:
                    self.users.set_organization(user.id, None, UserRole.USER)
                    repairs.append(f"user {user.id}: role reset for unaffiliated user")
                if row_org_id is not None:
                    self.organizations.remove_member(row_org_id, user.id)
                    repairs.append(f"user {user.id}: dropped stray membership in {row_org_id}")

            else:
                org = self.organizations.get(user.org_id)
                if org is None or row_org_id != org.id:
                    self.users.set_organization(user.id, None, UserRole.USER)
                    repairs.append(f"user {user.id}: unlinked from {user.org_id} (not a listed member)")
                    if row_org_id is not None:
                        self.organizations.remove_member(row_org_id, user.id)
                        repairs.append(f"user {user.id}: dropped stray membership in {row_org_id}")
                elif user.role != UserRole.MEMBER:
                    self.users.set_organization(user.id, org.id, UserRole.MEMBER)
                    repairs.append(f"user {user.id}: role corrected to member")

        for repair in repairs:
            logger.warning("Membership repair: %s", repair)
        return repairs

    def reconcile_organization(self, org_id: UUID) -> List[str]:
        """Drop membership rows whose user does not point back at ``org_id``."""
        repairs: List[str] = []
        org = self.organizations.get(org_id)
        if org is None:
            return repairs

        with self.unit_of_work("reconcile_organization"):
            member_ids = [m for m in self.organizations.member_ids(org.id) if m != org.owner_id]
            users_by_id = {u.id: u for u in self.users.get_many(member_ids)}
            for member_id in member_ids:
                user = users_by_id.get(member_id)
                if user is None or user.org_id != org.id:
                    self.organizations.remove_member(org.id, member_id)
                    repairs.append(f"organization {org.id}: dropped stale member {member_id}")

        for repair in repairs:
            logger.warning("Membership repair: %s", repair)
        repairs.extend(self.reconcile_user(org.owner_id))
        return repairs

    def reconcile_all(self) -> ReconcileReport:
        repairs: List[str] = []
        org_ids = self.organizations.list_ids()
        for org_id in org_ids:
            repairs.extend(self.reconcile_organization(org_id))
        user_ids = self.users.list_ids()
        for user_id in user_ids:
            repairs.extend(self.reconcile_user(user_id))

        logger.info(
            "Reconciled %d organizations and %d users, %d repairs",
            len(org_ids), len(user_ids), len(repairs),
        )
        return ReconcileReport(
            users_checked=len(user_ids),
            organizations_checked=len(org_ids),
            repairs=repairs,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, user_id: UUID) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def _require_owned_organization(self, requester: User, org_id: UUID) -> Organization:
        org = self.organizations.get(org_id)
        if org is None:
            raise NotFound("Organization not found.")
        if requester.id != org.owner_id:
            logger.warning("User %s attempted to manage members of organization %s", requester.id, org.id)
            raise Forbidden("Only the organization owner can manage members.")
        return org

    def _heal_and_get_organization(self, requester: User) -> Organization:
        self.reconcile_user(requester.id)
        current = self._require_user(requester.id)
        if current.org_id is None:
            raise NotFound("User is not part of any organization.")
        self.reconcile_organization(current.org_id)

        org = self.organizations.get(current.org_id)
        if org is None:
            raise NotFound("Organization not found.")
        return org

    def _to_dto(self, org: Organization) -> OrganizationDTO:
        return OrganizationDTO(
            id=org.id,
            name=org.name,
            owner=UserRef(id=org.owner_id),
            members=[UserRef(id=m) for m in self.organizations.member_ids(org.id)],
            created_at=org.created_at,
        )

    def _expand(self, org: Organization) -> OrganizationDetailDTO:
        dto = self._to_dto(org)
        ids = [dto.owner.id] + [ref.id for ref in dto.members]
        summaries = {
            u.id: UserSummary(id=u.id, name=u.name, email=u.email)
            for u in self.users.get_many(ids)
        }
        return OrganizationDetailDTO(
            id=dto.id,
            name=dto.name,
            owner=summaries.get(dto.owner.id),
            members=[summaries[ref.id] for ref in dto.members if ref.id in summaries],
            created_at=dto.created_at,
        )


def get_membership_manager() -> MembershipManager:
    """Default wiring: Django ORM repositories and transactional unit of work."""
    return MembershipManager(
        users=DjangoUserRepository(),
        organizations=DjangoOrganizationRepository(),
    )
