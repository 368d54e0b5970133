"""
Tests for membership reconciliation (self-healing on read and the sweep).

Inconsistent states are written directly with the ORM to simulate records
left behind by an interrupted write or a manual edit.
"""
from io import StringIO
from uuid import uuid4

from django.core.management import call_command
from django.test import TestCase

from apps.core.exceptions import NotFound
from apps.identity.models import User, UserRole
from apps.organizations.models import Membership, Organization
from apps.organizations.repositories import DjangoOrganizationRepository, DjangoUserRepository
from apps.organizations.services import MembershipManager, get_membership_manager
from apps.organizations.tasks import reconcile_memberships


def make_user(name):
    return User.objects.create_user(email=f"{name}@test.com", password="testpass123", name=name)


def fresh(user):
    return User.objects.get(id=user.id)


class ReconcileUserTest(TestCase):

    def setUp(self):
        self.manager = get_membership_manager()
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.org = self.manager.create_organization(self.alice, "Acme")

    def test_consistent_records_need_no_repair(self):
        self.manager.add_member(self.alice, self.org.id, "bob@test.com")
        self.assertEqual(self.manager.reconcile_user(self.alice.id), [])
        self.assertEqual(self.manager.reconcile_user(self.bob.id), [])

    def test_member_not_listed_is_unlinked(self):
        User.objects.filter(id=self.bob.id).update(org_id=self.org.id, role=UserRole.MEMBER)

        repairs = self.manager.reconcile_user(self.bob.id)

        self.assertEqual(len(repairs), 1)
        bob = fresh(self.bob)
        self.assertIsNone(bob.org_id)
        self.assertEqual(bob.role, UserRole.USER)

    def test_user_pointing_at_missing_organization_is_unlinked(self):
        User.objects.filter(id=self.bob.id).update(org_id=uuid4(), role=UserRole.MEMBER)
        self.manager.reconcile_user(self.bob.id)
        self.assertIsNone(fresh(self.bob).org_id)

    def test_owner_missing_membership_row_is_restored(self):
        Membership.objects.filter(user_id=self.alice.id).delete()

        self.manager.reconcile_user(self.alice.id)

        self.assertTrue(Membership.objects.filter(org_id=self.org.id, user_id=self.alice.id).exists())
        self.assertEqual(fresh(self.alice).role, UserRole.OWNER)

    def test_orphaned_owner_is_relinked(self):
        # Organization written but the owner's user record never updated
        User.objects.filter(id=self.alice.id).update(org_id=None, role=UserRole.USER)
        Membership.objects.filter(user_id=self.alice.id).delete()

        self.manager.reconcile_user(self.alice.id)

        alice = fresh(self.alice)
        self.assertEqual(alice.org_id, self.org.id)
        self.assertEqual(alice.role, UserRole.OWNER)
        self.assertTrue(Membership.objects.filter(org_id=self.org.id, user_id=alice.id).exists())

    def test_unaffiliated_user_with_wrong_role_is_reset(self):
        User.objects.filter(id=self.bob.id).update(role=UserRole.MEMBER)
        self.manager.reconcile_user(self.bob.id)
        self.assertEqual(fresh(self.bob).role, UserRole.USER)

    def test_unaffiliated_user_with_stray_row_loses_it(self):
        Membership.objects.create(org_id=self.org.id, user_id=self.bob.id)
        self.manager.reconcile_user(self.bob.id)
        self.assertFalse(Membership.objects.filter(user_id=self.bob.id).exists())

    def test_member_with_owner_role_is_corrected(self):
        self.manager.add_member(self.alice, self.org.id, "bob@test.com")
        User.objects.filter(id=self.bob.id).update(role=UserRole.OWNER)

        self.manager.reconcile_user(self.bob.id)
        self.assertEqual(fresh(self.bob).role, UserRole.MEMBER)

    def test_unknown_user(self):
        self.assertEqual(self.manager.reconcile_user(uuid4()), [])

    def test_member_added_after_an_earlier_read_is_kept(self):
        before_add = fresh(self.bob)

        class EarlierReadUserRepository(DjangoUserRepository):
            def get(self, user_id):
                if user_id == before_add.id:
                    return before_add
                return super().get(user_id)

        manager = MembershipManager(EarlierReadUserRepository(), DjangoOrganizationRepository())
        self.manager.add_member(self.alice, self.org.id, "bob@test.com")

        self.assertEqual(manager.reconcile_user(self.bob.id), [])
        self.assertEqual(manager.reconcile_user(self.bob.id), [])
        bob = fresh(self.bob)
        self.assertEqual(bob.org_id, self.org.id)
        self.assertEqual(bob.role, UserRole.MEMBER)
        self.assertTrue(Membership.objects.filter(org_id=self.org.id, user_id=bob.id).exists())

    def test_user_is_locked_before_membership_is_read(self):
        calls = []

        class RecordingUserRepository(DjangoUserRepository):
            def get_for_update(self, user_id):
                calls.append("lock user")
                return super().get_for_update(user_id)

        class RecordingOrganizationRepository(DjangoOrganizationRepository):
            def membership_org_for(self, user_id):
                calls.append("read membership")
                return super().membership_org_for(user_id)

        manager = MembershipManager(RecordingUserRepository(), RecordingOrganizationRepository())
        manager.reconcile_user(self.bob.id)

        self.assertEqual(calls, ["lock user", "read membership"])


class ReconcileOrganizationTest(TestCase):

    def setUp(self):
        self.manager = get_membership_manager()
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.org = self.manager.create_organization(self.alice, "Acme")

    def test_stale_row_is_dropped(self):
        Membership.objects.create(org_id=self.org.id, user_id=self.bob.id)

        repairs = self.manager.reconcile_organization(self.org.id)

        self.assertEqual(len(repairs), 1)
        self.assertFalse(Membership.objects.filter(user_id=self.bob.id).exists())

    def test_row_for_deleted_user_is_dropped(self):
        ghost = uuid4()
        Membership.objects.create(org_id=self.org.id, user_id=ghost)
        self.manager.reconcile_organization(self.org.id)
        self.assertFalse(Membership.objects.filter(user_id=ghost).exists())

    def test_unknown_organization(self):
        self.assertEqual(self.manager.reconcile_organization(uuid4()), [])


class SelfHealingOnReadTest(TestCase):

    def setUp(self):
        self.manager = get_membership_manager()
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.org = self.manager.create_organization(self.alice, "Acme")

    def test_unlisted_member_gets_not_found(self):
        User.objects.filter(id=self.bob.id).update(org_id=self.org.id, role=UserRole.MEMBER)

        with self.assertRaises(NotFound):
            self.manager.get_my_organization(fresh(self.bob))
        self.assertIsNone(fresh(self.bob).org_id)

    def test_stale_rows_are_not_listed(self):
        Membership.objects.create(org_id=self.org.id, user_id=self.bob.id)

        detail = self.manager.get_my_organization(fresh(self.alice))

        self.assertEqual([m.id for m in detail.members], [self.alice.id])

    def test_orphaned_owner_sees_organization(self):
        User.objects.filter(id=self.alice.id).update(org_id=None, role=UserRole.USER)

        detail = self.manager.get_my_organization(fresh(self.alice))
        self.assertEqual(detail.id, self.org.id)


class ReconcileSweepTest(TestCase):

    def setUp(self):
        self.manager = get_membership_manager()
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.carol = make_user("carol")
        self.org = self.manager.create_organization(self.alice, "Acme")
        self.manager.add_member(self.alice, self.org.id, "carol@test.com")

        # Two independent inconsistencies
        User.objects.filter(id=self.bob.id).update(org_id=self.org.id, role=UserRole.MEMBER)
        ghost_org = Organization.objects.create(name="Ghost", owner_id=uuid4())
        Membership.objects.filter(user_id=self.carol.id).update(org_id=ghost_org.id)

    def assertHealed(self):
        for user in User.objects.all():
            self.assertEqual(user.org_id is not None, user.role != UserRole.USER)
        for membership in Membership.objects.all():
            self.assertEqual(User.objects.get(id=membership.user_id).org_id, membership.org_id)

    def test_reconcile_all(self):
        report = self.manager.reconcile_all()

        self.assertEqual(report.users_checked, 3)
        self.assertEqual(report.organizations_checked, 2)
        self.assertTrue(report.repairs)
        self.assertHealed()
        self.assertEqual(self.manager.reconcile_all().repairs, [])

    def test_celery_task(self):
        with self.assertLogs("apps.organizations.tasks", level="WARNING") as logs:
            result = reconcile_memberships()
        self.assertIn(f"Reconciliation applied {result['repairs']} repairs", logs.output[0])
        self.assertGreater(result["repairs"], 0)
        self.assertHealed()

    def test_management_command(self):
        out = StringIO()
        call_command('reconcile_memberships', stdout=out)
        self.assertIn("repairs", out.getvalue())
        self.assertHealed()
