from unittest import mock
from uuid import uuid4

from django.test import TestCase

from apps.core.exceptions import InvalidOperation
from apps.identity.models import User
from apps.organizations.services import get_membership_manager
from apps.tracker.dtos import TaskIn
from apps.tracker.services import get_task_service

from .audit_service import AuditAction, log_action
from .models import AuditLog


class LogActionTest(TestCase):

    def test_creates_entry(self):
        org_id, target_id, user_id = uuid4(), uuid4(), uuid4()
        entry = log_action(
            org_id=org_id,
            action=AuditAction.CREATE_TASK,
            target_type="Task",
            target_id=target_id,
            target_label="x" * 300,
            performed_by_id=user_id,
        )

        self.assertIsNotNone(entry)
        self.assertEqual(entry.org_id, org_id)
        self.assertEqual(len(entry.target_label), 255)
        self.assertEqual(entry.context, {})

    def test_failure_does_not_raise(self):
        with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("apps.audit.audit_service", level="ERROR"):
                result = log_action(
                    org_id=uuid4(),
                    action=AuditAction.DELETE_TASK,
                    target_type="Task",
                    target_id=uuid4(),
                    performed_by_id=None,
                )
        self.assertIsNone(result)


class AuditTrailTest(TestCase):

    def setUp(self):
        self.alice = User.objects.create_user(email="alice@test.com", password="testpass123", name="alice")
        self.bob = User.objects.create_user(email="bob@test.com", password="testpass123", name="bob")

    def actions(self):
        return list(AuditLog.objects.order_by("performed_at").values_list("action", flat=True))

    def test_membership_and_task_mutations_are_recorded(self):
        manager = get_membership_manager()
        org = manager.create_organization(self.alice, "Acme")
        manager.add_member(self.alice, org.id, "bob@test.com")

        alice = User.objects.get(id=self.alice.id)
        service = get_task_service()
        task = service.create_task(alice, TaskIn(title="Report"))
        service.update_task(alice, task.id, {"status": "Done"})
        service.delete_task(alice, task.id)
        manager.remove_member(alice, org.id, self.bob.id)

        self.assertCountEqual(self.actions(), [
            AuditAction.CREATE_ORGANIZATION,
            AuditAction.ADD_MEMBER,
            AuditAction.CREATE_TASK,
            AuditAction.UPDATE_TASK,
            AuditAction.DELETE_TASK,
            AuditAction.REMOVE_MEMBER,
        ])
        self.assertEqual(AuditLog.objects.filter(org_id=org.id, performed_by_id=alice.id).count(), 6)
        update = AuditLog.objects.get(action=AuditAction.UPDATE_TASK)
        self.assertEqual(update.context, {"fields": ["status"]})

    def test_failed_operation_is_not_recorded(self):
        manager = get_membership_manager()
        org = manager.create_organization(self.alice, "Acme")
        with self.assertRaises(InvalidOperation):
            manager.remove_member(self.alice, org.id, self.alice.id)
        self.assertEqual(self.actions(), [AuditAction.CREATE_ORGANIZATION])
