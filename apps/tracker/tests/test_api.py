import json
from uuid import uuid4

from django.test import TestCase, Client

from apps.identity.jwt_auth import create_access_token
from apps.identity.models import User, UserRole
from apps.organizations.services import get_membership_manager
from apps.tracker.models import Task


def make_user(name):
    return User.objects.create_user(email=f"{name}@test.com", password="testpass123", name=name)


def auth_header(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {create_access_token(user.id, user.org_id)}"}


class TaskAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        manager = get_membership_manager()
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.carol = make_user("carol")
        self.org = manager.create_organization(self.alice, "Acme")
        manager.add_member(self.alice, self.org.id, "bob@test.com")
        manager.create_organization(self.carol, "Globex")

    def send(self, method, url, user, payload=None):
        kwargs = auth_header(user)
        if payload is not None:
            kwargs.update(data=json.dumps(payload), content_type="application/json")
        return getattr(self.client, method)(url, **kwargs)

    def test_requires_auth(self):
        self.assertEqual(self.client.get("/api/tasks/").status_code, 401)

    def test_create_and_list(self):
        response = self.send("post", "/api/tasks/", self.alice, {
            "title": "Ship release",
            "priority": "High",
            "assigned_to": str(self.bob.id),
            "due_date": "2030-01-01T09:00:00Z",
        })
        self.assertEqual(response.status_code, 201)
        task = response.json()
        self.assertEqual(task["status"], "To Do")
        self.assertEqual(task["assigned_to"]["email"], "bob@test.com")
        self.assertEqual(task["created_by"]["id"], str(self.alice.id))

        response = self.send("get", "/api/tasks/", self.bob)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["data"][0]["id"], task["id"])

    def test_list_filters(self):
        self.send("post", "/api/tasks/", self.alice, {"title": "A", "status": "Done"})
        self.send("post", "/api/tasks/", self.alice, {"title": "B", "assigned_to": str(self.bob.id)})

        response = self.send("get", "/api/tasks/?status=Done", self.alice)
        self.assertEqual([t["title"] for t in response.json()["data"]], ["A"])

        response = self.send("get", f"/api/tasks/?assigned_to={self.bob.id}", self.alice)
        self.assertEqual([t["title"] for t in response.json()["data"]], ["B"])

    def test_unknown_filter_value(self):
        response = self.send("get", "/api/tasks/?status=Blocked", self.alice)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_other_organization_gets_not_found(self):
        task_id = self.send("post", "/api/tasks/", self.alice, {"title": "Secret"}).json()["id"]

        for method in ("get", "delete"):
            response = self.send(method, f"/api/tasks/{task_id}", self.carol)
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["error"], "NotFound")

        response = self.send("put", f"/api/tasks/{task_id}", self.carol, {"title": "Mine"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(Task.objects.get(id=task_id).title, "Secret")

        response = self.send("get", "/api/tasks/", self.carol)
        self.assertEqual(response.json()["count"], 0)

    def test_assign_to_outsider(self):
        response = self.send("post", "/api/tasks/", self.alice, {"title": "X", "assigned_to": str(self.carol.id)})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {
            "error": "ValidationError",
            "message": "Assigned user is not a member of this organization.",
        })

    def test_unaffiliated_user(self):
        dave = make_user("dave")
        response = self.send("get", "/api/tasks/", dave)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "User is not associated with an organization.")

    def test_missing_title(self):
        response = self.send("post", "/api/tasks/", self.alice, {"priority": "Low"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_partial_update_and_unassign(self):
        task_id = self.send("post", "/api/tasks/", self.alice, {
            "title": "Draft", "assigned_to": str(self.bob.id),
        }).json()["id"]

        response = self.send("put", f"/api/tasks/{task_id}", self.bob, {"status": "In Progress"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "In Progress")
        self.assertEqual(response.json()["assigned_to_id"], str(self.bob.id))

        response = self.send("put", f"/api/tasks/{task_id}", self.bob, {"assigned_to": None})
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["assigned_to_id"])
        self.assertEqual(response.json()["status"], "In Progress")

    def test_delete(self):
        task_id = self.send("post", "/api/tasks/", self.alice, {"title": "Temp"}).json()["id"]

        response = self.send("delete", f"/api/tasks/{task_id}", self.bob)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Task removed"})
        self.assertEqual(self.send("get", f"/api/tasks/{task_id}", self.bob).status_code, 404)

    def test_unknown_task(self):
        self.assertEqual(self.send("get", f"/api/tasks/{uuid4()}", self.alice).status_code, 404)


class AcmeScenarioTest(TestCase):
    """Register, organize, assign, remove: end to end over HTTP."""

    def setUp(self):
        self.client = Client()

    def post(self, url, payload, token=None):
        kwargs = {"data": json.dumps(payload), "content_type": "application/json"}
        if token:
            kwargs["HTTP_AUTHORIZATION"] = f"Bearer {token}"
        return self.client.post(url, **kwargs)

    def test_full_flow(self):
        token_a = self.post("/api/auth/register", {
            "name": "Ann", "email": "a@x.io", "password": "secret123",
        }).json()["token"]
        bob = self.post("/api/auth/register", {
            "name": "Ben", "email": "b@x.io", "password": "secret123",
        }).json()["user"]

        response = self.post("/api/organizations/", {"name": "Acme"}, token_a)
        self.assertEqual(response.status_code, 201)
        org_id = response.json()["organization"]["id"]
        owner_id = response.json()["user"]["id"]

        response = self.post(f"/api/organizations/{org_id}/members", {"email": "b@x.io"}, token_a)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["member"]["role"], UserRole.MEMBER)

        response = self.post("/api/tasks/", {"title": "T1", "assigned_to": bob["id"]}, token_a)
        self.assertEqual(response.status_code, 201)
        task_id = response.json()["id"]

        response = self.client.delete(
            f"/api/organizations/{org_id}/members/{bob['id']}", HTTP_AUTHORIZATION=f"Bearer {token_a}"
        )
        self.assertEqual(response.status_code, 200)

        ben = User.objects.get(id=bob["id"])
        self.assertIsNone(ben.org_id)
        self.assertEqual(ben.role, UserRole.USER)
        self.assertEqual(str(Task.objects.get(id=task_id).assigned_to_id), bob["id"])

        response = self.client.delete(
            f"/api/organizations/{org_id}/members/{owner_id}", HTTP_AUTHORIZATION=f"Bearer {token_a}"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "InvalidOperation")

        response = self.client.get("/api/organizations/my", HTTP_AUTHORIZATION=f"Bearer {token_a}")
        self.assertEqual([m["id"] for m in response.json()["members"]], [owner_id])
        self.assertEqual(User.objects.get(id=owner_id).role, UserRole.OWNER)
