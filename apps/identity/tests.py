import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
from django.conf import settings
from django.test import TestCase, Client

from .models import User, UserRole
from .jwt_auth import (
    JWT_ALGORITHM,
    create_access_token,
    decode_token,
    get_bearer_token,
    get_user_id_from_token,
)


def make_user(email="alice@example.com", password="secret123", name="Alice", **extra):
    return User.objects.create_user(email=email, password=password, name=name, **extra)


class TokenTest(TestCase):

    def test_token_round_trip_carries_user_and_org(self):
        user_id, org_id = uuid4(), uuid4()
        payload = decode_token(create_access_token(user_id, org_id))
        self.assertEqual(payload['sub'], str(user_id))
        self.assertEqual(payload['org_id'], str(org_id))
        self.assertEqual(payload['type'], 'access')

    def test_token_without_org(self):
        payload = decode_token(create_access_token(uuid4(), None))
        self.assertIsNone(payload['org_id'])

    def test_expired_token_is_rejected(self):
        expired = jwt.encode(
            {
                'sub': str(uuid4()),
                'type': 'access',
                'exp': datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            settings.JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        self.assertIsNone(decode_token(expired))
        self.assertIsNone(get_user_id_from_token(expired))

    def test_token_signed_with_other_secret_is_rejected(self):
        forged = jwt.encode({'sub': str(uuid4()), 'type': 'access'}, 'not-the-secret', algorithm=JWT_ALGORITHM)
        self.assertIsNone(decode_token(forged))

    def test_bearer_header_parsing(self):
        self.assertEqual(get_bearer_token("Bearer abc.def"), "abc.def")
        self.assertEqual(get_bearer_token("bearer abc"), "abc")
        self.assertIsNone(get_bearer_token("Basic abc"))
        self.assertIsNone(get_bearer_token("Bearer "))
        self.assertIsNone(get_bearer_token(None))


class RegisterAPITest(TestCase):

    def setUp(self):
        self.client = Client()

    def register(self, **overrides):
        payload = {"name": "Alice", "email": "alice@example.com", "password": "secret123"}
        payload.update(overrides)
        return self.client.post(
            "/api/auth/register",
            data=json.dumps(payload),
            content_type="application/json",
        )

    def test_register_creates_unaffiliated_user(self):
        response = self.register()
        self.assertEqual(response.status_code, 201)
        data = response.json()

        self.assertIn("token", data)
        self.assertEqual(data["user"]["email"], "alice@example.com")
        self.assertEqual(data["user"]["role"], UserRole.USER)
        self.assertIsNone(data["user"]["org_id"])
        self.assertNotIn("password", data["user"])

        user = User.objects.get(email="alice@example.com")
        self.assertTrue(user.check_password("secret123"))
        self.assertIsNone(user.org_id)

    def test_register_duplicate_email(self):
        self.register()
        response = self.register(name="Other")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "AlreadyExists")
        self.assertEqual(User.objects.count(), 1)

    def test_email_uniqueness_is_case_sensitive(self):
        self.register()
        response = self.register(email="Alice@example.com")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(User.objects.count(), 2)

    def test_register_short_password(self):
        response = self.register(password="abc")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_register_invalid_email(self):
        response = self.register(email="not-an-email")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")

    def test_register_missing_field(self):
        response = self.client.post(
            "/api/auth/register",
            data=json.dumps({"email": "bob@example.com"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ValidationError")


class LoginAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.user = make_user()

    def login(self, email, password):
        return self.client.post(
            "/api/auth/login",
            data=json.dumps({"email": email, "password": password}),
            content_type="application/json",
        )

    def test_login_returns_token(self):
        response = self.login("alice@example.com", "secret123")
        self.assertEqual(response.status_code, 200)
        token = response.json()["token"]
        self.assertEqual(get_user_id_from_token(token), self.user.id)

    def test_wrong_password_and_unknown_email_fail_the_same_way(self):
        wrong_password = self.login("alice@example.com", "nope-nope")
        unknown_email = self.login("nobody@example.com", "secret123")
        self.assertEqual(wrong_password.status_code, 400)
        self.assertEqual(unknown_email.status_code, 400)
        self.assertEqual(wrong_password.json(), unknown_email.json())

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()
        self.assertEqual(self.login("alice@example.com", "secret123").status_code, 400)


class MeAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.user = make_user()

    def test_me_requires_auth(self):
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_me_rejects_garbage_token(self):
        response = self.client.get("/api/auth/me", HTTP_AUTHORIZATION="Bearer garbage")
        self.assertEqual(response.status_code, 401)

    def test_me_returns_profile(self):
        token = create_access_token(self.user.id, None)
        response = self.client.get("/api/auth/me", HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "alice@example.com")

    def test_me_reads_organization_from_record_not_token(self):
        token = create_access_token(self.user.id, None)
        org_id = uuid4()
        User.objects.filter(id=self.user.id).update(org_id=org_id, role=UserRole.MEMBER)

        response = self.client.get("/api/auth/me", HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(response.json()["org_id"], str(org_id))
        self.assertEqual(response.json()["role"], UserRole.MEMBER)

    def test_deactivated_user_token_is_rejected(self):
        token = create_access_token(self.user.id, None)
        self.user.is_active = False
        self.user.save()
        response = self.client.get("/api/auth/me", HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(response.status_code, 401)
