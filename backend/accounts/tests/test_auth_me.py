"""
Integration tests for the current-user profile endpoint.

Endpoint under test:  GET / PATCH /api/accounts/me/  (named URL: accounts:me)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import UserRole
from catalog.models import Department

User = get_user_model()

_PASSWORD = "Str0ng!Pass99"


class TestAuthMe(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.department = Department.objects.create(name="Civil Registry")
        cls.user = User.objects.create_user(
            username="me_user",
            email="me_user@example.com",
            password=_PASSWORD,
            first_name="Me",
            last_name="User",
            role=UserRole.OFFICER,
            department=cls.department,
        )
        User.objects.create_user(
            username="taken", email="taken@example.com", password=_PASSWORD,
        )

    def setUp(self):
        self.client = APIClient()
        self.me_url = reverse("accounts:me")

    def login(self):
        resp = self.client.post(
            reverse("accounts:login"),
            {"identifier": "me_user", "password": _PASSWORD},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.data['access']}")

    def test_me_returns_profile(self):
        self.login()

        resp = self.client.get(self.me_url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], self.user.pk)
        self.assertEqual(resp.data["role"], UserRole.OFFICER)
        self.assertEqual(resp.data["role_display"], "Officer")
        self.assertEqual(resp.data["department"], self.department.pk)
        self.assertEqual(resp.data["department_name"], "Civil Registry")
        self.assertNotIn("password", resp.data)

    def test_me_unauthenticated_returns_401(self):
        resp = self.client.get(self.me_url)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_invalid_token_returns_401(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        resp = self.client.get(self.me_url)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_patch_updates_allowed_fields(self):
        self.login()

        resp = self.client.patch(
            self.me_url,
            {"first_name": "Updated", "contact_info": "Tehran"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertEqual(resp.data["first_name"], "Updated")
        self.user.refresh_from_db()
        self.assertEqual(self.user.contact_info, "Tehran")

    def test_patch_cannot_change_role_or_department(self):
        self.login()

        self.client.patch(
            self.me_url,
            {"role": UserRole.ADMIN, "department": None},
            format="json",
        )

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, UserRole.OFFICER)
        self.assertEqual(self.user.department_id, self.department.pk)

    def test_patch_email_taken_by_another_account(self):
        self.login()

        resp = self.client.patch(self.me_url, {"email": "TAKEN@example.com"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", resp.data)
