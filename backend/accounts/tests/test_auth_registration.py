"""
Integration tests for citizen self-registration.

Endpoint under test:  POST /api/accounts/auth/register/
                      (named URL: accounts:register)
Success response:     HTTP 201 with the ``UserDetailSerializer`` payload.
Duplicates:           HTTP 409 ``{"detail": ..., "code": "duplicate_account"}``
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


def _payload(**overrides) -> dict:
    data = {
        "email": "Sara.Karimi@Example.com",
        "password": _PASSWORD,
        "password_confirm": _PASSWORD,
        "first_name": "Sara",
        "last_name": "Karimi",
        "national_id": "0012345678",
        "contact_info": "+98 21 5555 0000",
    }
    data.update(overrides)
    return data


class TestCitizenRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:register")

    def test_register_returns_201_with_citizen_role(self):
        resp = self.client.post(self.url, _payload(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["role"], UserRole.CITIZEN)
        self.assertIsNone(resp.data["department"])
        self.assertNotIn("password", resp.data)

    def test_email_is_normalised_and_used_as_username(self):
        resp = self.client.post(self.url, _payload(), format="json")

        self.assertEqual(resp.data["email"], "sara.karimi@example.com")
        self.assertEqual(resp.data["username"], "sara.karimi@example.com")

    def test_password_is_hashed(self):
        self.client.post(self.url, _payload(), format="json")

        user = User.objects.get(email="sara.karimi@example.com")
        self.assertNotEqual(user.password, _PASSWORD)
        self.assertTrue(user.check_password(_PASSWORD))

    def test_role_and_department_from_client_are_ignored(self):
        dept = Department.objects.create(name="Civil Registry")

        resp = self.client.post(
            self.url,
            _payload(role=UserRole.ADMIN, department=dept.pk),
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(pk=resp.data["id"])
        self.assertEqual(user.role, UserRole.CITIZEN)
        self.assertIsNone(user.department_id)

    def test_blank_national_id_is_stored_as_null(self):
        self.client.post(self.url, _payload(national_id=""), format="json")
        resp = self.client.post(
            self.url,
            _payload(email="other@example.com", national_id=""),
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(User.objects.filter(national_id__isnull=True).count(), 2)

    def test_duplicate_email_returns_409(self):
        self.client.post(self.url, _payload(), format="json")

        resp = self.client.post(
            self.url,
            _payload(email="SARA.KARIMI@example.com", national_id="0099999999"),
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "duplicate_account")
        self.assertIn("email", resp.data["detail"])

    def test_duplicate_national_id_returns_409(self):
        self.client.post(self.url, _payload(), format="json")

        resp = self.client.post(
            self.url,
            _payload(email="someone.else@example.com"),
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("national_id", resp.data["detail"])

    def test_password_mismatch_returns_400(self):
        resp = self.client.post(
            self.url, _payload(password_confirm="Different!Pass1"), format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", resp.data)

    def test_non_numeric_national_id_returns_400(self):
        resp = self.client.post(self.url, _payload(national_id="AB-123"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("national_id", resp.data)

    def test_missing_required_fields_returns_400(self):
        resp = self.client.post(self.url, {"email": "a@example.com"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ("password", "password_confirm", "first_name", "last_name"):
            self.assertIn(field, resp.data)
