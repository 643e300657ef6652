"""
Tests for the read-only user directory (``GET /api/accounts/users/``).

Administrators see every account; department heads only the users of
their own department; everyone else is refused.
"""

from __future__ import annotations

import pytest
from django.urls import reverse

from accounts.models import UserRole


@pytest.fixture()
def registry(create_department):
    return create_department(name="Civil Registry")


@pytest.fixture()
def transport(create_department):
    return create_department(name="Transport")


@pytest.fixture()
def staff(create_user, registry, transport):
    return {
        "registry_officer": create_user(
            username="reg_officer", role=UserRole.OFFICER, department=registry,
        ),
        "transport_officer": create_user(
            username="tr_officer", role=UserRole.OFFICER, department=transport,
        ),
        "citizen": create_user(username="some_citizen", first_name="Reza"),
    }


def _usernames(resp) -> set[str]:
    return {row["username"] for row in resp.data}


@pytest.mark.django_db
class TestUserDirectory:

    def test_admin_sees_everyone(self, api_client, auth_header, staff):
        header = auth_header(username="root", role=UserRole.ADMIN)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])

        resp = api_client.get(reverse("accounts:user-list"))

        assert resp.status_code == 200
        assert {"reg_officer", "tr_officer", "some_citizen", "root"} <= _usernames(resp)

    def test_head_sees_own_department_only(self, api_client, auth_header, staff, registry):
        header = auth_header(username="reg_head", role=UserRole.HEAD, department=registry)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])

        resp = api_client.get(reverse("accounts:user-list"))

        assert resp.status_code == 200
        assert _usernames(resp) == {"reg_head", "reg_officer"}

    def test_head_cannot_retrieve_foreign_staff(self, api_client, auth_header, staff, registry):
        header = auth_header(role=UserRole.HEAD, department=registry)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])

        resp = api_client.get(
            reverse("accounts:user-detail", args=[staff["transport_officer"].pk]),
        )

        assert resp.status_code == 404

    @pytest.mark.parametrize("role", [UserRole.CITIZEN, UserRole.OFFICER])
    def test_other_roles_are_refused(self, api_client, auth_header, registry, role):
        department = registry if role == UserRole.OFFICER else None
        header = auth_header(role=role, department=department)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])

        resp = api_client.get(reverse("accounts:user-list"))

        assert resp.status_code == 403
        assert resp.data["code"] == "role_not_permitted"

    def test_filters(self, api_client, auth_header, staff, transport):
        header = auth_header(role=UserRole.ADMIN)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
        url = reverse("accounts:user-list")

        resp = api_client.get(url, {"role": UserRole.OFFICER, "department": transport.pk})
        assert _usernames(resp) == {"tr_officer"}

        resp = api_client.get(url, {"search": "reza"})
        assert _usernames(resp) == {"some_citizen"}
