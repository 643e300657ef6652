"""
Project-wide pytest fixtures.

* ``api_client``                        : unauthenticated ``APIClient``.
* ``create_department`` / ``create_service``: catalogue factories.
* ``create_user``                       : user factory, any role.
* ``auth_header``                       : user + ``Authorization`` header.
"""

from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest
from rest_framework.test import APIClient

DEFAULT_PASSWORD = "TestPass123!"


@pytest.fixture()
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture()
def create_department(db):
    """``create_department(name="Civil Registry")``; names default to ``Department N``."""
    from catalog.models import Department

    seq = count(1)

    def _factory(*, name: str | None = None) -> Department:
        return Department.objects.create(name=name or f"Department {next(seq)}")

    return _factory


@pytest.fixture()
def create_service(db, create_department):
    """``create_service(fee="50.00", department=dept)``; a department is made if omitted."""
    from catalog.models import Service

    seq = count(1)

    def _factory(
        *,
        name: str | None = None,
        fee: Decimal | str = Decimal("0.00"),
        department=None,
    ) -> Service:
        return Service.objects.create(
            name=name or f"Service {next(seq)}",
            fee=Decimal(str(fee)),
            department=department or create_department(),
        )

    return _factory


@pytest.fixture()
def create_user(db):
    """
    User factory; citizens by default.

    Usage::

        citizen = create_user(username="alice")
        officer = create_user(role=UserRole.OFFICER, department=dept)
    """
    from accounts.models import User, UserRole

    seq = count(1)

    def _factory(
        *,
        username: str | None = None,
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
        role: str = UserRole.CITIZEN,
        department=None,
        is_active: bool = True,
        **extra,
    ) -> User:
        username = username or f"user{next(seq)}"
        return User.objects.create_user(
            username=username,
            password=password,
            email=email or f"{username}@portal.test",
            role=role,
            department=department,
            is_active=is_active,
            **extra,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Create a user and return ``{"Authorization": "Bearer <access>"}`` for it::

        header = auth_header(role=UserRole.ADMIN)
        api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(**user_kwargs) -> dict[str, str]:
        token = AccessToken.for_user(create_user(**user_kwargs))
        return {"Authorization": f"Bearer {token}"}

    return _make
