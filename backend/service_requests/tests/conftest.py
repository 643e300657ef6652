"""
Fixtures shared by the service-request tests: one department with two
officers and a head, a second department with its own officer, a
citizen, and a helper that files a request through the intake service.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from accounts.models import UserRole
from core.domain.access import Actor
from service_requests.services import RequestIntakeService


@pytest.fixture()
def department(create_department):
    return create_department(name="Civil Registry")


@pytest.fixture()
def other_department(create_department):
    return create_department(name="Transport")


@pytest.fixture()
def service(create_service, department):
    return create_service(name="Birth Certificate", fee=Decimal("50.00"), department=department)


@pytest.fixture()
def citizen(create_user):
    return create_user(username="citizen", first_name="Sara", last_name="Karimi")


@pytest.fixture()
def officer(create_user, department):
    return create_user(username="officer1", role=UserRole.OFFICER, department=department)


@pytest.fixture()
def second_officer(create_user, department):
    return create_user(username="officer2", role=UserRole.OFFICER, department=department)


@pytest.fixture()
def head(create_user, department):
    return create_user(username="head", role=UserRole.HEAD, department=department)


@pytest.fixture()
def foreign_officer(create_user, other_department):
    return create_user(username="officer3", role=UserRole.OFFICER, department=other_department)


@pytest.fixture()
def admin_user(create_user):
    return create_user(username="admin", role=UserRole.ADMIN)


@pytest.fixture()
def submit(citizen, service):
    """File a request as ``citizen`` (or another citizen) for ``service``."""

    def _submit(*, by=None, for_service=None, description="Please issue a copy."):
        return RequestIntakeService.submit_request(
            {"service": for_service or service, "description": description},
            Actor.from_user(by or citizen),
        )

    return _submit


@pytest.fixture()
def actor():
    return Actor.from_user
