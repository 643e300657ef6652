"""
Tests for the role-aware dashboard (``GET /api/core/dashboard/``) and the
system constants endpoint.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import UserRole
from core.domain.access import Actor
from core.services import DashboardAggregationService
from service_requests.services import (
    RequestAssignmentService,
    RequestIntakeService,
    RequestPaymentService,
    RequestWorkflowService,
)


@pytest.fixture()
def portal(create_department, create_service, create_user):
    """
    Two departments.  Civil Registry holds three requests (one approved
    and paid, one under review, one submitted); Transport holds one.
    """
    registry = create_department(name="Civil Registry")
    transport = create_department(name="Transport")
    birth = create_service(name="Birth Certificate", fee="50.00", department=registry)
    licence = create_service(name="Driving Licence", fee="120.00", department=transport)

    citizen = create_user(username="citizen")
    neighbour = create_user(username="neighbour")
    officer = create_user(username="officer1", role=UserRole.OFFICER, department=registry)
    idle = create_user(username="officer2", role=UserRole.OFFICER, department=registry)
    head = create_user(username="head", role=UserRole.HEAD, department=registry)
    admin = create_user(username="admin", role=UserRole.ADMIN)

    def file(by, service):
        return RequestIntakeService.submit_request(
            {"service": service, "description": "Please."}, Actor.from_user(by),
        )

    paid = file(citizen, birth)
    RequestAssignmentService.open_for_review(paid.pk, Actor.from_user(officer))
    RequestWorkflowService.transition(paid.pk, "approved", Actor.from_user(officer))
    RequestPaymentService.confirm_payment(paid.pk, Actor.from_user(citizen))

    open_review = file(citizen, birth)
    RequestAssignmentService.open_for_review(open_review.pk, Actor.from_user(officer))

    backlog = file(neighbour, birth)
    file(neighbour, licence)

    return {
        "registry": registry,
        "citizen": citizen,
        "officer": officer,
        "idle": idle,
        "head": head,
        "admin": admin,
        "open_review": open_review,
        "backlog": backlog,
    }


def _stats(user) -> dict:
    return DashboardAggregationService(Actor.from_user(user)).get_stats()


@pytest.mark.django_db
class TestDashboardAggregation:

    def test_admin_sees_everything_and_revenue(self, portal):
        stats = _stats(portal["admin"])

        assert stats["scope"] == "global"
        assert stats["total_requests"] == 4
        assert stats["approved"] == 1
        assert stats["under_review"] == 1
        assert stats["submitted"] == 2
        assert stats["revenue"] == Decimal("50.00")
        assert stats["payment_due"] == 3
        assert stats["officer_workload"] == []

    def test_head_sees_department_and_officer_workload(self, portal):
        stats = _stats(portal["head"])

        assert stats["scope"] == "department"
        assert stats["department_id"] == portal["registry"].pk
        assert stats["total_requests"] == 3

        workload = {row["username"]: row for row in stats["officer_workload"]}
        assert set(workload) == {"head", "officer1", "officer2"}
        assert workload["officer1"]["approved"] == 1
        assert workload["officer1"]["under_review"] == 1
        assert workload["officer1"]["total_reviewed"] == 2
        assert workload["officer2"]["total_reviewed"] == 0
        assert workload["head"]["total_reviewed"] == 0

    def test_head_reviews_count_in_workload(self, portal):
        head = portal["head"]
        RequestAssignmentService.open_for_review(portal["backlog"].pk, Actor.from_user(head))

        workload = {row["username"]: row for row in _stats(head)["officer_workload"]}

        assert workload["head"]["under_review"] == 1
        assert workload["head"]["total_reviewed"] == 1

    def test_officer_sees_open_reviews(self, portal):
        stats = _stats(portal["officer"])

        assert stats["total_requests"] == 3
        assert [row["id"] for row in stats["open_reviews"]] == [portal["open_review"].pk]
        assert _stats(portal["idle"])["open_reviews"] == []

    def test_citizen_sees_own_requests(self, portal):
        stats = _stats(portal["citizen"])

        assert stats["scope"] == "own"
        assert stats["total_requests"] == 2
        assert {row["status"] for row in stats["requests_by_status"]} == {
            "approved",
            "under_review",
        }

    def test_recent_activity_is_scoped(self, portal):
        request_ids = {row["request_id"] for row in _stats(portal["citizen"])["recent_activity"]}
        own = set(portal["citizen"].service_requests.values_list("id", flat=True))

        assert request_ids == own

    def test_endpoint(self, api_client, portal):
        token = AccessToken.for_user(portal["head"])
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        resp = api_client.get(reverse("core:dashboard-stats"))

        assert resp.status_code == 200
        assert resp.data["total_requests"] == 3
        assert resp.data["revenue"] == "50.00"
        assert len(resp.data["officer_workload"]) == 3


@pytest.mark.django_db
class TestSystemConstants:

    def test_constants_are_public(self, api_client):
        resp = api_client.get(reverse("core:system-constants"))

        assert resp.status_code == 200
        statuses = [item["value"] for item in resp.data["request_statuses"]]
        assert statuses == ["submitted", "under_review", "approved", "rejected"]
        assert {item["value"] for item in resp.data["roles"]} == {
            "citizen", "officer", "head", "admin",
        }
        assert "cross_department" in {item["value"] for item in resp.data["denial_reasons"]}
        assert "must_claim_first" in {item["value"] for item in resp.data["transition_errors"]}
