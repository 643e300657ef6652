"""Tests for ``RequestIntakeService.submit_request``."""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.domain.exceptions import NotFound, PermissionDenied
from core.models import Notification
from service_requests.models import PaymentStatus, RequestStatus, RequestStatusLog
from service_requests.services import RequestIntakeService


@pytest.mark.django_db
class TestSubmitRequest:

    def test_new_request_starts_submitted_unassigned_and_pending(self, submit, citizen, service):
        request = submit()

        assert request.status == RequestStatus.SUBMITTED
        assert request.reviewed_by_id is None
        assert request.citizen_id == citizen.pk
        assert request.payment_status == PaymentStatus.PENDING
        assert request.payment_amount == Decimal("50.00")
        assert request.payment_due is True

    def test_description_is_trimmed(self, submit):
        request = submit(description="   Need a copy  \n")
        assert request.description == "Need a copy"

    def test_intake_writes_initial_log_row_and_notifies_citizen(self, submit, citizen):
        request = submit()

        log = RequestStatusLog.objects.get(request=request)
        assert log.from_status == ""
        assert log.to_status == RequestStatus.SUBMITTED
        assert log.changed_by_id == citizen.pk
        assert Notification.objects.filter(recipient=citizen, title="Request Submitted").count() == 1

    def test_free_service_has_nothing_due(self, submit, create_service, department):
        free = create_service(name="Address Change", fee="0.00", department=department)
        request = submit(for_service=free)
        assert request.payment_due is False

    def test_fee_snapshot_survives_later_fee_change(self, submit, service):
        request = submit()

        service.fee = Decimal("75.00")
        service.save()
        request.refresh_from_db()

        assert request.payment_amount == Decimal("50.00")

    def test_officer_may_not_submit(self, submit, officer):
        with pytest.raises(PermissionDenied) as exc_info:
            submit(by=officer)
        assert exc_info.value.code == "role_not_permitted"

    def test_unknown_service_id_raises_not_found(self, citizen, actor):
        with pytest.raises(NotFound):
            RequestIntakeService.submit_request(
                {"service": 987654, "description": "x"},
                actor(citizen),
            )
