"""
Tests for ``RequestAssignmentService.open_for_review``: the first
officer to open an unassigned submitted request becomes its reviewer.
"""

from __future__ import annotations

import copy
from unittest import mock

import pytest

from core.domain.exceptions import NotFound, PermissionDenied
from core.models import Notification
from service_requests.models import RequestStatus, RequestStatusLog
from service_requests.services import ClaimOutcome, RequestAssignmentService
from service_requests.store import RequestStore


@pytest.mark.django_db
class TestOpenForReview:

    def test_first_officer_claims(self, submit, officer, actor):
        request = submit()

        result = RequestAssignmentService.open_for_review(request.pk, actor(officer))

        assert result.outcome is ClaimOutcome.CLAIMED
        assert result.claimed
        assert result.reviewer_id == officer.pk
        request.refresh_from_db()
        assert request.status == RequestStatus.UNDER_REVIEW
        assert request.reviewed_by_id == officer.pk

    def test_second_officer_gets_existing_assignment(self, submit, officer, second_officer, actor):
        request = submit()
        RequestAssignmentService.open_for_review(request.pk, actor(officer))

        result = RequestAssignmentService.open_for_review(request.pk, actor(second_officer))

        assert result.outcome is ClaimOutcome.ALREADY_ASSIGNED
        assert result.reviewer_id == officer.pk
        request.refresh_from_db()
        assert request.reviewed_by_id == officer.pk

    def test_reopening_by_reviewer_reports_own_assignment(self, submit, officer, actor):
        request = submit()
        RequestAssignmentService.open_for_review(request.pk, actor(officer))

        result = RequestAssignmentService.open_for_review(request.pk, actor(officer))

        assert result.outcome is ClaimOutcome.ALREADY_ASSIGNED
        assert result.reviewer_id == officer.pk

    def test_head_can_claim_like_an_officer(self, submit, head, actor):
        request = submit()
        result = RequestAssignmentService.open_for_review(request.pk, actor(head))
        assert result.claimed
        assert result.reviewer_id == head.pk

    def test_claim_writes_log_and_notifies_citizen(self, submit, officer, citizen, actor):
        request = submit()
        RequestAssignmentService.open_for_review(request.pk, actor(officer))

        log = RequestStatusLog.objects.get(request=request, to_status=RequestStatus.UNDER_REVIEW)
        assert log.from_status == RequestStatus.SUBMITTED
        assert log.changed_by_id == officer.pk
        assert Notification.objects.filter(
            recipient=citizen, title="Request Under Review",
        ).count() == 1

    def test_cross_department_officer_is_denied(self, submit, foreign_officer, actor):
        request = submit()

        with pytest.raises(PermissionDenied) as exc_info:
            RequestAssignmentService.open_for_review(request.pk, actor(foreign_officer))

        assert exc_info.value.code == "cross_department"
        request.refresh_from_db()
        assert request.reviewed_by_id is None
        assert request.status == RequestStatus.SUBMITTED

    @pytest.mark.parametrize("role_fixture", ["citizen", "admin_user"])
    def test_non_staff_roles_cannot_claim(self, request, submit, role_fixture, actor):
        user = request.getfixturevalue(role_fixture)
        service_request = submit()

        with pytest.raises(PermissionDenied) as exc_info:
            RequestAssignmentService.open_for_review(service_request.pk, actor(user))

        assert exc_info.value.code == "role_not_permitted"

    def test_unknown_request_raises_not_found(self, officer, actor):
        with pytest.raises(NotFound):
            RequestAssignmentService.open_for_review(424242, actor(officer))

    def test_decided_request_is_never_reassigned(self, submit, officer, second_officer, actor):
        from service_requests.services import RequestWorkflowService

        request = submit()
        RequestAssignmentService.open_for_review(request.pk, actor(officer))
        RequestWorkflowService.transition(request.pk, RequestStatus.APPROVED, actor(officer))

        result = RequestAssignmentService.open_for_review(request.pk, actor(second_officer))

        assert result.outcome is ClaimOutcome.ALREADY_ASSIGNED
        assert result.request.status == RequestStatus.APPROVED
        assert result.reviewer_id == officer.pk


@pytest.mark.django_db
class TestConcurrentClaims:
    """
    Every contender reads the request while it is still unassigned, then
    races on the conditional update.  ``RequestStore.get`` is patched to
    hand each contender that stale snapshot on its first read, which is
    exactly the interleaving a real race produces.
    """

    def _open_with_stale_read(self, request_id, stale, actor):
        real_get = RequestStore.get
        reads = []

        def _get(pk):
            reads.append(pk)
            if len(reads) == 1:
                return copy.copy(stale)
            return real_get(pk)

        with mock.patch.object(RequestStore, "get", side_effect=_get):
            return RequestAssignmentService.open_for_review(request_id, actor)

    def test_exactly_one_of_many_officers_wins(self, submit, create_user, department, actor):
        from accounts.models import UserRole

        request = submit()
        stale = RequestStore.get(request.pk)
        officers = [
            create_user(username=f"racer{i}", role=UserRole.OFFICER, department=department)
            for i in range(5)
        ]

        results = [
            self._open_with_stale_read(request.pk, stale, actor(o))
            for o in officers
        ]

        winners = [r for r in results if r.outcome is ClaimOutcome.CLAIMED]
        losers = [r for r in results if r.outcome is ClaimOutcome.ALREADY_ASSIGNED]
        assert len(winners) == 1
        assert len(losers) == 4
        winner_id = winners[0].reviewer_id
        assert winner_id == officers[0].pk
        assert all(r.reviewer_id == winner_id for r in losers)

        request.refresh_from_db()
        assert request.reviewed_by_id == winner_id
        assert RequestStatusLog.objects.filter(
            request=request, to_status=RequestStatus.UNDER_REVIEW,
        ).count() == 1

    def test_lost_conditional_update_never_overwrites(self, submit, officer, second_officer):
        request = submit()

        assert RequestStore.conditional_assign(request.pk, officer.pk) is True
        assert RequestStore.conditional_assign(request.pk, second_officer.pk) is False

        request.refresh_from_db()
        assert request.reviewed_by_id == officer.pk
