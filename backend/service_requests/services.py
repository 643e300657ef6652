"""
Service-requests app Service Layer.

This module is the **single source of truth** for all business logic
in the ``service_requests`` app.  Views must remain thin: validate input
via serializers, build an ``Actor``, call a service method, and return
the result wrapped in a DRF ``Response``.

Architecture
------------
- ``RequestQueryService``     : role-scoped, filtered listings.
- ``RequestIntakeService``    : citizen submission (fee snapshot).
- ``RequestAssignmentService``: first-officer-to-open claims the request.
- ``RequestWorkflowService``  : status state machine (decisions).
- ``RequestPaymentService``   : citizen payment confirmation.

Workflow State-Machine Overview
--------------------------------
  SUBMITTED
    → UNDER_REVIEW   (claim only: ``RequestAssignmentService``)
  UNDER_REVIEW
    → APPROVED       (stored reviewer)
    → REJECTED       (stored reviewer)
  APPROVED / REJECTED are terminal.

Concurrency
-----------
Both mutating paths end in a single compare-and-set ``UPDATE`` issued by
``RequestStore``; no row is ever read and then written unguarded, so the
rules hold across any number of server processes.  Lost races are
reported, never retried here.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts.models import STAFF_ROLES, UserRole
from catalog.models import Service
from core.domain.access import Actor, require_role
from core.domain.exceptions import (
    InvalidTransition,
    NotFound,
    PermissionDenied,
    StoreConflict,
)
from core.domain.notifications import NotificationService
from core.domain.transactions import compare_and_set, run_in_atomic

from .access import RequestAccessGuard
from .models import (
    DenialReason,
    PaymentStatus,
    RequestStatus,
    RequestStatusLog,
    ServiceRequest,
    TransitionError,
)
from .store import RequestStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Valid transition map
# ═══════════════════════════════════════════════════════════════════

#: Transitions reachable through ``RequestWorkflowService.transition``.
#: ``SUBMITTED → UNDER_REVIEW`` is deliberately absent: it only happens
#: through the claim in ``RequestAssignmentService``.
ALLOWED_TRANSITIONS: frozenset[tuple[str, str]] = frozenset({
    (RequestStatus.UNDER_REVIEW, RequestStatus.APPROVED),
    (RequestStatus.UNDER_REVIEW, RequestStatus.REJECTED),
})

_DECISION_EVENTS: dict[str, str] = {
    RequestStatus.APPROVED: "request_approved",
    RequestStatus.REJECTED: "request_rejected",
}


def _log_status_change(
    request_id: int,
    from_status: str,
    to_status: str,
    changed_by_id: int | None,
    message: str = "",
) -> RequestStatusLog:
    return RequestStatusLog.objects.create(
        request_id=request_id,
        from_status=from_status,
        to_status=to_status,
        changed_by_id=changed_by_id,
        message=message,
    )


def _require_staff(actor: Actor) -> None:
    require_role(
        actor,
        *STAFF_ROLES,
        message="Only officers and department heads may review requests.",
    )


# ═══════════════════════════════════════════════════════════════════
#  Request Query Service
# ═══════════════════════════════════════════════════════════════════


class RequestQueryService:
    """Role-scoped listings for dashboards and the audit trail."""

    @staticmethod
    def get_filtered_queryset(actor: Actor, filters: dict[str, Any]) -> QuerySet:
        """
        Build the list of requests ``actor`` may see, narrowed by
        ``filters`` (see ``RequestStore.apply_filters``).

        Staff asking explicitly for another department's requests get
        ``PermissionDenied(cross_department)`` rather than an empty list.
        """
        department = filters.get("department")
        if (
            actor.role in STAFF_ROLES
            and department is not None
            and department != actor.department_id
        ):
            raise PermissionDenied(
                "You may only list requests of your own department.",
                code=DenialReason.CROSS_DEPARTMENT,
            )

        if actor.role in STAFF_ROLES:
            return RequestStore.list_by_department(actor.department_id, filters)

        qs = RequestAccessGuard.scope_queryset(actor, RequestStore.base_queryset())
        return RequestStore.apply_filters(qs, filters)

    @staticmethod
    def get_request(request_id: int, actor: Actor) -> ServiceRequest:
        """Read a single request without side effects (citizens, admins)."""
        service_request = RequestStore.get(request_id)
        RequestAccessGuard.ensure_can_read(actor, service_request)
        return service_request

    @classmethod
    def get_status_log(cls, request_id: int, actor: Actor) -> QuerySet:
        service_request = cls.get_request(request_id, actor)
        return (
            service_request.status_logs
            .select_related("changed_by")
            .order_by("created_at", "id")
        )


# ═══════════════════════════════════════════════════════════════════
#  Request Intake Service
# ═══════════════════════════════════════════════════════════════════


class RequestIntakeService:
    """Creates requests on behalf of citizens."""

    @staticmethod
    @transaction.atomic
    def submit_request(validated_data: dict[str, Any], actor: Actor) -> ServiceRequest:
        """
        File a new request for ``validated_data["service"]``.

        The request starts ``SUBMITTED`` / unassigned / ``PENDING`` payment,
        and ``payment_amount`` is copied from the service fee *now*.

        Raises
        ------
        PermissionDenied
            If the actor is not a citizen.
        NotFound
            If the service does not exist.
        """
        require_role(actor, UserRole.CITIZEN, message="Only citizens may submit requests.")

        service = validated_data["service"]
        if not isinstance(service, Service):
            try:
                service = Service.objects.get(pk=service)
            except Service.DoesNotExist:
                raise NotFound(f"Service {service} does not exist.")

        service_request = ServiceRequest.objects.create(
            citizen_id=actor.id,
            service=service,
            description=validated_data["description"].strip(),
            status=RequestStatus.SUBMITTED,
            payment_status=PaymentStatus.PENDING,
            payment_amount=service.fee,
        )
        _log_status_change(
            service_request.pk, "", RequestStatus.SUBMITTED, actor.id,
        )
        NotificationService.create(
            actor=None,
            recipients=service_request.citizen,
            event_type="request_submitted",
            related_object=service_request,
        )
        logger.info(
            "Citizen %s submitted request %s for service %s (fee snapshot %s).",
            actor.id,
            service_request.pk,
            service.pk,
            service_request.payment_amount,
        )
        return service_request


# ═══════════════════════════════════════════════════════════════════
#  Request Assignment Service
# ═══════════════════════════════════════════════════════════════════


class ClaimOutcome(str, enum.Enum):
    #: This call made the actor the reviewer.
    CLAIMED = "claimed"
    #: Someone (possibly the actor, on an earlier open) already holds it,
    #: or the request had already left ``submitted``.
    ALREADY_ASSIGNED = "already_assigned"


@dataclass(frozen=True)
class ClaimResult:
    request: ServiceRequest
    outcome: ClaimOutcome

    @property
    def claimed(self) -> bool:
        return self.outcome is ClaimOutcome.CLAIMED

    @property
    def reviewer_id(self) -> int | None:
        return self.request.reviewed_by_id


class RequestAssignmentService:
    """
    "The first officer to open an unassigned submitted request becomes
    its reviewer."
    """

    @staticmethod
    def open_for_review(request_id: int, actor: Actor) -> ClaimResult:
        """
        Open a request as an officer/head, claiming it if it is still
        unclaimed.

        Steps
        -----
        1. Role must be officer or head (``role_not_permitted``).
        2. Load the request (``NotFound``) and check department
           (``cross_department``).
        3. If it looks unclaimed, issue the conditional assignment.  Only
           the single ``UPDATE`` decides the winner; the read in step 2 is
           advisory.
        4. Otherwise, or if the update lost, re-read and report the
           existing assignment as ``ALREADY_ASSIGNED``.  ``reviewed_by`` is
           never overwritten.
        """
        _require_staff(actor)

        service_request = RequestStore.get(request_id)
        RequestAccessGuard.ensure_can_read(actor, service_request)

        if (
            service_request.reviewed_by_id is None
            and service_request.status == RequestStatus.SUBMITTED
        ):
            won = run_in_atomic(
                RequestAssignmentService._claim, service_request.pk, actor,
            )
            if won:
                claimed = RequestStore.get(request_id)
                NotificationService.create(
                    actor=claimed.reviewed_by,
                    recipients=claimed.citizen,
                    event_type="request_under_review",
                    related_object=claimed,
                )
                logger.info(
                    "Request %s claimed by %s %s.",
                    request_id,
                    actor.role,
                    actor.id,
                )
                return ClaimResult(claimed, ClaimOutcome.CLAIMED)
            service_request = RequestStore.get(request_id)

        return ClaimResult(service_request, ClaimOutcome.ALREADY_ASSIGNED)

    @staticmethod
    def _claim(request_id: int, actor: Actor) -> bool:
        won = RequestStore.conditional_assign(request_id, actor.id)
        if won:
            _log_status_change(
                request_id,
                RequestStatus.SUBMITTED,
                RequestStatus.UNDER_REVIEW,
                actor.id,
            )
        return won


# ═══════════════════════════════════════════════════════════════════
#  Request Workflow Service
# ═══════════════════════════════════════════════════════════════════


class RequestWorkflowService:
    """
    Manages review decisions.

    A single ``transition`` method acts as the validated gateway through
    the state machine defined by ``ALLOWED_TRANSITIONS``.  Every
    rejection is a typed domain exception; the store is written only
    after every check has passed.
    """

    @staticmethod
    def transition(
        request_id: int,
        target_status: str,
        actor: Actor,
        message: str = "",
    ) -> ServiceRequest:
        """
        **The central state-machine gateway.**

        Parameters
        ----------
        request_id : int
            The request to decide.
        target_status : str
            Desired ``RequestStatus`` value.
        actor : Actor
            Officer or head performing the decision.
        message : str
            Optional note stored in the status log and sent to the
            citizen.

        Returns
        -------
        ServiceRequest
            The freshly re-read request.

        Raises
        ------
        NotFound
            Unknown request.
        PermissionDenied
            ``role_not_permitted`` / ``cross_department`` /
            ``not_assigned_reviewer``.
        InvalidTransition
            ``bad_target_status`` / ``terminal_state`` /
            ``must_claim_first``.
        StoreConflict
            The compare-and-set lost against a concurrent write.
        """
        service_request = RequestStore.get(request_id)
        _require_staff(actor)
        RequestAccessGuard.ensure_can_read(actor, service_request)

        current = service_request.status
        if target_status not in RequestStatus.values or target_status == RequestStatus.SUBMITTED:
            raise InvalidTransition(
                current=current,
                target=str(target_status),
                reason=TransitionError.BAD_TARGET_STATUS.label,
                code=TransitionError.BAD_TARGET_STATUS,
            )

        if service_request.is_terminal:
            raise InvalidTransition(
                current=current,
                target=target_status,
                reason=TransitionError.TERMINAL_STATE.label,
                code=TransitionError.TERMINAL_STATE,
            )

        if current == RequestStatus.SUBMITTED:
            raise InvalidTransition(
                current=current,
                target=target_status,
                reason=TransitionError.MUST_CLAIM_FIRST.label,
                code=TransitionError.MUST_CLAIM_FIRST,
            )

        RequestAccessGuard.ensure_can_mutate(actor, service_request)

        if (current, target_status) not in ALLOWED_TRANSITIONS:
            raise InvalidTransition(
                current=current,
                target=target_status,
                reason=TransitionError.BAD_TARGET_STATUS.label,
                code=TransitionError.BAD_TARGET_STATUS,
            )

        won = run_in_atomic(
            RequestWorkflowService._apply,
            service_request.pk, actor, current, target_status, message,
        )
        if not won:
            raise StoreConflict(
                f"Request #{request_id} changed while it was being decided; "
                f"reload it before trying again.",
            )

        decided = RequestStore.get(request_id)
        NotificationService.create(
            actor=decided.reviewed_by,
            recipients=decided.citizen,
            event_type=_DECISION_EVENTS[target_status],
            payload={"message": message},
            related_object=decided,
        )
        logger.info(
            "Request %s moved %s → %s by %s %s.",
            request_id,
            current,
            target_status,
            actor.role,
            actor.id,
        )
        return decided

    @staticmethod
    def _apply(
        request_id: int,
        actor: Actor,
        from_status: str,
        to_status: str,
        message: str,
    ) -> bool:
        won = RequestStore.conditional_transition(
            request_id, actor.id, from_status, to_status,
        )
        if won:
            _log_status_change(request_id, from_status, to_status, actor.id, message)
        return won


# ═══════════════════════════════════════════════════════════════════
#  Request Payment Service
# ═══════════════════════════════════════════════════════════════════


class RequestPaymentService:
    """
    Citizen-side payment confirmation.

    Payment state is independent of the review state machine: a request
    may be decided whatever its ``payment_status``.
    """

    @staticmethod
    def confirm_payment(request_id: int, actor: Actor) -> ServiceRequest:
        """
        Mark the fee of the actor's own request as paid.

        Idempotent: confirming an already-paid request returns it
        unchanged.  A request with no fee owes nothing and is returned
        unchanged as well.

        Raises
        ------
        NotFound
            Unknown request.
        PermissionDenied
            Actor is not a citizen (``role_not_permitted``) or not the
            owner (``not_owner``).
        """
        require_role(actor, UserRole.CITIZEN, message="Only citizens may confirm payments.")
        service_request = RequestStore.get(request_id)
        RequestAccessGuard.ensure_can_read(actor, service_request)

        if not service_request.payment_due:
            return service_request

        updated = compare_and_set(
            ServiceRequest,
            pk=service_request.pk,
            expected={
                "citizen_id": actor.id,
                "payment_status__in": [PaymentStatus.PENDING, PaymentStatus.FAILED],
            },
            changes={
                "payment_status": PaymentStatus.PAID,
                "paid_at": timezone.now(),
            },
        )
        service_request = RequestStore.get(request_id)
        if updated:
            NotificationService.create(
                actor=service_request.citizen,
                recipients=service_request.citizen,
                event_type="payment_confirmed",
                related_object=service_request,
            )
            logger.info(
                "Payment of %s confirmed for request %s.",
                service_request.payment_amount,
                request_id,
            )
        return service_request
