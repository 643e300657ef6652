"""
Core app services: the role-aware dashboard, the constants endpoint and
the notification inbox.

``core`` is the only app that aggregates across the others.  To keep
import order acyclic, models of ``accounts`` and ``service_requests`` are
resolved inside the methods (``apps.get_model`` or a local import), never
at module level.  Aggregations stay in the database
(``aggregate`` / ``values().annotate()``).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.apps import apps
from django.db.models import Count, Q, QuerySet, Sum

from core.domain.access import Actor
from core.domain.exceptions import NotFound


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces an aggregated statistics dict consumed by
    ``DashboardStatsSerializer``.

    The statistics are **role-aware**:

    * **Admin**: portal-wide totals and revenue (sum of paid fees).
    * **Head**: totals of the head's department plus the workload of
      every reviewer (officer or head) of the department.
    * **Officer**: totals of the officer's department plus the
      requests the officer is currently reviewing.
    * **Citizen**: totals of the citizen's own requests.
    """

    #: Maximum number of recent activity items to return.
    RECENT_ACTIVITY_LIMIT: int = 20

    def __init__(self, actor: Actor) -> None:
        self.actor = actor

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the full dashboard statistics dictionary."""
        from accounts.models import UserRole
        from service_requests.models import PaymentStatus, RequestStatus

        request_qs = self._get_request_queryset()

        aggregates = request_qs.aggregate(
            total_requests=Count("id"),
            submitted=Count("id", filter=Q(status=RequestStatus.SUBMITTED)),
            under_review=Count("id", filter=Q(status=RequestStatus.UNDER_REVIEW)),
            approved=Count("id", filter=Q(status=RequestStatus.APPROVED)),
            rejected=Count("id", filter=Q(status=RequestStatus.REJECTED)),
            payment_due=Count(
                "id",
                filter=Q(payment_amount__gt=0) & ~Q(payment_status=PaymentStatus.PAID),
            ),
            revenue=Sum(
                "payment_amount",
                filter=Q(payment_status=PaymentStatus.PAID),
            ),
        )

        return {
            "scope": self._scope_name(),
            "department_id": self.actor.department_id,
            "total_requests": aggregates["total_requests"],
            "submitted": aggregates["submitted"],
            "under_review": aggregates["under_review"],
            "approved": aggregates["approved"],
            "rejected": aggregates["rejected"],
            "payment_due": aggregates["payment_due"],
            "revenue": aggregates["revenue"] or Decimal("0.00"),
            "requests_by_status": self._get_requests_by_status(request_qs),
            "officer_workload": (
                self._get_officer_workload()
                if self.actor.role == UserRole.HEAD else []
            ),
            "open_reviews": (
                self._get_open_reviews()
                if self.actor.role in (UserRole.OFFICER, UserRole.HEAD) else []
            ),
            "recent_activity": self._get_recent_activity(request_qs),
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _scope_name(self) -> str:
        from accounts.models import UserRole

        return {
            UserRole.ADMIN: "global",
            UserRole.HEAD: "department",
            UserRole.OFFICER: "department",
            UserRole.CITIZEN: "own",
        }.get(self.actor.role, "none")

    def _get_request_queryset(self) -> QuerySet:
        """Return a ``ServiceRequest`` queryset scoped to the actor."""
        from service_requests.access import RequestAccessGuard

        ServiceRequest = apps.get_model("service_requests", "ServiceRequest")
        return RequestAccessGuard.scope_queryset(self.actor, ServiceRequest.objects.all())

    def _get_requests_by_status(self, request_qs: QuerySet) -> list[dict[str, Any]]:
        """Group ``request_qs`` by status and return a list of dicts."""
        from service_requests.models import RequestStatus

        status_label_map = dict(RequestStatus.choices)
        rows = (
            request_qs
            .values("status")
            .annotate(count=Count("id"))
            .order_by("status")
        )
        return [
            {
                "status": row["status"],
                "label": status_label_map.get(row["status"], row["status"]),
                "count": row["count"],
            }
            for row in rows
        ]

    def _get_officer_workload(self) -> list[dict[str, Any]]:
        """Officers and heads of the department with their reviewed requests by status."""
        from accounts.models import STAFF_ROLES
        from service_requests.models import RequestStatus

        User = apps.get_model("accounts", "User")
        officers = (
            User.objects
            .filter(role__in=STAFF_ROLES, department_id=self.actor.department_id)
            .annotate(
                under_review=Count(
                    "reviewed_requests",
                    filter=Q(reviewed_requests__status=RequestStatus.UNDER_REVIEW),
                ),
                approved=Count(
                    "reviewed_requests",
                    filter=Q(reviewed_requests__status=RequestStatus.APPROVED),
                ),
                rejected=Count(
                    "reviewed_requests",
                    filter=Q(reviewed_requests__status=RequestStatus.REJECTED),
                ),
            )
            .order_by("username")
        )
        return [
            {
                "officer_id": officer.pk,
                "username": officer.username,
                "full_name": officer.get_full_name() or officer.username,
                "under_review": officer.under_review,
                "approved": officer.approved,
                "rejected": officer.rejected,
                "total_reviewed": officer.under_review + officer.approved + officer.rejected,
            }
            for officer in officers
        ]

    def _get_open_reviews(self) -> list[dict[str, Any]]:
        """Requests the actor holds in ``under_review``."""
        from service_requests.models import RequestStatus

        ServiceRequest = apps.get_model("service_requests", "ServiceRequest")
        rows = (
            ServiceRequest.objects
            .filter(reviewed_by_id=self.actor.id, status=RequestStatus.UNDER_REVIEW)
            .select_related("service")
            .order_by("created_at")
        )
        return [
            {
                "id": row.pk,
                "service_name": row.service.name,
                "created_at": row.created_at,
            }
            for row in rows
        ]

    def _get_recent_activity(self, request_qs: QuerySet) -> list[dict[str, Any]]:
        """Latest status-log entries of the requests the actor can see."""
        RequestStatusLog = apps.get_model("service_requests", "RequestStatusLog")

        logs = (
            RequestStatusLog.objects
            .filter(request__in=request_qs)
            .select_related("changed_by")
            .order_by("-created_at", "-id")[: self.RECENT_ACTIVITY_LIMIT]
        )
        return [
            {
                "timestamp": log.created_at,
                "request_id": log.request_id,
                "description": (
                    f"Request #{log.request_id} moved from "
                    f"{log.from_status or 'new'} to {log.to_status}"
                ),
                "actor": log.changed_by.username if log.changed_by else None,
            }
            for log in logs
        ]


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers the system-wide choice enumerations into a single dict for
    the frontend.  Stateless; does not depend on the requesting user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        from accounts.models import UserRole
        from service_requests.models import (
            DenialReason,
            PaymentStatus,
            RequestStatus,
            TransitionError,
        )

        to_list = SystemConstantsService._choices_to_list
        return {
            "request_statuses": to_list(RequestStatus),
            "payment_statuses": to_list(PaymentStatus),
            "roles": to_list(UserRole),
            "denial_reasons": to_list(DenialReason),
            "transition_errors": to_list(TransitionError),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]


# ═══════════════════════════════════════════════════════════════════
#  Notification Inbox Service
# ═══════════════════════════════════════════════════════════════════

class NotificationInboxService:
    """
    Read side of the notification inbox for one user.  Creation lives in
    ``core.domain.notifications.NotificationService``.
    """

    def __init__(self, user: Any) -> None:
        self.user = user

    def list_notifications(self, *, unread_only: bool = False) -> QuerySet:
        """The user's notifications, newest first."""
        from core.models import Notification

        qs = (
            Notification.objects
            .for_recipient(self.user)
            .select_related("content_type")
            .order_by("-created_at", "-id")
        )
        return qs.unread() if unread_only else qs

    def mark_as_read(self, notification_id: int) -> Any:
        """
        Mark one of the user's notifications as read.  Idempotent.

        Raises ``NotFound`` for an unknown id or another user's
        notification, so foreign ids are indistinguishable from missing
        ones.
        """
        from core.models import Notification

        notification = (
            Notification.objects
            .for_recipient(self.user)
            .select_related("content_type")
            .filter(pk=notification_id)
            .first()
        )
        if notification is None:
            raise NotFound(f"Notification {notification_id} not found.")
        notification.mark_read()
        return notification
