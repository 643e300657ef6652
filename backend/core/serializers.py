"""
Core app serializers.

Output schemas for the dashboard and constants endpoints, which
serialize plain dicts built by ``core.services``, and the notification
inbox serializers.
"""

from __future__ import annotations

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class RequestsByStatusSerializer(serializers.Serializer):
    """
    Breakdown of request counts grouped by status.

    Example::

        {"status": "under_review", "label": "Under Review", "count": 12}
    """

    status = serializers.CharField(help_text="Machine-readable status key.")
    label = serializers.CharField(help_text="Human-readable display label.")
    count = serializers.IntegerField(help_text="Number of requests in this status.")


class OfficerWorkloadSerializer(serializers.Serializer):
    """One officer of the head's department and the requests they reviewed."""

    officer_id = serializers.IntegerField()
    username = serializers.CharField()
    full_name = serializers.CharField()
    under_review = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    total_reviewed = serializers.IntegerField()


class OpenReviewSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    service_name = serializers.CharField()
    created_at = serializers.DateTimeField()


class RecentActivitySerializer(serializers.Serializer):
    """
    One status-log entry in the dashboard feed::

        {
            "timestamp": "2026-03-02T08:15:00Z",
            "request_id": 12,
            "description": "Request #12 moved from submitted to under_review",
            "actor": "officer.jones"
        }
    """

    timestamp = serializers.DateTimeField(help_text="When the change happened.")
    request_id = serializers.IntegerField()
    description = serializers.CharField(help_text="Human-readable description.")
    actor = serializers.CharField(
        help_text="Username of the user who made the change.",
        allow_null=True,
        allow_blank=True,
    )


class DashboardStatsSerializer(serializers.Serializer):
    """
    Body of ``GET /api/core/dashboard/``; the scope depends on the role:

    * **Admin**: ``scope="global"``, every request, ``revenue`` over all
      paid fees.
    * **Head**: ``scope="department"`` plus ``officer_workload``.
    * **Officer**: ``scope="department"`` plus ``open_reviews``.
    * **Citizen**: ``scope="own"``.
    """

    scope = serializers.CharField(help_text="'global', 'department' or 'own'.")
    department_id = serializers.IntegerField(allow_null=True)

    # ── Scalar counters ──────────────────────────────────────────────
    total_requests = serializers.IntegerField()
    submitted = serializers.IntegerField()
    under_review = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    payment_due = serializers.IntegerField(
        help_text="Requests with a fee that has not been paid yet.",
    )
    revenue = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Sum of paid fees within the scope.",
    )

    # ── Nested breakdowns ────────────────────────────────────────────
    requests_by_status = RequestsByStatusSerializer(many=True)
    officer_workload = OfficerWorkloadSerializer(many=True)
    open_reviews = OpenReviewSerializer(many=True)
    recent_activity = RecentActivitySerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single choice option.

    Example::

        {"value": "under_review", "label": "Under Review"}
    """

    value = serializers.CharField()
    label = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    """Response serializer for ``GET /api/core/constants/``."""

    request_statuses = ChoiceItemSerializer(many=True)
    payment_statuses = ChoiceItemSerializer(many=True)
    roles = ChoiceItemSerializer(many=True)
    denial_reasons = ChoiceItemSerializer(
        many=True,
        help_text="``code`` values of 403 responses on requests.",
    )
    transition_errors = ChoiceItemSerializer(
        many=True,
        help_text="``code`` values of 409 invalid-transition responses.",
    )


# ════════════════════════════════════════════════════════════════════
#  Notifications
# ════════════════════════════════════════════════════════════════════

class NotificationFilterSerializer(serializers.Serializer):
    unread = serializers.BooleanField(required=False, default=False)


class NotificationSerializer(serializers.Serializer):
    """Inbox entry; ``request_id`` is set when the source is a service request."""

    id = serializers.IntegerField(read_only=True)
    event_type = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    message = serializers.CharField(read_only=True)
    is_read = serializers.BooleanField(read_only=True)
    read_at = serializers.DateTimeField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)
    request_id = serializers.SerializerMethodField()

    def get_request_id(self, obj) -> int | None:
        content_type = obj.content_type
        if content_type is None or content_type.model != "servicerequest":
            return None
        return obj.object_id
