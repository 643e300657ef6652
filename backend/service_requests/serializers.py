"""
Service-requests app serializers.

Serializers handle field definitions, read/write constraints, and
field-level validation only.  **No workflow logic lives here**: status
changes, claims and payment belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Request read serializers (list, detail, claim result)
3. Request write serializers (intake, transition)
4. Sub-resource serializers (status log)
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from catalog.models import Service

from .models import RequestStatus, RequestStatusLog, ServiceRequest


def _display_name(user) -> str | None:
    if user is None:
        return None
    return f"{user.first_name} {user.last_name}".strip() or user.username


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class RequestFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/requests/``.

    All fields are optional.  The view passes the validated dict directly
    to ``RequestQueryService.get_filtered_queryset``.
    """

    status = serializers.ChoiceField(
        choices=RequestStatus.choices,
        required=False,
        help_text="Filter by request status.",
    )
    service = serializers.IntegerField(required=False, min_value=1, help_text="Service PK.")
    department = serializers.IntegerField(
        required=False,
        min_value=1,
        help_text="Department PK. Officers and heads may only pass their own.",
    )
    reviewer = serializers.IntegerField(required=False, min_value=1, help_text="Reviewer (officer) PK.")
    citizen_name = serializers.CharField(
        required=False,
        max_length=255,
        allow_blank=False,
        help_text="Case-insensitive match on the citizen's name, username or e-mail.",
    )
    created_after = serializers.DateField(required=False, help_text="ISO 8601 date, inclusive.")
    created_before = serializers.DateField(required=False, help_text="ISO 8601 date, inclusive.")

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        after = attrs.get("created_after")
        before = attrs.get("created_before")
        if after and before and after > before:
            raise serializers.ValidationError(
                "created_after must be earlier than created_before."
            )
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  2. Request Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ServiceRequestListSerializer(serializers.ModelSerializer):
    """Compact representation for dashboards."""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)
    department = serializers.IntegerField(source="service.department_id", read_only=True)
    department_name = serializers.CharField(source="service.department.name", read_only=True)
    citizen_name = serializers.SerializerMethodField()
    reviewer_name = serializers.SerializerMethodField()
    payment_due = serializers.BooleanField(read_only=True)

    class Meta:
        model = ServiceRequest
        fields = [
            "id",
            "status",
            "status_display",
            "service",
            "service_name",
            "department",
            "department_name",
            "citizen",
            "citizen_name",
            "reviewed_by",
            "reviewer_name",
            "payment_status",
            "payment_amount",
            "payment_due",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_citizen_name(self, obj: ServiceRequest) -> str | None:
        return _display_name(obj.citizen)

    def get_reviewer_name(self, obj: ServiceRequest) -> str | None:
        return _display_name(obj.reviewed_by)


class ServiceRequestDetailSerializer(ServiceRequestListSerializer):
    """Full request representation, including the description."""

    class Meta(ServiceRequestListSerializer.Meta):
        fields = ServiceRequestListSerializer.Meta.fields + [
            "description",
            "paid_at",
        ]
        read_only_fields = fields


class ClaimResultSerializer(serializers.Serializer):
    """
    Response of opening / claiming a request.

    ``outcome`` is ``"claimed"`` when this call made the caller the
    reviewer, ``"already_assigned"`` otherwise; ``request.reviewed_by``
    then names the officer already reviewing it.
    """

    outcome = serializers.CharField(source="outcome.value")
    claimed = serializers.BooleanField()
    reviewer_id = serializers.IntegerField(allow_null=True)
    request = ServiceRequestDetailSerializer()


# ═══════════════════════════════════════════════════════════════════
#  3. Request Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ServiceRequestCreateSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/requests/`` (citizen intake).

    ``payment_amount`` is not accepted: it is always the service fee.
    """

    service = serializers.PrimaryKeyRelatedField(
        queryset=Service.objects.select_related("department"),
        help_text="PK of the service being applied for.",
    )
    description = serializers.CharField(
        max_length=5000,
        trim_whitespace=True,
        allow_blank=False,
        help_text="What the citizen is asking for.",
    )


class RequestTransitionSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/requests/{id}/transition/``.

    ``target_status`` is validated by the workflow service so that an
    unreachable or unknown value is reported as ``bad_target_status``.
    """

    target_status = serializers.CharField(
        max_length=20,
        help_text="'approved' or 'rejected'.",
    )
    message = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=2000,
        help_text="Optional note recorded in the status log and sent to the citizen.",
    )


# ═══════════════════════════════════════════════════════════════════
#  4. Sub-resource Serializers
# ═══════════════════════════════════════════════════════════════════


class RequestStatusLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for the request audit trail."""

    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = RequestStatusLog
        fields = [
            "id",
            "from_status",
            "to_status",
            "changed_by",
            "changed_by_name",
            "message",
            "created_at",
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj: RequestStatusLog) -> str | None:
        return _display_name(obj.changed_by)
