"""
Service-requests app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Build an ``Actor`` from ``request.user`` and delegate to a service.
    3. Serialize the result and return a DRF ``Response``.

Domain exceptions raised by the services are turned into HTTP responses
by ``core.domain.exception_handler.domain_exception_handler``.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from accounts.models import STAFF_ROLES
from core.domain.access import Actor

from .serializers import (
    ClaimResultSerializer,
    RequestFilterSerializer,
    RequestStatusLogSerializer,
    RequestTransitionSerializer,
    ServiceRequestCreateSerializer,
    ServiceRequestDetailSerializer,
    ServiceRequestListSerializer,
)
from .services import (
    RequestAssignmentService,
    RequestIntakeService,
    RequestPaymentService,
    RequestQueryService,
    RequestWorkflowService,
)

logger = logging.getLogger(__name__)


class ServiceRequestViewSet(viewsets.ViewSet):
    """
    Central ViewSet for citizen requests.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined; there is no generic update or delete.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role, department and
    reviewer checks are enforced exclusively inside the service layer.
    """

    permission_classes = [IsAuthenticated]

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List service requests",
        description=(
            "Citizens see their own requests, officers and department heads "
            "the requests of their department, administrators every request."
        ),
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by request status."),
            OpenApiParameter(name="service", type=int, location=OpenApiParameter.QUERY, description="Filter by service PK."),
            OpenApiParameter(name="department", type=int, location=OpenApiParameter.QUERY, description="Filter by department PK."),
            OpenApiParameter(name="reviewer", type=int, location=OpenApiParameter.QUERY, description="Filter by reviewing officer PK."),
            OpenApiParameter(name="citizen_name", type=str, location=OpenApiParameter.QUERY, description="Search the citizen's name, username or e-mail."),
            OpenApiParameter(name="created_after", type=str, location=OpenApiParameter.QUERY, description="ISO 8601 date, inclusive."),
            OpenApiParameter(name="created_before", type=str, location=OpenApiParameter.QUERY, description="ISO 8601 date, inclusive."),
        ],
        responses={
            200: OpenApiResponse(response=ServiceRequestListSerializer(many=True), description="Filtered list of requests."),
            403: OpenApiResponse(description="Department filter outside the caller's department."),
        },
        tags=["Requests"],
    )
    def list(self, request: Request) -> Response:
        """GET /api/requests/"""
        filter_serializer = RequestFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        qs = RequestQueryService.get_filtered_queryset(
            Actor.from_user(request.user), filter_serializer.validated_data,
        )
        serializer = ServiceRequestListSerializer(qs, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Submit a service request",
        description=(
            "Citizen files a request for a catalogue service. The request "
            "starts as 'submitted' and its payment amount is the current "
            "service fee."
        ),
        request=ServiceRequestCreateSerializer,
        responses={
            201: OpenApiResponse(response=ServiceRequestDetailSerializer, description="Request submitted."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Caller is not a citizen."),
        },
        tags=["Requests"],
    )
    def create(self, request: Request) -> Response:
        """POST /api/requests/"""
        serializer = ServiceRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service_request = RequestIntakeService.submit_request(
            serializer.validated_data, Actor.from_user(request.user),
        )
        out = ServiceRequestDetailSerializer(service_request)
        return Response(out.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Open a service request",
        description=(
            "Return request details. When an officer or department head opens "
            "an unassigned submitted request of their department they become "
            "its reviewer; 'claim_outcome' tells whether this call claimed it "
            "('claimed') or found it already assigned ('already_assigned')."
        ),
        responses={
            200: OpenApiResponse(response=ServiceRequestDetailSerializer, description="Request details."),
            403: OpenApiResponse(description="Request outside the caller's scope."),
            404: OpenApiResponse(description="Request not found."),
        },
        tags=["Requests"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        """GET /api/requests/{id}/"""
        actor = Actor.from_user(request.user)
        if actor.role in STAFF_ROLES:
            result = RequestAssignmentService.open_for_review(int(pk), actor)
            data = dict(ServiceRequestDetailSerializer(result.request).data)
            data["claim_outcome"] = result.outcome.value
            return Response(data, status=status.HTTP_200_OK)

        service_request = RequestQueryService.get_request(int(pk), actor)
        out = ServiceRequestDetailSerializer(service_request)
        return Response(out.data, status=status.HTTP_200_OK)

    # ── Workflow ─────────────────────────────────────────────────────

    @extend_schema(
        summary="Claim a request for review",
        description=(
            "Explicit form of opening a request: the first officer to claim "
            "an unassigned submitted request becomes its reviewer. Losers "
            "receive 'already_assigned' and the current reviewer."
        ),
        request=None,
        responses={
            200: OpenApiResponse(response=ClaimResultSerializer, description="Claim outcome."),
            403: OpenApiResponse(description="Role or department not permitted."),
            404: OpenApiResponse(description="Request not found."),
        },
        tags=["Requests - Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="claim")
    def claim(self, request: Request, pk: str = None) -> Response:
        """POST /api/requests/{id}/claim/"""
        result = RequestAssignmentService.open_for_review(
            int(pk), Actor.from_user(request.user),
        )
        return Response(ClaimResultSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Decide a request",
        description=(
            "The assigned reviewer moves an 'under_review' request to "
            "'approved' or 'rejected'. Both are final."
        ),
        request=RequestTransitionSerializer,
        responses={
            200: OpenApiResponse(response=ServiceRequestDetailSerializer, description="Request decided."),
            403: OpenApiResponse(description="Role, department or reviewer not permitted."),
            404: OpenApiResponse(description="Request not found."),
            409: OpenApiResponse(description="Invalid transition or concurrent change."),
        },
        tags=["Requests - Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request: Request, pk: str = None) -> Response:
        """POST /api/requests/{id}/transition/"""
        serializer = RequestTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service_request = RequestWorkflowService.transition(
            int(pk),
            serializer.validated_data["target_status"],
            Actor.from_user(request.user),
            message=serializer.validated_data.get("message", ""),
        )
        out = ServiceRequestDetailSerializer(service_request)
        return Response(out.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Confirm fee payment",
        description="Citizen confirms payment of the fee of their own request. Idempotent.",
        request=None,
        responses={
            200: OpenApiResponse(response=ServiceRequestDetailSerializer, description="Payment recorded."),
            403: OpenApiResponse(description="Caller is not the owning citizen."),
            404: OpenApiResponse(description="Request not found."),
        },
        tags=["Requests - Payment"],
    )
    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request: Request, pk: str = None) -> Response:
        """POST /api/requests/{id}/confirm-payment/"""
        service_request = RequestPaymentService.confirm_payment(
            int(pk), Actor.from_user(request.user),
        )
        out = ServiceRequestDetailSerializer(service_request)
        return Response(out.data, status=status.HTTP_200_OK)

    # ── Sub-resources ────────────────────────────────────────────────

    @extend_schema(
        summary="Request status history",
        description="Chronological audit trail of status changes.",
        responses={
            200: OpenApiResponse(response=RequestStatusLogSerializer(many=True), description="Status log entries."),
            403: OpenApiResponse(description="Request outside the caller's scope."),
            404: OpenApiResponse(description="Request not found."),
        },
        tags=["Requests"],
    )
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: str = None) -> Response:
        """GET /api/requests/{id}/status-log/"""
        logs = RequestQueryService.get_status_log(int(pk), Actor.from_user(request.user))
        serializer = RequestStatusLogSerializer(logs, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
