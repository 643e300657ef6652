"""
Core app views.  Each one validates its query parameters, calls the
matching service in ``core.services`` and serializes what comes back.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import Actor

from .serializers import (
    DashboardStatsSerializer,
    NotificationFilterSerializer,
    NotificationSerializer,
    SystemConstantsSerializer,
)
from .services import (
    DashboardAggregationService,
    NotificationInboxService,
    SystemConstantsService,
)


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return aggregated request statistics for the authenticated user.
    See ``DashboardAggregationService`` for the scoping per role.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        description=(
            "Role-aware request statistics: administrators get portal-wide "
            "totals and revenue, department heads their department and the "
            "workload per officer, officers their department and their open "
            "reviews, citizens their own requests."
        ),
        responses={200: OpenApiResponse(response=DashboardStatsSerializer, description="Dashboard stats.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        service = DashboardAggregationService(actor=Actor.from_user(request.user))
        serializer = DashboardStatsSerializer(service.get_stats())
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the system-wide choice enumerations so the frontend can build
    dropdowns, filters and labels without hardcoding values.

    **Authentication**: Not required (``AllowAny``).
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="System constants",
        description="Request statuses, payment statuses, roles and error codes.",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationViewSet(viewsets.ViewSet):
    """Inbox of the authenticated user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List notifications",
        description="Own notifications, newest first.",
        parameters=[
            OpenApiParameter(name="unread", type=bool, location=OpenApiParameter.QUERY, description="Only unread notifications."),
        ],
        responses={200: OpenApiResponse(response=NotificationSerializer(many=True), description="Notification list.")},
        tags=["Notifications"],
    )
    def list(self, request: Request) -> Response:
        params = NotificationFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        notifications = NotificationInboxService(request.user).list_notifications(
            unread_only=params.validated_data["unread"],
        )
        return Response(
            NotificationSerializer(notifications, many=True).data,
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="Mark notification as read",
        request=None,
        responses={
            200: OpenApiResponse(response=NotificationSerializer, description="Notification, now read."),
            404: OpenApiResponse(description="No such notification in the caller's inbox."),
        },
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"], url_path="read")
    def mark_as_read(self, request: Request, pk: str = None) -> Response:
        notification = NotificationInboxService(request.user).mark_as_read(int(pk))
        return Response(NotificationSerializer(notification).data, status=status.HTTP_200_OK)
