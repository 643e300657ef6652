"""
Catalog app ViewSets.

Read-only: any authenticated user may browse departments and services.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import serializers, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import DepartmentSerializer, ServiceSerializer
from .services import CatalogQueryService


class DepartmentViewSet(viewsets.ReadOnlyModelViewSet):
    """List / retrieve departments together with their services."""

    permission_classes = [IsAuthenticated]
    serializer_class = DepartmentSerializer

    def get_queryset(self):
        return CatalogQueryService.list_departments()

    @extend_schema(
        summary="List departments",
        responses={200: OpenApiResponse(response=DepartmentSerializer(many=True), description="Departments.")},
        tags=["Catalog"],
    )
    def list(self, request: Request, *args, **kwargs) -> Response:
        return super().list(request, *args, **kwargs)


class _ServiceFilterSerializer(serializers.Serializer):
    department = serializers.IntegerField(required=False, min_value=1)


class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    """List / retrieve services with their current fee."""

    permission_classes = [IsAuthenticated]
    serializer_class = ServiceSerializer

    def get_queryset(self):
        filters = _ServiceFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return CatalogQueryService.list_services(filters.validated_data)

    @extend_schema(
        summary="List services",
        parameters=[
            OpenApiParameter(name="department", type=int, location=OpenApiParameter.QUERY, description="Filter by department PK."),
        ],
        responses={200: OpenApiResponse(response=ServiceSerializer(many=True), description="Services.")},
        tags=["Catalog"],
    )
    def list(self, request: Request, *args, **kwargs) -> Response:
        return super().list(request, *args, **kwargs)
