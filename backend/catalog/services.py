"""
Catalog app Service Layer.

Query helpers for the read-only catalogue.  Writes happen in the Django
admin only.
"""

from __future__ import annotations

from typing import Any

from django.db.models import Prefetch, QuerySet

from .models import Department, Service


class CatalogQueryService:

    @staticmethod
    def list_departments() -> QuerySet:
        return Department.objects.prefetch_related(
            Prefetch("services", queryset=Service.objects.order_by("name")),
        )

    @staticmethod
    def list_services(filters: dict[str, Any]) -> QuerySet:
        """Services, optionally narrowed to one ``department``."""
        qs = Service.objects.select_related("department")
        if filters.get("department"):
            qs = qs.filter(department_id=filters["department"])
        return qs.order_by("name")
