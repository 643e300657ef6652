"""
Request Store: the persistence boundary of the review workflow.

Every read the workflow needs and the only two writes allowed to touch
``status`` / ``reviewed_by`` live here.  Both writes are single
compare-and-set ``UPDATE`` statements (see ``core.domain.transactions``);
the affected-row count is the only source of truth for who won a race.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models import Q, QuerySet

from core.domain.exceptions import NotFound
from core.domain.transactions import compare_and_set

from .models import RequestStatus, ServiceRequest

logger = logging.getLogger(__name__)


class RequestStore:
    """Stateless gateway to ``ServiceRequest`` rows."""

    @staticmethod
    def base_queryset() -> QuerySet:
        return ServiceRequest.objects.select_related(
            "service__department",
            "citizen",
            "reviewed_by",
        )

    @classmethod
    def get(cls, request_id: int) -> ServiceRequest:
        """
        Fetch a request with its service, department, citizen and reviewer.

        Raises
        ------
        NotFound
            If no request has this id.
        """
        try:
            return cls.base_queryset().get(pk=request_id)
        except ServiceRequest.DoesNotExist:
            raise NotFound(f"Service request {request_id} does not exist.")

    @classmethod
    def list_by_department(
        cls,
        department_id: int,
        filters: dict[str, Any] | None = None,
    ) -> QuerySet:
        """
        Requests whose service belongs to ``department_id``, narrowed by
        ``filters`` (see ``apply_filters``).
        """
        qs = cls.base_queryset().filter(service__department_id=department_id)
        return cls.apply_filters(qs, filters or {})

    @staticmethod
    def apply_filters(qs: QuerySet, filters: dict[str, Any]) -> QuerySet:
        """
        Apply the optional dashboard filters.

        Supported keys: ``status``, ``service``, ``department``,
        ``reviewer``, ``citizen_name`` (case-insensitive on first/last
        name, username and e-mail), ``created_after``,
        ``created_before``.
        """
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("service"):
            qs = qs.filter(service_id=filters["service"])
        if filters.get("department"):
            qs = qs.filter(service__department_id=filters["department"])
        if filters.get("reviewer"):
            qs = qs.filter(reviewed_by_id=filters["reviewer"])
        if filters.get("citizen_name"):
            term = filters["citizen_name"]
            qs = qs.filter(
                Q(citizen__first_name__icontains=term)
                | Q(citizen__last_name__icontains=term)
                | Q(citizen__username__icontains=term)
                | Q(citizen__email__icontains=term)
            )
        if filters.get("created_after"):
            qs = qs.filter(created_at__date__gte=filters["created_after"])
        if filters.get("created_before"):
            qs = qs.filter(created_at__date__lte=filters["created_before"])
        return qs.order_by("-created_at")

    @staticmethod
    def conditional_assign(request_id: int, officer_id: int) -> bool:
        """
        Claim an unassigned submitted request for ``officer_id``.

        ``UPDATE … SET reviewed_by = :officer, status = 'under_review'
        WHERE id = :id AND reviewed_by IS NULL AND status = 'submitted'``

        Returns ``True`` if this call made the assignment, ``False`` if the
        request was already assigned or had left ``submitted``.
        """
        won = compare_and_set(
            ServiceRequest,
            pk=request_id,
            expected={
                "reviewed_by__isnull": True,
                "status": RequestStatus.SUBMITTED,
            },
            changes={
                "reviewed_by_id": officer_id,
                "status": RequestStatus.UNDER_REVIEW,
            },
        )
        if not won:
            logger.info(
                "Claim of request %s by officer %s lost: already assigned.",
                request_id,
                officer_id,
            )
        return won

    @staticmethod
    def conditional_transition(
        request_id: int,
        officer_id: int,
        from_status: str,
        to_status: str,
    ) -> bool:
        """
        Move a request from ``from_status`` to ``to_status`` on behalf of
        its reviewer, re-affirming ``reviewed_by``.

        ``UPDATE … SET status = :to, reviewed_by = :officer
        WHERE id = :id AND status = :from AND reviewed_by = :officer``

        Returns ``False`` if the request is no longer in ``from_status``
        or is not assigned to ``officer_id``.
        """
        won = compare_and_set(
            ServiceRequest,
            pk=request_id,
            expected={
                "status": from_status,
                "reviewed_by_id": officer_id,
            },
            changes={
                "status": to_status,
                "reviewed_by_id": officer_id,
            },
        )
        if not won:
            logger.info(
                "Transition of request %s %s→%s by officer %s lost a race.",
                request_id,
                from_status,
                to_status,
                officer_id,
            )
        return won
