"""
Authorization Guard for service requests.

Every role in ``UserRole`` maps to exactly one read policy and one
mutate policy; there is no fall-through branch.  Policies take an
explicit ``Actor`` (never a session) and a ``ServiceRequest`` and answer
with an ``AccessDecision`` carrying a ``DenialReason`` code.

Read policies
-------------
- citizen : own requests only                       → ``not_owner``
- officer : requests of own department               → ``cross_department``
- head    : requests of own department               → ``cross_department``
- admin   : everything

Mutate policies (status-changing actions)
-----------------------------------------
- citizen, admin : never                             → ``role_not_permitted``
- officer, head  : read policy first; once a reviewer is stored, only
  that reviewer, whatever the status               → ``not_assigned_reviewer``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from django.db.models import QuerySet

from accounts.models import UserRole
from core.domain.access import Actor, ScopeRules, apply_role_scope
from core.domain.exceptions import PermissionDenied

from .models import DenialReason, ServiceRequest


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = AccessDecision(True)


def _deny(reason: DenialReason) -> AccessDecision:
    return AccessDecision(False, reason.value)


# ── Read policies ───────────────────────────────────────────────────

def _citizen_read(actor: Actor, request: ServiceRequest) -> AccessDecision:
    if request.citizen_id == actor.id:
        return ALLOW
    return _deny(DenialReason.NOT_OWNER)


def _department_read(actor: Actor, request: ServiceRequest) -> AccessDecision:
    if actor.department_id is not None and request.department_id == actor.department_id:
        return ALLOW
    return _deny(DenialReason.CROSS_DEPARTMENT)


def _admin_read(actor: Actor, request: ServiceRequest) -> AccessDecision:
    return ALLOW


# ── Mutate policies ─────────────────────────────────────────────────

def _never_mutate(actor: Actor, request: ServiceRequest) -> AccessDecision:
    return _deny(DenialReason.ROLE_NOT_PERMITTED)


def _reviewer_mutate(actor: Actor, request: ServiceRequest) -> AccessDecision:
    decision = _department_read(actor, request)
    if not decision:
        return decision
    if request.reviewed_by_id is not None and request.reviewed_by_id != actor.id:
        return _deny(DenialReason.NOT_ASSIGNED_REVIEWER)
    return ALLOW


Policy = Callable[[Actor, ServiceRequest], AccessDecision]

READ_POLICIES: dict[str, Policy] = {
    UserRole.CITIZEN: _citizen_read,
    UserRole.OFFICER: _department_read,
    UserRole.HEAD: _department_read,
    UserRole.ADMIN: _admin_read,
}

MUTATE_POLICIES: dict[str, Policy] = {
    UserRole.CITIZEN: _never_mutate,
    UserRole.OFFICER: _reviewer_mutate,
    UserRole.HEAD: _reviewer_mutate,
    UserRole.ADMIN: _never_mutate,
}

#: Listing scope per role (dashboard queries).
REQUEST_SCOPE_RULES: ScopeRules = {
    UserRole.ADMIN: lambda qs, a: qs,
    UserRole.OFFICER: lambda qs, a: qs.filter(service__department_id=a.department_id),
    UserRole.HEAD: lambda qs, a: qs.filter(service__department_id=a.department_id),
    UserRole.CITIZEN: lambda qs, a: qs.filter(citizen_id=a.id),
}


class RequestAccessGuard:
    """Answers "may this actor see / change this request?"."""

    @staticmethod
    def can_read(actor: Actor, request: ServiceRequest) -> AccessDecision:
        policy = READ_POLICIES.get(actor.role)
        if policy is None:
            return _deny(DenialReason.ROLE_NOT_PERMITTED)
        return policy(actor, request)

    @staticmethod
    def can_mutate(actor: Actor, request: ServiceRequest) -> AccessDecision:
        policy = MUTATE_POLICIES.get(actor.role)
        if policy is None:
            return _deny(DenialReason.ROLE_NOT_PERMITTED)
        return policy(actor, request)

    @classmethod
    def ensure_can_read(cls, actor: Actor, request: ServiceRequest) -> None:
        _raise_if_denied(cls.can_read(actor, request), request)

    @classmethod
    def ensure_can_mutate(cls, actor: Actor, request: ServiceRequest) -> None:
        _raise_if_denied(cls.can_mutate(actor, request), request)

    @staticmethod
    def scope_queryset(actor: Actor, queryset: QuerySet) -> QuerySet:
        """Restrict ``queryset`` to the requests ``actor`` may list."""
        return apply_role_scope(
            queryset,
            actor,
            scope_rules=REQUEST_SCOPE_RULES,
            default="none",
        )


def _raise_if_denied(decision: AccessDecision, request: ServiceRequest) -> None:
    if decision:
        return
    raise PermissionDenied(
        f"Access to request #{request.pk} denied: "
        f"{DenialReason(decision.reason).label}.",
        code=decision.reason,
    )
