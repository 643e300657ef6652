"""
core.domain.access: who is acting, and which rows they may list.

Views build an ``Actor`` from ``request.user`` once and hand it to the
service layer; services never look at the HTTP request or a session.
Per-app rules (which role sees which rows) stay in each app, expressed
as a ``ScopeRules`` table that ``apply_role_scope`` dispatches on::

    REQUEST_SCOPE_RULES = {
        "admin":   lambda qs, a: qs,
        "officer": lambda qs, a: qs.filter(service__department_id=a.department_id),
        "citizen": lambda qs, a: qs.filter(citizen_id=a.id),
    }

    qs = apply_role_scope(ServiceRequest.objects.all(), actor,
                          scope_rules=REQUEST_SCOPE_RULES)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User


@dataclass(frozen=True)
class Actor:
    """
    The identity a domain operation runs as.

    Only the three attributes that access rules depend on are carried;
    everything else about the user is profile data the core never reads.
    """

    id: int
    role: str
    department_id: int | None = None

    @classmethod
    def from_user(cls, user: User) -> Actor:
        """Snapshot the acting ``User`` into an ``Actor``."""
        return cls(
            id=user.pk,
            role=user.role,
            department_id=user.department_id,
        )

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


# Type alias for a scope filter function.
# Takes (queryset, actor) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, Actor], QuerySet]

# Role name → filter function.
ScopeRules = dict[str, ScopeFilter]


def apply_role_scope(
    queryset: QuerySet,
    actor: Actor,
    *,
    scope_rules: ScopeRules,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope rule registered for the actor's role.

    Args:
        queryset:    Base (unfiltered) queryset.
        actor:       The acting identity.
        scope_rules: ``{role: filter_fn}`` mapping.
        default:     What to do when the role has no rule.
                     ``"none"`` (default) → empty queryset.
                     ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    filter_fn = scope_rules.get(actor.role)
    if filter_fn is not None:
        return filter_fn(queryset, actor)

    if default == "none":
        return queryset.none()
    return queryset


def require_role(actor: Actor, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` (code ``role_not_permitted``)
    if the actor's role is not among ``allowed_roles``.

    Example::

        require_role(actor, UserRole.CITIZEN)
    """
    if not actor.has_role(*allowed_roles):
        raise PermissionDenied(
            message or (
                f"Role '{actor.role}' is not permitted for this operation. "
                f"Required: {', '.join(str(r) for r in allowed_roles)}."
            ),
            code="role_not_permitted",
        )
