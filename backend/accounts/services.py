"""
Accounts service layer.

- ``UserRegistrationService``: citizen self-registration; staff
  accounts are created by an administrator in the Django admin.
- ``UserManagementService``  : read-only directory for admins and heads.
- ``CurrentUserService``     : the ``me`` endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from core.domain.access import Actor, apply_role_scope, require_role
from core.domain.exceptions import Conflict, NotFound

from .models import UserRole

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """Creates citizen accounts.  Staff accounts are created in the admin."""

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a new citizen.

        ``role`` is always ``citizen`` and ``department`` is left empty
        whatever the client sent.  ``username`` defaults to the e-mail.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the username, e-mail or national ID is already taken.
        """
        data = dict(validated_data)
        data.pop("password_confirm", None)
        password = data.pop("password")
        data.pop("role", None)
        data.pop("department", None)

        data["username"] = data.get("username") or data["email"]
        # ``national_id`` is unique but optional: store NULL, never "".
        data["national_id"] = data.get("national_id") or None

        conflicts = []
        if User.objects.filter(username=data["username"]).exists():
            conflicts.append("username")
        if User.objects.filter(email__iexact=data["email"]).exists():
            conflicts.append("email")
        if data["national_id"] and User.objects.filter(national_id=data["national_id"]).exists():
            conflicts.append("national_id")

        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}.",
                code="duplicate_account",
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    password=password,
                    role=UserRole.CITIZEN,
                    department=None,
                    **data,
                )
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists.",
                code="duplicate_account",
            )

        logger.info("Citizen account %s registered.", user.pk)
        return user


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


#: Admins see every account; heads see the staff of their department.
USER_SCOPE_RULES = {
    UserRole.ADMIN: lambda qs, a: qs,
    UserRole.HEAD: lambda qs, a: qs.filter(department_id=a.department_id),
}


class UserManagementService:
    """Read-only user directory."""

    @staticmethod
    def list_users(
        actor: Actor,
        *,
        role: str | None = None,
        department_id: int | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> QuerySet:
        """
        Return the users ``actor`` may browse, filtered.

        ``search`` is a case-insensitive match on username, e-mail,
        national ID and first / last name.

        Raises
        ------
        PermissionDenied
            Unless the actor is an admin or a department head.
        """
        require_role(
            actor,
            UserRole.ADMIN,
            UserRole.HEAD,
            message="Only administrators and department heads may list users.",
        )
        qs = apply_role_scope(
            User.objects.select_related("department"),
            actor,
            scope_rules=USER_SCOPE_RULES,
        )

        if role:
            qs = qs.filter(role=role)
        if department_id is not None:
            qs = qs.filter(department_id=department_id)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(national_id__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        return qs.order_by("username")

    @classmethod
    def get_user(cls, actor: Actor, user_id: int) -> User:
        try:
            return cls.list_users(actor).get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {user_id} not found.")


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the "Me" endpoint."""

    @staticmethod
    def get_profile(user: User) -> User:
        return User.objects.select_related("department").get(pk=user.pk)

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Update the authenticated user's own profile fields.

        The user may NOT change their own ``role``, ``department``,
        ``is_active`` or ``username`` via this endpoint.
        """
        for field, value in validated_data.items():
            setattr(user, field, value)
        user.save(update_fields=list(validated_data.keys()))
        return CurrentUserService.get_profile(user)
