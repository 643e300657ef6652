"""
Accounts app serializers.

Request bodies are validated here; uniqueness of e-mail / national ID and
the forced ``citizen`` role are business rules and live in
``services.py`` so that duplicates surface as 409 rather than 400.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()

_PASSWORD_STYLE = {"input_type": "password"}


# ═══════════════════════════════════════════════════════════════════
#  Read serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """Profile as returned by register, login, ``me`` and the directory."""

    role_display = serializers.CharField(source="get_role_display", read_only=True)
    department_name = serializers.CharField(
        source="department.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "national_id",
            "date_of_birth",
            "contact_info",
            "job_title",
            "role",
            "role_display",
            "department",
            "department_name",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Registration
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.Serializer):
    """
    Citizen sign-up form.

    ``username`` falls back to the e-mail address.  Any ``role`` or
    ``department`` sent by the client is not a declared field and is
    dropped.
    """

    username = serializers.CharField(required=False, max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, style=_PASSWORD_STYLE)
    password_confirm = serializers.CharField(write_only=True, style=_PASSWORD_STYLE)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    national_id = serializers.CharField(required=False, allow_blank=True, max_length=20)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    contact_info = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate_national_id(self, value: str) -> str:
        value = value.strip()
        if value and not value.isdigit():
            raise serializers.ValidationError("National ID must contain digits only.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        confirm = attrs.pop("password_confirm")
        if attrs["password"] != confirm:
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  Login / JWT
# ═══════════════════════════════════════════════════════════════════


class PortalTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    SimpleJWT pair serializer keyed on a single ``identifier`` field
    (username, e-mail or national ID, see ``MultiFieldAuthBackend``).

    The access token carries ``role`` and ``department_id`` so clients
    can route to the right dashboard without an extra ``me`` call.  The
    validated data also includes the serialized ``user``.
    """

    username_field = "identifier"

    default_error_messages = {
        "no_active_account": "Invalid credentials.",
    }

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = user.role
        token["department_id"] = user.department_id
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        self.user = authenticate(
            request=self.context.get("request"),
            identifier=attrs["identifier"],
            password=attrs["password"],
        )
        if self.user is None:
            raise serializers.ValidationError(
                {"detail": self.error_messages["no_active_account"]},
                code="authentication",
            )

        refresh = self.get_token(self.user)
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": UserDetailSerializer(self.user).data,
        }


class LoginRequestSerializer(serializers.Serializer):
    """Schema of the login body (documentation only)."""

    identifier = serializers.CharField(help_text="Username, e-mail or national ID.")
    password = serializers.CharField(write_only=True, style=_PASSWORD_STYLE)


class TokenResponseSerializer(serializers.Serializer):
    """Schema of the login response (documentation only)."""

    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserDetailSerializer()


# ═══════════════════════════════════════════════════════════════════
#  Profile update
# ═══════════════════════════════════════════════════════════════════


class MeUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own profile."""

    class Meta:
        model = User
        fields = [
            "email",
            "first_name",
            "last_name",
            "date_of_birth",
            "contact_info",
        ]

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        taken = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            taken = taken.exclude(pk=self.instance.pk)
        if taken.exists():
            raise serializers.ValidationError("This e-mail is already in use by another account.")
        return value
