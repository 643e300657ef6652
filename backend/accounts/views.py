"""
Accounts app views.

Registration and profile views validate with a serializer and hand off
to ``services.py``; login is SimpleJWT's pair view driven by
``PortalTokenObtainPairSerializer``.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from core.domain.access import Actor

from .models import UserRole
from .serializers import (
    LoginRequestSerializer,
    MeUpdateSerializer,
    PortalTokenObtainPairSerializer,
    RegisterRequestSerializer,
    TokenResponseSerializer,
    UserDetailSerializer,
)
from .services import (
    CurrentUserService,
    UserManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication
# ═══════════════════════════════════════════════════════════════════


class RegisterView(APIView):
    """POST /api/accounts/auth/register/: public citizen sign-up."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register a citizen account",
        request=RegisterRequestSerializer,
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Account created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="E-mail, username or national ID already registered."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    """
    POST /api/accounts/auth/login/

    ``{"identifier", "password"}`` → ``{"access", "refresh", "user"}``.
    Unknown identifier, wrong password and disabled accounts all answer
    400 with the same message.
    """

    serializer_class = PortalTokenObtainPairSerializer

    @extend_schema(
        summary="Log in",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="JWT pair and user profile."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request, *args, **kwargs) -> Response:
        return super().post(request, *args, **kwargs)


# ═══════════════════════════════════════════════════════════════════
#  Current user
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET  /api/accounts/me/  → Retrieve current user profile.
    PATCH /api/accounts/me/ → Update own profile fields.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: OpenApiResponse(response=UserDetailSerializer, description="Profile.")},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update own profile",
        request=MeUpdateSerializer,
        responses={
            200: OpenApiResponse(response=UserDetailSerializer, description="Updated profile."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Accounts"],
    )
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(
            instance=request.user,
            data=request.data,
            partial=True,
        )
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  User Directory
# ═══════════════════════════════════════════════════════════════════


class _UserFilterSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    department = serializers.IntegerField(required=False, min_value=1)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)


class UserViewSet(viewsets.ViewSet):
    """
    Read-only user directory.

    Administrators see every account, department heads the staff of
    their own department.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter(name="role", type=str, location=OpenApiParameter.QUERY, description="Filter by role."),
            OpenApiParameter(name="department", type=int, location=OpenApiParameter.QUERY, description="Filter by department PK."),
            OpenApiParameter(name="is_active", type=bool, location=OpenApiParameter.QUERY, description="Filter by active flag."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Search username, e-mail, national ID or name."),
        ],
        responses={
            200: OpenApiResponse(response=UserDetailSerializer(many=True), description="Users."),
            403: OpenApiResponse(description="Caller is neither admin nor department head."),
        },
        tags=["Accounts"],
    )
    def list(self, request: Request) -> Response:
        filters = _UserFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data
        qs = UserManagementService.list_users(
            Actor.from_user(request.user),
            role=data.get("role"),
            department_id=data.get("department"),
            is_active=data.get("is_active"),
            search=data.get("search") or None,
        )
        return Response(UserDetailSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Retrieve a user",
        responses={
            200: OpenApiResponse(response=UserDetailSerializer, description="User."),
            403: OpenApiResponse(description="Caller is neither admin nor department head."),
            404: OpenApiResponse(description="User not found or outside the caller's scope."),
        },
        tags=["Accounts"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        user = UserManagementService.get_user(Actor.from_user(request.user), int(pk))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)
