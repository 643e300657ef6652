"""
Accounts app routes, mounted at ``api/accounts/`` by ``portal/urls.py``.

  POST  auth/register/        citizen self-registration
  POST  auth/login/           JWT pair for username / e-mail / national ID
  POST  auth/token/refresh/   SimpleJWT refresh
  GET   me/, PATCH me/        own profile
  GET   users/, users/{id}/   directory for admins and department heads
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, MeView, RegisterView, UserViewSet

app_name = "accounts"

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

auth_patterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
]

urlpatterns = [
    path("auth/", include(auth_patterns)),
    path("me/", MeView.as_view(), name="me"),
    path("", include(router.urls)),
]
