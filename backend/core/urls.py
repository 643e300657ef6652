"""
Core app routes, mounted at ``api/core/`` by ``portal/urls.py``.

  GET  dashboard/                 role-aware request statistics
  GET  constants/                 choice lists and error codes (public)
  GET  notifications/             own inbox (``?unread=true``)
  POST notifications/{id}/read/   mark one entry as read
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DashboardStatsView, NotificationViewSet, SystemConstantsView

app_name = "core"

router = DefaultRouter()
router.register(r"notifications", NotificationViewSet, basename="notification")

urlpatterns = [
    path("dashboard/", DashboardStatsView.as_view(), name="dashboard-stats"),
    path("constants/", SystemConstantsView.as_view(), name="system-constants"),
    path("", include(router.urls)),
]
