"""
Service-requests app URL configuration.

All routes are registered under the ``/api/`` prefix.

Route Hierarchy
---------------
  /api/requests/                           → list / create (citizen intake)
  /api/requests/{id}/                      → retrieve (staff: open & claim)

  ── Workflow @actions ───────────────────────────────────────────
  POST /api/requests/{id}/claim/            → officer/head claims for review
  POST /api/requests/{id}/transition/       → reviewer approves / rejects
  POST /api/requests/{id}/confirm-payment/  → citizen confirms fee payment

  ── Sub-resource @actions ───────────────────────────────────────
  GET  /api/requests/{id}/status-log/
"""

from rest_framework.routers import DefaultRouter

from .views import ServiceRequestViewSet

router = DefaultRouter()
router.register(
    prefix=r"requests",
    viewset=ServiceRequestViewSet,
    basename="service-request",
)

urlpatterns = router.urls
