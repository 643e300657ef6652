"""
Catalog app URL configuration.

  GET /api/catalog/departments/          → department list (with services)
  GET /api/catalog/departments/{id}/
  GET /api/catalog/services/             → service list (?department=)
  GET /api/catalog/services/{id}/
"""

from rest_framework.routers import DefaultRouter

from .views import DepartmentViewSet, ServiceViewSet

app_name = "catalog"

router = DefaultRouter()
router.register(r"departments", DepartmentViewSet, basename="department")
router.register(r"services", ServiceViewSet, basename="service")

urlpatterns = router.urls
