"""
Root URLconf of the service portal.

  /admin/          Django admin (catalogue and staff management)
  /api/accounts/   registration, login, profile, user directory
  /api/catalog/    departments and services
  /api/core/       dashboard, constants, notifications
  /api/requests/   service requests and the review workflow
  /api/schema/     OpenAPI document, browsable at /api/docs/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

api_patterns = [
    path("accounts/", include("accounts.urls")),
    path("catalog/", include("catalog.urls")),
    path("core/", include("core.urls")),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("", include("service_requests.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(api_patterns)),
]
