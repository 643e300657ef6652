"""
Tests for the read-only catalogue endpoints.

  GET /api/catalog/departments/
  GET /api/catalog/services/?department=
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError
from django.urls import reverse

from catalog.models import Service


@pytest.mark.django_db
class TestCatalogApi:

    @pytest.fixture(autouse=True)
    def _catalogue(self, create_department, create_service):
        self.registry = create_department(name="Civil Registry")
        self.transport = create_department(name="Transport")
        self.birth = create_service(name="Birth Certificate", fee="50.00", department=self.registry)
        self.marriage = create_service(name="Marriage Record", fee="0.00", department=self.registry)
        self.licence = create_service(name="Driving Licence", fee="120.00", department=self.transport)

    def test_departments_list_their_services(self, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])

        resp = api_client.get(reverse("catalog:department-list"))

        assert resp.status_code == 200
        by_name = {row["name"]: row for row in resp.data}
        assert [s["name"] for s in by_name["Civil Registry"]["services"]] == [
            "Birth Certificate",
            "Marriage Record",
        ]
        assert by_name["Transport"]["services"][0]["fee"] == "120.00"

    def test_services_filter_by_department(self, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])

        resp = api_client.get(reverse("catalog:service-list"), {"department": self.transport.pk})

        assert resp.status_code == 200
        assert [row["id"] for row in resp.data] == [self.licence.pk]
        assert resp.data[0]["department_name"] == "Transport"

    def test_catalogue_is_read_only(self, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])

        resp = api_client.post(
            reverse("catalog:service-list"),
            {"name": "New", "fee": "1.00", "department": self.registry.pk},
            format="json",
        )

        assert resp.status_code == 405

    def test_requires_authentication(self, api_client):
        resp = api_client.get(reverse("catalog:service-list"))
        assert resp.status_code == 401


@pytest.mark.django_db
def test_negative_fee_is_rejected_by_the_database(create_department):
    department = create_department()
    with pytest.raises(IntegrityError):
        Service.objects.create(name="Broken", fee=Decimal("-1.00"), department=department)
