"""
Catalog app serializers.

Read-only representations of departments and services.
"""

from rest_framework import serializers

from .models import Department, Service


class ServiceSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True)

    class Meta:
        model = Service
        fields = ["id", "name", "fee", "department", "department_name"]
        read_only_fields = fields


class DepartmentSerializer(serializers.ModelSerializer):
    """Department with the services it offers."""

    services = ServiceSerializer(many=True, read_only=True)

    class Meta:
        model = Department
        fields = ["id", "name", "services"]
        read_only_fields = fields
