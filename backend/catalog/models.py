"""
Catalog app models.

Departments and the services they offer.  The catalogue is maintained
through the Django admin; the request workflow only ever *reads* it:
a request's department is resolved through its ``Service``, and the
service ``fee`` is copied onto the request at submission time.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel


class Department(TimeStampedModel):
    """
    Government department: the scoping boundary for officers and heads.
    """

    name = models.CharField(
        max_length=255,
        unique=True,
        verbose_name="Department Name",
    )

    class Meta:
        verbose_name = "Department"
        verbose_name_plural = "Departments"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Service(TimeStampedModel):
    """
    A service citizens can apply for.  Belongs to exactly one department.
    """

    name = models.CharField(
        max_length=255,
        verbose_name="Service Name",
    )
    fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        verbose_name="Fee",
        help_text="Current fee; copied onto each request when it is submitted.",
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.CASCADE,
        related_name="services",
        verbose_name="Department",
    )

    class Meta:
        verbose_name = "Service"
        verbose_name_plural = "Services"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(fee__gte=0),
                name="catalog_service_fee_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.department})"
