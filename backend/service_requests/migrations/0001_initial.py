from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

_STATUS_CHOICES = [
    ("submitted", "Submitted"),
    ("under_review", "Under Review"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ServiceRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("description", models.TextField(verbose_name="Description")),
                (
                    "status",
                    models.CharField(
                        choices=_STATUS_CHOICES,
                        db_index=True,
                        default="submitted",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("paid", "Paid"), ("failed", "Failed")],
                        default="pending",
                        max_length=10,
                        verbose_name="Payment Status",
                    ),
                ),
                (
                    "payment_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Snapshot of the service fee at submission time.",
                        max_digits=10,
                        verbose_name="Payment Amount",
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True, verbose_name="Paid At")),
                (
                    "citizen",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="service_requests",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Citizen",
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_requests",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Reviewed By",
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="requests",
                        to="catalog.service",
                        verbose_name="Service",
                    ),
                ),
            ],
            options={
                "verbose_name": "Service Request",
                "verbose_name_plural": "Service Requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["reviewed_by", "status"], name="svc_req_reviewer_status_idx"),
                    models.Index(fields=["citizen", "status"], name="svc_req_citizen_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "submitted"), _negated=True),
                            ("reviewed_by__isnull", True),
                            _connector="OR",
                        ),
                        name="service_request_unassigned_while_submitted",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("payment_amount__gte", 0)),
                        name="service_request_payment_amount_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RequestStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                (
                    "from_status",
                    models.CharField(blank=True, choices=_STATUS_CHOICES, max_length=20, verbose_name="Previous Status"),
                ),
                ("to_status", models.CharField(choices=_STATUS_CHOICES, max_length=20, verbose_name="New Status")),
                ("message", models.TextField(blank=True, default="", verbose_name="Message")),
                (
                    "changed_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="request_status_changes",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Changed By",
                    ),
                ),
                (
                    "request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_logs",
                        to="service_requests.servicerequest",
                        verbose_name="Request",
                    ),
                ),
            ],
            options={
                "verbose_name": "Request Status Log",
                "verbose_name_plural": "Request Status Logs",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
