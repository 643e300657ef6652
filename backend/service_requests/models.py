"""
Service-requests app models.

A ``ServiceRequest`` is what a citizen files against a catalogue
``Service``.  It carries the review workflow state (``status`` +
``reviewed_by``) and, independently, the payment state for the fee
snapshot taken at submission.

  submitted ──claim──▶ under_review ──decide──▶ approved | rejected
                                                  (terminal)
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class RequestStatus(models.TextChoices):
    """Review workflow states.  ``APPROVED`` and ``REJECTED`` are terminal."""

    SUBMITTED = "submitted", "Submitted"
    UNDER_REVIEW = "under_review", "Under Review"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


TERMINAL_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


class PaymentStatus(models.TextChoices):
    """Fee payment state; tracked independently of ``RequestStatus``."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"


class DenialReason(models.TextChoices):
    """``code`` values carried by ``PermissionDenied`` for request access."""

    CROSS_DEPARTMENT = "cross_department", "Request belongs to another department"
    NOT_ASSIGNED_REVIEWER = "not_assigned_reviewer", "Request is assigned to another officer"
    NOT_OWNER = "not_owner", "Request belongs to another citizen"
    ROLE_NOT_PERMITTED = "role_not_permitted", "Role may not perform this action"


class TransitionError(models.TextChoices):
    """``code`` values carried by ``InvalidTransition``."""

    TERMINAL_STATE = "terminal_state", "Request has already been finalized"
    MUST_CLAIM_FIRST = "must_claim_first", "Request must be claimed for review first"
    BAD_TARGET_STATUS = "bad_target_status", "Target status is not reachable"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class ServiceRequest(TimeStampedModel):
    """
    A citizen's application for a catalogue service.

    * ``status`` / ``reviewed_by`` are only ever written through
      ``RequestStore.conditional_assign`` and
      ``RequestStore.conditional_transition``.
    * ``payment_amount`` is the service fee at submission time; later
      fee changes on the ``Service`` never touch existing requests.
    * The request's department is ``service.department``.
    """

    description = models.TextField(
        verbose_name="Description",
    )
    status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        default=RequestStatus.SUBMITTED,
        verbose_name="Status",
        db_index=True,
    )
    service = models.ForeignKey(
        "catalog.Service",
        on_delete=models.PROTECT,
        related_name="requests",
        verbose_name="Service",
    )
    citizen = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="service_requests",
        verbose_name="Citizen",
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_requests",
        verbose_name="Reviewed By",
    )

    # ── Payment ──────────────────────────────────────────────────────
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        verbose_name="Payment Status",
    )
    payment_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        verbose_name="Payment Amount",
        help_text="Snapshot of the service fee at submission time.",
    )
    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Paid At",
    )

    class Meta:
        verbose_name = "Service Request"
        verbose_name_plural = "Service Requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reviewed_by", "status"], name="svc_req_reviewer_status_idx"),
            models.Index(fields=["citizen", "status"], name="svc_req_citizen_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    ~models.Q(status=RequestStatus.SUBMITTED)
                    | models.Q(reviewed_by__isnull=True)
                ),
                name="service_request_unassigned_while_submitted",
            ),
            models.CheckConstraint(
                condition=models.Q(payment_amount__gte=0),
                name="service_request_payment_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"Request #{self.pk} - {self.get_status_display()}"

    @property
    def department_id(self) -> int:
        """The department the request is scoped to (via its service)."""
        return self.service.department_id

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def payment_due(self) -> bool:
        """A fee is owed and has not been paid yet."""
        return (
            self.payment_amount > 0
            and self.payment_status != PaymentStatus.PAID
        )


class RequestStatusLog(TimeStampedModel):
    """
    Append-only audit trail of every status change of a request: the
    intake, the claim and the final decision.
    """

    request = models.ForeignKey(
        ServiceRequest,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Request",
    )
    from_status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        blank=True,
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        verbose_name="New Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="request_status_changes",
        verbose_name="Changed By",
    )
    message = models.TextField(
        blank=True,
        default="",
        verbose_name="Message",
    )

    class Meta:
        verbose_name = "Request Status Log"
        verbose_name_plural = "Request Status Logs"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return (
            f"Request #{self.request_id}: "
            f"{self.from_status or '∅'} → {self.to_status}"
        )
