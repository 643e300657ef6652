"""
Core app models.

``TimeStampedModel`` is the abstract base of every concrete model in the
portal.  ``Notification`` is the in-app inbox entry a citizen receives
when one of their service requests is received, taken under review,
decided or paid.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Adds ``created_at`` / ``updated_at`` to every concrete child model."""

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class NotificationQuerySet(models.QuerySet):

    def for_recipient(self, user):
        return self.filter(recipient=user)

    def unread(self):
        return self.filter(is_read=False)


class Notification(TimeStampedModel):
    """
    One inbox entry for one recipient.

    ``event_type`` is the machine-readable event key (``request_approved``,
    ``payment_confirmed``, ...); ``title`` and ``message`` are the rendered
    text.  The source object, usually a ``ServiceRequest``, is linked
    through a generic relation so the frontend can deep-link to it.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Recipient",
    )
    event_type = models.CharField(
        max_length=50,
        blank=True,
        verbose_name="Event Type",
    )
    title = models.CharField(max_length=255, verbose_name="Title")
    message = models.TextField(verbose_name="Message")
    is_read = models.BooleanField(default=False, verbose_name="Read")
    read_at = models.DateTimeField(null=True, blank=True, verbose_name="Read At")

    content_type = models.ForeignKey(
        ContentType,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        verbose_name="Source Content Type",
    )
    object_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Source Object ID",
    )
    source = GenericForeignKey("content_type", "object_id")

    objects = NotificationQuerySet.as_manager()

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="core_notif_recipient_read_idx"),
        ]

    def __str__(self):
        return f"{self.title} → {self.recipient}"

    def mark_read(self) -> bool:
        """Flag as read; returns ``False`` if it already was."""
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at", "updated_at"])
        return True
