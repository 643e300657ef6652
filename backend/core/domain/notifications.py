"""
core.domain.notifications: single entry point for writing inbox entries.

Services call ``NotificationService.create`` after the state change the
notification describes has been persisted.  Delivery is synchronous: the
rows are written in the calling thread.

Usage::

    from core.domain.notifications import NotificationService

    NotificationService.create(
        actor=officer,
        recipients=service_request.citizen,
        event_type="request_approved",
        payload={"message": "Collect the certificate at the front desk."},
        related_object=service_request,
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from django.contrib.contenttypes.models import ContentType
from django.db import models

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventTemplate:
    title: str
    body: str

    def render(self, payload: dict[str, Any]) -> tuple[str, str]:
        """Return ``(title, message)``; a ``payload["message"]`` note is appended."""
        note = (payload.get("message") or "").strip()
        return self.title, f"{self.body} {note}" if note else self.body


EVENT_TEMPLATES: dict[str, EventTemplate] = {
    "request_submitted": EventTemplate(
        "Request Submitted", "Your service request has been received.",
    ),
    "request_under_review": EventTemplate(
        "Request Under Review", "An officer has started reviewing your service request.",
    ),
    "request_approved": EventTemplate(
        "Request Approved", "Your service request has been approved.",
    ),
    "request_rejected": EventTemplate(
        "Request Rejected", "Your service request has been rejected.",
    ),
    "payment_confirmed": EventTemplate(
        "Payment Confirmed", "Payment for your service request has been recorded.",
    ),
}


def _template_for(event_type: str) -> EventTemplate:
    template = EVENT_TEMPLATES.get(event_type)
    if template is None:
        logger.warning("No notification template for event_type=%s", event_type)
        template = EventTemplate(event_type.replace("_", " ").title(), f"Event: {event_type}")
    return template


class NotificationService:
    """Stateless writer of ``Notification`` rows."""

    @classmethod
    def create(
        cls,
        *,
        actor: User | None,
        recipients: User | Iterable[User],
        event_type: str,
        payload: dict[str, Any] | None = None,
        related_object: models.Model | None = None,
    ) -> list[Notification]:
        """
        Write one notification per recipient and return them.

        ``actor`` is only logged.  ``related_object`` (usually the
        ``ServiceRequest``) is linked through the generic relation.
        """
        from core.models import Notification

        if isinstance(recipients, models.Model):
            recipients = [recipients]
        recipients = list(recipients)
        if not recipients:
            logger.warning(
                "Notification [%s] by actor=%s has no recipients.", event_type, actor,
            )
            return []

        title, message = _template_for(event_type).render(payload or {})
        source = {}
        if related_object is not None:
            source = {
                "content_type": ContentType.objects.get_for_model(related_object),
                "object_id": related_object.pk,
            }

        created = [
            Notification.objects.create(
                recipient=recipient,
                event_type=event_type,
                title=title,
                message=message,
                **source,
            )
            for recipient in recipients
        ]
        logger.info(
            "Notification [%s] sent to %d recipient(s) by actor=%s.",
            event_type,
            len(created),
            actor,
        )
        return created
