"""
DRF ``EXCEPTION_HANDLER`` that renders ``core.domain.exceptions``.

Registered in ``portal/settings.py``::

    REST_FRAMEWORK = {
        ...
        "EXCEPTION_HANDLER": "core.domain.exception_handler.domain_exception_handler",
    }

Every domain error becomes ``{"detail": <message>, "code": <code>}``;
invalid transitions also report ``current_status`` and
``target_status``.  DRF's own exceptions keep their default rendering.
"""

from __future__ import annotations

import logging
from typing import Any

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Most specific first; DomainError is the 400 fallback.
_STATUS_BY_TYPE: tuple[tuple[type[DomainError], int], ...] = (
    (PermissionDenied, 403),
    (NotFound, 404),
    (Conflict, 409),
    (DomainError, 400),
)


def _status_for(exc: DomainError) -> int:
    return next(code for exc_type, code in _STATUS_BY_TYPE if isinstance(exc, exc_type))


def _body(exc: DomainError) -> dict[str, Any]:
    body: dict[str, Any] = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, InvalidTransition):
        body["current_status"] = exc.current
        body["target_status"] = exc.target
    return body


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    response = drf_default_handler(exc, context)
    if response is not None or not isinstance(exc, DomainError):
        return response

    status_code = _status_for(exc)
    logger.warning(
        "%s [%s] -> %s in %s: %s",
        type(exc).__name__,
        exc.code,
        status_code,
        context.get("view", "unknown"),
        exc,
    )
    return Response(_body(exc), status=status_code)
