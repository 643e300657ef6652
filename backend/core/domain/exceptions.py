"""
core.domain.exceptions: business-rule errors raised by service layers.

They are plain Python exceptions, independent of DRF; the
``EXCEPTION_HANDLER`` in ``core.domain.exception_handler`` turns them
into responses:

    DomainError        400
    PermissionDenied   403
    NotFound           404
    Conflict           409
    InvalidTransition  409  (subclass of Conflict)
    StoreConflict      409  (subclass of Conflict)

Each instance carries a machine-readable ``code`` (``cross_department``,
``terminal_state``, ...) that is echoed next to ``detail`` in the body.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class; also the 400 fallback for a generic rule violation."""

    default_message = "A business rule was violated."
    default_code: str | None = None

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The actor may not perform this operation on this resource.

    ``code`` is one of ``cross_department``, ``not_assigned_reviewer``,
    ``not_owner`` or ``role_not_permitted``.
    """

    default_message = "You do not have permission to perform this action."
    default_code = "permission_denied"


class NotFound(DomainError):
    default_message = "The requested resource was not found."
    default_code = "not_found"


class Conflict(DomainError):
    """The operation clashes with the current state (e.g. a duplicate account)."""

    default_message = "The operation conflicts with the current state."
    default_code = "conflict"


class InvalidTransition(Conflict):
    """
    A status change the workflow does not allow from the current status.

    ``current`` / ``target`` are the statuses involved; when no message is
    given one is built from them and ``reason``::

        raise InvalidTransition(
            current="approved",
            target="rejected",
            reason="Request has already been decided.",
            code="terminal_state",
        )
    """

    default_code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
        code: str | None = None,
    ) -> None:
        self.current = current
        self.target = target
        self.reason = reason
        if message is None:
            message = "Cannot move request"
            if current and target:
                message += f" from '{current}' to '{target}'"
            if reason:
                message += f": {reason}"
            message += "."
        super().__init__(message, code=code)


class StoreConflict(Conflict):
    """
    A compare-and-set write matched no row because the row changed after
    it was read.  Callers re-read and decide again; nothing is retried
    here.
    """

    default_message = "The resource was modified concurrently; reload and try again."
    default_code = "store_conflict"
