"""
core.domain.transactions: Helpers for safe state transitions.

Provides the compare-and-set primitive every app's service layer uses
for status changes, so that concurrent writers can never silently
overwrite one another.

Design goals
------------
* A state-transition write is a **single** ``UPDATE … WHERE`` statement
  whose ``WHERE`` clause carries the expected current values.  The
  database applies it atomically per row, across any number of server
  processes, without holding a lock between a read and a write.
* The number of affected rows is the outcome: ``1`` means this caller
  won, ``0`` means the guard condition no longer held.
* Keep the helpers **generic**: they accept any Django ``Model`` class,
  a primary key and plain field dicts.

Usage::

    from core.domain.transactions import compare_and_set

    won = compare_and_set(
        ServiceRequest,
        pk=request_id,
        expected={"status": "submitted", "reviewed_by__isnull": True},
        changes={"status": "under_review", "reviewed_by_id": officer_id},
    )
    if not won:
        ...  # re-read and report the current state

    # For arbitrary atomic blocks:
    from core.domain.transactions import run_in_atomic

    result = run_in_atomic(my_service_function, arg1, arg2, kwarg=val)
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from django.db import models, transaction
from django.utils import timezone

T = TypeVar("T")


def compare_and_set(
    model_class: type[models.Model],
    *,
    pk: Any,
    expected: Mapping[str, Any],
    changes: Mapping[str, Any],
    touch_field: str | None = "updated_at",
) -> bool:
    """
    Atomically apply ``changes`` to the row ``pk`` only if it still
    matches ``expected``.

    ``QuerySet.update`` bypasses ``auto_now``, so ``touch_field`` (when
    set) is stamped explicitly alongside ``changes``.

    Args:
        model_class: The Django model class.
        pk:          Primary key of the row to update.
        expected:    ORM lookups that must hold for the write to apply
                     (e.g. ``{"status": "under_review",
                     "reviewed_by_id": 7}``).
        changes:     Field → new value.
        touch_field: Timestamp field refreshed on a successful write, or
                     ``None``.

    Returns:
        ``True`` if exactly this call changed the row, ``False`` if the
        guard condition did not hold (or the row no longer exists).
    """
    values = dict(changes)
    if touch_field:
        values[touch_field] = timezone.now()

    updated = (
        model_class.objects
        .filter(pk=pk, **expected)
        .update(**values)
    )
    return updated == 1


def run_in_atomic(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Execute ``fn(*args, **kwargs)`` inside ``transaction.atomic()``.

    Convenient when a service step should be fully atomic but you
    don't want to decorate the function itself.

    Raises:
        Any exception raised by ``fn``: the transaction is rolled back.
    """
    with transaction.atomic():
        return fn(*args, **kwargs)
