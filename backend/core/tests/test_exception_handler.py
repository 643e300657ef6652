"""Unit tests for ``core.domain.exception_handler.domain_exception_handler``."""

from __future__ import annotations

import pytest
from rest_framework.exceptions import ValidationError

from core.domain.exception_handler import domain_exception_handler
from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    StoreConflict,
)


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (PermissionDenied("nope", code="cross_department"), 403, "cross_department"),
        (NotFound("gone"), 404, "not_found"),
        (Conflict("dup", code="duplicate_account"), 409, "duplicate_account"),
        (
            InvalidTransition(current="approved", target="rejected", reason="final", code="terminal_state"),
            409,
            "terminal_state",
        ),
        (StoreConflict("raced"), 409, "store_conflict"),
        (DomainError("bad"), 400, None),
    ],
)
def test_domain_errors_map_to_status_and_code(exc, status_code, code):
    response = domain_exception_handler(exc, {"view": None})

    assert response.status_code == status_code
    assert response.data["code"] == code
    assert response.data["detail"] == str(exc)


def test_drf_exceptions_keep_default_handling():
    response = domain_exception_handler(ValidationError({"field": ["bad"]}), {"view": None})

    assert response.status_code == 400
    assert "field" in response.data


def test_unknown_exceptions_propagate():
    assert domain_exception_handler(RuntimeError("boom"), {"view": None}) is None
