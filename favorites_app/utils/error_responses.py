"""Structured error payloads and the request id they are stamped with.

Each inbound HTTP request gets an identifier stored in a ``ContextVar`` by the
middleware in :mod:`favorites_app.main`; the builders below copy it into every
error payload together with a timezone-aware timestamp.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextvars import ContextVar, Token
from datetime import UTC, datetime

from favorites_app.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)

REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")

__all__ = [
    "REQUEST_ID_CONTEXT",
    "build_error_response",
    "build_validation_error_response",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]


def set_request_id(request_id: str) -> Token[str]:
    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")


def _current_timestamp() -> datetime:
    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    return ValidationErrorResponse(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str,
    status_code: int,
    path: str,
    retry_after: int | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    """Construct an :class:`ErrorResponse`; ``retry_after`` stays unset for faults
    that must not be retried automatically."""

    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        retry_after=retry_after,
    )
