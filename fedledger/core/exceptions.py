from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Machine-readable error kinds reported to callers."""

    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    ACCESS_DENIED = "ACCESS_DENIED"
    TRAINING_NOT_FINISHED = "TRAINING_NOT_FINISHED"
    TRAINING_FINISHED = "TRAINING_FINISHED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNAVAILABLE = "UNAVAILABLE"


class LedgerError(Exception):
    """Base exception for all ledger coordination errors."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(
        self, message: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(LedgerError):
    """Raised when a model, round or aggregate is absent."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(LedgerError):
    """Raised on duplicate creation."""

    kind = ErrorKind.ALREADY_EXISTS


class AccessDeniedError(LedgerError):
    """Raised when the caller lacks the required role attribute."""

    kind = ErrorKind.ACCESS_DENIED


class TrainingNotFinishedError(LedgerError):
    """Raised when a finished model is required."""

    kind = ErrorKind.TRAINING_NOT_FINISHED


class TrainingFinishedError(LedgerError):
    """Raised when a finished model would be advanced again."""

    kind = ErrorKind.TRAINING_FINISHED


class InvalidArgumentError(LedgerError):
    """Raised for unparsable or out-of-range arguments."""

    kind = ErrorKind.INVALID_ARGUMENT


class GatewayError(LedgerError):
    """Raised by the HTTP client when the gateway cannot be reached."""

    kind = ErrorKind.UNAVAILABLE


_ERRORS_BY_KIND: dict[ErrorKind, type[LedgerError]] = {
    cls.kind: cls
    for cls in (
        NotFoundError,
        AlreadyExistsError,
        AccessDeniedError,
        TrainingNotFinishedError,
        TrainingFinishedError,
        InvalidArgumentError,
        GatewayError,
    )
}


def error_for_kind(
    kind: str, message: str, details: dict[str, Any] | None = None
) -> LedgerError:
    """Rebuild the exception matching a reported error kind."""
    try:
        cls = _ERRORS_BY_KIND[ErrorKind(kind)]
    except ValueError:
        cls = LedgerError
    return cls(message, details)
