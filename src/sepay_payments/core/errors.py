"""
Error taxonomy shared by every part of the SDK.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "ConfigError",
    "ErrorKind",
    "SePayError",
    "classify_status",
]


class ErrorKind(str, enum.Enum):
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    GENERIC = "generic"


def classify_status(status_code: int) -> ErrorKind:
    """Map a failed HTTP status onto an :class:`ErrorKind`."""
    if status_code == 401:
        return ErrorKind.AUTHENTICATION
    if status_code == 400:
        return ErrorKind.VALIDATION
    if status_code == 429:
        return ErrorKind.RATE_LIMIT
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.GENERIC


class SePayError(Exception):
    """
    Raised for every failure surfaced by the SDK.

    ``kind`` tells callers what went wrong without a subclass hierarchy;
    ``status_code`` is ``0`` when no HTTP response was received.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.GENERIC,
        status_code: int = 0,
        details: Optional[Any] = None,
        error_code: Optional[str] = None,
        validation_errors: Optional[Mapping[str, List[str]]] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.details = details
        self.error_code = error_code
        self.validation_errors: Dict[str, List[str]] = dict(validation_errors or {})
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        """True when trying the same call later may succeed."""
        return self.kind in (ErrorKind.RATE_LIMIT, ErrorKind.SERVER)

    def has_field_error(self, field: str) -> bool:
        return field in self.validation_errors

    def field_errors(self, field: str) -> List[str]:
        return list(self.validation_errors.get(field, []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "details": self.details,
            "validation_errors": self.validation_errors or None,
            "retry_after": self.retry_after,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class ConfigError(SePayError):
    """Raised when the supplied configuration is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.VALIDATION)
