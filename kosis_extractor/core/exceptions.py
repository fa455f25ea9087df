"""Error types shared by the KOSIS client and the extraction service."""

from __future__ import annotations

from enum import Enum
from typing import Optional

AUTH_STATUS_CODES = frozenset({401, 403})

# Substrings that mark a foreign exception as an authentication/API failure.
LEGACY_FALLBACK_MARKERS = ("401", "403", "API")


class ConfigurationError(ValueError):
    """Raised when the extractor cannot be configured (e.g. missing API key)."""


class ApiErrorKind(str, Enum):
    HTTP = "http"  # server answered with a non-2xx status
    NO_RESPONSE = "no_response"  # timeout / network failure
    REQUEST = "request"  # request could not be built or sent
    INVALID_RESPONSE = "invalid_response"  # body is not the expected shape
    AUTH = "auth"  # provider rejected the API key
    PROVIDER = "provider"  # provider-level error payload


class ApiError(Exception):
    """A failed KOSIS API call, tagged with the operation that issued it."""

    def __init__(
        self,
        operation: str,
        detail: str,
        kind: ApiErrorKind,
        status_code: Optional[int] = None,
        provider_code: Optional[str] = None,
        table_id: Optional[str] = None,
    ):
        self.operation = operation
        self.detail = detail
        self.kind = kind
        self.status_code = status_code
        self.provider_code = provider_code
        self.table_id = table_id
        super().__init__(f"KOSIS API Error ({operation}): {detail}")

    @property
    def is_auth_failure(self) -> bool:
        return self.kind is ApiErrorKind.AUTH or self.status_code in AUTH_STATUS_CODES


class ProcessingError(Exception):
    """Wraps any non-API failure caught by the extraction service."""

    def __init__(self, message: str, kind: str = "processing"):
        self.kind = kind
        super().__init__(message)


def error_kind(exc: BaseException) -> str:
    if isinstance(exc, ApiError):
        return exc.kind.value
    if isinstance(exc, ProcessingError):
        return exc.kind
    return "processing"


def should_fallback_silently(exc: BaseException) -> bool:
    """Decide whether a listing failure goes straight to demo mode.

    KOSIS API errors always do (auth or otherwise). Other exceptions are
    matched on their message for status codes or an API tag.
    """
    if isinstance(exc, ApiError):
        return True
    message = str(exc)
    return any(marker in message for marker in LEGACY_FALLBACK_MARKERS)


def as_processing_error(exc: BaseException) -> ProcessingError:
    """Wrap a foreign failure, keeping it as ``__cause__``."""
    if isinstance(exc, ProcessingError):
        return exc
    failure = ProcessingError(str(exc))
    failure.__cause__ = exc
    return failure
