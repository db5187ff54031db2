"""Public error exports for teamstore."""

from __future__ import annotations

from .exceptions import (
    AccessDeniedError,
    AuthError,
    ExternalStoreError,
    HttpErrorInfo,
    IndexUnavailableError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    TeamStoreError,
    ValidationError,
    map_http_error,
)

__all__ = [
    "TeamStoreError",
    "NotFoundError",
    "AccessDeniedError",
    "ValidationError",
    "InvalidStateError",
    "IndexUnavailableError",
    "ExternalStoreError",
    "AuthError",
    "RateLimitError",
    "NetworkError",
    "HttpErrorInfo",
    "map_http_error",
]
