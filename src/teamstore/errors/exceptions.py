"""Exception hierarchy and HTTP error mapping for teamstore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class TeamStoreError(Exception):
    """
    Base exception for teamstore.

    Attributes:
        details: Optional structured information (e.g., item id, size limit).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class NotFoundError(TeamStoreError):
    """Raised when a referenced item, team or blob does not exist."""


class AccessDeniedError(TeamStoreError):
    """Raised when the caller lacks the capability the operation requires."""


class ValidationError(TeamStoreError):
    """Raised for missing/invalid fields, oversized payloads and illegal tree edits."""


class InvalidStateError(TeamStoreError):
    """Raised when a component is used in an invalid lifecycle state."""


class IndexUnavailableError(TeamStoreError):
    """
    Raised when a filtered-and-ordered query needs an index that does not exist.

    details["remediation_url"] holds the index creation link when the backend
    reports one.
    """


class ExternalStoreError(TeamStoreError):
    """Raised when an external backend (blob store or document store) fails."""


class AuthError(ExternalStoreError):
    """Raised when credentials cannot be loaded, refreshed or authorized."""


class RateLimitError(ExternalStoreError):
    """Raised when the blob store rate-limits the caller (HTTP 429)."""


class NetworkError(ExternalStoreError):
    """Raised when network/timeout issues prevent the request."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to teamstore exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_RATE_LIMIT_REASONS: tuple[str, ...] = (
    "rateLimitExceeded",
    "userRateLimitExceeded",
)


def _is_rate_limit_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() == reason.lower() for key in _RATE_LIMIT_REASONS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> TeamStoreError:
    """
    Map a blob-store HTTP error to a teamstore exception.

    Policy:
        - 401 -> AuthError
        - 403 -> RateLimitError if the reason is a rate limit, else AccessDeniedError
        - 404 -> NotFoundError
        - 429 -> RateLimitError
        - otherwise -> ExternalStoreError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_rate_limit_reason(info.reason):
            return RateLimitError(message, details=details, cause=cause)
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ExternalStoreError(message, details=details, cause=cause)
