"""Google Drive blob store for shared files too large to keep inline."""

from __future__ import annotations

import io
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from teamstore.auth import DRIVE_SCOPES, AuthInfo, CredentialsProvider
from teamstore.errors import (
    ExternalStoreError,
    HttpErrorInfo,
    NetworkError,
    RateLimitError,
    ValidationError,
    map_http_error,
)
from teamstore.util.mime import DEFAULT_MIME

from .base import BlobRef
from .fields import UPLOAD_FIELDS, VIEW_LINK_TEMPLATE

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class DriveBlobStore:
    """
    Blob store backed by Drive v3.

    Notes:
        - The Drive `service` object is NOT exposed.
        - Uploads land in `folder_id` (per call) or the store's default folder;
          with neither, Drive puts them in the account's root.
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        folder_id: Optional[str] = None,
        supports_all_drives: bool = True,
    ) -> None:
        self._folder_id = folder_id
        self._supports_all_drives = supports_all_drives
        self._retry_policy = _RetryPolicy()
        self._service = CredentialsProvider(auth_info).build_drive_service(DRIVE_SCOPES)

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        folder_id: Optional[str] = None,
        supports_all_drives: bool = True,
    ) -> DriveBlobStore:
        """Create store from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._folder_id = folder_id
        obj._supports_all_drives = supports_all_drives
        obj._retry_policy = _RetryPolicy()
        obj._service = service
        return obj

    # ----------------------------
    # Public API
    # ----------------------------
    def upload(
        self,
        data: bytes,
        name: str,
        mime_type: str,
        *,
        folder_id: Optional[str] = None,
    ) -> BlobRef:
        if not name or not isinstance(name, str):
            raise ValidationError("name must be a non-empty string")

        from googleapiclient.http import MediaIoBaseUpload

        media = MediaIoBaseUpload(
            io.BytesIO(data),
            mimetype=mime_type or DEFAULT_MIME,
            resumable=True,
        )
        body: dict[str, Any] = {"name": name}
        parent = folder_id or self._folder_id
        if parent:
            body["parents"] = [parent]

        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=UPLOAD_FIELDS,
            **self._common_kwargs(),
        )
        result = self._execute(req.execute)

        file_id = result.get("id")
        if not isinstance(file_id, str) or not file_id:
            raise ExternalStoreError("Drive did not return a file id", details={"name": name})

        link = result.get("webViewLink")
        if not isinstance(link, str) or not link:
            link = VIEW_LINK_TEMPLATE.format(file_id=file_id)

        logger.debug("Uploaded %s (%d bytes) to Drive as %s", name, len(data), file_id)
        return BlobRef(file_id=file_id, web_view_link=link)

    def download(self, file_id: str) -> bytes:
        from googleapiclient.http import MediaIoBaseDownload

        req = self._service.files().get_media(fileId=file_id, **self._common_kwargs())
        buf = io.BytesIO()
        downloader = MediaIoBaseDownload(buf, req)
        done = False
        while not done:
            _, done = self._execute(downloader.next_chunk)
        return buf.getvalue()

    def delete(self, file_id: str) -> None:
        req = self._service.files().delete(fileId=file_id, **self._common_kwargs())
        self._execute(req.execute)

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.debug("Drive call failed (%s), retrying in %.1fs", mapped, delay)
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ExternalStoreError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, (RateLimitError, NetworkError)):
            return True
        if type(exc) is ExternalStoreError:
            status_code = exc.details.get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        from googleapiclient.errors import HttpError

        if isinstance(exc, HttpError):
            return map_http_error(_http_error_to_info(exc), cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)

        return ExternalStoreError("Drive API error", cause=exc)


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
