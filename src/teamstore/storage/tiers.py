"""Storage-tier selection for shared file content."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from teamstore.blobstore.base import BlobStore
from teamstore.errors import ExternalStoreError, ValidationError
from teamstore.models import StorageType
from teamstore.util.mime import encode_data_url

logger = logging.getLogger(__name__)

INLINE_LIMIT: int = 700 * 1024
DOCUMENT_LIMIT: int = 1024 * 1024


class StorageTier(str, Enum):
    INLINE = "inline"
    EXTERNAL = "external"
    EXTERNAL_REQUIRED = "external-required"


@dataclass(slots=True, frozen=True)
class TierLimits:
    inline_limit: int = INLINE_LIMIT
    document_limit: int = DOCUMENT_LIMIT

    def __post_init__(self) -> None:
        if self.inline_limit <= 0 or self.document_limit <= 0:
            raise ValueError("tier limits must be positive")
        if self.inline_limit >= self.document_limit:
            raise ValueError("inline_limit must be below document_limit")


@dataclass(slots=True, frozen=True)
class Placement:
    """
    Where a file's content ended up.

    For stored bytes exactly one of content / drive_file_id is set and url is
    the web link of external placements. Link-only files have no tier.
    """

    tier: Optional[StorageTier]
    storage_type: StorageType
    content: Optional[str] = None
    url: Optional[str] = None
    drive_file_id: Optional[str] = None

    @classmethod
    def link(cls, url: str) -> Placement:
        if not url or not isinstance(url, str):
            raise ValidationError("url must be a non-empty string")
        return cls(tier=None, storage_type=StorageType.URL, url=url)

    @property
    def fell_back(self) -> bool:
        return self.tier is StorageTier.EXTERNAL and self.storage_type is StorageType.FIRESTORE


def select_tier(size: int, limits: TierLimits = TierLimits()) -> StorageTier:
    if size < 0:
        raise ValidationError("file size must not be negative", details={"size": size})
    if size < limits.inline_limit:
        return StorageTier.INLINE
    if size < limits.document_limit:
        return StorageTier.EXTERNAL
    return StorageTier.EXTERNAL_REQUIRED


def place_content(
    data: bytes,
    *,
    file_name: str,
    mime_type: str,
    blob_store: Optional[BlobStore],
    folder_id: Optional[str] = None,
    limits: TierLimits = TierLimits(),
) -> Placement:
    """
    Store `data` according to its tier.

    Policy:
        - inline: encode into the document.
        - external: upload; on failure (or with no blob store) fall back to inline.
        - external-required: upload; on failure raise ValidationError naming the limit.
    """
    tier = select_tier(len(data), limits)
    if tier is StorageTier.INLINE:
        return _inline(tier, data, mime_type)

    try:
        if blob_store is None:
            raise ExternalStoreError("No external blob store configured")
        ref = blob_store.upload(data, file_name, mime_type, folder_id=folder_id)
    except ExternalStoreError as exc:
        if tier is StorageTier.EXTERNAL:
            logger.warning(
                "External upload of %s (%d bytes) failed, storing inline: %s",
                file_name, len(data), exc,
            )
            return _inline(tier, data, mime_type)
        limit_mib = limits.document_limit / (1024 * 1024)
        raise ValidationError(
            f"File too large: {file_name} exceeds the {limit_mib:g} MiB inline size limit "
            "and the external upload failed",
            details={"size": len(data), "limit": limits.document_limit},
            cause=exc,
        ) from exc

    return Placement(
        tier=tier,
        storage_type=StorageType.DRIVE,
        url=ref.web_view_link,
        drive_file_id=ref.file_id,
    )


def _inline(tier: StorageTier, data: bytes, mime_type: str) -> Placement:
    return Placement(
        tier=tier,
        storage_type=StorageType.FIRESTORE,
        content=encode_data_url(data, mime_type),
    )
