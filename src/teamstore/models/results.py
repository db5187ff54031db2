"""Result models returned by store and sync operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from .items import ItemType

ImprovementTrend = Literal["improving", "declining", "stable"]


@dataclass(slots=True)
class PermissionUpdate:
    """Outcome of propagating one member's access to one item."""

    item_id: str
    name: str
    item_type: ItemType
    updated: bool
    error: Optional[str] = None


@dataclass(slots=True)
class DownloadResult:
    """File payload: bytes for stored content, url for link-only files."""

    file_id: str
    file_name: str
    mime_type: str
    data: Optional[bytes] = None
    url: Optional[str] = None


@dataclass(slots=True)
class SyncResult:
    """Aggregate result for one push or pull pass."""

    success: bool
    message: str
    synced: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AnalyticsStats:
    total_interviews: int
    average_score: int
    last_interview_date: Optional[str]
    improvement_trend: ImprovementTrend


@dataclass(slots=True)
class StorageStatus:
    is_online: bool
    is_authenticated: bool
    last_sync: Optional[str]
    needs_sync: bool
    pending_operations: int
    state: str
