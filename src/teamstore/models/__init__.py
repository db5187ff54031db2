"""Public model exports for teamstore."""

from __future__ import annotations

from .items import Breadcrumb, ItemType, StorageType, TeamFolderItem
from .performance import PerformanceRecord, migrate_legacy_flags
from .permissions import EffectivePermissions, Permissions, Tier
from .results import (
    AnalyticsStats,
    DownloadResult,
    PermissionUpdate,
    StorageStatus,
    SyncResult,
)
from .team import Team, TeamMember

__all__ = [
    "TeamFolderItem",
    "ItemType",
    "StorageType",
    "Breadcrumb",
    "Permissions",
    "EffectivePermissions",
    "Tier",
    "Team",
    "TeamMember",
    "PerformanceRecord",
    "migrate_legacy_flags",
    "PermissionUpdate",
    "DownloadResult",
    "SyncResult",
    "AnalyticsStats",
    "StorageStatus",
]
