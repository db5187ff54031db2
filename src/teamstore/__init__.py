"""teamstore public API."""

from __future__ import annotations

from teamstore.auth import AuthInfo, CredentialsProvider
from teamstore.blobstore import BlobRef, BlobStore, DriveBlobStore
from teamstore.config import StoreSettings, load_settings
from teamstore.errors import (
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
from teamstore.hierarchy import HierarchyManager, compute_path
from teamstore.log import configure_logging
from teamstore.manager import TeamFileStore
from teamstore.models import (
    AnalyticsStats,
    Breadcrumb,
    DownloadResult,
    EffectivePermissions,
    ItemType,
    PerformanceRecord,
    Permissions,
    PermissionUpdate,
    StorageStatus,
    StorageType,
    SyncResult,
    Team,
    TeamFolderItem,
    Tier,
)
from teamstore.permissions import effective_permissions, set_user_tier
from teamstore.storage import StorageTier, TierLimits, select_tier
from teamstore.store import DocumentStoreAdapter, FirestoreBackend, InMemoryBackend
from teamstore.sync import (
    AnalyticsSync,
    JsonFileCache,
    MemoryCache,
    RemoteAnalyticsStore,
    SyncState,
)

__all__ = [
    # High-level
    "TeamFileStore",
    "AnalyticsSync",
    "HierarchyManager",
    "DocumentStoreAdapter",
    # Backends
    "FirestoreBackend",
    "InMemoryBackend",
    "DriveBlobStore",
    "BlobStore",
    "BlobRef",
    "RemoteAnalyticsStore",
    "MemoryCache",
    "JsonFileCache",
    # Auth / config
    "AuthInfo",
    "CredentialsProvider",
    "StoreSettings",
    "load_settings",
    "configure_logging",
    # Models
    "TeamFolderItem",
    "ItemType",
    "StorageType",
    "Breadcrumb",
    "Permissions",
    "EffectivePermissions",
    "Tier",
    "Team",
    "PerformanceRecord",
    "PermissionUpdate",
    "DownloadResult",
    "SyncResult",
    "AnalyticsStats",
    "StorageStatus",
    "SyncState",
    "StorageTier",
    "TierLimits",
    # Functions
    "effective_permissions",
    "set_user_tier",
    "select_tier",
    "compute_path",
    # Errors
    "TeamStoreError",
    "NotFoundError",
    "AccessDeniedError",
    "ValidationError",
    "ExternalStoreError",
    "AuthError",
    "RateLimitError",
    "NetworkError",
    "IndexUnavailableError",
    "InvalidStateError",
    "HttpErrorInfo",
    "map_http_error",
]
