"""TeamFileStore: team file sharing over the document store and blob store."""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, Optional, Sequence

from teamstore.blobstore import BlobStore, DriveBlobStore
from teamstore.config import StoreSettings, load_settings
from teamstore.errors import (
    ExternalStoreError,
    NotFoundError,
    TeamStoreError,
    ValidationError,
)
from teamstore.hierarchy import (
    ROOT_PATH,
    HierarchyManager,
    compute_path,
    deletion_order,
    validate_name,
    validate_same_team,
    validate_subtree_capability,
    validate_unique_folder_path,
)
from teamstore.log import configure_logging
from teamstore.models import (
    Breadcrumb,
    DownloadResult,
    EffectivePermissions,
    ItemType,
    Permissions,
    PermissionUpdate,
    StorageType,
    TeamFolderItem,
    Tier,
)
from teamstore.permissions import (
    derive_permissions,
    derive_team_permissions,
    effective_permissions,
    ensure_has_admin,
    require_capability,
    set_user_tier,
    tier_for_role,
)
from teamstore.storage import Placement, TierLimits, place_content
from teamstore.store import (
    SYSTEM_ACTOR,
    DocumentBackend,
    DocumentStoreAdapter,
    FirestoreBackend,
    TeamDirectory,
)
from teamstore.sync import AnalyticsSync, MemoryCache, RemoteAnalyticsStore
from teamstore.util.ids import new_file_id, new_folder_id
from teamstore.util.mime import decode_data_url, guess_file_type

logger = logging.getLogger(__name__)

PermissionAction = Literal["grant", "revoke"]


class TeamFileStore:
    """
    High-level API for team folders and shared files.

    Every mutating call names the acting user and checks that user's
    capability before anything is written.
    """

    def __init__(self, settings: Optional[StoreSettings] = None) -> None:
        settings = settings or load_settings()
        configure_logging(settings.log_level)
        auth_info = settings.auth_info()
        if auth_info is None:
            raise ValidationError("credentials_file is required to connect to Google services")

        backend = FirestoreBackend(
            auth_info,
            project=settings.firestore_project,
            database=settings.firestore_database,
        )
        blob_store = DriveBlobStore(auth_info, folder_id=settings.drive_folder_id)
        sync = AnalyticsSync.from_settings(settings, backend)
        self._setup(backend, blob_store, settings.tier_limits(), sync)

    @classmethod
    def from_components(
        cls,
        backend: DocumentBackend,
        blob_store: Optional[BlobStore] = None,
        *,
        limits: TierLimits = TierLimits(),
        sync: Optional[AnalyticsSync] = None,
    ) -> TeamFileStore:
        """
        Create store from injected backends (useful for tests).

        Without `sync`, analytics records are mirrored to `backend` through an
        in-memory local cache.
        """
        if sync is None:
            sync = AnalyticsSync(MemoryCache(), RemoteAnalyticsStore(backend))
        obj = cls.__new__(cls)
        obj._setup(backend, blob_store, limits, sync)
        return obj

    def _setup(
        self,
        backend: DocumentBackend,
        blob_store: Optional[BlobStore],
        limits: TierLimits,
        sync: AnalyticsSync,
    ) -> None:
        self._backend = backend
        self._blob_store = blob_store
        self._limits = limits
        self._adapter = DocumentStoreAdapter(backend, document_limit=limits.document_limit)
        self._teams = TeamDirectory(backend)
        self._hierarchy = HierarchyManager(self._adapter)
        self._sync = sync

    def close(self) -> None:
        """Stop the analytics sync loop and wait for queued remote writes."""
        self._sync.close()

    @property
    def adapter(self) -> DocumentStoreAdapter:
        return self._adapter

    @property
    def hierarchy(self) -> HierarchyManager:
        return self._hierarchy

    @property
    def teams(self) -> TeamDirectory:
        return self._teams

    @property
    def sync(self) -> AnalyticsSync:
        """Analytics sync engine; the host wires auth and network events into it."""
        return self._sync

    # ----------------------------
    # Folders
    # ----------------------------
    def create_folder(
        self,
        team_id: str,
        name: str,
        user_id: str,
        *,
        parent_id: Optional[str] = None,
        description: str = "",
        permissions: Optional[Permissions] = None,
    ) -> TeamFolderItem:
        """
        Create a folder under parent_id (None = root).

        Raises:
            NotFoundError: team or parent folder does not exist.
            AccessDeniedError: user is not a team member or cannot edit the parent.
            ValidationError: bad name, or a folder already exists at that path.
        """
        name = validate_name(name)
        self._teams.require_member(team_id, user_id)
        parent = self._parent_folder(team_id, parent_id, user_id)

        path = compute_path(parent.folder_path if parent else ROOT_PATH, name)
        validate_unique_folder_path(self._adapter, team_id, path)

        item = TeamFolderItem(
            id=new_folder_id(),
            name=name,
            item_type=ItemType.FOLDER,
            team_id=team_id,
            permissions=self._initial_permissions(team_id, user_id, permissions),
            created_by=user_id,
            parent_id=parent.id if parent else None,
            folder_path=path,
            description=description or "",
        )
        return self._adapter.create(item, user_id)

    def list_contents(
        self,
        team_id: str,
        user_id: str,
        parent_id: Optional[str] = None,
    ) -> list[TeamFolderItem]:
        """Folders then files directly under parent_id that user_id can view."""
        self._teams.require_member(team_id, user_id)
        return self._adapter.list(team_id, parent_id, user_id)

    def list_folders(
        self,
        team_id: str,
        user_id: str,
        parent_id: Optional[str] = None,
    ) -> list[TeamFolderItem]:
        self._teams.require_member(team_id, user_id)
        return self._adapter.list(team_id, parent_id, user_id, item_types=(ItemType.FOLDER,))

    def list_team_files(self, team_id: str, user_id: str) -> list[TeamFolderItem]:
        """Every file of the team user_id can view, at any depth, newest first."""
        self._teams.require_member(team_id, user_id)
        files = [
            f for f in self._adapter.list_team_items(team_id, (ItemType.FILE,))
            if effective_permissions(f, user_id).can_view
        ]
        for f in files:
            f.content = None
        files.sort(key=lambda f: (f.created_at is not None, f.created_at), reverse=True)
        return files

    def build_path(self, team_id: str, parent_id: Optional[str], name: Optional[str] = None) -> str:
        return self._hierarchy.build_path(team_id, parent_id, name)

    def build_breadcrumbs(
        self,
        team_id: str,
        folder_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> list[Breadcrumb]:
        if user_id is not None:
            self._teams.require_member(team_id, user_id)
        return self._hierarchy.build_breadcrumbs(team_id, folder_id)

    def move_item(
        self,
        item_id: str,
        item_type: ItemType,
        new_parent_id: Optional[str],
        user_id: str,
    ) -> TeamFolderItem:
        return self._hierarchy.move(item_id, ItemType(item_type), new_parent_id, user_id)

    def rename_folder(self, folder_id: str, new_name: str, user_id: str) -> TeamFolderItem:
        return self._hierarchy.rename_folder(folder_id, new_name, user_id)

    def delete_folder(
        self,
        folder_id: str,
        user_id: str,
        *,
        delete_contents: bool = False,
    ) -> int:
        """
        Delete a folder; returns the number of items removed.

        With delete_contents, user_id needs admin on every descendant; nothing is
        deleted unless all checks pass. Items go deepest first.
        """
        folder = self._adapter.fetch(folder_id, ItemType.FOLDER)
        require_capability(folder, user_id, Tier.ADMIN)

        subtree = self._hierarchy.collect_subtree(folder)
        if subtree and not delete_contents:
            raise ValidationError(
                "Folder is not empty",
                details={"folder_id": folder_id, "items": len(subtree)},
            )
        validate_subtree_capability((item for item, _ in subtree), user_id, Tier.ADMIN)

        for item in deletion_order(subtree):
            self._adapter.remove(item)
            if item.is_file and item.drive_file_id:
                self._delete_blob(item.drive_file_id)
        self._adapter.remove(folder)

        logger.info("Deleted folder %s (%s) with %d descendants",
                    folder.id, folder.folder_path, len(subtree))
        return len(subtree) + 1

    # ----------------------------
    # Files
    # ----------------------------
    def share_file(
        self,
        team_id: str,
        user_id: str,
        file_name: str,
        *,
        data: Optional[bytes] = None,
        url: Optional[str] = None,
        file_type: Optional[str] = None,
        parent_id: Optional[str] = None,
        description: str = "",
        tags: Sequence[str] = (),
        permissions: Optional[Permissions] = None,
    ) -> TeamFolderItem:
        """
        Share a file with the team: either `data` (stored by size tier) or a `url`.

        Raises:
            NotFoundError: team or parent folder does not exist.
            AccessDeniedError: not a member, sharing disabled, or no edit on the parent.
            ValidationError: bad input, or too large with a failed external upload.
        """
        file_name = validate_name(file_name)
        if (data is None) == (url is None):
            raise ValidationError("Exactly one of data or url must be provided")

        self._teams.require_sharing_allowed(team_id, user_id)
        parent = self._parent_folder(team_id, parent_id, user_id)
        file_type = file_type or guess_file_type(file_name)

        if data is not None:
            placement = self._place(data, file_name, file_type)
            size = len(data)
        else:
            placement = Placement.link(url)
            size = 0

        item = TeamFolderItem(
            id=new_file_id(),
            name=file_name,
            item_type=ItemType.FILE,
            team_id=team_id,
            permissions=self._initial_permissions(team_id, user_id, permissions),
            created_by=user_id,
            parent_id=parent.id if parent else None,
            folder_path=parent.folder_path if parent else ROOT_PATH,
            description=description or "",
            file_type=file_type,
            file_size=size,
            content=placement.content,
            url=placement.url,
            drive_file_id=placement.drive_file_id,
            version=1,
            storage_type=placement.storage_type,
            tags=list(tags),
        )

        try:
            self._adapter.create(item, user_id)
        except TeamStoreError:
            if placement.drive_file_id:
                self._delete_blob(placement.drive_file_id)
            raise

        logger.info("Shared %s (%d bytes) in team %s as %s",
                    file_name, size, team_id, placement.storage_type.value)
        return item

    def get_item(
        self,
        item_id: str,
        user_id: str,
        item_type: Optional[ItemType] = None,
    ) -> TeamFolderItem:
        return self._adapter.get(item_id, user_id, item_type)

    def update_file(
        self,
        file_id: str,
        user_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        data: Optional[bytes] = None,
        file_type: Optional[str] = None,
    ) -> TeamFolderItem:
        """
        Edit a file (edit tier); bumps version.

        New `data` goes through tier selection again; a superseded external blob
        is removed afterwards.
        """
        current = self._adapter.fetch(file_id, ItemType.FILE)
        require_capability(current, user_id, Tier.EDIT)

        changes: dict[str, Any] = {"version": (current.version or 1) + 1}
        if name is not None:
            changes["name"] = validate_name(name)
        if description is not None:
            changes["description"] = description
        if tags is not None:
            changes["tags"] = list(tags)

        placement: Optional[Placement] = None
        if data is not None:
            mime = file_type or current.file_type or guess_file_type(changes.get("name", current.name))
            placement = self._place(data, changes.get("name", current.name), mime)
            changes.update({
                "file_type": mime,
                "file_size": len(data),
                "content": placement.content,
                "url": placement.url,
                "drive_file_id": placement.drive_file_id,
                "storage_type": placement.storage_type,
            })
        elif file_type is not None:
            changes["file_type"] = file_type

        try:
            updated = self._adapter.update(file_id, ItemType.FILE, user_id, changes)
        except TeamStoreError:
            if placement is not None and placement.drive_file_id:
                self._delete_blob(placement.drive_file_id)
            raise

        if placement is not None and current.drive_file_id and \
                current.drive_file_id != placement.drive_file_id:
            self._delete_blob(current.drive_file_id)
        return updated

    def delete_file(self, file_id: str, user_id: str) -> None:
        removed = self._adapter.delete(file_id, ItemType.FILE, user_id)
        if removed.drive_file_id:
            self._delete_blob(removed.drive_file_id)
        logger.info("Deleted file %s (%s)", removed.id, removed.name)

    def download_file(self, file_id: str, user_id: str) -> DownloadResult:
        """Bytes for inline and Drive files, the link for URL files."""
        item = self._adapter.get(file_id, user_id, ItemType.FILE)
        result = DownloadResult(
            file_id=item.id,
            file_name=item.name,
            mime_type=item.file_type or guess_file_type(item.name),
        )

        if item.storage_type is StorageType.DRIVE and item.drive_file_id:
            if self._blob_store is None:
                raise ExternalStoreError("No external blob store configured",
                                         details={"file_id": file_id})
            result.data = self._blob_store.download(item.drive_file_id)
            return result
        if item.storage_type is StorageType.FIRESTORE and item.content:
            try:
                result.data = decode_data_url(item.content)
            except ValueError as exc:
                raise ValidationError("Stored content is corrupt",
                                      details={"file_id": file_id}, cause=exc) from exc
            return result
        if item.url:
            result.url = item.url
            return result
        raise NotFoundError("File content not available", details={"file_id": file_id})

    # ----------------------------
    # Permissions
    # ----------------------------
    def effective_permissions(
        self,
        item_id: str,
        user_id: str,
        item_type: Optional[ItemType] = None,
    ) -> EffectivePermissions:
        return effective_permissions(self._adapter.fetch(item_id, item_type), user_id)

    def set_permission(
        self,
        item_id: str,
        item_type: ItemType,
        user_id: str,
        target_user_id: str,
        tier: Optional[Tier],
    ) -> TeamFolderItem:
        """
        Give target_user_id exactly `tier` (None = no access); requires admin.

        Raises:
            ValidationError: the change would leave the item without an admin.
        """
        item_type = ItemType(item_type)
        current = self._adapter.fetch(item_id, item_type)
        require_capability(current, user_id, Tier.ADMIN)

        permissions = set_user_tier(current.permissions, target_user_id, tier)
        ensure_has_admin(permissions, item_id)
        return self._adapter.update(
            item_id,
            item_type,
            user_id,
            {"permissions": permissions},
            required=Tier.ADMIN,
        )

    def change_permission(
        self,
        item_id: str,
        item_type: ItemType,
        user_id: str,
        target_user_id: str,
        tier: Tier,
        action: PermissionAction,
    ) -> TeamFolderItem:
        """
        Grant or revoke one tier.

        grant raises the target to at least `tier`; revoke drops the target to
        the tier just below `tier` when they currently hold it or more.
        """
        tier = Tier(tier)
        current = self._adapter.fetch(item_id, ItemType(item_type))
        held = current.permissions.highest_tier(target_user_id)

        if action == "grant":
            new_tier: Optional[Tier] = tier if held is None or held.rank < tier.rank else held
        elif action == "revoke":
            if held is None or held.rank < tier.rank:
                new_tier = held
            else:
                new_tier = list(Tier)[tier.rank - 1] if tier.rank > 0 else None
        else:
            raise ValidationError(f"Unknown permission action: {action}")

        return self.set_permission(item_id, item_type, user_id, target_user_id, new_tier)

    def grant_member_access(
        self,
        team_id: str,
        member_id: str,
        role: Optional[str] = None,
    ) -> list[PermissionUpdate]:
        """Give a (new) team member the tier for `role` on every team item."""
        tier = tier_for_role(role)

        def grant(item: TeamFolderItem) -> Permissions:
            # Creators keep admin on their own items.
            if item.created_by == member_id:
                return item.permissions
            return set_user_tier(item.permissions, member_id, tier)

        return self._rewrite_team_permissions(team_id, grant)

    def revoke_member_access(self, team_id: str, member_id: str) -> list[PermissionUpdate]:
        """Remove a departing member from every team item (items keep an admin)."""
        return self._rewrite_team_permissions(
            team_id,
            lambda item: set_user_tier(item.permissions, member_id, None),
        )

    def sync_team_permissions(self, team_id: str) -> list[PermissionUpdate]:
        """Rebuild every team item's permissions from the current member roles."""
        team = self._teams.get_team(team_id)

        def rebuild(item: TeamFolderItem) -> Permissions:
            if team.is_member(item.created_by):
                return derive_permissions(team, item.created_by)
            perms = Permissions()
            for member in team.members.values():
                perms = set_user_tier(perms, member.user_id, tier_for_role(member.role))
            if not perms.admin and item.created_by:
                perms = set_user_tier(perms, item.created_by, Tier.ADMIN)
            return perms

        return self._rewrite_team_permissions(team_id, rebuild)

    # ----------------------------
    # Internals
    # ----------------------------
    def _parent_folder(
        self,
        team_id: str,
        parent_id: Optional[str],
        user_id: str,
    ) -> Optional[TeamFolderItem]:
        if not parent_id:
            return None
        parent = self._adapter.find(parent_id, ItemType.FOLDER)
        if parent is None:
            raise NotFoundError("Parent folder not found", details={"parent_id": parent_id})
        validate_same_team(parent, team_id)
        require_capability(parent, user_id, Tier.EDIT)
        return parent

    def _initial_permissions(
        self,
        team_id: str,
        user_id: str,
        explicit: Optional[Permissions],
    ) -> Permissions:
        """Explicit permissions (creator forced to admin) or the team's role defaults."""
        if explicit is not None:
            return set_user_tier(explicit, user_id, Tier.ADMIN)
        return derive_team_permissions(self._teams, team_id, user_id)

    def _place(self, data: bytes, file_name: str, mime_type: str) -> Placement:
        placement = place_content(
            data,
            file_name=file_name,
            mime_type=mime_type,
            blob_store=self._blob_store,
            limits=self._limits,
        )
        logger.info("Storage tier for %s (%d bytes): %s -> %s",
                    file_name, len(data), placement.tier.value, placement.storage_type.value)
        return placement

    def _delete_blob(self, file_id: str) -> None:
        """Best-effort blob removal; failures are logged."""
        if self._blob_store is None:
            return
        try:
            self._blob_store.delete(file_id)
        except (ExternalStoreError, NotFoundError) as exc:
            logger.warning("Failed to delete blob %s: %s", file_id, exc)

    def _rewrite_team_permissions(
        self,
        team_id: str,
        rewrite: Callable[[TeamFolderItem], Permissions],
    ) -> list[PermissionUpdate]:
        updates: list[PermissionUpdate] = []
        for item in self._adapter.list_team_items(team_id):
            try:
                permissions = rewrite(item)
                if permissions.to_dict() == item.permissions.to_dict():
                    updates.append(PermissionUpdate(item.id, item.name, item.item_type, False))
                    continue
                ensure_has_admin(permissions, item.id)
                item.permissions = permissions
                self._adapter.touch(item, SYSTEM_ACTOR)
                updates.append(PermissionUpdate(item.id, item.name, item.item_type, True))
            except TeamStoreError as exc:
                logger.warning("Permission update failed for %s %s: %s",
                               item.item_type.value, item.id, exc)
                updates.append(
                    PermissionUpdate(item.id, item.name, item.item_type, False, error=str(exc))
                )

        logger.info("Updated permissions on %d of %d items in team %s",
                    sum(1 for u in updates if u.updated), len(updates), team_id)
        return updates
