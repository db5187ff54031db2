import unittest

from teamstore.errors import AccessDeniedError, NotFoundError, ValidationError
from teamstore.models import ItemType, Permissions, StorageType, TeamFolderItem, Tier
from teamstore.store import (
    FILES_COLLECTION,
    FOLDERS_COLLECTION,
    DocumentStoreAdapter,
    InMemoryBackend,
)


def _folder(item_id, name, perms, parent_id=None, path=None):
    return TeamFolderItem(
        id=item_id,
        name=name,
        item_type=ItemType.FOLDER,
        team_id="t1",
        permissions=perms,
        created_by="alice",
        parent_id=parent_id,
        folder_path=path or f"/{name}",
    )


def _file(item_id, name, perms, parent_id=None, path="/"):
    return TeamFolderItem(
        id=item_id,
        name=name,
        item_type=ItemType.FILE,
        team_id="t1",
        permissions=perms,
        created_by="alice",
        parent_id=parent_id,
        folder_path=path,
        content="data:text/plain;base64,YQ==",
        storage_type=StorageType.FIRESTORE,
        version=1,
    )


class TestDocumentStoreAdapter(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = InMemoryBackend()
        self.adapter = DocumentStoreAdapter(self.backend)
        self.shared = Permissions(view=["alice", "bob"], edit=["alice"], admin=["alice"])
        self.private = Permissions.creator_only("alice")

    def test_create_sets_timestamps(self) -> None:
        created = self.adapter.create(_folder("F1", "Docs", self.shared), "alice")
        self.assertIsNotNone(created.created_at)
        self.assertEqual(created.last_modified_by, "alice")
        stored = self.backend.get(FOLDERS_COLLECTION, "F1")
        self.assertEqual(stored["folderName"], "Docs")

    def test_create_rejects_duplicate_and_missing_team(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.shared), "alice")
        with self.assertRaises(ValidationError):
            self.adapter.create(_file("D1", "a.txt", self.shared), "alice")

        orphan = _file("D2", "b.txt", self.shared)
        orphan.team_id = ""
        with self.assertRaises(ValidationError):
            self.adapter.create(orphan, "alice")

    def test_create_requires_edit_on_parent(self) -> None:
        self.adapter.create(_folder("F1", "Docs", self.shared), "alice")
        with self.assertRaises(AccessDeniedError):
            self.adapter.create(_file("D1", "a.txt", self.shared, parent_id="F1", path="/Docs"), "bob")
        self.assertIsNone(self.backend.get(FILES_COLLECTION, "D1"))

    def test_list_filters_by_view_and_sorts(self) -> None:
        self.adapter.create(_file("D1", "zeta.txt", self.shared), "alice")
        self.adapter.create(_file("D2", "Alpha.txt", self.shared), "alice")
        self.adapter.create(_file("D3", "secret.txt", self.private), "alice")
        self.adapter.create(_folder("F1", "Zoo", self.shared), "alice")

        names = [i.name for i in self.adapter.list("t1", None, "bob")]
        self.assertEqual(names, ["Zoo", "Alpha.txt", "zeta.txt"])

        listed = self.adapter.list("t1", None, "alice")
        self.assertEqual(len(listed), 4)
        self.assertTrue(all(i.content is None for i in listed))

    def test_list_without_index_falls_back_unordered(self) -> None:
        self.backend.unindexed_collections.add(FILES_COLLECTION)
        self.adapter.create(_file("D1", "b.txt", self.shared), "alice")
        self.adapter.create(_file("D2", "a.txt", self.shared), "alice")

        with self.assertLogs("teamstore.store.adapter", level="WARNING"):
            items = self.adapter.list("t1", None, "bob", item_types=(ItemType.FILE,))

        self.assertEqual([i.name for i in items], ["a.txt", "b.txt"])
        self.assertIn(FILES_COLLECTION, self.adapter.index_advisories)
        self.assertTrue(self.adapter.index_advisories[FILES_COLLECTION].startswith("https://"))

    def test_get_requires_view(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.private), "alice")
        self.assertEqual(self.adapter.get("D1", "alice").name, "a.txt")
        with self.assertRaises(AccessDeniedError):
            self.adapter.get("D1", "bob")
        with self.assertRaises(NotFoundError) as ctx:
            self.adapter.get("missing", "alice", ItemType.FILE)
        self.assertEqual(str(ctx.exception), "File not found")

    def test_update_checks_before_write(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.shared), "alice")
        with self.assertRaises(AccessDeniedError):
            self.adapter.update("D1", ItemType.FILE, "bob", {"description": "x"})
        self.assertNotIn("x", self.backend.get(FILES_COLLECTION, "D1").get("description", ""))

        updated = self.adapter.update("D1", ItemType.FILE, "alice", {"description": "x"})
        self.assertEqual(updated.description, "x")
        self.assertEqual(self.backend.get(FILES_COLLECTION, "D1")["description"], "x")

    def test_update_rejects_unknown_fields(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.shared), "alice")
        with self.assertRaises(ValidationError):
            self.adapter.update("D1", ItemType.FILE, "alice", {"team_id": "t2"})

    def test_update_required_tier(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.shared), "alice")
        perms = Permissions(view=["bob"], edit=["bob"], admin=[])
        self.adapter.update("D1", ItemType.FILE, "alice", {"permissions": perms}, required=Tier.ADMIN)
        with self.assertRaises(AccessDeniedError):
            self.adapter.update("D1", ItemType.FILE, "bob", {"permissions": perms}, required=Tier.ADMIN)

    def test_delete_requires_admin(self) -> None:
        self.adapter.create(_file("D1", "a.txt", self.shared), "alice")
        with self.assertRaises(AccessDeniedError):
            self.adapter.delete("D1", ItemType.FILE, "bob")
        removed = self.adapter.delete("D1", ItemType.FILE, "alice")
        self.assertEqual(removed.id, "D1")
        self.assertIsNone(self.backend.get(FILES_COLLECTION, "D1"))

    def test_put_enforces_document_limit(self) -> None:
        adapter = DocumentStoreAdapter(self.backend, document_limit=200)
        big = _file("D1", "a.txt", self.shared)
        big.content = "x" * 500
        with self.assertRaises(ValidationError):
            adapter.put(big)
        self.assertIsNone(self.backend.get(FILES_COLLECTION, "D1"))

    def test_find_folder_by_path(self) -> None:
        self.adapter.create(_folder("F1", "Docs", self.shared), "alice")
        self.assertEqual(self.adapter.find_folder_by_path("t1", "/Docs").id, "F1")
        self.assertIsNone(self.adapter.find_folder_by_path("t1", "/Nope"))
        self.assertIsNone(self.adapter.find_folder_by_path("t2", "/Docs"))


if __name__ == "__main__":
    unittest.main()
