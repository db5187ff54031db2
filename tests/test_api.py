import base64
import unittest

from fastapi.testclient import TestClient

from teamstore.api import create_app, item_to_json
from teamstore.manager import TeamFileStore
from teamstore.store import FILES_COLLECTION, FOLDERS_COLLECTION, TEAMS_COLLECTION, InMemoryBackend


def _data_url(data: bytes, mime: str = "text/plain") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class TestApi(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = InMemoryBackend()
        self.backend.set(
            TEAMS_COLLECTION,
            "t1",
            {"members": {"alice": {"role": "member"}, "vera": {"role": "viewer"}}},
        )
        self.store = TeamFileStore.from_components(self.backend)
        self.addCleanup(self.store.close)
        self.client = TestClient(create_app(self.store))

    def _share(self, name="a.txt", **extra):
        body = {"teamId": "t1", "fileName": name, "sharedBy": "alice",
                "content": _data_url(b"hello")}
        body.update(extra)
        return self.client.post("/api/files", json=body)

    def test_share_and_get_file(self) -> None:
        resp = self._share()
        self.assertEqual(resp.status_code, 201)
        file_json = resp.json()["file"]
        self.assertEqual(file_json["fileName"], "a.txt")
        self.assertEqual(file_json["storageType"], "firestore")
        self.assertTrue(file_json["userPermissions"]["canManage"])

        resp = self.client.get("/api/files", params={"fileId": file_json["id"], "userId": "vera"})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["file"]["userPermissions"]["canEdit"])

    def test_list_team_files(self) -> None:
        self._share("a.txt")
        self._share("b.txt")
        resp = self.client.get("/api/files", params={"teamId": "t1", "userId": "vera"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["files"]), 2)

    def test_missing_parameters_is_400(self) -> None:
        resp = self.client.post("/api/files", json={"teamId": "t1"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Invalid or missing parameters", resp.json()["error"])

        resp = self.client.get("/api/files")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.get("/api/files", params={"userId": "alice"})
        self.assertEqual(resp.status_code, 400)

    def test_non_member_is_403(self) -> None:
        resp = self.client.get("/api/files", params={"teamId": "t1", "userId": "mallory"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Access denied: Not a team member")

    def test_unknown_file_is_404(self) -> None:
        resp = self.client.get("/api/files", params={"fileId": "nope", "userId": "alice"})
        self.assertEqual(resp.status_code, 404)

    def test_update_and_delete(self) -> None:
        file_id = self._share().json()["file"]["id"]

        resp = self.client.put("/api/files", params={"fileId": file_id},
                               json={"userId": "alice", "description": "v2"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["file"]["version"], 2)

        resp = self.client.delete("/api/files", params={"fileId": file_id, "userId": "vera"})
        self.assertEqual(resp.status_code, 403)

        resp = self.client.delete("/api/files", params={"fileId": file_id, "userId": "alice"})
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(self.backend.get(FILES_COLLECTION, file_id))

    def test_permission_action(self) -> None:
        file_id = self._share().json()["file"]["id"]
        resp = self.client.post(
            "/api/files",
            params={"action": "permission"},
            json={
                "fileId": file_id,
                "userId": "alice",
                "targetUserId": "vera",
                "permission": "edit",
                "action": "grant",
            },
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIn("vera", resp.json()["file"]["permissions"]["edit"])

    def test_folders(self) -> None:
        resp = self.client.post("/api/folders",
                                json={"teamId": "t1", "folderName": "Specs", "createdBy": "alice"})
        self.assertEqual(resp.status_code, 201)
        folder = resp.json()["folder"]
        self.assertEqual(folder["folderPath"], "/Specs")
        self.assertEqual(folder["itemType"], "folder")

        self._share("a.txt", parentId=folder["id"])

        resp = self.client.get("/api/folders", params={"teamId": "t1", "userId": "vera"})
        self.assertEqual([i["folderName"] for i in resp.json()["items"]], ["Specs"])

        resp = self.client.get("/api/folders/breadcrumbs",
                               params={"teamId": "t1", "userId": "alice", "folderId": folder["id"]})
        self.assertEqual([c["name"] for c in resp.json()["breadcrumbs"]], ["Team Files", "Specs"])

        resp = self.client.delete("/api/folders", params={"folderId": folder["id"], "userId": "alice"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Folder is not empty")

        resp = self.client.delete(
            "/api/folders",
            params={"folderId": folder["id"], "userId": "alice", "deleteContents": "true"},
        )
        self.assertEqual(resp.json(), {"deleted": 2})
        self.assertEqual(self.backend.docs_by_collection.get(FOLDERS_COLLECTION), {})

    def test_move(self) -> None:
        folder = self.client.post(
            "/api/folders", json={"teamId": "t1", "folderName": "Specs", "createdBy": "alice"}
        ).json()["folder"]
        file_id = self._share().json()["file"]["id"]

        resp = self.client.post(
            "/api/items/move",
            json={"itemId": file_id, "itemType": "file", "userId": "vera", "newParentId": folder["id"]},
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.post(
            "/api/items/move",
            json={"itemId": file_id, "itemType": "file", "userId": "alice", "newParentId": folder["id"]},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["item"]["folderPath"], "/Specs")

    def test_preflight(self) -> None:
        resp = self.client.options("/api/files")
        self.assertEqual(resp.status_code, 200)

    def test_item_to_json_formats_timestamps(self) -> None:
        item = self.store.create_folder("t1", "Specs", "alice")
        out = item_to_json(item)
        self.assertTrue(out["createdAt"].endswith("Z"))
        self.assertNotIn("userPermissions", out)

    def test_shutdown_stops_sync_loop(self) -> None:
        with TestClient(create_app(self.store)):
            self.store.sync.set_user("alice")
            self.assertTrue(self.store.sync.is_running)
        self.assertFalse(self.store.sync.is_running)


if __name__ == "__main__":
    unittest.main()
