import unittest
from unittest.mock import Mock

from google.api_core import exceptions as gexc

from teamstore.errors import (
    AccessDeniedError,
    ExternalStoreError,
    IndexUnavailableError,
    NotFoundError,
)
from teamstore.store import Filter, FirestoreBackend


def _snap(doc_id, data, exists=True):
    snap = Mock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


class TestFirestoreBackend(unittest.TestCase):
    def test_get_existing_and_missing(self) -> None:
        client = Mock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.side_effect = [_snap("a", {"x": 1}), _snap("b", None, exists=False)]

        backend = FirestoreBackend.from_client(client)
        self.assertEqual(backend.get("sharedFiles", "a"), {"x": 1})
        self.assertIsNone(backend.get("sharedFiles", "b"))
        client.collection.assert_called_with("sharedFiles")

    def test_set_and_delete(self) -> None:
        client = Mock()
        doc_ref = client.collection.return_value.document.return_value
        backend = FirestoreBackend.from_client(client)

        backend.set("teams", "t1", {"name": "n"})
        backend.delete("teams", "t1")

        doc_ref.set.assert_called_once_with({"name": "n"})
        doc_ref.delete.assert_called_once_with()

    def test_query_applies_filters_and_order(self) -> None:
        client = Mock()
        collection = client.collection.return_value
        filtered = collection.where.return_value
        filtered.where.return_value = filtered
        ordered = filtered.order_by.return_value
        ordered.stream.return_value = iter([_snap("a", {"n": "a"})])

        backend = FirestoreBackend.from_client(client)
        rows = backend.query(
            "sharedFolders",
            [Filter("teamId", "t1"), Filter("parentId", None)],
            order_by="folderName",
        )

        self.assertEqual(rows, [("a", {"n": "a"})])
        filtered.order_by.assert_called_once_with("folderName")
        self.assertIn("filter", collection.where.call_args.kwargs)

    def test_index_error_carries_link(self) -> None:
        client = Mock()
        q = client.collection.return_value.where.return_value.order_by.return_value
        q.stream.side_effect = gexc.FailedPrecondition(
            "The query requires an index. You can create it here: "
            "https://console.firebase.google.com/project/p/firestore/indexes?create_composite=abc"
        )

        backend = FirestoreBackend.from_client(client)
        with self.assertRaises(IndexUnavailableError) as ctx:
            backend.query("sharedFiles", [Filter("teamId", "t1")], order_by="fileName")
        self.assertEqual(
            ctx.exception.details["remediation_url"],
            "https://console.firebase.google.com/project/p/firestore/indexes?create_composite=abc",
        )

    def test_error_mapping(self) -> None:
        client = Mock()
        doc_ref = client.collection.return_value.document.return_value
        backend = FirestoreBackend.from_client(client)

        doc_ref.update.side_effect = gexc.NotFound("no doc")
        with self.assertRaises(NotFoundError):
            backend.update("teams", "t1", {"a": 1})

        doc_ref.update.side_effect = gexc.PermissionDenied("nope")
        with self.assertRaises(AccessDeniedError):
            backend.update("teams", "t1", {"a": 1})

        doc_ref.update.side_effect = gexc.ServiceUnavailable("down")
        with self.assertRaises(ExternalStoreError):
            backend.update("teams", "t1", {"a": 1})


if __name__ == "__main__":
    unittest.main()
