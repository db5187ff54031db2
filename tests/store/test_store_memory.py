import unittest

from teamstore.errors import IndexUnavailableError, NotFoundError, ValidationError
from teamstore.store import Filter, InMemoryBackend


class TestInMemoryBackend(unittest.TestCase):
    def test_reads_are_copies(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "a", {"tags": ["x"]})
        doc = backend.get("c", "a")
        doc["tags"].append("y")
        self.assertEqual(backend.get("c", "a"), {"tags": ["x"]})

    def test_update_missing_raises(self) -> None:
        with self.assertRaises(NotFoundError):
            InMemoryBackend().update("c", "nope", {"a": 1})

    def test_update_merges(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "a", {"x": 1, "y": 2})
        backend.update("c", "a", {"y": 3})
        self.assertEqual(backend.get("c", "a"), {"x": 1, "y": 3})

    def test_delete_is_idempotent(self) -> None:
        backend = InMemoryBackend()
        backend.delete("c", "a")
        self.assertIsNone(backend.get("c", "a"))

    def test_query_null_filter_requires_field(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "root", {"parentId": None})
        backend.set("c", "legacy", {})
        rows = backend.query("c", [Filter("parentId", None)])
        self.assertEqual([doc_id for doc_id, _ in rows], ["root"])

    def test_query_order_excludes_missing_field(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "b", {"n": "b"})
        backend.set("c", "a", {"n": "a"})
        backend.set("c", "z", {})
        rows = backend.query("c", order_by="n")
        self.assertEqual([doc_id for doc_id, _ in rows], ["a", "b"])

    def test_unindexed_collection_rejects_filtered_order(self) -> None:
        backend = InMemoryBackend(unindexed_collections={"c"})
        backend.set("c", "a", {"t": 1, "n": "a"})
        with self.assertRaises(IndexUnavailableError) as ctx:
            backend.query("c", [Filter("t", 1)], order_by="n")
        self.assertIn("remediation_url", ctx.exception.details)
        self.assertEqual(len(backend.query("c", [Filter("t", 1)])), 1)
        self.assertEqual(len(backend.query("c", order_by="n")), 1)

    def test_unsupported_operator(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "a", {"t": 1})
        with self.assertRaises(ValidationError):
            backend.query("c", [Filter("t", 1, op=">")])

    def test_clone_is_independent(self) -> None:
        backend = InMemoryBackend()
        backend.set("c", "a", {"x": 1})
        copy = backend.clone()
        copy.set("c", "b", {"x": 2})
        self.assertIsNone(backend.get("c", "b"))
