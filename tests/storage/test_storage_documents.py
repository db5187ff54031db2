import unittest
from datetime import datetime, timezone

from teamstore.errors import ValidationError
from teamstore.storage import compact, document_size, validate_document_size


class TestCompact(unittest.TestCase):
    def test_drops_none_but_keeps_parent_id(self) -> None:
        data = {"id": "a", "parentId": None, "url": None, "tags": []}
        self.assertEqual(compact(data), {"id": "a", "parentId": None, "tags": []})

    def test_custom_keep(self) -> None:
        self.assertEqual(compact({"a": None, "b": None}, keep=("b",)), {"b": None})


class TestDocumentSize(unittest.TestCase):
    def test_counts_utf8_bytes(self) -> None:
        self.assertEqual(document_size({"a": "é"}), len('{"a":"é"}'.encode("utf-8")))

    def test_encodes_datetimes(self) -> None:
        size = document_size({"t": datetime(2025, 1, 1, tzinfo=timezone.utc)})
        self.assertGreater(size, 0)

    def test_validate_limit(self) -> None:
        self.assertEqual(validate_document_size({"a": "b"}, limit=100), 9)
        with self.assertRaises(ValidationError) as ctx:
            validate_document_size({"a": "x" * 200}, limit=100)
        self.assertEqual(ctx.exception.details["limit"], 100)
        self.assertTrue(str(ctx.exception).startswith("Document too large"))
