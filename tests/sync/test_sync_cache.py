import json
import os
import tempfile
import unittest

from teamstore.errors import TeamStoreError
from teamstore.sync import JsonFileCache, MemoryCache


class TestMemoryCache(unittest.TestCase):
    def test_values_are_copied(self) -> None:
        cache = MemoryCache()
        value = {"a": [1]}
        cache.set("k", value)
        value["a"].append(2)
        self.assertEqual(cache.get("k"), {"a": [1]})
        self.assertEqual(cache.get("missing", []), [])
        cache.remove("k")
        self.assertIsNone(cache.get("k"))


class TestJsonFileCache(unittest.TestCase):
    def test_persists_across_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "sub", "cache.json")
            cache = JsonFileCache(path)
            cache.set("k", {"v": 1})

            reopened = JsonFileCache(path)
            self.assertEqual(reopened.get("k"), {"v": 1})

            reopened.remove("k")
            with open(path, encoding="utf-8") as f:
                self.assertEqual(json.load(f), {})

    def test_corrupt_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cache.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertRaises(TeamStoreError):
                JsonFileCache(path)
