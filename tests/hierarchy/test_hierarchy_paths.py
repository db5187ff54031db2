import unittest

from teamstore.errors import ValidationError
from teamstore.hierarchy import (
    compute_path,
    is_same_or_descendant,
    path_prefixes,
    path_segments,
    validate_name,
)


class TestPaths(unittest.TestCase):
    def test_compute_path(self) -> None:
        self.assertEqual(compute_path("/", "a"), "/a")
        self.assertEqual(compute_path(None, "a"), "/a")
        self.assertEqual(compute_path("/a", "b"), "/a/b")
        self.assertEqual(compute_path("/a/", "b"), "/a/b")
        self.assertEqual(compute_path("//a//", "b"), "/a/b")

    def test_validate_name(self) -> None:
        self.assertEqual(validate_name("  Docs "), "Docs")
        with self.assertRaises(ValidationError):
            validate_name("   ")
        with self.assertRaises(ValidationError):
            validate_name("a/b")

    def test_segments_and_prefixes(self) -> None:
        self.assertEqual(path_segments("/"), [])
        self.assertEqual(path_segments("/a/b"), ["a", "b"])
        self.assertEqual(path_prefixes("/a/b"), [("a", "/a"), ("b", "/a/b")])

    def test_is_same_or_descendant(self) -> None:
        self.assertTrue(is_same_or_descendant("/a", "/a"))
        self.assertTrue(is_same_or_descendant("/a/b", "/a"))
        self.assertFalse(is_same_or_descendant("/ab", "/a"))
        self.assertTrue(is_same_or_descendant("/x", "/"))
