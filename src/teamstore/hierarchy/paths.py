"""Pure helpers for denormalized folder paths."""

from __future__ import annotations

import re
from typing import Optional

from teamstore.errors import ValidationError

ROOT_PATH: str = "/"

_SEPARATORS = re.compile(r"/+")


def validate_name(name: str) -> str:
    """Return the stripped name; names are non-empty and contain no '/'."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name must be a non-empty string")
    name = name.strip()
    if "/" in name:
        raise ValidationError("name must not contain '/'", details={"name": name})
    return name


def compute_path(parent_path: Optional[str], name: str) -> str:
    """
    Path of `name` under `parent_path` (None or "/" for root).

    Duplicate separators collapse and the result has no trailing '/'.
    """
    joined = _SEPARATORS.sub("/", f"/{parent_path or ''}/{name}")
    if len(joined) > 1:
        joined = joined.rstrip("/")
    return joined or ROOT_PATH


def path_segments(path: str) -> list[str]:
    return [seg for seg in (path or "").split("/") if seg]


def path_prefixes(path: str) -> list[tuple[str, str]]:
    """(segment, prefix path) pairs from the top: "/a/b" -> [("a", "/a"), ("b", "/a/b")]."""
    out: list[tuple[str, str]] = []
    current = ""
    for seg in path_segments(path):
        current = f"{current}/{seg}"
        out.append((seg, current))
    return out


def is_same_or_descendant(path: str, ancestor_path: str) -> bool:
    if ancestor_path == ROOT_PATH:
        return True
    return path == ancestor_path or path.startswith(ancestor_path + "/")
