from __future__ import annotations

import secrets
import string
import time

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def new_item_id(prefix: str) -> str:
    """
    Generate a document id shaped like ``{prefix}_{epochMillis}_{randomSuffix}``.

    The suffix is six lowercase alphanumerics.
    """
    if not prefix or "_" in prefix:
        raise ValueError("prefix must be a non-empty string without '_'")
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{prefix}_{millis}_{suffix}"


def new_file_id() -> str:
    return new_item_id("file")


def new_folder_id() -> str:
    return new_item_id("folder")
