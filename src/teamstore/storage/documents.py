"""Pre-write document hygiene: drop empty fields and enforce the size ceiling."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable

from teamstore.errors import ValidationError

from .tiers import DOCUMENT_LIMIT

# parentId must be written even when None so `parentId == None` queries match.
_KEEP_NONE: tuple[str, ...] = ("parentId",)


def compact(data: dict[str, Any], keep: Iterable[str] = _KEEP_NONE) -> dict[str, Any]:
    """Return a copy without None values, except for the keys in `keep`."""
    keep = set(keep)
    return {k: v for k, v in data.items() if v is not None or k in keep}


def document_size(data: dict[str, Any]) -> int:
    """Approximate stored size: the UTF-8 length of the JSON encoding."""
    return len(json.dumps(data, default=_json_default, separators=(",", ":")).encode("utf-8"))


def validate_document_size(data: dict[str, Any], limit: int = DOCUMENT_LIMIT) -> int:
    size = document_size(data)
    if size > limit:
        raise ValidationError(
            f"Document too large: {size} bytes exceeds the {limit} byte limit",
            details={"size": size, "limit": limit},
        )
    return size


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
