"""Public storage exports for teamstore."""

from __future__ import annotations

from .documents import compact, document_size, validate_document_size
from .tiers import (
    DOCUMENT_LIMIT,
    INLINE_LIMIT,
    Placement,
    StorageTier,
    TierLimits,
    place_content,
    select_tier,
)

__all__ = [
    "INLINE_LIMIT",
    "DOCUMENT_LIMIT",
    "StorageTier",
    "TierLimits",
    "Placement",
    "select_tier",
    "place_content",
    "compact",
    "document_size",
    "validate_document_size",
]
