"""Interview performance record replicated by the sync engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from teamstore.util.time import from_wire, now_utc, to_rfc3339

_ANALYSIS_KEYS: tuple[str, ...] = ("speechAnalysis", "bodyLanguageAnalysis")


@dataclass(slots=True)
class PerformanceRecord:
    """
    One interview's analytics entry.

    Only id, timestamp and overallScore are interpreted; everything else
    (score breakdowns, nested analysis blobs) travels untouched in payload.
    """

    id: str
    timestamp: datetime
    overall_score: float = 0.0
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceRecord:
        record_id = data.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise ValueError("performance record requires a non-empty 'id'")

        payload = {
            k: copy.deepcopy(v)
            for k, v in data.items()
            if k not in ("id", "timestamp", "overallScore")
        }
        score = data.get("overallScore", 0)
        return cls(
            id=record_id,
            timestamp=from_wire(data.get("timestamp")) or now_utc(),
            overall_score=float(score) if isinstance(score, (int, float)) else 0.0,
            payload=payload,
        )

    def to_dict(self) -> dict[str, Any]:
        out = copy.deepcopy(self.payload)
        out["id"] = self.id
        out["timestamp"] = to_rfc3339(self.timestamp)
        out["overallScore"] = self.overall_score
        return out


def migrate_legacy_flags(record: PerformanceRecord) -> bool:
    """
    Rewrite legacy `isSimulated` analysis flags as `isFallbackData`.

    Returns True if the record changed.
    """
    changed = False
    for key in _ANALYSIS_KEYS:
        analysis = record.payload.get(key)
        if isinstance(analysis, dict) and analysis.get("isSimulated") is True:
            analysis.pop("isSimulated")
            analysis["isFallbackData"] = True
            analysis["analysisAvailable"] = False
            changed = True
    return changed
