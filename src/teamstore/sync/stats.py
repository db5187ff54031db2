"""Aggregate statistics over performance records."""

from __future__ import annotations

import math
from typing import Sequence

from teamstore.models import AnalyticsStats, PerformanceRecord
from teamstore.models.results import ImprovementTrend
from teamstore.util.time import to_rfc3339

TREND_MIN_RECORDS: int = 4
TREND_THRESHOLD: float = 5.0


def compute_stats(records: Sequence[PerformanceRecord]) -> AnalyticsStats:
    """
    Totals, rounded average, latest date and trend.

    The trend compares the newer half of the records with the older half:
    more than 5 points up is improving, more than 5 down is declining.
    """
    if not records:
        return AnalyticsStats(
            total_interviews=0,
            average_score=0,
            last_interview_date=None,
            improvement_trend="stable",
        )

    ordered = sorted(records, key=lambda r: r.timestamp, reverse=True)
    scores = [r.overall_score for r in ordered]
    average = sum(scores) / len(scores)

    return AnalyticsStats(
        total_interviews=len(ordered),
        average_score=_round_half_up(average),
        last_interview_date=to_rfc3339(ordered[0].timestamp),
        improvement_trend=_trend(scores),
    )


def _trend(newest_first: list[float]) -> ImprovementTrend:
    if len(newest_first) < TREND_MIN_RECORDS:
        return "stable"
    mid = len(newest_first) // 2
    recent = newest_first[:mid]
    older = newest_first[mid:]
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    if recent_avg > older_avg + TREND_THRESHOLD:
        return "improving"
    if recent_avg < older_avg - TREND_THRESHOLD:
        return "declining"
    return "stable"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
