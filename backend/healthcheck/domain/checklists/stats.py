# backend/healthcheck/domain/checklists/stats.py
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from typing import Any, Iterable

from .health import row_get
from .scoring import FinalStatus, round_half_up

SCORE_BUCKETS = ("90-100", "80-89", "70-79", "60-69", "<60")


def score_bucket(score: float) -> str:
    if score >= 90:
        return "90-100"
    if score >= 80:
        return "80-89"
    if score >= 70:
        return "70-79"
    if score >= 60:
        return "60-69"
    return "<60"


def score_distribution(rows: Iterable[Any]) -> dict[str, int]:
    """Counts completed checklists per score bucket. Every bucket is present."""
    out = {b: 0 for b in SCORE_BUCKETS}
    for r in rows:
        score = row_get(r, "score")
        if score is None:
            continue
        out[score_bucket(float(score))] += 1
    return out


def final_status_counts(rows: Iterable[Any]) -> dict[str, int]:
    ctr: Counter[str] = Counter()
    for r in rows:
        fs = row_get(r, "final_status")
        if fs:
            ctr[str(fs)] += 1
    return {s.value: ctr.get(s.value, 0) for s in FinalStatus}


def daily_score_trend(rows: Iterable[Any]) -> list[dict[str, Any]]:
    """
    [{"date": "2024-03-01", "avg_score": 87.5, "num_inspections": 2}, ...]
    ordered by date ascending.
    """
    by_day: dict[date, list[float]] = defaultdict(list)
    for r in rows:
        completed_at = row_get(r, "completed_at")
        score = row_get(r, "score")
        if completed_at is None or score is None:
            continue
        by_day[completed_at.date()].append(float(score))

    return [
        {
            "date": day.isoformat(),
            "avg_score": round_half_up(sum(scores) / len(scores), 1),
            "num_inspections": len(scores),
        }
        for day, scores in sorted(by_day.items())
    ]
