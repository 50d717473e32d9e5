# backend/healthcheck/domain/checklists/health.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from .scheduling import as_naive_utc

# Operator-owned statuses are never overwritten by a score refresh.
MANUAL_STATUSES = frozenset({"maintenance", "outOfService"})


@dataclass(frozen=True)
class InspectionPoint:
    completed_at: datetime
    score: float


def row_get(row: Any, key: str) -> Any:
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def inspection_points(rows: Iterable[Any]) -> list[InspectionPoint]:
    """
    Accepts Checklist rows or dicts; keeps completed ones that carry a score.
    """
    out: list[InspectionPoint] = []
    for r in rows:
        status = row_get(r, "status")
        if status is not None and status != "completed":
            continue
        completed_at = row_get(r, "completed_at")
        score = row_get(r, "score")
        if completed_at is None or score is None:
            continue
        out.append(InspectionPoint(completed_at=as_naive_utc(completed_at), score=float(score)))
    return out


def equipment_health_score(
    history: Iterable[Any],
    *,
    as_of: datetime,
    window: int = 5,
    lookback_days: int = 180,
) -> Optional[int]:
    """
    Rolling health score: mean of the `window` most recent completed inspection
    scores inside the lookback period, rounded half-up to an integer 0..100.

    Returns None when nothing qualifies (the caller keeps the current value).
    """
    as_of = as_naive_utc(as_of)
    cutoff = as_of - timedelta(days=int(lookback_days))
    points = [p for p in inspection_points(history) if cutoff <= p.completed_at <= as_of]
    if not points:
        return None

    # ties on completed_at keep input order
    recent = sorted(points, key=lambda p: p.completed_at, reverse=True)[: max(1, int(window))]
    mean = sum(Decimal(str(p.score)) for p in recent) / Decimal(len(recent))
    value = int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, value))


def derive_equipment_status(current: str, health_score: Optional[int], *, critical_below: int = 50) -> str:
    if current in MANUAL_STATUSES or health_score is None:
        return current
    if health_score < critical_below:
        return "critical"
    if current == "critical":
        return "operational"
    return current


def is_overdue(next_maintenance_date: Optional[date], today: date) -> bool:
    return next_maintenance_date is not None and next_maintenance_date < today
