# backend/healthcheck/services/dashboard.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..domain.checklists.scheduling import as_naive_utc
from ..domain.checklists.scoring import round_half_up
from ..domain.checklists.stats import daily_score_trend, final_status_counts, score_distribution
from ..models import Alert, Checklist, Equipment


@dataclass(frozen=True)
class InspectionRollup:
    window_days: int
    completed: int
    avg_score: Optional[float]
    distribution: dict[str, int]
    final_status: dict[str, int]
    trend: list[dict[str, Any]]
    equipment_by_status: dict[str, int]
    avg_health_score: Optional[float]
    active_alerts: int


def inspection_rollup(db: Session, *, as_of: Optional[datetime] = None, window_days: int = 30) -> InspectionRollup:
    as_of = as_naive_utc(as_of) if as_of is not None else datetime.utcnow()
    start = as_of - timedelta(days=int(window_days))

    rows = db.scalars(
        select(Checklist)
        .where(Checklist.status == "completed")
        .where(Checklist.completed_at >= start)
        .where(Checklist.completed_at <= as_of)
        .order_by(Checklist.completed_at)
    ).all()

    scores = [float(r.score) for r in rows if r.score is not None]
    avg = round_half_up(sum(scores) / len(scores), 1) if scores else None

    eq_counts = {
        str(status): int(n)
        for status, n in db.execute(select(Equipment.status, func.count()).group_by(Equipment.status)).all()
    }
    avg_health = db.scalar(select(func.avg(Equipment.health_score)))
    active_alerts = db.scalar(select(func.count()).select_from(Alert).where(Alert.status == "active")) or 0

    return InspectionRollup(
        window_days=int(window_days),
        completed=len(rows),
        avg_score=avg,
        distribution=score_distribution(rows),
        final_status=final_status_counts(rows),
        trend=daily_score_trend(rows),
        equipment_by_status=eq_counts,
        avg_health_score=round_half_up(float(avg_health), 1) if avg_health is not None else None,
        active_alerts=int(active_alerts),
    )
