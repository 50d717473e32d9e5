# backend/healthcheck/services/equipment_health.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.checklists.health import derive_equipment_status, equipment_health_score
from ..domain.checklists.scheduling import as_naive_utc
from ..errors import NotFoundError
from ..models import Checklist, Equipment

log = logging.getLogger("healthcheck.equipment_health")


def recompute_health_score(
    db: Session,
    *,
    equipment_id: str,
    as_of: Optional[datetime] = None,
    window: Optional[int] = None,
    lookback_days: Optional[int] = None,
) -> Equipment:
    """
    Refresh equipments.health_score (and the derived critical/operational status)
    from the inspection history. Does not commit.
    """
    eq = db.get(Equipment, equipment_id)
    if eq is None:
        raise NotFoundError("Equipment", equipment_id)

    as_of = as_naive_utc(as_of) if as_of is not None else datetime.utcnow()
    window = int(window or settings.health_score_window)
    lookback_days = int(lookback_days or settings.health_score_lookback_days)

    # Pending writes (the checklist that just completed) must be visible to the query.
    db.flush()

    cutoff = as_of - timedelta(days=lookback_days)
    rows = db.scalars(
        select(Checklist)
        .where(Checklist.equipment_id == equipment_id)
        .where(Checklist.status == "completed")
        .where(Checklist.completed_at >= cutoff)
        .where(Checklist.completed_at <= as_of)
        .order_by(desc(Checklist.completed_at), desc(Checklist.id))
        .limit(window)
    ).all()

    score = equipment_health_score(rows, as_of=as_of, window=window, lookback_days=lookback_days)
    if score is None:
        log.info("no qualifying inspections, health score unchanged", extra={"equipment_id": equipment_id})
        return eq

    before_status = eq.status
    eq.health_score = score
    eq.status = derive_equipment_status(eq.status, score, critical_below=settings.health_score_critical_below)

    log.info(
        "health score refreshed (status %s -> %s)",
        before_status,
        eq.status,
        extra={"equipment_id": equipment_id, "health_score": score},
    )
    return eq


def refresh_all_health_scores(db: Session, *, as_of: Optional[datetime] = None) -> int:
    ids = list(db.scalars(select(Equipment.id).order_by(Equipment.id)).all())
    for eq_id in ids:
        recompute_health_score(db, equipment_id=eq_id, as_of=as_of)
    db.commit()
    return len(ids)
