# backend/healthcheck/services/alerts.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.checklists.alert_rules import AlertDraft, sort_by_severity, sweep_alerts
from ..errors import AlertStateError, NotFoundError
from ..models import Alert, Equipment

log = logging.getLogger("healthcheck.alerts")

OPEN_STATUSES = ("active", "acknowledged")


def create_alert(db: Session, draft: AlertDraft, *, now: Optional[datetime] = None) -> Alert:
    """Does not commit."""
    row = Alert(
        equipment_id=draft.equipment_id,
        checklist_id=draft.checklist_id,
        alert_type=draft.alert_type,
        severity=draft.severity,
        title=draft.title,
        message=draft.message,
        status="active",
        created_at=now or datetime.utcnow(),
    )
    db.add(row)
    db.flush()
    log.warning(
        "%s alert raised (%s)",
        draft.alert_type,
        draft.severity,
        extra={"equipment_id": draft.equipment_id, "checklist_id": draft.checklist_id, "alert_id": row.id},
    )
    return row


def _has_active(db: Session, *, equipment_id: Optional[str], alert_type: str) -> bool:
    existing = db.scalar(
        select(Alert.id)
        .where(Alert.equipment_id == equipment_id)
        .where(Alert.alert_type == alert_type)
        .where(Alert.status == "active")
        .limit(1)
    )
    return existing is not None


def run_alert_sweep(
    db: Session,
    *,
    today: Optional[date] = None,
    critical_below: Optional[int] = None,
) -> list[Alert]:
    """
    Raise maintenance_due / critical_failure / inspection_overdue alerts.
    Skips an equipment+type pair that already has an active alert. Commits.
    """
    today = today or datetime.utcnow().date()
    if critical_below is None:
        critical_below = settings.health_score_critical_below
    equipments = db.scalars(select(Equipment).order_by(Equipment.id)).all()

    created: list[Alert] = []
    for draft in sweep_alerts(equipments, today=today, critical_below=critical_below):
        if _has_active(db, equipment_id=draft.equipment_id, alert_type=draft.alert_type):
            continue
        created.append(create_alert(db, draft))

    db.commit()
    return created


def list_alerts(
    db: Session,
    *,
    status: str = "active",
    severity: Optional[str] = None,
    equipment_id: Optional[str] = None,
) -> list[Alert]:
    stmt = select(Alert).where(Alert.status == status)
    if severity is not None:
        stmt = stmt.where(Alert.severity == severity)
    if equipment_id is not None:
        stmt = stmt.where(Alert.equipment_id == equipment_id)
    rows = db.scalars(stmt.order_by(desc(Alert.created_at), desc(Alert.id))).all()
    # stable sort keeps newest-first inside a severity
    return sort_by_severity(rows)


def acknowledge_alert(db: Session, *, alert_id: int, user: str) -> Alert:
    row = db.get(Alert, alert_id)
    if row is None:
        raise NotFoundError("Alert", alert_id)
    if row.status != "active":
        raise AlertStateError(f"Alert {alert_id} is {row.status}, only active alerts can be acknowledged")

    row.status = "acknowledged"
    row.acknowledged_by = user
    row.acknowledged_at = datetime.utcnow()
    db.commit()
    return row


def resolve_alert(db: Session, *, alert_id: int, user: str, notes: str) -> Alert:
    if not (notes or "").strip():
        raise AlertStateError("Resolution notes are required")

    row = db.get(Alert, alert_id)
    if row is None:
        raise NotFoundError("Alert", alert_id)
    if row.status not in OPEN_STATUSES:
        raise AlertStateError(f"Alert {alert_id} is already {row.status}")

    row.status = "resolved"
    row.resolved_by = user
    row.resolved_at = datetime.utcnow()
    row.resolution_notes = notes.strip()
    db.commit()
    return row
