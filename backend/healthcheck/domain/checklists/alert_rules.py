# backend/healthcheck/domain/checklists/alert_rules.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from .health import is_overdue, row_get

SEVERITY_ORDER = {"critical": 1, "high": 2, "medium": 3, "low": 4}


@dataclass(frozen=True)
class AlertDraft:
    alert_type: str
    severity: str
    title: str
    message: str
    equipment_id: Optional[str] = None
    checklist_id: Optional[int] = None


def low_score_alert(
    *,
    score: float,
    threshold: float,
    equipment_id: str,
    checklist_id: Optional[int] = None,
    severity: str = "high",
) -> Optional[AlertDraft]:
    """
    Independent of the final-status bands: a checklist strictly below
    `threshold` raises a health_score_low alert.
    """
    if score >= threshold:
        return None
    return AlertDraft(
        alert_type="health_score_low",
        severity=severity,
        title=f"Score faible - {equipment_id}",
        message=f"L'inspection a révélé un score de {score:.1f}%. Vérification requise.",
        equipment_id=equipment_id,
        checklist_id=checklist_id,
    )


def sweep_alerts(equipments: Iterable[Any], *, today: date, critical_below: int = 50) -> list[AlertDraft]:
    """
    Periodic sweep over equipment rows:
      - maintenance_due     (medium)   status == maintenance
      - critical_failure    (critical) status == critical or health score below critical_below
      - inspection_overdue  (high)     next maintenance date already past
    """
    out: list[AlertDraft] = []
    for eq in equipments:
        eq_id = str(row_get(eq, "id"))
        name = row_get(eq, "name") or eq_id
        status = row_get(eq, "status")
        health = row_get(eq, "health_score")

        if status == "maintenance":
            out.append(
                AlertDraft(
                    alert_type="maintenance_due",
                    severity="medium",
                    title=f"Maintenance planifiée - {name}",
                    message="Équipement en maintenance planifiée. Vérification requise.",
                    equipment_id=eq_id,
                )
            )

        if status == "critical" or (health is not None and int(health) < critical_below):
            out.append(
                AlertDraft(
                    alert_type="critical_failure",
                    severity="critical",
                    title=f"ALERTE CRITIQUE - {name}",
                    message="Équipement en état critique. Intervention urgente requise.",
                    equipment_id=eq_id,
                )
            )

        if is_overdue(row_get(eq, "next_maintenance_date"), today):
            out.append(
                AlertDraft(
                    alert_type="inspection_overdue",
                    severity="high",
                    title=f"Inspection en retard - {name}",
                    message="La prochaine inspection est échue. Planifier immédiatement.",
                    equipment_id=eq_id,
                )
            )

    return out


def sort_by_severity(drafts: Iterable[Any]) -> list[Any]:
    return sorted(drafts, key=lambda a: SEVERITY_ORDER.get(row_get(a, "severity"), 9))
