# backend/healthcheck/services/checklists.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.checklists.alert_rules import low_score_alert
from ..domain.checklists.lifecycle import ChecklistStatus, parse_status, requires_scoring, transition
from ..domain.checklists.scheduling import as_naive_utc
from ..domain.checklists.scoring import ScoreResult, as_response, score_checklist
from ..errors import NotFoundError, TemplateMismatchError
from ..logging_config import bind_log_context
from ..models import Alert, Checklist, ChecklistTemplateRecord, Equipment
from .alerts import create_alert
from .equipment_health import recompute_health_score
from .templates import load_template

log = logging.getLogger("healthcheck.checklists")


@dataclass(frozen=True)
class CompletionOutcome:
    checklist: Checklist
    result: ScoreResult
    alert: Optional[Alert]
    health_score: Optional[int]


def _loads_responses(s: Optional[str]) -> dict[str, dict[str, Any]]:
    if not s:
        return {}
    try:
        v = json.loads(s)
    except ValueError:
        return {}
    return v if isinstance(v, dict) else {}


def _dumps_responses(responses: Mapping[str, Any]) -> str:
    return json.dumps(responses, ensure_ascii=False, sort_keys=True, default=str)


def _normalize_responses(raw: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    out: dict[str, dict[str, Any]] = {}
    for item_id, r in raw.items():
        resp = as_response(r)
        out[str(item_id)] = {"value": resp.value, "note": resp.note}
    return out


def get_checklist(db: Session, checklist_id: int) -> Checklist:
    row = db.get(Checklist, checklist_id)
    if row is None:
        raise NotFoundError("Checklist", checklist_id)
    return row


def create_checklist(
    db: Session,
    *,
    equipment_id: str,
    template_id: str,
    inspector_name: Optional[str] = None,
    scheduled_date: Optional[date] = None,
    status: str = "pending",
) -> Checklist:
    eq = db.get(Equipment, equipment_id)
    if eq is None:
        raise NotFoundError("Equipment", equipment_id)

    tpl_row = db.get(ChecklistTemplateRecord, template_id)
    if tpl_row is None:
        raise NotFoundError("ChecklistTemplate", template_id)

    if tpl_row.equipment_type != eq.category:
        raise TemplateMismatchError(template_type=tpl_row.equipment_type, equipment_category=eq.category)

    tpl = load_template(db, template_id)
    initial = parse_status(status)
    if initial not in (ChecklistStatus.DRAFT, ChecklistStatus.PENDING):
        raise ValueError(f"New checklists start as draft or pending, not {initial.value}")

    row = Checklist(
        equipment_id=equipment_id,
        template_id=template_id,
        inspector_name=inspector_name,
        scheduled_date=scheduled_date or datetime.utcnow().date(),
        status=initial.value,
        responses_json="{}",
        total_items=tpl.total_items,
        created_at=datetime.utcnow(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    log.info("checklist created", extra={"checklist_id": row.id, "equipment_id": equipment_id, "template_id": template_id})
    return row


def update_checklist(
    db: Session,
    *,
    checklist_id: int,
    responses: Optional[Mapping[str, Any]] = None,
    status: Optional[str] = None,
    inspector_notes: Optional[str] = None,
    now: Optional[datetime] = None,
    invalid_responses: Optional[str] = None,
) -> Checklist | CompletionOutcome:
    """
    Save answers and/or move the checklist through its lifecycle.

    Incoming responses are merged over the stored ones (incoming keys win).
    Moving to `completed` runs the full completion flow and returns a
    CompletionOutcome; other updates return the Checklist row.
    """
    row = get_checklist(db, checklist_id)
    current = parse_status(row.status)
    target = parse_status(status) if status is not None else current

    # Validate before touching anything so a rejected update leaves no trace.
    transition(current, target)

    merged = _loads_responses(row.responses_json)
    if responses:
        merged.update(_normalize_responses(responses))

    if requires_scoring(current, target):
        return complete_checklist(
            db,
            checklist_id=checklist_id,
            responses=merged,
            inspector_notes=inspector_notes,
            now=now,
            invalid_responses=invalid_responses,
        )

    now = as_naive_utc(now) if now is not None else datetime.utcnow()
    row.responses_json = _dumps_responses(merged)
    if inspector_notes is not None:
        row.inspector_notes = inspector_notes
    if target == ChecklistStatus.IN_PROGRESS and row.started_at is None:
        row.started_at = now
    row.status = target.value
    row.updated_at = now
    db.commit()
    db.refresh(row)
    return row


def complete_checklist(
    db: Session,
    *,
    checklist_id: int,
    responses: Optional[Mapping[str, Any]] = None,
    inspector_notes: Optional[str] = None,
    now: Optional[datetime] = None,
    invalid_responses: Optional[str] = None,
) -> CompletionOutcome:
    """
    The `completed` transition:
      1) score the responses with the pure engine (errors stop here, nothing written)
      2) persist counters / score / final status / next check date on the checklist
      3) move the equipment's last/next maintenance dates
      4) refresh the equipment health score
      5) raise a health_score_low alert under the configured threshold
    All in one transaction.
    """
    row = get_checklist(db, checklist_id)
    transition(row.status, ChecklistStatus.COMPLETED)

    now = as_naive_utc(now) if now is not None else datetime.utcnow()
    policy = invalid_responses or settings.invalid_response_policy
    answers = _normalize_responses(responses) if responses is not None else _loads_responses(row.responses_json)

    with bind_log_context(checklist_id=row.id, equipment_id=row.equipment_id, template_id=row.template_id):
        template = load_template(db, row.template_id)
        result = score_checklist(template, answers, reference=now, invalid_responses=policy)

        try:
            row.responses_json = _dumps_responses(answers)
            if inspector_notes is not None:
                row.inspector_notes = inspector_notes
            row.status = ChecklistStatus.COMPLETED.value
            row.started_at = row.started_at or now
            row.completed_at = now
            row.total_items = result.total_items
            row.completed_items = result.completed_items
            row.passed_items = result.passed_items
            row.failed_items = result.failed_items
            row.score = result.score
            row.final_status = result.final_status.value
            row.next_check_date = result.next_check_date
            row.updated_at = now

            eq = db.get(Equipment, row.equipment_id)
            if eq is None:
                raise NotFoundError("Equipment", row.equipment_id)
            eq.last_maintenance_date = now.date()
            eq.next_maintenance_date = result.next_check_date

            eq = recompute_health_score(db, equipment_id=row.equipment_id, as_of=now)

            alert = None
            draft = low_score_alert(
                score=result.score,
                threshold=settings.low_score_alert_threshold,
                equipment_id=row.equipment_id,
                checklist_id=row.id,
                severity=settings.low_score_alert_severity,
            )
            if draft is not None:
                alert = create_alert(db, draft, now=now)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(row)
        log.info(
            "checklist completed",
            extra={"score": result.score, "final_status": result.final_status.value, "health_score": eq.health_score},
        )

    return CompletionOutcome(checklist=row, result=result, alert=alert, health_score=eq.health_score)


def cancel_checklist(db: Session, *, checklist_id: int, now: Optional[datetime] = None) -> Checklist:
    # never scores, so always a Checklist row
    return update_checklist(db, checklist_id=checklist_id, status=ChecklistStatus.CANCELLED.value, now=now)


def list_checklists(
    db: Session,
    *,
    equipment_id: Optional[str] = None,
    status: Optional[str] = None,
    final_status: Optional[str] = None,
    completed_from: Optional[datetime] = None,
    completed_to: Optional[datetime] = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Checklist]:
    stmt = select(Checklist)
    if equipment_id is not None:
        stmt = stmt.where(Checklist.equipment_id == equipment_id)
    if status is not None:
        stmt = stmt.where(Checklist.status == status)
    if final_status is not None:
        stmt = stmt.where(Checklist.final_status == final_status)
    if completed_from is not None:
        stmt = stmt.where(Checklist.completed_at >= completed_from)
    if completed_to is not None:
        stmt = stmt.where(Checklist.completed_at <= completed_to)
    stmt = stmt.order_by(desc(Checklist.completed_at), desc(Checklist.id)).limit(max(1, min(100, int(limit)))).offset(max(0, int(offset)))
    return list(db.scalars(stmt).all())
