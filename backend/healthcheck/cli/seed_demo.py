# backend/healthcheck/cli/seed_demo.py
from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db import SessionLocal, init_db
from ..domain.checklists.template import (
    BooleanItem,
    ChecklistTemplate,
    FileItem,
    NumberItem,
    SelectItem,
    TextareaItem,
)
from ..models import Alert, Checklist, ChecklistTemplateRecord, Equipment
from ..schemas import EquipmentIn
from ..seed.templates_seed import EQUIPMENTS, TEMPLATES
from ..services.alerts import run_alert_sweep
from ..services.checklists import complete_checklist, create_checklist
from ..services.equipment_health import refresh_all_health_scores
from ..services.templates import import_templates, record_to_template

log = logging.getLogger("healthcheck.seed")


@dataclass(frozen=True)
class SeedResult:
    templates: int
    template_errors: int
    equipments: int
    checklists: int
    active_alerts: int


def _get_or_create_equipment(db: Session, payload: Mapping[str, Any]) -> Equipment:
    data = EquipmentIn.model_validate(payload)
    row = db.get(Equipment, data.id)
    if row:
        return row
    row = Equipment(
        id=data.id,
        name=data.name,
        type=data.type,
        category=data.category,
        manufacturer=data.manufacturer,
        model=data.model,
        serial_number=data.serial_number,
        building=data.building,
        zone=data.zone,
        status=data.status,
        criticality_level=data.criticality_level,
        health_score=data.health_score,
    )
    db.add(row)
    db.commit()
    return row


def generate_responses(template: ChecklistTemplate, rng: random.Random) -> dict[str, dict[str, Any]]:
    """
    Plausible inspection answers. Free-text and file items are often left
    unanswered, which keeps completed_items below total_items.
    """
    out: dict[str, dict[str, Any]] = {}
    for item in template.iter_items():
        if isinstance(item, BooleanItem):
            value: Any = rng.random() > 0.15
        elif isinstance(item, NumberItem):
            if item.range is None:
                value = round(rng.random() * 100, 1)
            else:
                lo, hi = item.range.min, item.range.max
                span = (hi - lo) or 1.0
                # ~10% of readings drift outside the acceptable band
                if rng.random() < 0.10:
                    value = round(hi + span * rng.uniform(0.05, 0.5), 2)
                else:
                    value = round(rng.uniform(lo, hi), 2)
        elif isinstance(item, SelectItem):
            weights = [1.0 if o.acceptable else 0.15 for o in item.options]
            value = rng.choices(item.options, weights=weights, k=1)[0].value
        elif isinstance(item, TextareaItem):
            if rng.random() > 0.3:
                continue
            value = "Observations normales, RAS"
        elif isinstance(item, FileItem):
            if rng.random() > 0.4:
                continue
            value = f"photo_{item.id}_{rng.randrange(10**6)}.jpg"
        else:
            continue
        out[item.id] = {"value": value, "note": None}
    return out


def generate_history(
    db: Session,
    *,
    rng: random.Random,
    now: datetime,
    months: int = 6,
    target: int = 127,
    inspector_name: str = "Sample Inspector",
) -> int:
    templates = {r.equipment_type: record_to_template(r) for r in db.scalars(select(ChecklistTemplateRecord)).all()}
    equipments = db.scalars(select(Equipment).order_by(Equipment.id)).all()
    start = now - timedelta(days=30 * months)

    generated = 0
    for eq in equipments:
        tpl = templates.get(eq.category)
        if tpl is None:
            continue

        n = rng.randint(2, 4)
        dates = sorted(start + (now - start) * rng.random() for _ in range(n))
        for completed_at in dates:
            if generated >= target:
                return generated
            row = create_checklist(
                db,
                equipment_id=eq.id,
                template_id=tpl.id,
                inspector_name=inspector_name,
                scheduled_date=completed_at.date(),
            )
            complete_checklist(db, checklist_id=row.id, responses=generate_responses(tpl, rng), now=completed_at)
            generated += 1

    return generated


def load_json_list(path: Path, key: str) -> list[dict[str, Any]]:
    doc = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(doc, dict):
        doc = doc.get(key, [])
    if not isinstance(doc, list):
        raise ValueError(f"{path}: expected a list or an object with a {key!r} list")
    return doc


def seed_demo(
    *,
    templates: Optional[Iterable[Mapping[str, Any]]] = None,
    equipments: Optional[Iterable[Mapping[str, Any]]] = None,
    random_seed: Optional[int] = None,
    history_months: int = 6,
    target_checklists: int = 127,
    now: Optional[datetime] = None,
) -> SeedResult:
    init_db()
    now = now or datetime.utcnow()
    rng = random.Random(random_seed)

    db = SessionLocal()
    try:
        imported = import_templates(db, templates if templates is not None else TEMPLATES)

        eq_payloads = list(equipments if equipments is not None else EQUIPMENTS)
        for payload in eq_payloads:
            _get_or_create_equipment(db, payload)

        checklists = generate_history(db, rng=rng, now=now, months=history_months, target=target_checklists)
        refresh_all_health_scores(db, as_of=now)
        run_alert_sweep(db, today=now.date())

        active = db.scalar(select(func.count()).select_from(Alert).where(Alert.status == "active")) or 0
        total_checklists = db.scalar(select(func.count()).select_from(Checklist)) or 0
        log.info("seed complete: %d checklists generated (%d total)", checklists, total_checklists)

        return SeedResult(
            templates=len(imported["imported"]),
            template_errors=len(imported["errors"]),
            equipments=len(eq_payloads),
            checklists=checklists,
            active_alerts=int(active),
        )
    finally:
        db.close()
