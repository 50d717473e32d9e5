# backend/healthcheck/services/templates.py
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.checklists.template import ChecklistTemplate, template_from_payload, template_to_payload
from ..errors import InvalidTemplateError, NotFoundError
from ..models import ChecklistTemplateRecord

log = logging.getLogger("healthcheck.templates")


def _loads(s: Optional[str], default: Any) -> Any:
    if not s:
        return default
    try:
        return json.loads(s)
    except ValueError:
        return default


def upsert_template(db: Session, payload: Mapping[str, Any] | ChecklistTemplate) -> ChecklistTemplateRecord:
    """
    Validate and store a template. Re-importing an existing id replaces its
    version, sections and scoring rules (templates are versioned by re-import).
    Does not commit.
    """
    tpl = payload if isinstance(payload, ChecklistTemplate) else template_from_payload(payload)
    doc = template_to_payload(tpl)

    row = db.get(ChecklistTemplateRecord, tpl.id)
    created = row is None
    if row is None:
        row = ChecklistTemplateRecord(id=tpl.id, created_at=datetime.utcnow())
        db.add(row)

    row.equipment_type = tpl.equipment_type
    row.title = tpl.title
    row.description = tpl.description
    row.version = tpl.version
    row.frequency = tpl.frequency
    row.estimated_duration = tpl.estimated_duration
    row.required_certifications_json = json.dumps(doc["requiredCertifications"])
    row.required_ppe_json = json.dumps(doc["requiredPPE"])
    row.sections_json = json.dumps(doc["sections"], ensure_ascii=False)
    row.scoring_rules_json = json.dumps(doc["scoringRules"], ensure_ascii=False)
    row.is_active = True
    row.updated_at = datetime.utcnow()

    log.info(
        "template %s %s (version %s, %d items)",
        "created" if created else "updated",
        tpl.id,
        tpl.version,
        tpl.total_items,
        extra={"template_id": tpl.id},
    )
    return row


def import_templates(db: Session, payloads: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Bulk import (seed / admin tooling). A malformed template is reported and
    skipped; the others still import. Commits once at the end.
    """
    imported: list[str] = []
    errors: list[dict[str, Any]] = []

    for p in payloads:
        try:
            row = upsert_template(db, p)
        except InvalidTemplateError as e:
            log.warning("template rejected: %s", e, extra={"template_id": e.template_id})
            errors.append(e.to_dict())
            continue
        imported.append(row.id)

    db.commit()
    return {"imported": imported, "errors": errors}


def record_to_template(row: ChecklistTemplateRecord) -> ChecklistTemplate:
    return template_from_payload(
        {
            "id": row.id,
            "equipmentType": row.equipment_type,
            "title": row.title,
            "description": row.description,
            "version": row.version,
            "frequency": row.frequency,
            "estimatedDuration": row.estimated_duration,
            "requiredCertifications": _loads(row.required_certifications_json, []),
            "requiredPPE": _loads(row.required_ppe_json, []),
            "sections": _loads(row.sections_json, []),
            "scoringRules": _loads(row.scoring_rules_json, {}),
        }
    )


def load_template(db: Session, template_id: str) -> ChecklistTemplate:
    row = db.get(ChecklistTemplateRecord, template_id)
    if row is None:
        raise NotFoundError("ChecklistTemplate", template_id)
    return record_to_template(row)


def list_templates(
    db: Session,
    *,
    equipment_type: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> list[ChecklistTemplateRecord]:
    stmt = select(ChecklistTemplateRecord)
    if equipment_type is not None:
        stmt = stmt.where(ChecklistTemplateRecord.equipment_type == equipment_type)
    if is_active is not None:
        stmt = stmt.where(ChecklistTemplateRecord.is_active.is_(is_active))
    stmt = stmt.order_by(ChecklistTemplateRecord.equipment_type, ChecklistTemplateRecord.title)
    return list(db.scalars(stmt).all())
