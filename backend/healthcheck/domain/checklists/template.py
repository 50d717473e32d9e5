# backend/healthcheck/domain/checklists/template.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ...errors import InvalidTemplateError
from ...schemas import ChecklistTemplateIn, TemplateItemIn


@dataclass(frozen=True)
class NumberRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class SelectOption:
    value: Any
    label: str = ""
    acceptable: bool = True


@dataclass(frozen=True)
class BooleanItem:
    id: str
    check: str = ""
    type: str = field(default="boolean", init=False)


@dataclass(frozen=True)
class NumberItem:
    id: str
    check: str = ""
    range: Optional[NumberRange] = None
    type: str = field(default="number", init=False)


@dataclass(frozen=True)
class SelectItem:
    id: str
    check: str = ""
    options: tuple[SelectOption, ...] = ()
    type: str = field(default="select", init=False)

    def find_option(self, value: Any) -> Optional[SelectOption]:
        for opt in self.options:
            if _same_value(opt.value, value):
                return opt
        return None


def _same_value(a: Any, b: Any) -> bool:
    # True == 1 in python; option matching must not conflate them
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


@dataclass(frozen=True)
class TextareaItem:
    id: str
    check: str = ""
    type: str = field(default="textarea", init=False)


@dataclass(frozen=True)
class FileItem:
    id: str
    check: str = ""
    type: str = field(default="file", init=False)


Item = Union[BooleanItem, NumberItem, SelectItem, TextareaItem, FileItem]


@dataclass(frozen=True)
class Section:
    name: str
    items: tuple[Item, ...]


@dataclass(frozen=True)
class ChecklistTemplate:
    id: str
    equipment_type: str
    title: str
    version: str
    frequency: Optional[str]
    sections: tuple[Section, ...]

    description: Optional[str] = None
    estimated_duration: Optional[int] = None
    required_certifications: tuple[str, ...] = ()
    required_ppe: tuple[str, ...] = ()
    scoring_rules: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_template(self)

    def iter_items(self):
        for section in self.sections:
            yield from section.items

    @property
    def total_items(self) -> int:
        return sum(len(s.items) for s in self.sections)


def validate_template(template: ChecklistTemplate) -> None:
    """
    Structural invariants:
      - at least one section, every section has at least one item
      - item ids are unique across the whole template
      - select items enumerate at least one option
      - number ranges are finite and not inverted
    """
    tid = template.id
    if not template.sections:
        raise InvalidTemplateError(f"Template {tid!r} has no sections", template_id=tid)

    seen: set[str] = set()
    for section in template.sections:
        if not section.items:
            raise InvalidTemplateError(f"Section {section.name!r} of template {tid!r} has no items", template_id=tid)

        for item in section.items:
            if not item.id:
                raise InvalidTemplateError(f"Template {tid!r} has an item without id", template_id=tid)
            if item.id in seen:
                raise InvalidTemplateError(f"Duplicate item id {item.id!r}", template_id=tid, item_id=item.id)
            seen.add(item.id)

            if isinstance(item, SelectItem) and not item.options:
                raise InvalidTemplateError(f"Select item {item.id!r} has no options", template_id=tid, item_id=item.id)

            if isinstance(item, NumberItem) and item.range is not None:
                lo, hi = item.range.min, item.range.max
                if not (math.isfinite(lo) and math.isfinite(hi)):
                    raise InvalidTemplateError(f"Range of item {item.id!r} is not finite", template_id=tid, item_id=item.id)
                if lo > hi:
                    raise InvalidTemplateError(
                        f"Range of item {item.id!r} is inverted ({lo} > {hi})", template_id=tid, item_id=item.id
                    )


def _build_item(raw: TemplateItemIn, *, template_id: str) -> Item:
    kind = (raw.type or "").strip().lower()
    check = raw.check or ""

    if kind == "boolean":
        return BooleanItem(id=raw.id, check=check)
    if kind == "number":
        rng = NumberRange(min=float(raw.range.min), max=float(raw.range.max)) if raw.range is not None else None
        return NumberItem(id=raw.id, check=check, range=rng)
    if kind == "select":
        options = tuple(
            SelectOption(value=o.value, label=o.label or str(o.value), acceptable=o.acceptable)
            for o in (raw.options or [])
        )
        return SelectItem(id=raw.id, check=check, options=options)
    if kind == "textarea":
        return TextareaItem(id=raw.id, check=check)
    if kind == "file":
        return FileItem(id=raw.id, check=check)

    raise InvalidTemplateError(f"Unknown item type {raw.type!r} for item {raw.id!r}", template_id=template_id, item_id=raw.id)


def template_from_payload(payload: Mapping[str, Any] | ChecklistTemplateIn) -> ChecklistTemplate:
    """
    Build a validated template from the JSON shape used by seed files and
    stored template rows (camelCase or snake_case keys).
    """
    if isinstance(payload, ChecklistTemplateIn):
        parsed = payload
    else:
        try:
            parsed = ChecklistTemplateIn.model_validate(payload)
        except ValidationError as e:
            tid = payload.get("id") if isinstance(payload, Mapping) else None
            raise InvalidTemplateError(f"Malformed template payload: {e.error_count()} error(s)", template_id=tid) from e

    sections = tuple(
        Section(name=s.name, items=tuple(_build_item(i, template_id=parsed.id) for i in s.items))
        for s in parsed.sections
    )

    freq = (parsed.frequency or "").strip().lower() or None

    return ChecklistTemplate(
        id=parsed.id,
        equipment_type=parsed.equipment_type,
        title=parsed.title,
        version=parsed.version,
        frequency=freq,
        sections=sections,
        description=parsed.description,
        estimated_duration=parsed.estimated_duration,
        required_certifications=tuple(parsed.required_certifications),
        required_ppe=tuple(parsed.required_ppe),
        scoring_rules=dict(parsed.scoring_rules or {}),
    )


def template_to_payload(template: ChecklistTemplate) -> dict[str, Any]:
    def item_payload(item: Item) -> dict[str, Any]:
        out: dict[str, Any] = {"id": item.id, "type": item.type, "check": item.check}
        if isinstance(item, NumberItem) and item.range is not None:
            out["range"] = {"min": item.range.min, "max": item.range.max}
        if isinstance(item, SelectItem):
            out["options"] = [{"value": o.value, "label": o.label, "acceptable": o.acceptable} for o in item.options]
        return out

    return {
        "id": template.id,
        "equipmentType": template.equipment_type,
        "title": template.title,
        "description": template.description,
        "version": template.version,
        "frequency": template.frequency,
        "estimatedDuration": template.estimated_duration,
        "requiredCertifications": list(template.required_certifications),
        "requiredPPE": list(template.required_ppe),
        "sections": [{"name": s.name, "items": [item_payload(i) for i in s.items]} for s in template.sections],
        "scoringRules": dict(template.scoring_rules),
    }
