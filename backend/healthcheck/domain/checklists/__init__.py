# backend/healthcheck/domain/checklists/__init__.py
from .template import (
    BooleanItem,
    ChecklistTemplate,
    FileItem,
    NumberItem,
    NumberRange,
    Section,
    SelectItem,
    SelectOption,
    TextareaItem,
    template_from_payload,
    template_to_payload,
)
from .scoring import (
    FinalStatus,
    ItemOutcome,
    Response,
    ScoreResult,
    classify,
    evaluate_item,
    score_checklist,
)
from .scheduling import Frequency, next_due_date
from .lifecycle import ChecklistStatus, transition

__all__ = [
    "BooleanItem",
    "ChecklistTemplate",
    "FileItem",
    "NumberItem",
    "NumberRange",
    "Section",
    "SelectItem",
    "SelectOption",
    "TextareaItem",
    "template_from_payload",
    "template_to_payload",
    "FinalStatus",
    "ItemOutcome",
    "Response",
    "ScoreResult",
    "classify",
    "evaluate_item",
    "score_checklist",
    "Frequency",
    "next_due_date",
    "ChecklistStatus",
    "transition",
]
