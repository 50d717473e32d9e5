# backend/healthcheck/domain/checklists/scoring.py
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Mapping, Optional, Union

from ...errors import InvalidResponseError
from .scheduling import next_due_date
from .template import (
    BooleanItem,
    ChecklistTemplate,
    FileItem,
    Item,
    NumberItem,
    SelectItem,
    TextareaItem,
)

INVALID_RESPONSE_POLICIES = ("raise", "skip")


class FinalStatus(str, Enum):
    CONFORME = "conforme"
    A_VERIFIER = "à_vérifier"
    CRITIQUE = "critique"
    EN_ATTENTE = "en_attente"


# (lower bound inclusive, status), highest band first
STATUS_BANDS: tuple[tuple[float, FinalStatus], ...] = (
    (90.0, FinalStatus.CONFORME),
    (75.0, FinalStatus.A_VERIFIER),
    (50.0, FinalStatus.CRITIQUE),
)


@dataclass(frozen=True)
class Response:
    value: Any = None
    note: Optional[str] = None


@dataclass(frozen=True)
class ItemOutcome:
    item_id: str
    item_type: str
    answered: bool
    passed: Optional[bool]  # None when unanswered


@dataclass(frozen=True)
class ScoreResult:
    total_items: int
    completed_items: int
    passed_items: int
    failed_items: int
    score: float
    final_status: FinalStatus
    next_check_date: date
    item_outcomes: tuple[ItemOutcome, ...] = ()
    skipped_item_ids: tuple[str, ...] = ()

    @property
    def failed_item_ids(self) -> tuple[str, ...]:
        return tuple(o.item_id for o in self.item_outcomes if o.answered and not o.passed)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_items": self.total_items,
            "completed_items": self.completed_items,
            "passed_items": self.passed_items,
            "failed_items": self.failed_items,
            "score": self.score,
            "final_status": self.final_status.value,
            "next_check_date": self.next_check_date.isoformat(),
            "failed_item_ids": list(self.failed_item_ids),
            "skipped_item_ids": list(self.skipped_item_ids),
        }


ResponseLike = Union[Response, Mapping[str, Any]]


def as_response(raw: ResponseLike) -> Response:
    if isinstance(raw, Response):
        return raw
    if isinstance(raw, Mapping):
        return Response(value=raw.get("value"), note=raw.get("note"))
    # pydantic models and other attribute carriers
    return Response(value=getattr(raw, "value", None), note=getattr(raw, "note", None))


def round_half_up(value: Union[Decimal, float, int], places: int = 1) -> float:
    q = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return False


def evaluate_item(item: Item, response: Optional[ResponseLike]) -> ItemOutcome:
    if response is None:
        return ItemOutcome(item_id=item.id, item_type=item.type, answered=False, passed=None)

    value = as_response(response).value

    if isinstance(item, BooleanItem):
        passed = value is True
    elif isinstance(item, NumberItem):
        if not _is_number(value):
            raise InvalidResponseError(item_id=item.id, item_type=item.type, value=value, reason="expected a finite number")
        passed = item.range.contains(value) if item.range is not None else True
    elif isinstance(item, SelectItem):
        opt = item.find_option(value)
        passed = opt is not None and opt.acceptable is not False
    elif isinstance(item, (TextareaItem, FileItem)):
        passed = True
    else:
        raise TypeError(f"Unhandled item variant: {type(item).__name__}")

    return ItemOutcome(item_id=item.id, item_type=item.type, answered=True, passed=bool(passed))


def classify(score: float) -> FinalStatus:
    for lower, status in STATUS_BANDS:
        if score >= lower:
            return status
    return FinalStatus.EN_ATTENTE


def score_checklist(
    template: ChecklistTemplate,
    responses: Mapping[str, ResponseLike],
    *,
    reference: Optional[Union[date, datetime]] = None,
    invalid_responses: str = "raise",
) -> ScoreResult:
    """
    Pure scoring: evaluates every item of the template against the response map,
    aggregates into a one-decimal percentage, classifies it and schedules the next
    inspection from the template frequency.

    invalid_responses:
      - "raise": the first mistyped answer aborts with InvalidResponseError
      - "skip":  mistyped answers count as unanswered and are listed in skipped_item_ids
    """
    if invalid_responses not in INVALID_RESPONSE_POLICIES:
        raise ValueError(f"invalid_responses must be one of {INVALID_RESPONSE_POLICIES}, got {invalid_responses!r}")

    outcomes: list[ItemOutcome] = []
    skipped: list[str] = []

    for item in template.iter_items():
        try:
            outcome = evaluate_item(item, responses.get(item.id))
        except InvalidResponseError:
            if invalid_responses == "raise":
                raise
            skipped.append(item.id)
            outcome = ItemOutcome(item_id=item.id, item_type=item.type, answered=False, passed=None)
        outcomes.append(outcome)

    completed = sum(1 for o in outcomes if o.answered)
    passed = sum(1 for o in outcomes if o.answered and o.passed)
    failed = completed - passed

    if completed == 0:
        pct = 0.0
    else:
        pct = round_half_up(Decimal(passed * 100) / Decimal(completed), 1)

    return ScoreResult(
        total_items=len(outcomes),
        completed_items=completed,
        passed_items=passed,
        failed_items=failed,
        score=pct,
        final_status=classify(pct),
        next_check_date=next_due_date(template.frequency, reference),
        item_outcomes=tuple(outcomes),
        skipped_item_ids=tuple(skipped),
    )
