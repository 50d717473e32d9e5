# backend/healthcheck/domain/checklists/lifecycle.py
from __future__ import annotations

from enum import Enum
from typing import Union

from ...errors import InvalidTransitionError


class ChecklistStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL = frozenset({ChecklistStatus.COMPLETED, ChecklistStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[ChecklistStatus, frozenset[ChecklistStatus]] = {
    ChecklistStatus.DRAFT: frozenset({ChecklistStatus.PENDING, ChecklistStatus.CANCELLED}),
    ChecklistStatus.PENDING: frozenset(
        {ChecklistStatus.IN_PROGRESS, ChecklistStatus.COMPLETED, ChecklistStatus.CANCELLED}
    ),
    ChecklistStatus.IN_PROGRESS: frozenset({ChecklistStatus.COMPLETED, ChecklistStatus.CANCELLED}),
    ChecklistStatus.COMPLETED: frozenset(),
    ChecklistStatus.CANCELLED: frozenset(),
}


def parse_status(raw: Union[str, ChecklistStatus]) -> ChecklistStatus:
    if isinstance(raw, ChecklistStatus):
        return raw
    try:
        return ChecklistStatus((raw or "").strip().lower())
    except ValueError:
        raise InvalidTransitionError(str(raw), str(raw), message=f"Unknown checklist status {raw!r}") from None


def can_transition(current: Union[str, ChecklistStatus], target: Union[str, ChecklistStatus]) -> bool:
    cur = parse_status(current)
    tgt = parse_status(target)
    if cur == tgt:
        # saving answers without moving is fine until the checklist is closed
        return cur not in TERMINAL
    return tgt in ALLOWED_TRANSITIONS[cur]


def transition(current: Union[str, ChecklistStatus], target: Union[str, ChecklistStatus]) -> ChecklistStatus:
    cur = parse_status(current)
    tgt = parse_status(target)
    if not can_transition(cur, tgt):
        raise InvalidTransitionError(cur.value, tgt.value)
    return tgt


def requires_scoring(current: Union[str, ChecklistStatus], target: Union[str, ChecklistStatus]) -> bool:
    """Only entering `completed` runs the scoring engine."""
    return parse_status(target) == ChecklistStatus.COMPLETED and parse_status(current) != ChecklistStatus.COMPLETED
