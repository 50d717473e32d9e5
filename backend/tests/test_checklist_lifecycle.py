# backend/tests/test_checklist_lifecycle.py
from __future__ import annotations

import pytest

from healthcheck.domain.checklists.lifecycle import ChecklistStatus, can_transition, requires_scoring, transition
from healthcheck.errors import InvalidTransitionError


def test_happy_path_through_every_state():
    s = ChecklistStatus.DRAFT
    for nxt in ("pending", "in_progress", "completed"):
        s = transition(s, nxt)
    assert s == ChecklistStatus.COMPLETED


def test_pending_can_complete_directly():
    assert transition("pending", "completed") == ChecklistStatus.COMPLETED


@pytest.mark.parametrize("terminal", ["completed", "cancelled"])
@pytest.mark.parametrize("target", ["draft", "pending", "in_progress", "completed", "cancelled"])
def test_terminal_states_never_move(terminal, target):
    assert can_transition(terminal, target) is False
    with pytest.raises(InvalidTransitionError):
        transition(terminal, target)


def test_no_going_backwards():
    with pytest.raises(InvalidTransitionError) as exc:
        transition("in_progress", "pending")
    assert exc.value.current == "in_progress"
    assert exc.value.target == "pending"


def test_same_state_saves_are_allowed_while_open():
    assert transition("in_progress", "in_progress") == ChecklistStatus.IN_PROGRESS


def test_unknown_status_is_rejected():
    with pytest.raises(InvalidTransitionError):
        transition("pending", "archived")


def test_only_entering_completed_requires_scoring():
    assert requires_scoring("in_progress", "completed") is True
    assert requires_scoring("pending", "in_progress") is False
    assert requires_scoring("in_progress", "cancelled") is False
