# backend/tests/test_item_evaluation.py
from __future__ import annotations

from decimal import Decimal

import pytest

from healthcheck.domain.checklists.scoring import evaluate_item
from healthcheck.domain.checklists.template import (
    BooleanItem,
    FileItem,
    NumberItem,
    NumberRange,
    SelectItem,
    SelectOption,
    TextareaItem,
)
from healthcheck.errors import InvalidResponseError


SELECT = SelectItem(
    id="sel",
    options=(
        SelectOption(value="ok"),
        SelectOption(value="worn", acceptable=True),
        SelectOption(value="broken", acceptable=False),
        SelectOption(value=1),
    ),
)


def test_absent_response_is_unanswered():
    o = evaluate_item(BooleanItem(id="b"), None)
    assert o.answered is False
    assert o.passed is None


def test_boolean_passes_only_on_strict_true():
    item = BooleanItem(id="b")
    assert evaluate_item(item, {"value": True}).passed is True
    assert evaluate_item(item, {"value": False}).passed is False
    assert evaluate_item(item, {"value": "true"}).passed is False
    assert evaluate_item(item, {"value": 1}).passed is False


def test_number_range_is_inclusive_on_both_ends():
    item = NumberItem(id="n", range=NumberRange(min=10, max=20))
    assert evaluate_item(item, {"value": 10}).passed is True
    assert evaluate_item(item, {"value": 20.0}).passed is True
    assert evaluate_item(item, {"value": 9.999}).passed is False
    assert evaluate_item(item, {"value": 20.001}).passed is False


def test_number_without_range_always_passes():
    item = NumberItem(id="n")
    assert evaluate_item(item, {"value": -1e9}).passed is True


def test_number_accepts_finite_decimals():
    item = NumberItem(id="n", range=NumberRange(min=10, max=20))
    assert evaluate_item(item, {"value": Decimal("12.5")}).passed is True
    assert evaluate_item(item, {"value": Decimal("25")}).passed is False


@pytest.mark.parametrize("value", ["15", None, True, float("nan"), Decimal("NaN"), Decimal("Infinity"), [15]])
def test_number_rejects_non_numeric_values(value):
    item = NumberItem(id="temp", range=NumberRange(min=10, max=20))
    with pytest.raises(InvalidResponseError) as exc:
        evaluate_item(item, {"value": value})

    assert exc.value.item_id == "temp"
    assert exc.value.item_type == "number"
    assert exc.value.to_dict()["item_id"] == "temp"


def test_select_matches_acceptable_options():
    assert evaluate_item(SELECT, {"value": "ok"}).passed is True
    assert evaluate_item(SELECT, {"value": "worn"}).passed is True
    assert evaluate_item(SELECT, {"value": "broken"}).passed is False


def test_select_unknown_value_fails_without_error():
    o = evaluate_item(SELECT, {"value": "legacy"})
    assert o.answered is True
    assert o.passed is False


def test_select_does_not_confuse_true_with_one():
    assert evaluate_item(SELECT, {"value": 1}).passed is True
    assert evaluate_item(SELECT, {"value": True}).passed is False


def test_textarea_and_file_pass_once_answered():
    assert evaluate_item(TextareaItem(id="t"), {"value": ""}).passed is True
    assert evaluate_item(FileItem(id="f"), {"value": None}).passed is True
