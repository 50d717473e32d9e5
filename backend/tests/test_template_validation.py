# backend/tests/test_template_validation.py
from __future__ import annotations

import copy

import pytest

from healthcheck.domain.checklists.template import (
    BooleanItem,
    ChecklistTemplate,
    NumberItem,
    SelectItem,
    Section,
    template_from_payload,
    template_to_payload,
)
from healthcheck.errors import InvalidTemplateError


def test_camel_case_payload_builds_tagged_items(four_item_payload):
    tpl = template_from_payload(four_item_payload)

    assert tpl.equipment_type == "compresseur"
    assert tpl.total_items == 4
    kinds = [type(i) for i in tpl.iter_items()]
    assert kinds[:3] == [BooleanItem, NumberItem, SelectItem]
    assert tpl.sections[1].items[0].options[1].acceptable is False
    # acceptable defaults to true when omitted
    assert tpl.sections[1].items[0].options[0].acceptable is True


def test_payload_round_trips_through_storage_shape(four_item_payload):
    tpl = template_from_payload(four_item_payload)
    assert template_from_payload(template_to_payload(tpl)) == tpl


def test_duplicate_item_ids_are_rejected(four_item_payload):
    bad = copy.deepcopy(four_item_payload)
    bad["sections"][1]["items"][1]["id"] = "guard"

    with pytest.raises(InvalidTemplateError) as exc:
        template_from_payload(bad)
    assert exc.value.item_id == "guard"
    assert exc.value.template_id == "TPL-TEST-4"


def test_empty_sections_and_empty_items_are_rejected(four_item_payload):
    no_sections = {**four_item_payload, "sections": []}
    with pytest.raises(InvalidTemplateError):
        template_from_payload(no_sections)

    empty_section = copy.deepcopy(four_item_payload)
    empty_section["sections"][0]["items"] = []
    with pytest.raises(InvalidTemplateError):
        template_from_payload(empty_section)


def test_unknown_item_type_is_rejected(four_item_payload):
    bad = copy.deepcopy(four_item_payload)
    bad["sections"][0]["items"][0]["type"] = "slider"
    with pytest.raises(InvalidTemplateError):
        template_from_payload(bad)


def test_select_without_options_and_inverted_range_are_rejected(four_item_payload):
    no_options = copy.deepcopy(four_item_payload)
    no_options["sections"][1]["items"][0]["options"] = []
    with pytest.raises(InvalidTemplateError):
        template_from_payload(no_options)

    inverted = copy.deepcopy(four_item_payload)
    inverted["sections"][0]["items"][1]["range"] = {"min": 20, "max": 10}
    with pytest.raises(InvalidTemplateError):
        template_from_payload(inverted)


def test_schema_errors_surface_as_invalid_template():
    with pytest.raises(InvalidTemplateError):
        template_from_payload({"id": "TPL-X", "title": "missing equipment type and sections"})


def test_direct_construction_is_validated_too():
    with pytest.raises(InvalidTemplateError):
        ChecklistTemplate(
            id="T",
            equipment_type="pompe",
            title="dup",
            version="1",
            frequency="daily",
            sections=(Section(name="a", items=(BooleanItem(id="x"),)), Section(name="b", items=(BooleanItem(id="x"),))),
        )
