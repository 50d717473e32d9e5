# backend/tests/test_checklist_completion_flow.py
from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from healthcheck.models import Alert, Checklist, Equipment
from healthcheck.services.checklists import (
    CompletionOutcome,
    cancel_checklist,
    create_checklist,
    list_checklists,
    update_checklist,
)
from healthcheck.services.templates import import_templates, list_templates, load_template
from healthcheck.errors import (
    InvalidResponseError,
    InvalidTransitionError,
    NotFoundError,
    TemplateMismatchError,
)

NOW = datetime(2024, 1, 31, 14, 0)


def _setup(db, payload, *, category="compresseur", health_score=100):
    out = import_templates(db, [payload])
    assert out["imported"] == [payload["id"]]
    db.add(Equipment(id="EQ-1", name="Compresseur A1", type="vis", category=category, health_score=health_score))
    db.commit()


def _passing():
    return {"guard": {"value": True}, "pressure": {"value": 15}, "leak": {"value": "none"}, "notes": {"value": "ok"}}


def test_create_checklist_counts_template_items(db_session, four_item_payload):
    _setup(db_session, four_item_payload)

    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4", scheduled_date=date(2024, 1, 30))

    assert c.status == "pending"
    assert c.total_items == 4
    assert c.responses_json == "{}"


def test_template_must_match_equipment_category(db_session, four_item_payload):
    _setup(db_session, four_item_payload, category="pompe")

    with pytest.raises(TemplateMismatchError):
        create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    with pytest.raises(NotFoundError):
        create_checklist(db_session, equipment_id="EQ-404", template_id="TPL-TEST-4")


def test_responses_merge_across_saves(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    update_checklist(db_session, checklist_id=c.id, status="in_progress", responses={"guard": {"value": False}}, now=NOW)
    row = update_checklist(db_session, checklist_id=c.id, responses={"guard": {"value": True}, "notes": {"value": "x"}}, now=NOW)

    assert row.status == "in_progress"
    assert row.started_at == NOW
    stored = json.loads(row.responses_json)
    assert stored["guard"]["value"] is True
    assert set(stored) == {"guard", "notes"}


def test_completion_persists_result_and_updates_equipment(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    out = update_checklist(db_session, checklist_id=c.id, status="completed", responses=_passing(), now=NOW)

    assert isinstance(out, CompletionOutcome)
    assert out.result.score == 100.0
    assert out.alert is None

    row = db_session.get(Checklist, c.id)
    assert row.status == "completed"
    assert row.completed_at == NOW
    assert (row.completed_items, row.passed_items, row.failed_items) == (4, 4, 0)
    assert row.final_status == "conforme"
    assert row.next_check_date == date(2024, 2, 7)  # weekly

    eq = db_session.get(Equipment, "EQ-1")
    assert eq.last_maintenance_date == date(2024, 1, 31)
    assert eq.next_maintenance_date == date(2024, 2, 7)
    assert eq.health_score == 100


def test_low_score_raises_alert_and_drops_health(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    responses = {"guard": {"value": False}, "pressure": {"value": 25}, "leak": {"value": "none"}}
    out = update_checklist(db_session, checklist_id=c.id, status="completed", responses=responses, now=NOW)

    assert out.result.score == 33.3
    assert out.result.final_status.value == "en_attente"
    assert out.alert is not None

    alerts = db_session.scalars(select(Alert)).all()
    assert len(alerts) == 1
    assert alerts[0].alert_type == "health_score_low"
    assert alerts[0].checklist_id == c.id
    assert alerts[0].status == "active"

    eq = db_session.get(Equipment, "EQ-1")
    assert eq.health_score == 33
    assert eq.status == "critical"


def test_invalid_response_rejects_completion_without_writes(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    bad = {**_passing(), "pressure": {"value": "15 bar"}}
    with pytest.raises(InvalidResponseError) as exc:
        update_checklist(db_session, checklist_id=c.id, status="completed", responses=bad, now=NOW, invalid_responses="raise")
    assert exc.value.item_id == "pressure"

    db_session.expire_all()
    row = db_session.get(Checklist, c.id)
    assert row.status == "pending"
    assert row.score is None
    assert db_session.get(Equipment, "EQ-1").last_maintenance_date is None
    assert db_session.scalars(select(Alert)).all() == []


def test_skip_policy_completes_with_item_unanswered(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    c = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    bad = {**_passing(), "pressure": {"value": "15 bar"}}
    out = update_checklist(db_session, checklist_id=c.id, status="completed", responses=bad, now=NOW, invalid_responses="skip")

    assert out.result.skipped_item_ids == ("pressure",)
    assert out.checklist.completed_items == 3
    assert out.checklist.score == 100.0


def test_completed_and_cancelled_checklists_are_closed(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    done = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    update_checklist(db_session, checklist_id=done.id, status="completed", responses=_passing(), now=NOW)

    with pytest.raises(InvalidTransitionError):
        update_checklist(db_session, checklist_id=done.id, responses={"guard": {"value": False}})

    dropped = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    assert cancel_checklist(db_session, checklist_id=dropped.id).status == "cancelled"
    with pytest.raises(InvalidTransitionError):
        update_checklist(db_session, checklist_id=dropped.id, status="completed")


def test_health_score_averages_recent_completions(db_session, four_item_payload):
    _setup(db_session, four_item_payload)

    first = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    update_checklist(db_session, checklist_id=first.id, status="completed", responses=_passing(), now=NOW - timedelta(days=7))

    second = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    half = {**_passing(), "pressure": {"value": 25}, "leak": {"value": "major"}}
    out = update_checklist(db_session, checklist_id=second.id, status="completed", responses=half, now=NOW)

    assert out.result.score == 50.0
    assert out.alert is not None
    assert out.health_score == 75


def test_reimport_replaces_template_version(db_session, four_item_payload):
    _setup(db_session, four_item_payload)

    v2 = {**four_item_payload, "version": "2.0", "frequency": "daily"}
    import_templates(db_session, [v2])

    tpl = load_template(db_session, "TPL-TEST-4")
    assert tpl.version == "2.0"
    assert tpl.frequency == "daily"


def test_bad_template_is_reported_not_imported(db_session, four_item_payload):
    bad = {**four_item_payload, "id": "TPL-BAD", "sections": []}
    out = import_templates(db_session, [bad, four_item_payload])

    assert out["imported"] == ["TPL-TEST-4"]
    assert out["errors"][0]["template_id"] == "TPL-BAD"


def test_listing_filters_by_status_and_type(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    done = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    update_checklist(db_session, checklist_id=done.id, status="completed", responses=_passing(), now=NOW)
    create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")

    assert [c.id for c in list_checklists(db_session, status="completed")] == [done.id]
    assert [c.id for c in list_checklists(db_session, final_status="conforme", equipment_id="EQ-1")] == [done.id]
    assert len(list_checklists(db_session, equipment_id="EQ-1")) == 2

    assert [t.id for t in list_templates(db_session, equipment_type="compresseur", is_active=True)] == ["TPL-TEST-4"]
    assert list_templates(db_session, equipment_type="pompe") == []


def test_aware_instants_are_stored_as_naive_utc(db_session, four_item_payload):
    _setup(db_session, four_item_payload)
    paris = timezone(timedelta(hours=2))

    first = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    update_checklist(
        db_session, checklist_id=first.id, status="completed", responses=_passing(),
        now=datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
    )

    second = create_checklist(db_session, equipment_id="EQ-1", template_id="TPL-TEST-4")
    half = {**_passing(), "pressure": {"value": 25}, "leak": {"value": "major"}}
    out = update_checklist(
        db_session, checklist_id=second.id, status="completed", responses=half,
        now=datetime(2024, 1, 8, 12, 0, tzinfo=paris),
    )

    assert out.health_score == 75
    assert out.checklist.completed_at == datetime(2024, 1, 8, 10, 0)
    assert out.checklist.next_check_date == date(2024, 1, 15)
