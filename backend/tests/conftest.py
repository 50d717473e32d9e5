# backend/tests/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from healthcheck.db import init_db
from healthcheck.domain.checklists.template import template_from_payload


FOUR_ITEM_TEMPLATE = {
    "id": "TPL-TEST-4",
    "equipmentType": "compresseur",
    "title": "Four item test template",
    "version": "1.0",
    "frequency": "weekly",
    "sections": [
        {
            "name": "Safety",
            "items": [
                {"id": "guard", "type": "boolean", "check": "Guard in place"},
                {"id": "pressure", "type": "number", "check": "Pressure", "range": {"min": 10, "max": 20}},
            ],
        },
        {
            "name": "Condition",
            "items": [
                {
                    "id": "leak",
                    "type": "select",
                    "check": "Leaks",
                    "options": [
                        {"value": "none", "label": "None"},
                        {"value": "major", "label": "Major", "acceptable": False},
                    ],
                },
                {"id": "notes", "type": "textarea", "check": "Notes"},
            ],
        },
    ],
}


@pytest.fixture
def four_item_payload() -> dict:
    return {**FOUR_ITEM_TEMPLATE}


@pytest.fixture
def four_item_template():
    return template_from_payload(FOUR_ITEM_TEMPLATE)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
