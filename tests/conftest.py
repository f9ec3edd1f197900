"""
Shared fixtures: a throwaway SQLite backend per test and helpers to seed it.
"""
from typing import Dict, Sequence

import pytest

from survey_portal.db.repository import SurveyRepository
from survey_portal.db.sqlite_backend import SQLiteBackend
from survey_portal.workflows.submission import SurveyForm


@pytest.fixture
def backend(tmp_path) -> SQLiteBackend:
    """Fresh local backend backed by a temporary file"""
    return SQLiteBackend(str(tmp_path / "survey.db"))


@pytest.fixture
def repo(backend) -> SurveyRepository:
    return SurveyRepository(backend)


@pytest.fixture
def valid_form() -> SurveyForm:
    return SurveyForm(
        name="Anu",
        mobile="9876543210",
        panchayath="Kadakkal",
        ward="7",
        role="respondent",
        items=("Soap", "Rice"),
    )


def seed_response(
    backend: SQLiteBackend,
    name: str,
    created_at: str,
    items: Sequence[str] = (),
    role: str = "respondent",
) -> Dict[str, object]:
    """Insert one header with an explicit timestamp, plus its items"""
    header = backend.insert(
        "surveys",
        [{
            "name": name,
            "mobile": "9876543210",
            "panchayath": "Kadakkal",
            "ward": "3",
            "user_type": role,
            "created_at": created_at,
        }],
    )[0]
    category = "product" if role == "respondent" else "service"
    if items:
        backend.insert(
            "survey_items",
            [{"survey_id": header["id"], "item_name": n, "item_type": category} for n in items],
        )
    return header
