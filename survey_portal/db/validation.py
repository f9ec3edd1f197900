from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

import jsonschema

from survey_portal.app.errors import RecordShapeError


_ID = {"type": ["string", "integer"]}

# Row shapes as returned by the store, keyed by table name.
ROW_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "panchayaths": {
        "type": "object",
        "properties": {
            "id": _ID,
            "name": {"type": "string"},
            "name_ml": {"type": ["string", "null"]},
            "ward_count": {"type": "integer", "minimum": 1},
        },
        "required": ["id", "name", "ward_count"],
    },
    "surveys": {
        "type": "object",
        "properties": {
            "id": _ID,
            "name": {"type": "string"},
            "mobile": {"type": "string"},
            "panchayath": {"type": "string"},
            "ward": {"type": "string"},
            "user_type": {"enum": ["respondent", "agent"]},
            "created_at": {"type": "string"},
        },
        "required": ["id", "name", "mobile", "panchayath", "ward", "user_type", "created_at"],
    },
    "survey_items": {
        "type": "object",
        "properties": {
            "id": _ID,
            "survey_id": _ID,
            "item_name": {"type": "string"},
            "item_type": {"enum": ["product", "service"]},
        },
        "required": ["id", "survey_id", "item_name", "item_type"],
    },
    "user_roles": {
        "type": "object",
        "properties": {
            "user_id": _ID,
            "role": {"type": "string"},
        },
        "required": ["role"],
    },
}


def _schema_for(table: str, columns: Optional[Sequence[str]]) -> Dict[str, Any]:
    try:
        schema = ROW_SCHEMAS[table]
    except KeyError:
        raise RecordShapeError(f"No row schema registered for table {table!r}") from None
    if columns is None:
        return schema
    # Partial selects only require the columns that were asked for.
    wanted = set(columns)
    return {**schema, "required": [c for c in schema["required"] if c in wanted]}


def validate_row(table: str, row: Mapping[str, Any], columns: Optional[Sequence[str]] = None) -> None:
    if not isinstance(row, Mapping):
        raise RecordShapeError(f"{table}: expected a mapping, got {type(row).__name__}")
    try:
        jsonschema.validate(instance=dict(row), schema=_schema_for(table, columns))
    except jsonschema.ValidationError as e:
        field = ".".join(str(p) for p in e.absolute_path) or "<row>"
        raise RecordShapeError(f"{table}.{field}: {e.message}") from e
