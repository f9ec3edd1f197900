from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import jsonschema

from survey_portal.app.errors import BackendError
from survey_portal.app.i18n import translate
from survey_portal.app.logging import get_logger
from survey_portal.db.models import Location
from survey_portal.db.repository import SurveyRepository

from .outcome import Notice, Outcome


logger = get_logger(__name__)

LOCATION_FORM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 100},
        "name_ml": {"type": ["string", "null"], "maxLength": 100},
        "ward_count": {"type": "integer", "minimum": 1},
    },
    "required": ["name", "ward_count"],
}

_VALIDATOR = jsonschema.Draft7Validator(LOCATION_FORM_SCHEMA)

_ERROR_KEYS = {
    ("name", "minLength"): "locations.name_required",
    ("name", "maxLength"): "locations.name_too_long",
    ("name_ml", "maxLength"): "locations.name_too_long",
}


def _en(key: str) -> str:
    return translate(key, "en")


@dataclass(frozen=True)
class LocationForm:
    name: str = ""
    name_ml: str = ""
    ward_count: Union[int, str, None] = 1

    @classmethod
    def from_location(cls, location: Location) -> "LocationForm":
        return cls(name=location.name, name_ml=location.name_ml or "", ward_count=location.ward_count)

    def as_payload(self) -> Dict[str, Any]:
        return {
            "name": (self.name or "").strip(),
            "name_ml": (self.name_ml or "").strip() or None,
            "ward_count": _as_int(self.ward_count),
        }


def _as_int(value: Union[int, float, str, None]) -> Any:
    # Integral input becomes int; anything else is left for the schema to reject.
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def validate_location(payload: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in _VALIDATOR.iter_errors(payload):
        field = str(err.absolute_path[0]) if err.absolute_path else "name"
        if field == "ward_count":
            errors.setdefault(field, _en("locations.ward_count_invalid"))
        else:
            errors.setdefault(field, _en(_ERROR_KEYS.get((field, err.validator), "locations.name_required")))
    return errors


class LocationManager:
    """
    Admin CRUD over panchayaths.

    ``locations`` always holds the result of the last successful read; every
    successful mutation is followed by a full re-read.
    """

    def __init__(self, repo: SurveyRepository):
        self.repo = repo
        self.locations: List[Location] = []

    def refresh(self) -> Optional[Notice]:
        try:
            self.locations = self.repo.list_locations()
        except BackendError:
            logger.exception("Failed to fetch panchayaths")
            return Notice.error(_en("locations.fetch_failed"))
        return None

    def save(self, form: LocationForm, location_id: Optional[str] = None) -> Outcome:
        # Creates when location_id is None, otherwise updates that row.
        payload = form.as_payload()
        errors = validate_location(payload)
        if errors:
            return Outcome.invalid(errors)

        try:
            if location_id:
                self.repo.update_location(location_id, **payload)
                message = _en("locations.updated")
            else:
                created = self.repo.create_location(**payload)
                location_id = created.location_id
                message = _en("locations.added")
        except BackendError:
            logger.exception("Panchayath save failed", extra={"location_id": location_id})
            return Outcome.failed(_en("locations.save_failed"))

        logger.info("Panchayath saved", extra={"location_id": location_id})
        return Outcome(ok=True, notice=self.refresh() or Notice.success(message), value=location_id)

    def delete(self, location_id: str, confirmed: bool = False) -> Optional[Notice]:
        if not confirmed:
            return None
        try:
            self.repo.delete_location(location_id)
        except BackendError:
            logger.exception("Panchayath delete failed", extra={"location_id": location_id})
            return Notice.error(_en("locations.delete_failed"))

        logger.info("Panchayath deleted", extra={"location_id": location_id})
        return self.refresh() or Notice.success(_en("locations.deleted"))
