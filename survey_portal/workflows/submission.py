# submission.py
"""Public survey form: normalisation, validation and the two-step write.

A valid submission writes one ``surveys`` header and then one ``survey_items``
row per requested item, with the category taken from the respondent's role.
The two writes are independent: when the item write fails the header stays
behind without items and nothing rolls it back.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import jsonschema

from survey_portal.app.errors import BackendError
from survey_portal.app.i18n import DEFAULT_LANGUAGE, translate
from survey_portal.app.logging import get_logger
from survey_portal.db.models import ROLES, Category, Location, category_for
from survey_portal.db.repository import SurveyRepository

from .outcome import Notice, Outcome


logger = get_logger(__name__)

MOBILE_PATTERN = r"^[6-9][0-9]{9}$"

SURVEY_FORM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 2, "maxLength": 100},
        "mobile": {"type": "string", "pattern": MOBILE_PATTERN},
        "panchayath": {"type": "string", "minLength": 2, "maxLength": 100},
        "ward": {"type": "string", "minLength": 1, "maxLength": 50},
        "role": {"enum": list(ROLES)},
        "items": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "minLength": 2, "maxLength": 200},
        },
    },
    "required": ["name", "mobile", "panchayath", "ward", "role", "items"],
}

_VALIDATOR = jsonschema.Draft7Validator(SURVEY_FORM_SCHEMA)

# (field, failing keyword) -> message key
_ERROR_KEYS: Dict[Tuple[str, str], str] = {
    ("name", "minLength"): "error.name_min",
    ("name", "maxLength"): "error.name_max",
    ("mobile", "pattern"): "error.mobile_invalid",
    ("panchayath", "minLength"): "error.panchayath_required",
    ("panchayath", "maxLength"): "error.panchayath_max",
    ("ward", "minLength"): "error.ward_required",
    ("ward", "maxLength"): "error.ward_max",
    ("role", "enum"): "error.role_required",
    ("items", "minItems"): "error.items_required",
    ("item", "minLength"): "error.item_min",
    ("item", "maxLength"): "error.item_max",
}

_FALLBACK_KEYS = {
    "name": "error.name_min",
    "mobile": "error.mobile_invalid",
    "panchayath": "error.panchayath_required",
    "ward": "error.ward_required",
    "role": "error.role_required",
    "items": "error.items_required",
    "item": "error.item_min",
}


@dataclass(frozen=True)
class SurveyForm:
    # Raw widget values, exactly as typed.
    name: str = ""
    mobile: str = ""
    panchayath: str = ""
    ward: str = ""
    role: Optional[str] = None
    items: Tuple[str, ...] = ("",)


@dataclass(frozen=True)
class SurveySubmission:
    name: str
    mobile: str
    panchayath: str
    ward: str
    role: Optional[str]
    items: Tuple[str, ...]
    # Position of each kept item in the raw list, for inline error placement.
    item_positions: Tuple[int, ...] = ()

    @classmethod
    def from_form(cls, form: SurveyForm) -> "SurveySubmission":
        kept = normalize_items(form.items)
        return cls(
            name=(form.name or "").strip(),
            mobile=(form.mobile or "").strip(),
            panchayath=(form.panchayath or "").strip(),
            ward=(form.ward or "").strip(),
            role=form.role,
            items=tuple(text for _, text in kept),
            item_positions=tuple(pos for pos, _ in kept),
        )

    @property
    def category(self) -> Category:
        return category_for(self.role or "")

    def as_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mobile": self.mobile,
            "panchayath": self.panchayath,
            "ward": self.ward,
            "role": self.role,
            "items": list(self.items),
        }


def normalize_items(raw_items: Sequence[str]) -> List[Tuple[int, str]]:
    # Drop blank entries, trim the rest, remember where each came from.
    return [(i, (text or "").strip()) for i, text in enumerate(raw_items) if (text or "").strip()]


def validate_submission(submission: SurveySubmission) -> Dict[str, str]:
    """
    Returns {field: message_key} for every invalid field; empty when valid.

    Item errors are keyed ``items.<n>`` where n is the item's position in the
    raw form list. Only the first error per field is kept.
    """
    errors: Dict[str, str] = {}
    for err in _VALIDATOR.iter_errors(submission.as_payload()):
        path = list(err.absolute_path)
        if not path:
            continue

        field = str(path[0])
        if field == "items" and len(path) > 1:
            idx = int(path[1])
            raw_pos = submission.item_positions[idx] if idx < len(submission.item_positions) else idx
            key = _ERROR_KEYS.get(("item", err.validator), _FALLBACK_KEYS["item"])
            errors.setdefault(f"items.{raw_pos}", key)
            continue

        errors.setdefault(field, _ERROR_KEYS.get((field, err.validator), _FALLBACK_KEYS.get(field, "error.name_min")))
    return errors


def localize_errors(errors: Dict[str, str], language: str) -> Dict[str, str]:
    return {field: translate(key, language) for field, key in errors.items()}


class SurveySubmitter:
    def __init__(self, repo: SurveyRepository, language: str = DEFAULT_LANGUAGE):
        self.repo = repo
        self.language = language

    def load_locations(self) -> Tuple[List[Location], Optional[Notice]]:
        # Populates the panchayath selector; an empty list when the read fails.
        try:
            return self.repo.list_locations(), None
        except BackendError:
            logger.exception("Error fetching panchayaths")
            return [], Notice.error(translate("notice.locations_failed", self.language))

    def submit(self, form: SurveyForm) -> Outcome:
        submission = SurveySubmission.from_form(form)
        errors = validate_submission(submission)
        if errors:
            return Outcome.invalid(localize_errors(errors, self.language))

        try:
            header = self.repo.insert_response(
                name=submission.name,
                mobile=submission.mobile,
                panchayath=submission.panchayath,
                ward=submission.ward,
                role=submission.role or "",
            )
            # No compensation if this second write fails: the header stays without items.
            item_count = self.repo.insert_line_items(header.response_id, submission.items, submission.category)
        except BackendError:
            logger.exception("Error submitting survey")
            return Outcome.failed(translate("notice.submit_failed", self.language))

        logger.info(
            "Survey submitted",
            extra={"response_id": header.response_id, "role": header.role, "item_count": item_count},
        )
        return Outcome.succeeded(translate("notice.submitted", self.language), value=header)


class ConfirmationWindow:
    """Post-submit thank-you state that closes itself after a fixed number of seconds."""

    def __init__(self, seconds: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._opened_at: Optional[float] = None

    def open(self) -> None:
        self._opened_at = self._clock()

    def close(self) -> None:
        self._opened_at = None

    def remaining(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.seconds - (self._clock() - self._opened_at))

    def is_open(self) -> bool:
        if self._opened_at is None:
            return False
        if self.remaining() <= 0.0:
            self.close()
            return False
        return True
