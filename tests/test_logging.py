"""
Tests for structured logging and translations
"""
import json
import logging
import sys
from pathlib import Path

from survey_portal.app.i18n import MESSAGES, translate
from survey_portal.app.logging import JsonFormatter, SessionIdFilter, clear_session_id, set_session_id


def _record(msg="Survey submitted", **extra):
    record = logging.LogRecord("survey_portal.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_session_id_and_extras(self):
        set_session_id("abc123")
        try:
            record = _record(response_id="s1", item_count=2, when=object())
            SessionIdFilter().filter(record)
            payload = json.loads(JsonFormatter().format(record))
        finally:
            clear_session_id()

        assert payload["level"] == "INFO"
        assert payload["logger"] == "survey_portal.test"
        assert payload["msg"] == "Survey submitted"
        assert payload["session_id"] == "abc123"
        assert payload["response_id"] == "s1"
        assert payload["item_count"] == 2
        assert isinstance(payload["when"], str)
        assert payload["ts"].endswith("Z")

    def test_no_session(self):
        record = _record()
        SessionIdFilter().filter(record)

        assert json.loads(JsonFormatter().format(record))["session_id"] is None

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("t", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in payload["exc_info"]


class TestTranslate:
    def test_malayalam_default_strings(self):
        assert translate("notice.submitted", "ml") == "സർവേ വിജയകരമായി സമർപ്പിച്ചു!"

    def test_falls_back_to_english(self):
        assert translate("admin.logout", "ml") == "Logout"

    def test_unknown_key_returns_key(self):
        assert translate("no.such.key", "en") == "no.such.key"

    def test_every_form_string_is_used(self):
        root = Path(__file__).resolve().parents[1] / "survey_portal"
        source = "\n".join(
            (root / rel).read_text(encoding="utf-8") for rel in ("app/ui.py", "workflows/submission.py")
        )

        unused = []
        for key in MESSAGES["en"]:
            if not key.startswith(("form.", "error.", "notice.", "thanks.")):
                continue
            # Keys built with an f-string, e.g. f"form.role_{role}".
            prefix = key.rsplit("_", 1)[0] + "_{"
            if f'"{key}"' not in source and f"'{key}'" not in source and prefix not in source:
                unused.append(key)

        assert unused == []

    def test_form_strings_exist_in_both_languages(self):
        ml_keys = {k for k in MESSAGES["ml"] if k.startswith(("form.", "error.", "notice.", "thanks."))}
        en_keys = {k for k in MESSAGES["en"] if k.startswith(("form.", "error.", "notice.", "thanks."))}

        assert ml_keys == en_keys
