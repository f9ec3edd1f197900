from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from survey_portal.app.errors import ConfigError


BACKENDS = ("supabase", "sqlite")
LANGUAGES = ("ml", "en")


def _env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(key)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _env_float(key: str, default: float) -> float:
    v = _env_str(key)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    v = _env_str(key)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    # Backend selection
    backend: str
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    db_path: str

    # Logging
    log_level: str
    log_json: bool

    # Public form
    default_language: str
    confirmation_seconds: float

    # Seed admin for the local SQLite backend
    local_admin_email: Optional[str] = None
    local_admin_password: Optional[str] = None

    @staticmethod
    def from_env(dotenv: bool = True) -> "Settings":
        # Read configuration from environment variables (and .env when present).
        if dotenv:
            load_dotenv()

        backend = (_env_str("APP_BACKEND", "supabase") or "supabase").lower()
        if backend not in BACKENDS:
            raise ConfigError(f"Unknown APP_BACKEND {backend!r}; expected one of {BACKENDS}")

        supabase_url = _env_str("SUPABASE_URL")
        supabase_key = _env_str("SUPABASE_KEY")
        if backend == "supabase" and not (supabase_url and supabase_key):
            raise ConfigError("SUPABASE_URL and SUPABASE_KEY must be set when APP_BACKEND=supabase")

        db_path = _env_str("APP_DB_PATH", "data/survey.db") or "data/survey.db"
        if backend == "sqlite":
            # Create the parent directory only; the backend creates the file.
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        language = (_env_str("APP_LANGUAGE", "ml") or "ml").lower()
        if language not in LANGUAGES:
            language = "ml"

        return Settings(
            backend=backend,
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            db_path=db_path,

            log_level=_env_str("APP_LOG_LEVEL", "INFO") or "INFO",
            log_json=_env_bool("APP_LOG_JSON", True),

            default_language=language,
            confirmation_seconds=max(0.0, _env_float("APP_CONFIRMATION_SECONDS", 5.0)),

            local_admin_email=_env_str("APP_LOCAL_ADMIN_EMAIL"),
            local_admin_password=_env_str("APP_LOCAL_ADMIN_PASSWORD"),
        )
