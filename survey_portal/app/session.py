"""Per-browser-session wiring: settings, backend lifecycle, log context and toasts."""
from __future__ import annotations

from typing import List, Optional
from uuid import uuid4

import streamlit as st

from survey_portal.app.config import Settings
from survey_portal.app.logging import get_logger, set_session_id, setup_logging
from survey_portal.db.backend import Backend
from survey_portal.db.repository import SurveyRepository
from survey_portal.db.sqlite_backend import SQLiteBackend
from survey_portal.db.supabase_backend import SupabaseBackend
from survey_portal.workflows.outcome import Notice


logger = get_logger(__name__)

_NOTICE_ICONS = {"success": "✅", "error": "⚠️"}


@st.cache_resource
def get_settings() -> Settings:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_json)
    if settings.backend == "sqlite" and settings.local_admin_email and settings.local_admin_password:
        SQLiteBackend(settings.db_path).ensure_user(
            settings.local_admin_email, settings.local_admin_password, roles=("admin",)
        )
    logger.info("Settings loaded", extra={"backend": settings.backend})
    return settings


def build_backend(settings: Settings) -> Backend:
    if settings.backend == "sqlite":
        return SQLiteBackend(settings.db_path)
    return SupabaseBackend.connect(settings.supabase_url or "", settings.supabase_key or "")


def get_backend() -> Backend:
    # One client per browser session: the client carries that visitor's auth session.
    if "backend" not in st.session_state:
        st.session_state.backend = build_backend(get_settings())
    return st.session_state.backend


def get_repository() -> SurveyRepository:
    return SurveyRepository(get_backend())


def bind_log_session() -> None:
    if "log_session_id" not in st.session_state:
        st.session_state.log_session_id = uuid4().hex[:8]
    set_session_id(st.session_state.log_session_id)


def queue_notice(notice: Optional[Notice]) -> None:
    # Held until the next render so it survives st.rerun / st.switch_page.
    if notice is None:
        return
    pending: List[Notice] = st.session_state.setdefault("pending_notices", [])
    pending.append(notice)


def show_notice(notice: Optional[Notice]) -> None:
    if notice is None:
        return
    st.toast(notice.message, icon=_NOTICE_ICONS.get(notice.kind))


def flush_notices() -> None:
    pending: List[Notice] = st.session_state.get("pending_notices", [])
    while pending:
        show_notice(pending.pop(0))


# Workflow objects cached by the admin dashboard for the current visit.
ADMIN_VIEW_KEYS = ("location_manager", "response_browser", "demand_aggregator")


def forget_admin_views() -> None:
    for key in ADMIN_VIEW_KEYS:
        st.session_state.pop(key, None)
