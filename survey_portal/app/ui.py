from typing import Dict, List

import streamlit as st

from survey_portal.app.i18n import LANGUAGE_LABELS, translate
from survey_portal.app.session import (
    flush_notices,
    get_repository,
    get_settings,
    queue_notice,
)
from survey_portal.db.models import ROLES, Location
from survey_portal.workflows.submission import ConfirmationWindow, SurveyForm, SurveySubmitter


# --- Session state helpers ---
def _init_state() -> None:
    settings = get_settings()
    if "language" not in st.session_state:
        st.session_state.language = settings.default_language
    if "confirmation" not in st.session_state:
        st.session_state.confirmation = ConfirmationWindow(settings.confirmation_seconds)
    if "form_nonce" not in st.session_state:
        st.session_state.form_nonce = 0
    if "item_slots" not in st.session_state:
        st.session_state.item_slots = [0]
    if "form_errors" not in st.session_state:
        st.session_state.form_errors = {}


def _key(field: str) -> str:
    # Bumping the nonce gives every widget a fresh key, which blanks the form.
    return f"survey_{field}_{st.session_state.form_nonce}"


def _reset_form() -> None:
    st.session_state.form_nonce += 1
    st.session_state.item_slots = [0]
    st.session_state.form_errors = {}
    st.session_state.pop("form_locations", None)


def _submitter() -> SurveySubmitter:
    return SurveySubmitter(get_repository(), language=st.session_state.language)


def _locations() -> List[Location]:
    # Read once per form mount.
    if "form_locations" not in st.session_state:
        locations, notice = _submitter().load_locations()
        queue_notice(notice)
        st.session_state.form_locations = locations
    return st.session_state.form_locations


# --- Callbacks ---
def _add_item() -> None:
    slots = st.session_state.item_slots
    slots.append(max(slots) + 1)


def _remove_item(slot: int) -> None:
    if len(st.session_state.item_slots) > 1:
        st.session_state.item_slots.remove(slot)
        st.session_state.pop(_key(f"item_{slot}"), None)


def _submit() -> None:
    slots = st.session_state.item_slots
    form = SurveyForm(
        name=st.session_state.get(_key("name"), ""),
        mobile=st.session_state.get(_key("mobile"), ""),
        panchayath=st.session_state.get(_key("panchayath")) or "",
        ward=st.session_state.get(_key("ward"), ""),
        role=st.session_state.get(_key("role")),
        items=tuple(st.session_state.get(_key(f"item_{s}"), "") for s in slots),
    )
    outcome = _submitter().submit(form)
    queue_notice(outcome.notice)

    if not outcome.ok:
        # Item errors come back keyed by list position; widgets are keyed by slot.
        errors: Dict[str, str] = {}
        for field, message in outcome.field_errors.items():
            if field.startswith("items."):
                pos = int(field.split(".", 1)[1])
                errors[f"item_{slots[pos]}"] = message
            else:
                errors[field] = message
        st.session_state.form_errors = errors
        return

    _reset_form()
    st.session_state.confirmation.open()


def _submit_another() -> None:
    st.session_state.confirmation.close()


# --- Rendering ---
def _field_error(field: str) -> None:
    message = st.session_state.form_errors.get(field)
    if message:
        st.caption(f":red[{message}]")


@st.fragment(run_every=1)
def _close_when_elapsed() -> None:
    # Ticks once a second; the whole page reruns when the window has closed.
    window: ConfirmationWindow = st.session_state.confirmation
    if not window.is_open():
        st.rerun()


def _render_thanks(lang: str) -> None:
    st.markdown("<div style='text-align:center;font-size:4rem'>✅</div>", unsafe_allow_html=True)
    st.header(translate("thanks.title", lang), anchor=False)
    st.write(translate("thanks.body", lang))
    st.button(translate("thanks.again", lang), on_click=_submit_another, use_container_width=True)
    _close_when_elapsed()


def _render_form(lang: str) -> None:
    locations = _locations()
    by_name = {loc.name: loc for loc in locations}

    st.text_input(
        translate("form.name", lang),
        placeholder=translate("form.name_placeholder", lang),
        key=_key("name"),
    )
    _field_error("name")

    st.text_input(
        translate("form.mobile", lang),
        placeholder=translate("form.mobile_placeholder", lang),
        max_chars=10,
        key=_key("mobile"),
    )
    _field_error("mobile")

    left, right = st.columns(2)
    with left:
        st.selectbox(
            translate("form.panchayath", lang),
            options=list(by_name),
            index=None,
            format_func=lambda name: by_name[name].display_name,
            placeholder=translate("form.panchayath_placeholder", lang),
            key=_key("panchayath"),
        )
        _field_error("panchayath")
    with right:
        st.text_input(
            translate("form.ward", lang),
            placeholder=translate("form.ward_placeholder", lang),
            key=_key("ward"),
        )
        _field_error("ward")

    st.radio(
        translate("form.role", lang),
        options=list(ROLES),
        index=None,
        format_func=lambda role: translate(f"form.role_{role}", lang),
        key=_key("role"),
    )
    _field_error("role")

    head, add = st.columns([4, 1])
    head.markdown(f"**{translate('form.items', lang)}**")
    add.button("➕ " + translate("form.add_item", lang), on_click=_add_item)

    slots = st.session_state.item_slots
    for index, slot in enumerate(slots, start=1):
        text_col, remove_col = st.columns([10, 1])
        with text_col:
            st.text_input(
                translate("form.item_placeholder", lang, index=index),
                placeholder=translate("form.item_placeholder", lang, index=index),
                label_visibility="collapsed",
                key=_key(f"item_{slot}"),
            )
            _field_error(f"item_{slot}")
        if len(slots) > 1:
            remove_col.button("✕", key=_key(f"remove_{slot}"), on_click=_remove_item, args=(slot,))
    _field_error("items")

    st.button(translate("form.submit", lang), type="primary", on_click=_submit, use_container_width=True)


def render() -> None:
    _init_state()
    flush_notices()

    st.radio(
        "Language",
        options=list(LANGUAGE_LABELS),
        format_func=LANGUAGE_LABELS.get,
        horizontal=True,
        label_visibility="collapsed",
        key="language",
    )
    lang = st.session_state.language
    st.title(translate("form.title", lang), anchor=False)

    window: ConfirmationWindow = st.session_state.confirmation
    if window.is_open():
        _render_thanks(lang)
        return

    _render_form(lang)
