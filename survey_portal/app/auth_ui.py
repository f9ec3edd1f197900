import streamlit as st

from survey_portal.app.i18n import translate
from survey_portal.app.navigation import go_to
from survey_portal.app.session import flush_notices, get_backend, get_repository, queue_notice, show_notice
from survey_portal.workflows.admin_gate import AdminGate


def render() -> None:
    flush_notices()
    st.title("🔐 " + translate("auth.title", "en"), anchor=False)

    with st.form("admin_sign_in"):
        email = st.text_input(translate("auth.email", "en"))
        password = st.text_input(translate("auth.password", "en"), type="password")
        submitted = st.form_submit_button(translate("auth.submit", "en"), type="primary", use_container_width=True)

    if submitted:
        outcome = AdminGate(get_backend(), get_repository()).sign_in(email, password)
        if outcome.ok:
            queue_notice(outcome.notice)
            go_to("admin")
        show_notice(outcome.notice)
