import streamlit as st

from survey_portal.app import admin_ui, auth_ui, ui
from survey_portal.app.navigation import register_pages
from survey_portal.app.session import bind_log_session, forget_admin_views, get_settings


def main() -> None:
    st.set_page_config(
        page_title="Panchayath Survey",
        page_icon="📝",
        layout="centered",
    )

    # Settings, logging and the local seed admin are set up once per process.
    get_settings()
    bind_log_session()

    pages = register_pages(survey=ui.render, auth=auth_ui.render, admin=admin_ui.render)
    page = st.navigation(list(pages.values()), position="hidden")
    if page.url_path != pages["admin"].url_path:
        # Leaving the dashboard drops its data; the next visit reads fresh.
        forget_admin_views()
    page.run()
