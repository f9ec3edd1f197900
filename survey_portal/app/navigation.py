from __future__ import annotations

from typing import Callable, Dict

import streamlit as st
from streamlit.navigation.page import StreamlitPage


_PAGES: Dict[str, StreamlitPage] = {}


def register_pages(survey: Callable[[], None], auth: Callable[[], None], admin: Callable[[], None]) -> Dict[str, StreamlitPage]:
    _PAGES.update(
        survey=st.Page(survey, title="Survey", icon="📝", url_path="survey", default=True),
        auth=st.Page(auth, title="Admin Sign In", icon="🔐", url_path="auth"),
        admin=st.Page(admin, title="Admin Panel", icon="📊", url_path="admin"),
    )
    return dict(_PAGES)


def go_to(name: str) -> None:
    st.switch_page(_PAGES[name])
