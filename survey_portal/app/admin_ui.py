from datetime import datetime
from typing import Optional

import pandas as pd
import streamlit as st

from survey_portal.app.i18n import translate
from survey_portal.app.navigation import go_to
from survey_portal.app.session import (
    flush_notices,
    forget_admin_views,
    get_backend,
    get_repository,
    queue_notice,
    show_notice,
)
from survey_portal.db.models import Location, ResponseHeader
from survey_portal.workflows.admin_gate import AdminGate
from survey_portal.workflows.aggregator import DemandAggregator
from survey_portal.workflows.browser import ResponseBrowser
from survey_portal.workflows.locations import LocationForm, LocationManager


def _t(key: str) -> str:
    return translate(key, "en")


def _workflows():
    # Built and loaded once per dashboard visit; mutations reload their own view.
    if "location_manager" not in st.session_state:
        repo = get_repository()
        manager, browser, aggregator = LocationManager(repo), ResponseBrowser(repo), DemandAggregator(repo)
        with st.spinner(_t("admin.loading")):
            queue_notice(manager.refresh())
            queue_notice(browser.load())
            queue_notice(aggregator.load())
        st.session_state.location_manager = manager
        st.session_state.response_browser = browser
        st.session_state.demand_aggregator = aggregator
    return (
        st.session_state.location_manager,
        st.session_state.response_browser,
        st.session_state.demand_aggregator,
    )


# --- Panchayaths ---
@st.dialog("Panchayath")
def _location_dialog(manager: LocationManager, location: Optional[Location] = None) -> None:
    form = LocationForm.from_location(location) if location else LocationForm()
    st.subheader(_t("locations.edit") if location else _t("locations.add"), anchor=False)

    name = st.text_input(_t("locations.name"), value=form.name)
    name_ml = st.text_input(_t("locations.name_ml"), value=form.name_ml)
    ward_count = st.number_input(_t("locations.ward_count"), min_value=1, step=1, value=int(form.ward_count or 1))

    label = _t("locations.save_update") if location else _t("locations.save_add")
    if st.button(label, type="primary", use_container_width=True):
        outcome = manager.save(
            LocationForm(name=name, name_ml=name_ml, ward_count=ward_count),
            location_id=location.location_id if location else None,
        )
        for message in outcome.field_errors.values():
            st.error(message)
        if outcome.ok:
            queue_notice(outcome.notice)
            st.rerun()
        show_notice(outcome.notice)


@st.dialog("Delete panchayath")
def _confirm_location_delete(manager: LocationManager, location: Location) -> None:
    st.write(_t("locations.confirm_delete"))
    st.write(f"**{location.name}**")
    confirm, cancel = st.columns(2)
    if confirm.button(_t("common.confirm"), type="primary", use_container_width=True):
        queue_notice(manager.delete(location.location_id, confirmed=True))
        st.rerun()
    if cancel.button(_t("common.cancel"), use_container_width=True):
        st.rerun()


def _render_locations(manager: LocationManager) -> None:
    head, add = st.columns([3, 1])
    head.subheader(_t("locations.title"), anchor=False)
    if add.button("➕ " + _t("locations.add"), use_container_width=True):
        _location_dialog(manager)

    cols = st.columns([3, 3, 1, 1, 1])
    for col, title in zip(cols, [_t("locations.name"), _t("locations.name_ml"), _t("locations.wards")]):
        col.markdown(f"**{title}**")

    for loc in manager.locations:
        name_col, ml_col, wards_col, edit_col, delete_col = st.columns([3, 3, 1, 1, 1])
        name_col.write(loc.name)
        ml_col.write(loc.name_ml or "-")
        wards_col.write(str(loc.ward_count))
        if edit_col.button("✏️", key=f"edit_{loc.location_id}"):
            _location_dialog(manager, loc)
        if delete_col.button("🗑️", key=f"delete_{loc.location_id}"):
            _confirm_location_delete(manager, loc)


# --- Surveys ---
def _submitted_on(header: ResponseHeader) -> str:
    try:
        return datetime.fromisoformat(header.created_at.replace("Z", "+00:00")).astimezone().strftime("%d/%m/%Y")
    except ValueError:
        return header.created_at


@st.dialog("Delete survey")
def _confirm_response_delete(browser: ResponseBrowser, header: ResponseHeader) -> None:
    st.write(_t("surveys.confirm_delete"))
    st.write(f"**{header.name}** ({header.mobile})")
    confirm, cancel = st.columns(2)
    if confirm.button(_t("common.confirm"), type="primary", use_container_width=True):
        queue_notice(browser.delete(header.response_id, confirmed=True))
        st.rerun()
    if cancel.button(_t("common.cancel"), use_container_width=True):
        st.rerun()


def _render_surveys(browser: ResponseBrowser) -> None:
    snapshot = browser.snapshot
    total, unique = st.columns(2)
    total.metric(_t("surveys.total"), snapshot.summary.total_responses, border=True)
    unique.metric(_t("surveys.unique_items"), snapshot.summary.unique_items, border=True)

    st.subheader(_t("surveys.title"), anchor=False)
    for header in snapshot.headers:
        with st.container(border=True):
            info, action = st.columns([8, 1])
            with info:
                st.markdown(f"**{header.name}** &nbsp; `{header.role}`")
                st.caption(
                    f"{_t('surveys.mobile')}: {header.mobile}  \n"
                    f"{_t('surveys.panchayath')}: {header.panchayath} | {_t('surveys.ward')}: {header.ward}  \n"
                    f"{_t('surveys.submitted')}: {_submitted_on(header)}"
                )
            if action.button("🗑️", key=f"delete_survey_{header.response_id}"):
                _confirm_response_delete(browser, header)

            items = snapshot.items_for(header.response_id)
            st.markdown(f"*{_t('surveys.requested')}*")
            if items:
                st.markdown(" ".join(
                    f"`{'📦' if item.category == 'product' else '🔧'} {item.item_name}`" for item in items
                ))


# --- Most demanded ---
def _render_demand_column(table: pd.DataFrame, title: str, empty: str) -> None:
    st.subheader(title, anchor=False)
    if table.empty:
        st.caption(empty)
        return
    st.dataframe(
        table,
        hide_index=True,
        use_container_width=True,
        column_config={
            "rank": st.column_config.NumberColumn("#", width="small"),
            "item": st.column_config.TextColumn("Item"),
            "count": st.column_config.NumberColumn("Count", width="small"),
        },
    )


def _render_demand(aggregator: DemandAggregator) -> None:
    products, services = st.columns(2)
    with products:
        _render_demand_column(
            aggregator.report.to_dataframe("product"), "📦 " + _t("demand.products"), _t("demand.no_products")
        )
    with services:
        _render_demand_column(
            aggregator.report.to_dataframe("service"), "🔧 " + _t("demand.services"), _t("demand.no_services")
        )


def render() -> None:
    gate = AdminGate(get_backend(), get_repository())
    with st.spinner(_t("admin.loading")):
        decision = gate.check()
    if decision.redirect:
        forget_admin_views()
        queue_notice(decision.notice)
        go_to("auth")
        return

    manager, browser, aggregator = _workflows()
    flush_notices()

    title, refresh, logout = st.columns([3, 1, 1])
    title.title("📊 " + _t("admin.title"), anchor=False)
    if refresh.button("🔄", help="Reload all tabs", use_container_width=True):
        forget_admin_views()
        st.rerun()
    if logout.button(_t("admin.logout"), use_container_width=True):
        queue_notice(gate.logout())
        forget_admin_views()
        go_to("auth")
        return

    tab_locations, tab_surveys, tab_demand = st.tabs(
        [_t("admin.tab_locations"), _t("admin.tab_surveys"), _t("admin.tab_demand")]
    )
    with tab_locations:
        _render_locations(manager)
    with tab_surveys:
        _render_surveys(browser)
    with tab_demand:
        _render_demand(aggregator)
