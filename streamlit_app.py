"""Streamlit frontend for the agent reporting service.

Thin UI layer: every button dispatches a named action; the action runs a
state transition in ``agent_reports`` and the page renders the result.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

import streamlit as st

from agent_reports.config import get_client_runtime_settings, get_reporting_api_settings
from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.downloads import DownloadedReport, ReportKind
from agent_reports.domain.query_state import MATCH_MODES, PAGE_SIZE_CHOICES, date_within, parse_iso_date
from agent_reports.domain.timeframe import TIMEFRAME_CUSTOM, TIMEFRAME_MODES
from agent_reports.errors import ReportClientError
from agent_reports.logging_utils import configure_logging
from agent_reports.presentation.bindings import ActionInFlightError, ActionRegistry
from agent_reports.presentation.messages import StatusMessage
from agent_reports.presentation.tables import (
    ACTIVITY_EMPTY_MESSAGE,
    COMPARE_EMPTY_MESSAGE,
    PREVIEW_PRIORITY_COLUMN,
    TableView,
    render_table,
)
from agent_reports.services import AgentDirectory, DashboardSession, ReportPipeline, upload_dataset
from agent_reports.services.report_pipeline_service import default_timeframe_inputs

st.set_page_config(page_title="Agent Reports", page_icon="📊", layout="wide")

PAGES = ("Upload", "Dashboard", "Agents", "Agent Compare")


@st.cache_resource(show_spinner=False)
def _load_client() -> ReportingAPIClient:
    configure_logging(get_client_runtime_settings().log_level)
    return ReportingAPIClient(settings=get_reporting_api_settings())


# ── Session state defaults ─────────────────────────────────────────────────
_STATE_DEFAULTS: dict = {
    "file_id": None,
    "page": "Upload",
    "dashboard": None,
    "agents": None,
    "pipeline": None,
    "compare_status": None,
    "pending_download": None,
}

for _key, _val in _STATE_DEFAULTS.items():
    if _key not in st.session_state:
        st.session_state[_key] = _val

_params_file_id = st.query_params.get("file_id")
if _params_file_id and _params_file_id != st.session_state.file_id:
    st.session_state.file_id = _params_file_id
    st.session_state.dashboard = None
    st.session_state.agents = None
    st.session_state.pipeline = None
    st.session_state.page = "Dashboard"


# ── Helper renderers ───────────────────────────────────────────────────────
def _show_status(status: Optional[StatusMessage]) -> None:
    if status is None or not status.text:
        return
    if status.tone == "good":
        st.success(status.text)
    elif status.tone == "bad":
        st.error(status.text)
    else:
        st.info(status.text)


def _show_table(view: TableView) -> None:
    if view.is_empty:
        st.info(view.empty_message)
        return
    st.dataframe(view.to_dataframe(), use_container_width=True, hide_index=True)


def _open_dashboard(agent: Optional[str] = None) -> None:
    st.query_params["file_id"] = st.session_state.file_id
    if agent:
        st.query_params["agent"] = agent
    st.session_state.dashboard = None
    st.session_state.page = "Dashboard"
    st.rerun()


def _require_file_id() -> Optional[str]:
    file_id = st.session_state.file_id
    if not file_id:
        st.info("Upload a dataset first.")
    return file_id


# ── Upload ─────────────────────────────────────────────────────────────────
def _render_upload(client: ReportingAPIClient) -> None:
    st.subheader("Upload data")
    uploaded = st.file_uploader(
        f"Spreadsheets (up to {client.max_upload_files})",
        type=["csv", "xlsx"],
        accept_multiple_files=True,
    )
    if st.button("Upload", type="primary"):
        files = [(item.name, item.getvalue()) for item in uploaded or []]
        with st.spinner("Uploading..."):
            outcome = upload_dataset(client, files)
        _show_status(outcome.status)
        if outcome.ok:
            st.session_state.file_id = outcome.file_id
            st.query_params.clear()
            _open_dashboard()


# ── Dashboard ──────────────────────────────────────────────────────────────
def _dashboard_session(client: ReportingAPIClient, file_id: str) -> DashboardSession:
    session: Optional[DashboardSession] = st.session_state.dashboard
    if session is not None:
        return session

    session = DashboardSession(client=client, file_id=file_id)
    try:
        session.load_metadata()
        st.session_state.date_bounds = session.load_date_bounds()
    except ReportClientError as exc:
        st.error(f"Could not load dataset metadata: {exc}")
    agent = st.query_params.get("agent")
    if agent:
        session.prefill_agent(agent)
    session.run_query()
    st.session_state.dashboard = session
    return session


def _render_dashboard(client: ReportingAPIClient) -> None:
    file_id = _require_file_id()
    if not file_id:
        return
    session = _dashboard_session(client, file_id)
    state = session.state
    meta = session.metadata
    columns = meta.columns if meta else []

    st.subheader("Dashboard")
    if session.chips:
        chip_cols = st.columns(min(len(session.chips), 6))
        for index, chip in enumerate(session.chips):
            if chip_cols[index % len(chip_cols)].button(chip, key=f"chip_{chip}"):
                _show_status(session.select_column(chip).status)

    with st.form("filters"):
        c1, c2, c3 = st.columns(3)
        column = c1.selectbox(
            "Column",
            options=columns or [state.column or ""],
            index=(columns.index(state.column) if state.column in columns else 0),
        )
        value = c2.text_input("Value", value=state.value)
        mode = c3.selectbox(
            "Match",
            options=MATCH_MODES,
            index=MATCH_MODES.index(state.mode) if state.mode in MATCH_MODES else 0,
        )
        bounds = st.session_state.get("date_bounds")
        lower = parse_iso_date(bounds.min_date) if bounds is not None else None
        upper = parse_iso_date(bounds.max_date) if bounds is not None else None
        d1, d2, d3 = st.columns(3)
        start_pick = d1.date_input(
            "Start date",
            value=date_within(parse_iso_date(state.start_date), lower, upper),
            min_value=lower,
            max_value=upper,
            format="YYYY-MM-DD",
        )
        end_pick = d2.date_input(
            "End date",
            value=date_within(parse_iso_date(state.end_date), lower, upper),
            min_value=lower,
            max_value=upper,
            format="YYYY-MM-DD",
        )
        page_size = d3.selectbox(
            "Rows per page",
            options=PAGE_SIZE_CHOICES,
            index=PAGE_SIZE_CHOICES.index(state.page_size) if state.page_size in PAGE_SIZE_CHOICES else 1,
        )
        if bounds is not None:
            st.caption(f"Data covers {bounds.min_date} to {bounds.max_date}.")
        apply_clicked = st.form_submit_button("Apply filters", type="primary")

    if apply_clicked:
        session.update_controls(
            column=column,
            value=value,
            mode=mode,
            start_date=start_pick.isoformat() if isinstance(start_pick, date) else "",
            end_date=end_pick.isoformat() if isinstance(end_pick, date) else "",
            page_size=page_size,
        )
        _show_status(session.apply_filters().status)

    b1, b2, b3, b4, b5 = st.columns(5)
    if b1.button("Reset"):
        _show_status(session.reset().status)
    view = session.view
    if b2.button("Previous", disabled=not (view and view.has_previous)):
        session.previous_page()
    if b3.button("Next", disabled=not (view and view.has_next)):
        session.next_page()
    b4.link_button("Export CSV", session.export_url("csv"))
    b5.link_button("Export XLSX", session.export_url("xlsx"))

    view = session.view
    if view is None:
        return
    st.caption(
        f"Rows: {view.count} | Date column: {view.date_col or '-'} | "
        f"Page {view.page} of {view.total_pages}"
    )
    _show_table(view.table)


# ── Agents ─────────────────────────────────────────────────────────────────
def _render_agents(client: ReportingAPIClient) -> None:
    file_id = _require_file_id()
    if not file_id:
        return
    directory: Optional[AgentDirectory] = st.session_state.agents
    if directory is None:
        directory = AgentDirectory(client=client, file_id=file_id)
        st.session_state.agents = directory
        st.session_state.agent_listing = directory.query()

    st.subheader("Agents")
    c1, c2, c3 = st.columns(3)
    search = c1.text_input("Search", value=directory.search)
    start_date = c2.text_input("Start date (YYYY-MM-DD)", value=directory.start_date, key="agents_start")
    end_date = c3.text_input("End date (YYYY-MM-DD)", value=directory.end_date, key="agents_end")
    a1, a2 = st.columns(2)
    if a1.button("Apply", type="primary"):
        st.session_state.agent_listing = directory.query(search=search, start_date=start_date, end_date=end_date)
    if a2.button("Reset"):
        st.session_state.agent_listing = directory.reset()

    listing = st.session_state.agent_listing
    if listing.status.tone == "bad":
        _show_status(listing.status)
        return
    st.caption(f"Agents: {listing.count} | Date column: {listing.date_col or '-'}")
    if not listing.agents:
        st.info(listing.empty_message)
    for agent in listing.agents:
        if st.button(agent, key=f"agent_{agent}"):
            _open_dashboard(agent=agent)


# ── Agent Compare ──────────────────────────────────────────────────────────
def _report_pipeline(client: ReportingAPIClient, file_id: str) -> ReportPipeline:
    pipeline: Optional[ReportPipeline] = st.session_state.pipeline
    if pipeline is None or pipeline.file_id != file_id:
        pipeline = ReportPipeline(client=client, file_id=file_id)
        st.session_state.pipeline = pipeline
    return pipeline


def _build_registry(pipeline: ReportPipeline) -> ActionRegistry:
    registry = ActionRegistry()
    registry.bind("compare", stage="compare", handler=pipeline.start_compare)
    registry.bind(
        "generate_activity",
        stage="activity",
        handler=pipeline.generate_activity,
        enabled_when=lambda: pipeline.state.can_generate_activity,
    )
    registry.bind(
        "download_compare",
        stage="download",
        handler=lambda: pipeline.download(ReportKind.COMPARE),
        enabled_when=lambda: pipeline.state.can_download(ReportKind.COMPARE),
    )
    registry.bind(
        "download_activity",
        stage="download",
        handler=lambda: pipeline.download(ReportKind.ACTIVITY),
        enabled_when=lambda: pipeline.state.can_download(ReportKind.ACTIVITY),
    )
    return registry


def _dispatch(registry: ActionRegistry, name: str, **kwargs: Any) -> None:
    try:
        outcome = registry.dispatch(name, **kwargs)
    except ActionInFlightError as exc:
        st.session_state.compare_status = StatusMessage.bad(str(exc))
        return
    if outcome.applied:
        st.session_state.compare_status = outcome.status
    if outcome.download is not None:
        st.session_state.pending_download = outcome.download


def _render_pending_download() -> None:
    report: Optional[DownloadedReport] = st.session_state.pending_download
    if report is None:
        return
    st.download_button(
        label=f"Save {report.filename}",
        data=report.content,
        file_name=report.filename,
        mime=report.media_type,
        type="primary",
    )
    # The payload is served for this render only.
    st.session_state.pending_download = None


def _render_compare(client: ReportingAPIClient) -> None:
    file_id = _require_file_id()
    if not file_id:
        return
    pipeline = _report_pipeline(client, file_id)
    registry = _build_registry(pipeline)

    st.subheader("Agent compare")
    compare_file = st.file_uploader("Compare file (.xlsx or .csv)", type=["xlsx", "csv"], key="compare_file")
    c1, c2 = st.columns(2)
    if c1.button("Upload & compare", type="primary", disabled=not registry.is_enabled("compare")):
        with st.spinner("Uploading compare file..."):
            _dispatch(
                registry,
                "compare",
                filename=compare_file.name if compare_file else None,
                content=compare_file.getvalue() if compare_file else None,
            )
    if c2.button("Download compare report", disabled=not registry.is_enabled("download_compare")):
        _dispatch(registry, "download_compare")

    _show_status(st.session_state.compare_status)
    _render_pending_download()

    state = pipeline.state
    if state.compare is None or state.compare.direct_download is not None:
        return

    summary = pipeline.compare_summary()
    if summary:
        st.write(summary)
    _show_table(render_table(state.compare.preview_rows, COMPARE_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN))

    st.subheader("Monthly activity")
    defaults = default_timeframe_inputs(date.today())
    t1, t2, t3, t4 = st.columns(4)
    timeframe_mode = t1.selectbox("Timeframe", options=TIMEFRAME_MODES)
    month = start_date = end_date = ""
    if timeframe_mode == TIMEFRAME_CUSTOM:
        start_date = t2.text_input("Start date", value=defaults.start_date)
        end_date = t3.text_input("End date", value=defaults.end_date)
    else:
        month = t2.text_input("Month (YYYY-MM)", value=defaults.month)
    activity_type = t4.text_input("Activity type", value="all")

    g1, g2 = st.columns(2)
    if g1.button("Generate preview", disabled=not registry.is_enabled("generate_activity")):
        with st.spinner("Generating monthly activity preview..."):
            _dispatch(
                registry,
                "generate_activity",
                timeframe_mode=timeframe_mode,
                month=month,
                start_date=start_date,
                end_date=end_date,
                activity_type=activity_type,
            )
        st.rerun()
    if g2.button("Download activity report", disabled=not registry.is_enabled("download_activity")):
        _dispatch(registry, "download_activity")
        st.rerun()

    state = pipeline.state
    summary = pipeline.activity_summary()
    if summary:
        st.write(summary)
    rows = state.activity.preview_rows if state.activity is not None else ()
    _show_table(render_table(rows, ACTIVITY_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN))


# ── Main ───────────────────────────────────────────────────────────────────
_client = _load_client()

with st.sidebar:
    st.title("Agent Reports")
    st.caption(f"Backend: {_client.base_url}")
    if st.session_state.file_id:
        st.caption(f"Dataset: {st.session_state.file_id}")
    st.session_state.page = st.radio("View", options=PAGES, index=PAGES.index(st.session_state.page))

_RENDERERS = {
    "Upload": _render_upload,
    "Dashboard": _render_dashboard,
    "Agents": _render_agents,
    "Agent Compare": _render_compare,
}
_RENDERERS[st.session_state.page](_client)
