"""
Analysis browser: the filter cascade, the faculty list for the chosen course,
and the department / bulk report downloads.
"""

import logging

import streamlit as st

from analysis.filters import LEVELS, FilterCascade
from api.client import ApiError, FeedbackApiClient
from api.schemas import FacultyRecord
from frontend import navigation, ui
from frontend.navigation import Navigator
from reports import download

log = logging.getLogger(__name__)

_CASCADE_KEY = "analysis.cascade"
_REPORT_KEY  = "analysis.report"

_OPTION_LISTS = {
    "degree": "degrees",
    "department": "departments",
    "batch": "batches",
    "course": "courses",
}


def _cascade(client: FeedbackApiClient, nav: Navigator) -> FilterCascade:
    cascade = st.session_state.get(_CASCADE_KEY)
    if cascade is None:
        cascade = FilterCascade(client)
        snapshot = nav.handoff.take("cascade")
        if snapshot:
            cascade.restore(snapshot)
        else:
            cascade.load_degrees()
        st.session_state[_CASCADE_KEY] = cascade
    return cascade


def _filter_row(cascade: FilterCascade) -> None:
    state = cascade.state
    for col, level in zip(st.columns(len(LEVELS)), LEVELS):
        raw = getattr(cascade.options, _OPTION_LISTS[level])
        if level == "course":
            labels = {c.code: c.label for c in raw}
            choices = [""] + list(labels)
        else:
            labels = {}
            choices = [""] + list(raw)

        current = getattr(state, level)
        index = choices.index(current) if current in choices else 0
        # Key on the upper selections so a cleared level redraws empty.
        upper = "|".join(getattr(state, u) for u in LEVELS[:LEVELS.index(level)])
        value = col.selectbox(
            level.title(),
            choices,
            index=index,
            key=f"filter.{level}.{upper}",
            disabled=not state.is_enabled(level),
            format_func=lambda v, lv=level, lb=labels: lb.get(v, v) or f"Select {lv.title()}",
        )
        if value != current:
            cascade.select(level, value)
            st.session_state.pop(_REPORT_KEY, None)
            st.rerun()


def _open_analysis(client: FeedbackApiClient, nav: Navigator, cascade: FilterCascade,
                   member: FacultyRecord) -> None:
    try:
        with st.spinner("Loading analysis…"):
            analysis = client.feedback(cascade.state.query_params(), member.staff_id)
    except ApiError as exc:
        log.error("Error fetching analysis for %s: %s", member.staff_id, exc.message)
        st.error(f"Failed to load analysis: {exc.message}")
        return

    st.session_state.pop(_CASCADE_KEY, None)
    nav.go(
        navigation.RESULTS,
        analysis=analysis,
        faculty=member,
        cascade=cascade.snapshot(),
    )
    st.rerun()


def _reports(client: FeedbackApiClient, cascade: FilterCascade) -> None:
    state = cascade.state
    st.subheader("Reports")
    cols = st.columns(4)

    actions = [
        (cols[0], "Department report",
         lambda: download.department_report(client, state)),
        (cols[1], "Department report (all batches)",
         lambda: download.department_report_all_batches(client, state)),
        (cols[2], "Bulk report (visible faculty)",
         lambda: _bulk(client, cascade)),
        (cols[3], "Bulk report (server)",
         lambda: download.server_bulk_report(client, state)),
    ]
    for col, label, build in actions:
        if col.button(label, use_container_width=True):
            try:
                with st.spinner("Generating report…"):
                    st.session_state[_REPORT_KEY] = build()
            except ValueError as exc:
                st.warning(str(exc))
            except ApiError as exc:
                log.error("Error generating %s: %s", label, exc.message)
                st.error(f"Failed to generate report: {exc.message}")

    report = st.session_state.get(_REPORT_KEY)
    if report is not None:
        st.download_button(
            f"Download {report.filename}",
            data=report.content,
            file_name=report.filename,
            mime=report.content_type,
        )


def _bulk(client: FeedbackApiClient, cascade: FilterCascade) -> download.Report:
    bulk = download.bulk_report(client, cascade.state, cascade.faculty)
    if bulk.batch.failed:
        names = ", ".join(m.staff_id or m.display_name for m, _ in bulk.batch.failed)
        st.warning(
            f"{len(bulk.batch.failed)} of {bulk.batch.total} faculty skipped: {names}"
        )
    return bulk.report


def render(client: FeedbackApiClient, nav: Navigator) -> None:
    ui.header()
    if st.button("← Home"):
        st.session_state.pop(_CASCADE_KEY, None)
        nav.go(navigation.HOME)
        st.rerun()

    st.markdown(
        "Use the filters below to analyze student feedback by degree, department, "
        "batch, and course."
    )

    cascade = _cascade(client, nav)
    _filter_row(cascade)

    if cascade.state.department:
        _reports(client, cascade)

    if not cascade.state.course:
        return

    search = st.text_input(
        "Search by Staff ID",
        value=cascade.staff_id_search,
        placeholder="Enter staff_id...",
    )
    if search != cascade.staff_id_search:
        cascade.search_staff(search)

    if not cascade.faculty:
        st.info("No faculty found.")
        return

    filters = cascade.state.as_dict()
    cols = st.columns(3)
    for i, member in enumerate(cascade.faculty):
        with cols[i % 3]:
            if ui.faculty_card(member, filters, key=f"faculty.{i}.{member.staff_id}"):
                _open_analysis(client, nav, cascade, member)
