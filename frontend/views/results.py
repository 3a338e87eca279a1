"""
Analysis results dashboard for one faculty member.

Arrives with the analysis, the faculty record and the filter cascade snapshot
in the navigation handoff. They are taken once and kept in this screen's own
view state until the user goes back.
"""

import logging

import streamlit as st

from analysis import scores
from analysis.filters import FilterState
from api.client import ApiError, FeedbackApiClient
from api.schemas import AnalysisResult, FacultyRecord
from frontend import navigation, ui
from frontend.navigation import Navigator
from reports import download

log = logging.getLogger(__name__)

_VIEW_KEY = "results.view"

_BAND_COLOURS = {"success": "green", "warning": "orange", "danger": "red"}


def _view(nav: Navigator) -> dict | None:
    view = st.session_state.get(_VIEW_KEY)
    if view is None and nav.handoff.has("analysis"):
        analysis: AnalysisResult = nav.handoff.take("analysis")
        view = {
            "analysis": analysis,
            "faculty": nav.handoff.take("faculty"),
            "cascade": nav.handoff.take("cascade"),
            "card": scores.score_card(analysis),
            "report": None,
            "comments": None,
        }
        st.session_state[_VIEW_KEY] = view
    return view


def _back(nav: Navigator, view: dict | None) -> None:
    st.session_state.pop(_VIEW_KEY, None)
    nav.handoff.clear("analysis", "faculty")
    cascade = view.get("cascade") if view else None
    if cascade:
        nav.go(navigation.ANALYSIS, cascade=cascade)
    else:
        nav.go(navigation.ANALYSIS)
    st.rerun()


def _overview(card: scores.ScoreCard) -> None:
    cols = st.columns(len(card.sections) + 1)
    cols[0].metric("Overall Score", f"{card.overall}%")
    for col, section in zip(cols[1:], card.sections.values()):
        col.metric(section.name, f"{section.score}%")

    st.subheader("Section-wise Performance")
    for section in card.sections.values():
        colour = _BAND_COLOURS[scores.score_band(section.score)]
        st.markdown(f"**{section.name}** :{colour}[{section.score}%]")
        st.progress(min(max(section.score, 0), 100) / 100)
        st.caption(f"Based on {section.question_count} questions")


def _section(analysis: AnalysisResult, key: str, card: scores.ScoreCard) -> None:
    st.markdown(f"**Score: {card.sections[key].score}%**")
    section = analysis.analysis[key]
    for i, question in enumerate(section.questions.values(), start=1):
        st.markdown(f"##### Question {i}")
        st.write(question.question)
        for option in question.options:
            share = scores.option_share(option, question)
            label = scores.interpretation(option.value)
            colour = _BAND_COLOURS[{"Good": "success", "Neutral": "warning"}.get(label, "danger")]
            st.markdown(
                f"{option.text} :{colour}[{label}] ({option.count}) "
                f"**{scores.round_half_up(share)}%**"
            )
            st.progress(min(max(share, 0), 100) / 100)


def _comments(client: FeedbackApiClient, view: dict) -> None:
    analysis: AnalysisResult = view["analysis"]
    flag = analysis.comments
    if not flag or not flag.has_comments:
        return

    st.subheader(f"Student Comments ({flag.total_comments})")
    if view["comments"] is None:
        if not st.button("Load comments"):
            return
        cascade = view.get("cascade") or {}
        params = FilterState(**cascade.get("filters", {})).query_params()
        try:
            view["comments"] = client.comments(params, analysis.staff_id or "")
        except ApiError as exc:
            log.error("Error fetching comments: %s", exc.message)
            st.error(f"Failed to load comments: {exc.message}")
            return

    for text, sentiment in view["comments"].texts():
        st.markdown(f"- {text}" + (f" _({sentiment})_" if sentiment else ""))


def render(client: FeedbackApiClient, nav: Navigator) -> None:
    view = _view(nav)
    if view is None:
        ui.header("No Analysis Data Found")
        st.write("Please go back and select a faculty to analyze.")
        if st.button("Back to Analysis"):
            _back(nav, view)
        return

    analysis: AnalysisResult = view["analysis"]
    faculty: FacultyRecord = view["faculty"]
    card: scores.ScoreCard = view["card"]

    ui.header(faculty.display_name)
    st.markdown(
        f"**Course:** {analysis.course_code} - {analysis.course_name}  \n"
        f"**Staff ID:** {analysis.staff_id} • **Total Responses:** {analysis.total_responses}"
    )

    back, generate = st.columns(2)
    if back.button("← Back to Analysis", use_container_width=True):
        _back(nav, view)
    if generate.button("Generate Report", type="primary", use_container_width=True):
        try:
            with st.spinner("Generating report…"):
                view["report"] = download.faculty_report(client, analysis, faculty)
        except ApiError as exc:
            log.error("Error generating report: %s", exc.message)
            st.error(f"Failed to generate report: {exc.message}")

    if view["report"] is not None:
        report = view["report"]
        st.download_button(
            f"Download {report.filename}",
            data=report.content,
            file_name=report.filename,
            mime=report.content_type,
        )

    keys = list(card.sections)
    tabs = st.tabs(["Overview"] + [card.sections[k].name for k in keys])
    with tabs[0]:
        _overview(card)
    for tab, key in zip(tabs[1:], keys):
        with tab:
            _section(analysis, key, card)

    _comments(client, view)
