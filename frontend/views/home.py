"""Landing screen: upload a spreadsheet or move on to analysis / questions."""

import streamlit as st

from api.client import FeedbackApiClient
from frontend import navigation, ui
from frontend.navigation import Navigator
from frontend.upload import upload_widget

FEATURES = [
    ("📚", "Department-wise Analysis",
     "Analyze feedback across different departments and academic programs"),
    ("👤", "Faculty Performance",
     "Comprehensive evaluation of teaching effectiveness and engagement"),
    ("📊", "Detailed Analytics",
     "Section-wise and question-wise analysis with visual insights"),
    ("🎯", "Performance Tracking",
     "Monitor trends and improvements across semesters"),
]


def render(client: FeedbackApiClient, nav: Navigator) -> None:
    ui.header()
    st.markdown(
        "Comprehensive platform for analyzing student feedback across departments, "
        "courses, and faculty members with detailed insights and reporting."
    )

    upload_widget(client, key="home_upload")

    left, right = st.columns(2)
    if left.button("Start Analysis 📊", use_container_width=True):
        nav.go(navigation.ANALYSIS)
        st.rerun()
    if right.button("Manage Questions ❓", use_container_width=True):
        nav.go(navigation.QUESTIONS)
        st.rerun()

    st.header("Key Features")
    for col, (icon, title, blurb) in zip(st.columns(len(FEATURES)), FEATURES):
        with col:
            st.markdown(f"### {icon}")
            st.markdown(f"**{title}**")
            st.caption(blurb)
