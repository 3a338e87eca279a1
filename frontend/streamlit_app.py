"""
Streamlit frontend for the student feedback analysis portal.

Run with:
    streamlit run frontend/streamlit_app.py

Screens: Home (upload + navigation), Analysis (filter cascade + faculty),
Results (score dashboard), Questions (catalog manager). Every screen talks
to the backend at FEEDBACK_API_URL through one shared FeedbackApiClient.
"""

import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on sys.path when launched via `streamlit run`
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.client import FeedbackApiClient
from app import settings
from app.logging_setup import setup_logging
from frontend import navigation, ui
from frontend.navigation import Navigator
from frontend.views import analysis, home, questions, results

VIEWS = {
    navigation.HOME: home.render,
    navigation.ANALYSIS: analysis.render,
    navigation.RESULTS: results.render,
    navigation.QUESTIONS: questions.render,
}


@st.cache_resource
def _client() -> FeedbackApiClient:
    return FeedbackApiClient(settings.API_BASE_URL)


def main() -> None:
    setup_logging()
    st.set_page_config(page_title=settings.PORTAL_TITLE, page_icon="📊", layout="wide")

    nav = Navigator(st.session_state)
    ui.show_flashes()
    VIEWS[nav.current](_client(), nav)


main()
