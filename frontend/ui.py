"""
Shared Streamlit widgets: page header, faculty cards, flash messages.
"""

import streamlit as st

from api.schemas import FacultyRecord
from app import settings

_FLASH_KEY = "_flash"


def header(title: str = settings.PORTAL_TITLE) -> None:
    left, right = st.columns([1, 6])
    with left:
        st.image(settings.LOGO_URL, width=72)
    with right:
        st.markdown(f"#### {settings.OFFICE}")
        st.caption("Internal Quality Assurance Compliance")
    st.title(title)
    st.subheader(settings.INSTITUTION)


# ---------------------------------------------------------------------------
# Flash messages
# ---------------------------------------------------------------------------

def flash(message: str, kind: str = "success") -> None:
    """Queue a message to show after the next rerun."""
    st.session_state.setdefault(_FLASH_KEY, []).append((kind, message))


def show_flashes() -> None:
    # st.toast disappears on its own after a few seconds.
    for kind, message in st.session_state.pop(_FLASH_KEY, []):
        icon = "✅" if kind == "success" else "⚠️"
        st.toast(message, icon=icon)


# ---------------------------------------------------------------------------
# Faculty
# ---------------------------------------------------------------------------

def faculty_card(member: FacultyRecord, filters: dict[str, str], key: str) -> bool:
    """Render one faculty card; returns True when 'View analysis' is clicked."""
    with st.container(border=True):
        avatar, info = st.columns([1, 5])
        avatar.markdown(f"### {member.initials}")
        with info:
            st.markdown(f"**{member.display_name}**")
            st.caption(
                f"**{filters.get('degree') or '-'}** · {filters.get('department') or '-'}"
                f" · Batch {filters.get('batch') or '-'}"
            )
        st.markdown(
            f"`{member.course_code or '-'}` {member.course_name or '-'}"
        )
        if member.staff_id:
            st.text("Staff Identifier")
            st.code(member.staff_id, language=None)
        return st.button("View analysis", key=key, disabled=not member.staff_id)
