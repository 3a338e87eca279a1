"""
Question manager: list the catalog, add / edit a question with its options,
delete with confirmation.
"""

import logging

import streamlit as st

from api.client import ApiError, FeedbackApiClient
from api.schemas import Question
from frontend import navigation, ui
from frontend.navigation import Navigator
from questions.catalog import (
    SECTION_TYPES,
    FormValidationError,
    QuestionForm,
    delete_question,
    save_question,
)

log = logging.getLogger(__name__)

_FORM_KEY    = "questions.form"
_ERRORS_KEY  = "questions.errors"
_GEN_KEY     = "questions.generation"
_DELETE_KEY  = "questions.pending_delete"


def _form() -> QuestionForm:
    return st.session_state.setdefault(_FORM_KEY, QuestionForm())


def _redraw() -> None:
    """Give every form widget a fresh key so it picks up the form's values."""
    st.session_state[_GEN_KEY] = st.session_state.get(_GEN_KEY, 0) + 1
    st.session_state.pop(_ERRORS_KEY, None)


def _load_questions(client: FeedbackApiClient) -> list[Question]:
    try:
        return client.questions()
    except ApiError as exc:
        log.error("Error fetching questions: %s", exc.message)
        st.error(exc.message or "Failed to load questions. Please refresh the page.")
        return []


def _field_error(errors: dict[str, str], name: str) -> None:
    if name in errors:
        st.caption(f":red[{errors[name]}]")


def _editor(client: FeedbackApiClient) -> None:
    form = _form()
    errors = st.session_state.get(_ERRORS_KEY, {})
    gen = st.session_state.get(_GEN_KEY, 0)

    st.subheader("Edit Question" if form.is_editing else "Add New Question")

    choices = [""] + list(SECTION_TYPES)
    form.section_type = st.selectbox(
        "Section Type",
        choices,
        index=choices.index(form.section_type) if form.section_type in choices else 0,
        format_func=lambda v: v or "Select Section Type",
        key=f"q.section.{gen}",
    )
    _field_error(errors, "section_type")

    form.question = st.text_area("Question", value=form.question, key=f"q.text.{gen}")
    _field_error(errors, "question")

    form.column_name = st.text_input(
        "Column Name", value=form.column_name, placeholder="e.g., qn1", key=f"q.column.{gen}"
    )
    _field_error(errors, "column_name")

    st.markdown("**Options**")
    for i, option in enumerate(form.options):
        label, text, remove = st.columns([1, 8, 1])
        label.markdown(f"**{option.option_label}**")
        form.set_option_text(
            i,
            text.text_input(
                f"Option {option.option_label}",
                value=option.option_text,
                key=f"q.option.{gen}.{i}",
                label_visibility="collapsed",
            ),
        )
        _field_error(errors, f"option_text_{i}")
        if remove.button("✕", key=f"q.remove.{gen}.{i}", disabled=len(form.options) <= 1):
            form.remove_option(i)
            _redraw()
            st.rerun()

    if st.button("+ Add Option"):
        form.add_option()
        st.rerun()

    submit, cancel = st.columns(2)
    if submit.button("Update Question" if form.is_editing else "Add Question", type="primary"):
        _submit(client, form)
    if form.is_editing and cancel.button("Cancel"):
        form.reset()
        _redraw()
        st.rerun()


def _submit(client: FeedbackApiClient, form: QuestionForm) -> None:
    editing = form.is_editing
    try:
        with st.spinner("Saving…"):
            save_question(client, form)
    except FormValidationError as exc:
        st.session_state[_ERRORS_KEY] = exc.errors
        st.rerun()
    except ApiError as exc:
        log.error("Error saving question: %s", exc.message)
        ui.flash(exc.message or "Failed to add question. Please try again.", kind="error")
        st.rerun()

    ui.flash("Question updated successfully!" if editing else "Question added successfully!")
    _redraw()
    st.rerun()


def _catalog(client: FeedbackApiClient) -> None:
    questions = _load_questions(client)
    st.subheader(f"Existing Questions ({len(questions)})")
    if not questions:
        st.info("No questions found.")
        return

    pending = st.session_state.get(_DELETE_KEY)
    for q in questions:
        with st.container(border=True):
            st.caption(f"{q.section_type} · {q.column_name}")
            st.markdown(f"**{q.question}**")
            for option in q.options:
                st.markdown(f"- **{option.option_label}.** {option.option_text}")

            edit, delete = st.columns(2)
            if edit.button("Edit", key=f"q.edit.{q.id}"):
                _form().load(q)
                _redraw()
                st.rerun()

            if pending == q.id:
                st.warning("Are you sure you want to delete this question and its options?")
                yes, no = st.columns(2)
                if yes.button("Yes, delete", key=f"q.confirm.{q.id}", type="primary"):
                    st.session_state.pop(_DELETE_KEY, None)
                    try:
                        delete_question(client, q.id)
                    except ApiError as exc:
                        log.error("Delete error: %s", exc.message)
                        ui.flash(exc.message or "Failed to delete", kind="error")
                    else:
                        ui.flash("Question deleted.")
                    st.rerun()
                if no.button("Keep", key=f"q.keep.{q.id}"):
                    st.session_state.pop(_DELETE_KEY, None)
                    st.rerun()
            elif delete.button("Delete", key=f"q.delete.{q.id}"):
                st.session_state[_DELETE_KEY] = q.id
                st.rerun()


def render(client: FeedbackApiClient, nav: Navigator) -> None:
    ui.header("Question Management")
    if st.button("← Home"):
        nav.go(navigation.HOME)
        st.rerun()

    editor, catalog = st.columns([2, 3])
    with editor:
        _editor(client)
    with catalog:
        _catalog(client)
