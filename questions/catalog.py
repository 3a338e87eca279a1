"""
Question catalog: the add/edit form and its save/delete orchestration.

A question is saved in two dependent calls: the question itself first (to get
its id), then its ordered option list tagged with that id. Option labels are
never typed by the user; they are the letters A, B, C, ... by position and are
re-derived whenever an option is removed.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from api.client import FeedbackApiClient
from api.schemas import Question

log = logging.getLogger(__name__)

SECTION_TYPES = (
    "TEACHING EFFECTIVENESS",
    "CLASSROOM DYNAMICS AND ENGAGEMENT",
    "ASSESSMENT AND FEEDBACK",
)

COLUMN_NAME_RE = re.compile(r"qn[0-9]+")


class FormValidationError(ValueError):
    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


def option_label(index: int) -> str:
    return chr(ord("A") + index)


def is_valid_column_name(name: str) -> bool:
    """'qn' followed by one or more digits, nothing else."""
    return COLUMN_NAME_RE.fullmatch(name) is not None


@dataclass
class OptionDraft:
    option_label: str
    option_text: str = ""


def _blank_options() -> list[OptionDraft]:
    return [OptionDraft(option_label(0))]


@dataclass
class QuestionForm:
    section_type: str = ""
    question: str = ""
    column_name: str = ""
    options: list[OptionDraft] = field(default_factory=_blank_options)
    editing_id: Any = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def add_option(self) -> None:
        self.options.append(OptionDraft(option_label(len(self.options))))

    def remove_option(self, index: int) -> None:
        """Drop one option and relabel the rest; the last one always stays."""
        if len(self.options) <= 1:
            return
        del self.options[index]
        for i, option in enumerate(self.options):
            option.option_label = option_label(i)

    def set_option_text(self, index: int, text: str) -> None:
        self.options[index].option_text = text

    # ------------------------------------------------------------------
    # Edit / cancel
    # ------------------------------------------------------------------

    def load(self, question: Question) -> None:
        """Pre-fill the form from an existing question."""
        self.editing_id = question.id
        self.section_type = question.section_type
        self.question = question.question
        self.column_name = question.column_name
        if question.options:
            self.options = [
                OptionDraft(o.option_label, o.option_text) for o in question.options
            ]

    def reset(self) -> None:
        self.section_type = ""
        self.question = ""
        self.column_name = ""
        self.options = _blank_options()
        self.editing_id = None

    # ------------------------------------------------------------------
    # Validation & payloads
    # ------------------------------------------------------------------

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}

        if not self.section_type.strip():
            errors["section_type"] = "Section type is required"
        elif self.section_type not in SECTION_TYPES:
            errors["section_type"] = "Section type must be one of the listed sections"

        if not self.question.strip():
            errors["question"] = "Question text is required"

        if not self.column_name.strip():
            errors["column_name"] = "Column name is required"
        elif not is_valid_column_name(self.column_name):
            errors["column_name"] = 'Column name must be in format "qn1", "qn2", etc.'

        for i, option in enumerate(self.options):
            if not option.option_label.strip():
                errors[f"option_label_{i}"] = "Option label is required"
            if not option.option_text.strip():
                errors[f"option_text_{i}"] = "Option text is required"

        return errors

    def question_payload(self) -> dict[str, str]:
        return {
            "section_type": self.section_type,
            "question": self.question,
            "column_name": self.column_name,
        }

    def options_payload(self, question_id: Any) -> list[dict]:
        return [
            {
                "option_label": o.option_label,
                "option_text": o.option_text,
                "question_id": question_id,
            }
            for o in self.options
        ]


# ---------------------------------------------------------------------------
# Save / delete
# ---------------------------------------------------------------------------

def save_question(client: FeedbackApiClient, form: QuestionForm) -> Any:
    """Create or update the form's question and its options; return its id."""
    errors = form.validate()
    if errors:
        raise FormValidationError(errors)

    if form.is_editing:
        question_id = form.editing_id
        client.update_question(question_id, form.question_payload())
        client.update_options(question_id, form.options_payload(question_id))
        log.info("Updated question %s (%s)", question_id, form.column_name)
    else:
        question_id = client.create_question(form.question_payload())
        client.create_options(form.options_payload(question_id))
        log.info("Created question %s (%s)", question_id, form.column_name)

    form.reset()
    return question_id


def delete_question(client: FeedbackApiClient, question_id: Any) -> None:
    """Remove a question; the backend removes its options with it."""
    client.delete_question(question_id)
    log.info("Deleted question %s", question_id)
