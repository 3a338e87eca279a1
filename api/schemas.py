"""
Pydantic models for the records exchanged with the feedback backend.

The backend owns every one of these records; the dashboard only displays and
edits them. Unknown keys are kept (extra="allow") so a record fetched from one
endpoint can be posted back to another unchanged, which the report endpoints
rely on.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


# ---------------------------------------------------------------------------
# Filter cascade
# ---------------------------------------------------------------------------

class Course(_Record):
    code: str
    name: str = ""

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


class FacultyRecord(_Record):
    staff_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("staff_id", "staffid"),
    )
    faculty_name: str | None = None
    course_code: str | None = None
    course_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.faculty_name or "Unknown"

    @property
    def initials(self) -> str:
        """First letters of the first and last name parts, or '?'."""
        if not self.faculty_name or not self.faculty_name.strip():
            return "?"
        parts = self.faculty_name.split()
        first = parts[0][0]
        last = parts[-1][0] if len(parts) > 1 else ""
        return (first + last).upper()


# ---------------------------------------------------------------------------
# Analysis results
# ---------------------------------------------------------------------------

class OptionCount(_Record):
    text: str = ""
    value: int | float
    count: int = 0


class QuestionStats(_Record):
    question: str = ""
    total_responses: int = 0
    options: list[OptionCount] = Field(default_factory=list)


class Section(_Record):
    section_name: str | None = None
    questions: dict[str, QuestionStats] = Field(default_factory=dict)


class CommentsFlag(_Record):
    has_comments: bool = False
    total_comments: int = 0


class AnalysisResult(_Record):
    staff_id: str | None = None
    course_code: str | None = None
    course_name: str | None = None
    total_responses: int = 0
    analysis: dict[str, Section] = Field(default_factory=dict)
    comments: CommentsFlag | None = None


class CommentSummary(_Record):
    has_comments: bool = False
    total_comments: int = 0
    comments: list[Any] = Field(default_factory=list)

    def texts(self) -> list[tuple[str, str | None]]:
        """(comment text, sentiment) pairs; entries may be bare strings."""
        out = []
        for item in self.comments:
            if isinstance(item, dict):
                text = item.get("comment") or item.get("text") or ""
                out.append((str(text), item.get("sentiment")))
            else:
                out.append((str(item), None))
        return out


# ---------------------------------------------------------------------------
# Question catalog
# ---------------------------------------------------------------------------

class QuestionOption(_Record):
    option_label: str
    option_text: str


class Question(_Record):
    id: int | str
    section_type: str
    question: str
    column_name: str
    options: list[QuestionOption] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

class UploadResult(_Record):
    success: bool = False
    count: int = 0
    message: str | None = None
