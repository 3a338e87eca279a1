"""
Degree → department → batch → course filter cascade.

FilterState is the bare selection. Changing one level clears every level
below it, and a level is only selectable once all levels above it are set.

FilterCascade wraps a FilterState with the option lists for each level and
the faculty list for the selected course, fetching each from the backend as
soon as the level above it is chosen. A failed fetch is logged and leaves
that list empty; it never reaches the UI as an exception.
"""

import logging
from dataclasses import dataclass, field, fields

from api.client import ApiError, FeedbackApiClient
from api.schemas import Course, FacultyRecord

log = logging.getLogger(__name__)

LEVELS = ("degree", "department", "batch", "course")

# Backend query-parameter name for each level.
PARAM_NAMES = {"degree": "degree", "department": "dept", "batch": "batch", "course": "course"}


@dataclass
class FilterState:
    degree: str = ""
    department: str = ""
    batch: str = ""
    course: str = ""

    def select(self, level: str, value: str) -> None:
        """Set one level and clear every level below it."""
        if level not in LEVELS:
            raise ValueError(f"Unknown filter level: {level!r}")
        setattr(self, level, value)
        for lower in LEVELS[LEVELS.index(level) + 1:]:
            setattr(self, lower, "")

    def set_degree(self, value: str) -> None:
        self.select("degree", value)

    def set_department(self, value: str) -> None:
        self.select("department", value)

    def set_batch(self, value: str) -> None:
        self.select("batch", value)

    def set_course(self, value: str) -> None:
        self.select("course", value)

    def is_enabled(self, level: str) -> bool:
        return all(getattr(self, upper) for upper in LEVELS[:LEVELS.index(level)])

    def missing(self, *levels: str) -> list[str]:
        return [level for level in levels if not getattr(self, level)]

    def query_params(self) -> dict[str, str]:
        return {PARAM_NAMES[level]: getattr(self, level) for level in LEVELS}

    def as_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class FilterOptions:
    degrees: list[str] = field(default_factory=list)
    departments: list[str] = field(default_factory=list)
    batches: list[str] = field(default_factory=list)
    courses: list[Course] = field(default_factory=list)


# Option list that a selection at each level populates.
_NEXT_OPTIONS = {"degree": "departments", "department": "batches", "batch": "courses"}
_OPTION_ORDER = ("degrees", "departments", "batches", "courses")


class FilterCascade:
    def __init__(self, client: FeedbackApiClient, state: FilterState | None = None):
        self.client          = client
        self.state           = state or FilterState()
        self.options         = FilterOptions()
        self.faculty: list[FacultyRecord] = []
        self.staff_id_search = ""

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def load_degrees(self) -> None:
        self.options.degrees = self._fetch("degrees", self.client.degrees)

    def select(self, level: str, value: str) -> None:
        self.state.select(level, value)

        # Option lists for levels below the changed one are stale now.
        if level != "course":
            target = _NEXT_OPTIONS[level]
            for name in _OPTION_ORDER[_OPTION_ORDER.index(target):]:
                setattr(self.options, name, [])

        if value:
            self._load_next(level)
        self.refresh_faculty()

    def search_staff(self, text: str) -> None:
        self.staff_id_search = text
        self.refresh_faculty()

    def refresh_faculty(self) -> None:
        s = self.state
        if not s.course:
            self.faculty = []
            return
        self.faculty = self._fetch(
            "faculty",
            lambda: self.client.faculty(
                s.degree, s.department, s.batch, s.course, self.staff_id_search
            ),
        )

    def _load_next(self, level: str) -> None:
        s = self.state
        if level == "degree":
            self.options.departments = self._fetch(
                "departments", lambda: self.client.departments(s.degree)
            )
        elif level == "department":
            self.options.batches = self._fetch(
                "batches", lambda: self.client.batches(s.degree, s.department)
            )
        elif level == "batch":
            self.options.courses = self._fetch(
                "courses", lambda: self.client.courses(s.degree, s.department, s.batch)
            )

    def _fetch(self, what: str, call) -> list:
        try:
            return call()
        except ApiError as exc:
            log.error("Error fetching %s: %s", what, exc)
            return []

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def course(self) -> Course | None:
        return next((c for c in self.options.courses if c.code == self.state.course), None)

    # ------------------------------------------------------------------
    # Handoff
    # ------------------------------------------------------------------

    def snapshot(self) -> dict:
        """Everything needed to rebuild this cascade on another screen."""
        return {
            "filters": self.state.as_dict(),
            "options": {
                "degrees": list(self.options.degrees),
                "departments": list(self.options.departments),
                "batches": list(self.options.batches),
                "courses": [c.model_dump() for c in self.options.courses],
            },
            "faculty": [f.model_dump() for f in self.faculty],
            "staff_id_search": self.staff_id_search,
        }

    def restore(self, snapshot: dict) -> None:
        self.state = FilterState(**snapshot.get("filters", {}))
        options = snapshot.get("options", {})
        self.options = FilterOptions(
            degrees=list(options.get("degrees", [])),
            departments=list(options.get("departments", [])),
            batches=list(options.get("batches", [])),
            courses=[Course.model_validate(c) for c in options.get("courses", [])],
        )
        self.faculty = [FacultyRecord.model_validate(f) for f in snapshot.get("faculty", [])]
        self.staff_id_search = snapshot.get("staff_id_search", "")
