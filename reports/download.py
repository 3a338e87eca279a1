"""
Server-side report generation.

Every variant follows the same steps: check that the filter levels it needs
are selected, POST a JSON payload, insist on a spreadsheet reply, and hand
back a Report (filename + bytes). The Streamlit views offer the bytes through
st.download_button; save_report() writes them to disk instead.

    faculty report          POST /api/reports/generate-report
    department report       POST /api/reports/generate-department-report
    all-batches report      POST /api/reports/generate-department-report-all-batches
    bulk (client-collected) POST /api/reports/generate-bulk-report
    bulk (server-collected) POST /api/bulk-reports/generate-bulk-report
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from analysis.filters import FilterState
from api.client import ApiError, FeedbackApiClient
from api.schemas import AnalysisResult, FacultyRecord
from app import settings
from reports.bulk import BatchResult, collect_analyses

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class MissingFilterError(ValueError):
    def __init__(self, missing: list[str]):
        super().__init__(f"Please select {', '.join(missing)} first")
        self.missing = missing


@dataclass
class Report:
    filename: str
    content: bytes
    content_type: str


@dataclass
class BulkReport:
    report: Report
    batch: BatchResult


def _safe(part: str | None, default: str = "unknown") -> str:
    cleaned = _UNSAFE_CHARS.sub("_", (part or "").strip()).strip("_")
    return cleaned or default


def _require(filters: FilterState, *levels: str) -> None:
    missing = filters.missing(*levels)
    if missing:
        raise MissingFilterError(missing)


def _fetch(client: FeedbackApiClient, path: str, payload: dict, filename: str) -> Report:
    log.info("Generating report %s via %s", filename, path)
    content, content_type = client.spreadsheet(path, payload)
    log.info("  Received %d bytes", len(content))
    return Report(filename=filename, content=content, content_type=content_type)


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

def faculty_report(
    client: FeedbackApiClient, analysis: AnalysisResult, faculty: FacultyRecord
) -> Report:
    payload = {
        "analysisData": analysis.model_dump(mode="json", exclude_none=True),
        "facultyData": faculty.model_dump(mode="json", exclude_none=True),
    }
    filename = f"faculty_feedback_report_{_safe(analysis.staff_id)}.xlsx"
    return _fetch(client, "/api/reports/generate-report", payload, filename)


def department_report(client: FeedbackApiClient, filters: FilterState) -> Report:
    _require(filters, "degree", "department", "batch")
    payload = {"degree": filters.degree, "dept": filters.department, "batch": filters.batch}
    filename = f"department_report_{_safe(filters.department)}_{_safe(filters.batch)}.xlsx"
    return _fetch(client, "/api/reports/generate-department-report", payload, filename)


def department_report_all_batches(client: FeedbackApiClient, filters: FilterState) -> Report:
    _require(filters, "degree", "department")
    payload = {"degree": filters.degree, "dept": filters.department}
    filename = f"department_report_{_safe(filters.department)}_all_batches.xlsx"
    return _fetch(
        client, "/api/reports/generate-department-report-all-batches", payload, filename
    )


def bulk_report(
    client: FeedbackApiClient,
    filters: FilterState,
    faculty: list[FacultyRecord],
    max_workers: int = settings.BULK_WORKERS,
) -> BulkReport:
    """Collect every visible faculty member's analysis, then build one workbook."""
    _require(filters, "degree", "department", "batch", "course")
    if not faculty:
        raise ValueError("No faculty to include in the report")

    batch = collect_analyses(client, filters.query_params(), faculty, max_workers)
    if not batch.succeeded:
        raise ApiError("Could not fetch analysis for any faculty member")

    payload = {
        "filters": filters.query_params(),
        "facultyAnalyses": [
            {
                "analysisData": analysis.model_dump(mode="json", exclude_none=True),
                "facultyData": member.model_dump(mode="json", exclude_none=True),
            }
            for member, analysis in batch.succeeded
        ],
    }
    filename = f"bulk_feedback_report_{_safe(filters.course)}.xlsx"
    report = _fetch(client, "/api/reports/generate-bulk-report", payload, filename)
    return BulkReport(report=report, batch=batch)


def server_bulk_report(client: FeedbackApiClient, filters: FilterState) -> Report:
    """Bulk report where the backend gathers the analyses itself."""
    _require(filters, "degree", "department", "batch", "course")
    filename = f"bulk_feedback_report_{_safe(filters.course)}.xlsx"
    return _fetch(
        client, "/api/bulk-reports/generate-bulk-report", filters.query_params(), filename
    )


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

def save_report(report: Report, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report.filename
    path.write_bytes(report.content)
    log.info("Saved %s (%d bytes)", path, len(report.content))
    return path
