"""
HTTP client for the feedback analysis backend.

Every screen of the dashboard goes through FeedbackApiClient; nothing else in
the project talks to the network. The backend is an external service, so
this module only knows its request/response shapes:

    GET    /api/analysis/{degrees,departments,batches,courses,faculty}
    GET    /api/analysis/feedback          → {"success": bool, ...analysis}
    GET    /api/analysis/comments
    POST   /api/upload                     (multipart, field "file")
    GET    /api/questions/with-options
    POST   /api/questions                  → {"success": bool, "data": [{"id": ...}]}
    PUT    /api/questions/<id>
    POST   /api/questions/options
    PUT    /api/questions/<id>/options
    DELETE /api/questions/<id>
    POST   /api/reports/...                → .xlsx body

All failures (transport errors, non-2xx replies, unparsable JSON, bodies
that do not fit the schemas and {"success": false} envelopes) surface as
ApiError. Callers decide whether to
degrade quietly or show the message.
"""

import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Callable, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from api.schemas import (
    AnalysisResult,
    CommentSummary,
    Course,
    FacultyRecord,
    Question,
    UploadResult,
)
from app import settings

log = logging.getLogger(__name__)

SPREADSHEET_MARKER = "spreadsheetml"
UPLOAD_EXTENSIONS  = {"csv", "xlsx", "xls"}

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """A backend call failed; message is fit to show to the user."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def is_supported_upload(filename: str) -> bool:
    """True for .csv / .xlsx / .xls, case-insensitive."""
    if "." not in filename:
        return False
    return filename.rsplit(".", 1)[-1].lower() in UPLOAD_EXTENSIONS


def _error_message(resp: requests.Response, fallback: str, plain_fallback: str | None = None) -> str:
    """Pull details/error/message out of a JSON error body if there is one."""
    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        log.error("Server response (%d): %s", resp.status_code, resp.text[:500])
        return plain_fallback or fallback
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    return body.get("details") or body.get("error") or body.get("message") or fallback


def _check_success(body: Any, fallback: str) -> dict:
    if not isinstance(body, dict) or not body.get("success"):
        message = fallback
        if isinstance(body, dict):
            message = body.get("error") or body.get("message") or fallback
        raise ApiError(message)
    return body


def _parse(model: type[ModelT], data: Any, path: str) -> ModelT:
    """Validate one reply body; schema mismatches surface as ApiError."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        log.error("Unexpected %s from %s: %s", model.__name__, path, exc)
        raise ApiError("Invalid response format from server") from exc


class FeedbackApiClient:
    def __init__(
        self,
        base_url: str = settings.API_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = settings.API_TIMEOUT,
        report_timeout: float = settings.REPORT_TIMEOUT,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.base_url        = base_url.rstrip("/")
        self.session         = session or session_factory()
        self.timeout         = timeout
        self.report_timeout  = report_timeout
        self.session_factory = session_factory

    def worker(self) -> "FeedbackApiClient":
        """Same backend and timeouts on a fresh session, for use from another thread."""
        return FeedbackApiClient(
            self.base_url,
            session=self.session_factory(),
            timeout=self.timeout,
            report_timeout=self.report_timeout,
            session_factory=self.session_factory,
        )

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        plain_fallback: str | None = None,
        **kwargs,
    ) -> requests.Response:
        """Send one request; raise ApiError on transport failure or non-2xx."""
        kwargs.setdefault("timeout", self.timeout)
        url = f"{self.base_url}{path}"
        t0 = time.perf_counter()
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            log.error("%s %s failed: %s", method, path, exc)
            raise ApiError(f"{fallback}: {exc}") from exc

        elapsed = time.perf_counter() - t0
        log.info("%s %s  status=%d  %.2fs", method, path, resp.status_code, elapsed)

        if not resp.ok:
            raise ApiError(
                _error_message(resp, fallback, plain_fallback), status_code=resp.status_code
            )
        return resp

    def _json(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        resp = self._request(method, path, fallback, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            log.error("%s %s returned a non-JSON body", method, path)
            raise ApiError("Invalid response format from server") from exc

    def _list(self, path: str, fallback: str, params: dict | None = None) -> list:
        data = self._json("GET", path, fallback, params=params)
        if not isinstance(data, list):
            log.error("Expected a list from %s, got %r", path, data)
            raise ApiError("Invalid response format from server")
        return data

    # ------------------------------------------------------------------
    # Filter cascade
    # ------------------------------------------------------------------

    def degrees(self) -> list[str]:
        return self._list("/api/analysis/degrees", "Failed to fetch degrees")

    def departments(self, degree: str) -> list[str]:
        return self._list(
            "/api/analysis/departments",
            "Failed to fetch departments",
            params={"degree": degree},
        )

    def batches(self, degree: str, dept: str) -> list[str]:
        return self._list(
            "/api/analysis/batches",
            "Failed to fetch batches",
            params={"degree": degree, "dept": dept},
        )

    def courses(self, degree: str, dept: str, batch: str) -> list[Course]:
        rows = self._list(
            "/api/analysis/courses",
            "Failed to fetch courses",
            params={"degree": degree, "dept": dept, "batch": batch},
        )
        return [_parse(Course, r, "/api/analysis/courses") for r in rows]

    def faculty(
        self,
        degree: str,
        dept: str,
        batch: str,
        course: str,
        staff_id: str | None = None,
    ) -> list[FacultyRecord]:
        params = {"degree": degree, "dept": dept, "batch": batch, "course": course}
        if staff_id and staff_id.strip():
            params["staffId"] = staff_id.strip()
        rows = self._list("/api/analysis/faculty", "Failed to fetch faculty", params=params)
        return [_parse(FacultyRecord, r, "/api/analysis/faculty") for r in rows]

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def feedback(self, filters: dict[str, str], staff_id: str) -> AnalysisResult:
        """Fetch the computed analysis for one faculty member."""
        body = self._json(
            "GET",
            "/api/analysis/feedback",
            "Failed to fetch analysis",
            params={**filters, "staffId": staff_id},
        )
        body = _check_success(body, "Failed to fetch analysis")
        return _parse(AnalysisResult, body, "/api/analysis/feedback")

    def comments(self, filters: dict[str, str], staff_id: str) -> CommentSummary:
        body = self._json(
            "GET",
            "/api/analysis/comments",
            "Failed to fetch comments",
            params={**filters, "staffId": staff_id},
        )
        if not isinstance(body, dict):
            raise ApiError("Invalid response format from server")
        return _parse(CommentSummary, body, "/api/analysis/comments")

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, file: BinaryIO | bytes | Path, filename: str | None = None) -> UploadResult:
        """Upload a feedback spreadsheet; returns the server's record count."""
        if isinstance(file, Path):
            filename = filename or file.name
            payload = file.read_bytes()
        else:
            filename = filename or getattr(file, "name", None)
            payload = file
        if not filename or not is_supported_upload(filename):
            raise ValueError("Please select a CSV or Excel file")

        log.info("Uploading %s", filename)
        body = self._json(
            "POST",
            "/api/upload",
            "Upload failed",
            files={"file": (filename, payload)},
            timeout=self.report_timeout,
        )
        if not isinstance(body, dict):
            raise ApiError("Upload failed")
        if not body.get("success"):
            raise ApiError(body.get("message") or body.get("error") or "Upload failed")
        return _parse(UploadResult, body, "/api/upload")

    # ------------------------------------------------------------------
    # Question catalog
    # ------------------------------------------------------------------

    def questions(self) -> list[Question]:
        rows = self._list("/api/questions/with-options", "Failed to fetch questions")
        return [_parse(Question, r, "/api/questions/with-options") for r in rows]

    def create_question(self, fields: dict[str, str]) -> Any:
        """Create a question and return the id the backend assigned."""
        body = self._json("POST", "/api/questions", "Failed to create question", json=fields)
        body = _check_success(body, "Failed to create question")
        return _first_id(body)

    def update_question(self, question_id: Any, fields: dict[str, str]) -> Any:
        body = self._json(
            "PUT", f"/api/questions/{question_id}", "Failed to update question", json=fields
        )
        body = _check_success(body, "Failed to update question")
        return _first_id(body)

    def create_options(self, options: list[dict]) -> None:
        body = self._json(
            "POST", "/api/questions/options", "Failed to create options", json=options
        )
        _check_success(body, "Failed to create options")

    def update_options(self, question_id: Any, options: list[dict]) -> None:
        body = self._json(
            "PUT",
            f"/api/questions/{question_id}/options",
            "Failed to update options",
            json=options,
        )
        _check_success(body, "Failed to update options")

    def delete_question(self, question_id: Any) -> None:
        body = self._json(
            "DELETE", f"/api/questions/{question_id}", "Failed to delete question"
        )
        _check_success(body, "Failed to delete question")

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def spreadsheet(self, path: str, payload: dict) -> tuple[bytes, str]:
        """POST a report request and return (xlsx bytes, content type)."""
        resp = self._request(
            "POST",
            path,
            "Failed to generate report",
            plain_fallback="Server error occurred",
            json=payload,
            timeout=self.report_timeout,
        )
        content_type = resp.headers.get("content-type", "")
        if SPREADSHEET_MARKER not in content_type:
            log.error("Unexpected content type from %s: %r", path, content_type)
            raise ApiError("Invalid response format from server")
        return resp.content, content_type


def _first_id(body: dict) -> Any:
    data = body.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], dict) or not data[0].get("id"):
        log.error("Invalid question data structure: %r", body)
        raise ApiError("Question saved but returned invalid data structure")
    return data[0]["id"]
