import io
from pathlib import Path

import pytest
import requests

from api.client import ApiError, FeedbackApiClient, is_supported_upload
from fakes import XLSX, FakeSession, make_response


class TestTransport:
    """Test how backend failures are mapped to ApiError."""

    def test_base_url_trailing_slash(self, session):
        """Test that a trailing slash on the base URL is ignored."""
        client = FeedbackApiClient(base_url=session.base_url + "/", session=session)
        session.add("GET", "/api/analysis/degrees", make_response(body=[]))
        assert client.degrees() == []

    def test_timeout_is_always_sent(self, client, session):
        """Test that every request carries the configured timeout."""
        session.add("GET", "/api/analysis/degrees", make_response(body=["B.Tech"]))
        client.degrees()
        assert session.calls[0]["timeout"] == client.timeout

    def test_connection_error(self, client, session):
        """Test that transport failures become ApiError without a status."""
        session.add("GET", "/api/analysis/degrees", requests.ConnectionError("refused"))
        with pytest.raises(ApiError) as exc_info:
            client.degrees()
        assert exc_info.value.status_code is None

    def test_http_error_uses_json_message(self, client, session):
        """Test that a JSON error body supplies the message."""
        session.add("GET", "/api/questions/with-options",
                    make_response(500, {"error": "database unavailable"}))
        with pytest.raises(ApiError, match="database unavailable") as exc_info:
            client.questions()
        assert exc_info.value.status_code == 500

    def test_http_error_without_json(self, client, session):
        """Test that a non-JSON error body falls back to the default message."""
        session.add("GET", "/api/questions/with-options",
                    make_response(502, content_type="text/html", raw=b"<h1>Bad gateway</h1>"))
        with pytest.raises(ApiError, match="Failed to fetch questions"):
            client.questions()

    def test_non_json_success_body(self, client, session):
        """Test that a non-JSON success body is rejected."""
        session.add("GET", "/api/analysis/degrees",
                    make_response(content_type="text/html", raw=b"<html></html>"))
        with pytest.raises(ApiError, match="Invalid response format"):
            client.degrees()

    def test_non_list_where_list_expected(self, client, session):
        """Test that an object where a list is expected is rejected."""
        session.add("GET", "/api/questions/with-options", make_response(body={"rows": []}))
        with pytest.raises(ApiError, match="Invalid response format"):
            client.questions()


class TestAnalysisEndpoints:
    """Test parameters and parsing of analysis lookups."""

    def test_courses_parsed(self, client, session):
        """Test that course rows are parsed and filters sent."""
        session.add("GET", "/api/analysis/courses",
                    make_response(body=[{"code": "CSE201", "name": "Data Structures"}]))
        courses = client.courses("B.Tech", "CSE", "2022")
        assert courses[0].label == "CSE201 - Data Structures"
        assert session.calls[0]["params"] == {"degree": "B.Tech", "dept": "CSE", "batch": "2022"}

    def test_faculty_accepts_staffid_alias(self, client, session):
        """Test that staffid is read as staff_id."""
        session.add("GET", "/api/analysis/faculty",
                    make_response(body=[{"staffid": 1001, "faculty_name": "Anita Raman"}]))
        member = client.faculty("B.Tech", "CSE", "2022", "CSE201")[0]
        assert member.staff_id == "1001"
        assert member.initials == "AR"

    def test_feedback_success(self, client, session, analysis_payload):
        """Test that a successful feedback reply is parsed."""
        session.add("GET", "/api/analysis/feedback", make_response(body=analysis_payload))
        result = client.feedback({"degree": "B.Tech", "dept": "CSE"}, "KARE1001")
        assert result.course_code == "CSE201"
        assert result.analysis["teaching"].questions["qn1"].options[2].count == 10
        assert session.calls[0]["params"]["staffId"] == "KARE1001"

    def test_feedback_unsuccessful(self, client, session):
        """Test that success false surfaces the server message."""
        session.add("GET", "/api/analysis/feedback",
                    make_response(body={"success": False, "message": "No responses"}))
        with pytest.raises(ApiError, match="No responses"):
            client.feedback({}, "KARE1001")

    def test_comments(self, client, session):
        """Test that plain and structured comments are both read."""
        session.add("GET", "/api/analysis/comments", make_response(body={
            "has_comments": True,
            "total_comments": 2,
            "comments": ["Great classes", {"comment": "Too fast", "sentiment": "negative"}],
        }))
        summary = client.comments({}, "KARE1001")
        assert summary.texts() == [("Great classes", None), ("Too fast", "negative")]


class TestUpload:
    """Test the one-shot spreadsheet upload."""

    @pytest.mark.parametrize("name", ["feedback.csv", "FEEDBACK.XLSX", "old.xls"])
    def test_supported(self, name):
        """Test that csv and Excel names are accepted."""
        assert is_supported_upload(name)

    @pytest.mark.parametrize("name", ["feedback.pdf", "xlsx", "notes.txt"])
    def test_unsupported(self, name):
        """Test that other file types are refused."""
        assert not is_supported_upload(name)

    def test_upload_reports_count(self, client, session):
        """Test that upload returns the stored record count."""
        session.add("POST", "/api/upload", make_response(body={"success": True, "count": 120}))
        result = client.upload(io.BytesIO(b"a,b\n1,2\n"), "feedback.csv")
        assert result.count == 120
        name, _ = session.calls[0]["files"]["file"]
        assert name == "feedback.csv"

    def test_upload_from_path(self, client, session, tmp_path):
        """Test that a Path can be uploaded directly."""
        path = tmp_path / "responses.xlsx"
        path.write_bytes(b"PK\x03\x04")
        session.add("POST", "/api/upload", make_response(body={"success": True, "count": 3}))
        assert client.upload(Path(path)).count == 3

    def test_upload_rejects_type_before_request(self, client, session):
        """Test that an unsupported file never reaches the backend."""
        with pytest.raises(ValueError):
            client.upload(b"%PDF", "feedback.pdf")
        assert session.calls == []

    def test_upload_server_message(self, client, session):
        """Test that an unsuccessful upload shows the server message."""
        session.add("POST", "/api/upload",
                    make_response(body={"success": False, "message": "Missing column qn3"}))
        with pytest.raises(ApiError, match="Missing column qn3"):
            client.upload(b"a,b", "feedback.csv")

    def test_upload_http_error_message(self, client, session):
        """Test that an HTTP error on upload shows the server message."""
        session.add("POST", "/api/upload", make_response(413, {"message": "File too large"}))
        with pytest.raises(ApiError, match="File too large"):
            client.upload(b"a,b", "feedback.csv")


class TestSpreadsheet:
    """Test the binary report transport."""

    def test_returns_bytes(self, client, session):
        """Test that report bytes are returned with the report timeout."""
        session.add("POST", "/api/reports/generate-report",
                    make_response(content_type=XLSX, raw=b"PK\x03\x04xlsx"))
        content, content_type = client.spreadsheet("/api/reports/generate-report", {})
        assert content == b"PK\x03\x04xlsx"
        assert "spreadsheetml" in content_type
        assert session.calls[0]["timeout"] == client.report_timeout

    def test_wrong_content_type(self, client, session):
        """Test that a non-spreadsheet reply is rejected."""
        session.add("POST", "/api/reports/generate-report", make_response(body={"ok": True}))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.spreadsheet("/api/reports/generate-report", {})

    def test_json_error_prefers_details(self, client, session):
        """Test that details wins over error in report failures."""
        session.add("POST", "/api/reports/generate-report",
                    make_response(500, {"error": "Report failed", "details": "No sections"}))
        with pytest.raises(ApiError, match="No sections"):
            client.spreadsheet("/api/reports/generate-report", {})

    def test_plain_error_body(self, client, session):
        """Test that a plain-text report failure gets the generic message."""
        session.add("POST", "/api/reports/generate-report",
                    make_response(500, content_type="text/plain", raw=b"Traceback ..."))
        with pytest.raises(ApiError, match="Server error occurred"):
            client.spreadsheet("/api/reports/generate-report", {})


class TestSchemaMismatch:
    """Test that replies which do not fit the schemas surface as ApiError."""

    def test_course_without_code(self, client, session):
        """Test that a course row missing its code is rejected."""
        session.add("GET", "/api/analysis/courses", make_response(body=[{"name": "no code"}]))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.courses("B.Tech", "CSE", "2022")

    def test_faculty_row_not_an_object(self, client, session):
        """Test that a faculty list of bare strings is rejected."""
        session.add("GET", "/api/analysis/faculty", make_response(body=["KARE1001"]))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.faculty("B.Tech", "CSE", "2022", "CSE201")

    def test_feedback_with_null_count(self, client, session):
        """Test that an option count of null fails the analysis parse."""
        session.add("GET", "/api/analysis/feedback", make_response(body={
            "success": True,
            "analysis": {"s": {"questions": {"q": {
                "options": [{"text": "Good", "value": 3, "count": None}],
            }}}},
        }))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.feedback({}, "KARE1001")

    def test_feedback_with_null_value(self, client, session):
        """Test that an option value of null fails the analysis parse."""
        session.add("GET", "/api/analysis/feedback", make_response(body={
            "success": True,
            "analysis": {"s": {"questions": {"q": {
                "options": [{"text": "Good", "value": None, "count": 1}],
            }}}},
        }))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.feedback({}, "KARE1001")

    def test_comments_with_bad_total(self, client, session):
        """Test that a non-numeric comment total is rejected."""
        session.add("GET", "/api/analysis/comments",
                    make_response(body={"has_comments": True, "total_comments": "many"}))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.comments({}, "KARE1001")

    def test_question_without_column_name(self, client, session):
        """Test that a catalog row missing column_name is rejected."""
        session.add("GET", "/api/questions/with-options", make_response(body=[
            {"id": 1, "section_type": "Teaching", "question": "Pace?"},
        ]))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.questions()

    def test_upload_with_bad_count(self, client, session):
        """Test that an upload reply with a non-numeric count is rejected."""
        session.add("POST", "/api/upload",
                    make_response(body={"success": True, "count": "lots"}))
        with pytest.raises(ApiError, match="Invalid response format from server"):
            client.upload(b"a,b", "feedback.csv")


class TestWorkerClient:
    """Test the per-thread client clone."""

    def test_worker_uses_a_fresh_session(self, session):
        """Test that worker() keeps settings but not the session."""
        fresh = FakeSession(session.base_url)
        client = FeedbackApiClient(
            base_url=session.base_url, session=session, timeout=5,
            report_timeout=60, session_factory=lambda: fresh,
        )
        worker = client.worker()
        assert worker.session is fresh
        assert (worker.base_url, worker.timeout, worker.report_timeout) == (
            client.base_url, 5, 60,
        )

    def test_close_closes_session(self, client, session):
        """Test that close() releases the underlying session."""
        client.close()
        assert session.closed
