import pytest

from api.client import FeedbackApiClient
from fakes import FakeSession


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return FeedbackApiClient(
        base_url=session.base_url, session=session, session_factory=lambda: session
    )


@pytest.fixture
def analysis_payload():
    """A feedback reply for one faculty member with two sections."""
    return {
        "success": True,
        "staff_id": "KARE1001",
        "course_code": "CSE201",
        "course_name": "Data Structures",
        "total_responses": 10,
        "analysis": {
            "teaching": {
                "section_name": "Teaching Effectiveness",
                "questions": {
                    "qn1": {
                        "question": "How is the faculty's approach?",
                        "total_responses": 10,
                        "options": [
                            {"text": "Poor", "value": 1, "count": 0},
                            {"text": "Average", "value": 2, "count": 0},
                            {"text": "Good", "value": 3, "count": 10},
                        ],
                    },
                },
            },
            "assessment": {
                "section_name": "Assessment and Feedback",
                "questions": {
                    "qn2": {
                        "question": "Whether faculty returns answer scripts in time?",
                        "total_responses": 10,
                        "options": [
                            {"text": "Poor", "value": 1, "count": 10},
                            {"text": "Average", "value": 2, "count": 0},
                            {"text": "Good", "value": 3, "count": 0},
                        ],
                    },
                },
            },
        },
        "comments": {"has_comments": True, "total_comments": 2},
    }
