from api.schemas import AnalysisResult, FacultyRecord


class TestFacultyRecord:
    """Test display helpers on faculty cards."""

    def test_initials_first_and_last(self):
        """Test that initials use the first and last names."""
        assert FacultyRecord(faculty_name="anita devi raman").initials == "AR"

    def test_initials_single_name(self):
        """Test that a single name gives one initial."""
        assert FacultyRecord(faculty_name="Prakash").initials == "P"

    def test_initials_missing(self):
        """Test that a missing name gives a question mark."""
        assert FacultyRecord().initials == "?"
        assert FacultyRecord(faculty_name="   ").initials == "?"

    def test_display_name(self):
        """Test that a missing name displays as Unknown."""
        assert FacultyRecord().display_name == "Unknown"

    def test_unknown_fields_kept(self):
        """Test that unknown backend fields are kept."""
        member = FacultyRecord.model_validate({"staff_id": "K1", "designation": "Professor"})
        assert member.model_dump()["designation"] == "Professor"


class TestAnalysisResult:

    def test_minimal(self):
        """Test that a bare reply parses with defaults."""
        result = AnalysisResult.model_validate({"staff_id": 1001})
        assert result.staff_id == "1001"
        assert result.analysis == {}
        assert result.comments is None

    def test_pass_through_option_value(self):
        """Test that fractional option values are kept."""
        result = AnalysisResult.model_validate({"analysis": {"s": {"questions": {"q": {
            "options": [{"text": "Odd", "value": 4.5, "count": 2}],
        }}}}})
        assert result.analysis["s"].questions["q"].options[0].value == 4.5
