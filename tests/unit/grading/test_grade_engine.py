"""Unit tests for GradeEngine."""

import logging

import pytest

from campusrecords.registry import CampusRecords
from campusrecords.store import (
    DuplicateEntityError,
    EnrollmentStatus,
    InvalidInputError,
    LetterGrade,
    NotFoundError,
    RecordsError,
)


@pytest.fixture
def enrolled(populated: CampusRecords) -> CampusRecords:
    """S1 enrolled in C1, C2 and C3; S2 enrolled in C1."""
    populated.enrollments.enroll("S1", "C1")
    populated.enrollments.enroll("S1", "C2")
    populated.enrollments.enroll("S1", "C3")
    populated.enrollments.enroll("S2", "C1")
    return populated


@pytest.mark.unit
class TestRecordGrade:
    """Tests for record_grade."""

    def test_gpa_scenario(self, enrolled: CampusRecords) -> None:
        """85 in a 3-credit course is B (3.0); adding 95 in another lifts GPA to 3.5."""
        grade = enrolled.grades.record_grade("S1", "C1", 85)

        assert grade.letter_grade is LetterGrade.B
        assert grade.grade_points == 3.0
        assert enrolled.students.get_by_id("S1").gpa == pytest.approx(3.0)

        enrolled.grades.record_grade("S1", "C2", 95)

        assert enrolled.students.get_by_id("S1").gpa == pytest.approx(3.5)

    def test_gpa_weighted_by_credits(self, enrolled: CampusRecords) -> None:
        """A 6-credit F outweighs a 3-credit A."""
        enrolled.grades.record_grade("S1", "C1", 95)
        enrolled.grades.record_grade("S1", "C3", 40)

        assert enrolled.grades.calculate_gpa("S1") == pytest.approx(12.0 / 9)

    def test_marks_out_of_range(self, enrolled: CampusRecords) -> None:
        """InvalidInputError and nothing stored."""
        with pytest.raises(InvalidInputError):
            enrolled.grades.record_grade("S1", "C1", 105)

        assert not enrolled.grades.has_grade("S1", "C1")

    def test_comments_and_date(self, enrolled: CampusRecords) -> None:
        """Optional fields are stored."""
        grade = enrolled.grades.record_grade("S1", "C1", 72.5, comments="late lab")

        assert grade.comments == "late lab"
        assert grade.recorded_date is not None
        assert grade.letter_grade is LetterGrade.C

    def test_without_enrollment(self, enrolled: CampusRecords) -> None:
        """A grade needs an enrollment record."""
        with pytest.raises(NotFoundError):
            enrolled.grades.record_grade("S2", "C2", 80)

    def test_dropped_enrollment(self, enrolled: CampusRecords) -> None:
        """DROPPED enrollments cannot be graded."""
        enrolled.enrollments.update_status("S1", "C1", EnrollmentStatus.DROPPED)

        with pytest.raises(NotFoundError):
            enrolled.grades.record_grade("S1", "C1", 80)

    def test_completed_enrollment(self, enrolled: CampusRecords) -> None:
        """COMPLETED enrollments can be graded."""
        enrolled.enrollments.update_status("S1", "C1", EnrollmentStatus.COMPLETED)

        grade = enrolled.grades.record_grade("S1", "C1", 80)

        assert grade.letter_grade is LetterGrade.B

    def test_unknown_student_or_course(self, enrolled: CampusRecords) -> None:
        """NotFoundError for unknown keys."""
        with pytest.raises(NotFoundError):
            enrolled.grades.record_grade("nope", "C1", 80)
        with pytest.raises(NotFoundError):
            enrolled.grades.record_grade("S1", "NOPE", 80)

    def test_duplicate_grade(self, enrolled: CampusRecords) -> None:
        """Recording twice raises and keeps the first grade."""
        enrolled.grades.record_grade("S1", "C1", 85)

        with pytest.raises(DuplicateEntityError):
            enrolled.grades.record_grade("S1", "C1", 95)

        assert enrolled.grades.get_grade("S1", "C1").marks == 85


@pytest.mark.unit
class TestUpdateAndDeleteGrade:
    """Tests for update_grade and delete_grade."""

    def test_update_recomputes_letter_and_gpa(self, enrolled: CampusRecords) -> None:
        """New marks flow into letter grade and cached GPA."""
        enrolled.grades.record_grade("S1", "C1", 65)

        grade = enrolled.grades.update_grade("S1", "C1", 91)

        assert grade.letter_grade is LetterGrade.A
        assert enrolled.students.get_by_id("S1").gpa == pytest.approx(4.0)

    def test_update_keeps_comments_unless_given(self, enrolled: CampusRecords) -> None:
        """Comments change only when provided."""
        enrolled.grades.record_grade("S1", "C1", 65, comments="first attempt")

        grade = enrolled.grades.update_grade("S1", "C1", 70)

        assert grade.comments == "first attempt"

    def test_update_missing(self, enrolled: CampusRecords) -> None:
        """NotFoundError when there's no grade."""
        with pytest.raises(NotFoundError):
            enrolled.grades.update_grade("S1", "C1", 70)

    def test_update_bad_marks(self, enrolled: CampusRecords) -> None:
        """Out-of-range marks are rejected before touching the grade."""
        enrolled.grades.record_grade("S1", "C1", 65)

        with pytest.raises(InvalidInputError):
            enrolled.grades.update_grade("S1", "C1", -5)

        assert enrolled.grades.get_grade("S1", "C1").marks == 65

    def test_delete_refreshes_gpa(self, enrolled: CampusRecords) -> None:
        """Removing the only grade returns GPA to 0.0."""
        enrolled.grades.record_grade("S1", "C1", 95)

        assert enrolled.grades.delete_grade("S1", "C1") is True

        assert not enrolled.grades.has_grade("S1", "C1")
        assert enrolled.students.get_by_id("S1").gpa == 0.0

    def test_delete_missing(self, enrolled: CampusRecords) -> None:
        """NotFoundError when there's no grade."""
        with pytest.raises(NotFoundError):
            enrolled.grades.delete_grade("S1", "C1")


@pytest.mark.unit
class TestGpa:
    """Tests for GPA calculation and the cached value."""

    def test_no_grades(self, enrolled: CampusRecords) -> None:
        """0.0 with nothing graded."""
        assert enrolled.grades.calculate_gpa("S1") == 0.0

    def test_deleted_course_skipped(self, enrolled: CampusRecords) -> None:
        """Grades whose course left the catalog are ignored."""
        enrolled.grades.record_grade("S1", "C1", 95)
        enrolled.grades.record_grade("S1", "C2", 45)
        enrolled.courses.delete("C2")

        assert enrolled.grades.calculate_gpa("S1") == pytest.approx(4.0)

    def test_refresh_failure_is_logged(
        self,
        enrolled: CampusRecords,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A failed GPA refresh doesn't fail the grade operation."""

        def fail(*_args: object, **_kwargs: object) -> None:
            raise RecordsError("store unavailable")

        monkeypatch.setattr(enrolled.students, "update_gpa", fail)

        with caplog.at_level(logging.WARNING, logger="campusrecords"):
            grade = enrolled.grades.record_grade("S1", "C1", 88)

        assert grade.letter_grade is LetterGrade.B
        assert enrolled.grades.has_grade("S1", "C1")
        assert "Could not refresh GPA" in caplog.text


@pytest.mark.unit
class TestGradeReads:
    """Tests for listings and aggregates."""

    def test_student_grades_sorted(self, enrolled: CampusRecords) -> None:
        """Sorted by course code."""
        enrolled.grades.record_grade("S1", "C3", 70)
        enrolled.grades.record_grade("S1", "C1", 80)

        codes = [g.course_code for g in enrolled.grades.get_student_grades("S1")]

        assert codes == ["C1", "C3"]

    def test_student_grades_unknown(self, enrolled: CampusRecords) -> None:
        """NotFoundError for unknown students."""
        with pytest.raises(NotFoundError):
            enrolled.grades.get_student_grades("nope")

    def test_course_average_and_distribution(self, enrolled: CampusRecords) -> None:
        """Mean marks and letter counts per course."""
        enrolled.grades.record_grade("S1", "C1", 90)
        enrolled.grades.record_grade("S2", "C1", 70)

        assert enrolled.grades.calculate_course_average("C1") == pytest.approx(80.0)
        distribution = enrolled.grades.course_grade_distribution("C1")
        assert distribution[LetterGrade.A] == 1
        assert distribution[LetterGrade.C] == 1
        assert distribution[LetterGrade.F] == 0

    def test_course_average_empty(self, enrolled: CampusRecords) -> None:
        """0.0 for a course with no grades; NotFoundError for unknown courses."""
        assert enrolled.grades.calculate_course_average("C2") == 0.0
        with pytest.raises(NotFoundError):
            enrolled.grades.calculate_course_average("NOPE")

    def test_statistics(self, enrolled: CampusRecords) -> None:
        """Pass rate is a percentage."""
        enrolled.grades.record_grade("S1", "C1", 90)
        enrolled.grades.record_grade("S1", "C2", 50)
        enrolled.grades.record_grade("S2", "C1", 75)
        enrolled.grades.record_grade("S1", "C3", 30)

        stats = enrolled.grades.statistics()

        assert stats.total == 4
        assert stats.average_marks == pytest.approx(61.25)
        assert stats.pass_rate == pytest.approx(50.0)
        assert stats.distribution[LetterGrade.F] == 2

    def test_statistics_empty(self, records: CampusRecords) -> None:
        """Zeros with no grades."""
        stats = records.grades.statistics()

        assert stats.total == 0
        assert stats.pass_rate == 0.0
        assert set(stats.distribution) == set(LetterGrade)
