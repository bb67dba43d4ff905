"""Unit tests for StudentDirectory."""

import pytest

from campusrecords.config import RecordsConfig
from campusrecords.store import (
    Database,
    DuplicateEntityError,
    InvalidInputError,
    NotFoundError,
    StudentDirectory,
    StudentStatus,
    new_student,
)
from campusrecords.store import criteria


@pytest.fixture
def directory():
    """A StudentDirectory over an in-memory database."""
    db = Database(":memory:")
    db.create_tables()
    yield StudentDirectory(db, RecordsConfig())
    db.close()


def _add(directory: StudentDirectory, student_id: str, name: str, email: str | None = None):
    return directory.add(
        new_student(student_id, f"R-{student_id}", name, email or f"{student_id.lower()}@uni.edu")
    )


@pytest.mark.unit
class TestAddStudent:
    """Tests for add."""

    def test_add_and_get(self, directory: StudentDirectory) -> None:
        """Added students can be fetched by ID."""
        _add(directory, "S1", "Ada Lovelace")

        student = directory.get_by_id("S1")

        assert student is not None
        assert student.full_name == "Ada Lovelace"
        assert student.created_at is not None
        assert student.updated_at is not None

    def test_duplicate_id_raises(self, directory: StudentDirectory) -> None:
        """DuplicateEntityError on an existing ID."""
        _add(directory, "S1", "Ada")

        with pytest.raises(DuplicateEntityError) as exc_info:
            directory.add(new_student("S1", "R-other", "Other", "other@uni.edu"))

        assert "S1" in str(exc_info.value)
        assert exc_info.value.error_code == "DUPLICATE_ENTITY"

    def test_duplicate_reg_no_raises(self, directory: StudentDirectory) -> None:
        """DuplicateEntityError when the registration number is taken."""
        directory.add(new_student("S1", "R1", "Ada", "ada@uni.edu"))

        with pytest.raises(DuplicateEntityError) as exc_info:
            directory.add(new_student("S2", "R1", "Brian", "bwk@uni.edu"))

        assert "registration number" in str(exc_info.value)
        assert directory.get_by_id("S2") is None


@pytest.mark.unit
class TestGetStudents:
    """Tests for lookups and listing."""

    def test_get_missing_returns_none(self, directory: StudentDirectory) -> None:
        """get_by_id returns None for unknown IDs."""
        assert directory.get_by_id("nope") is None

    def test_require_missing_raises(self, directory: StudentDirectory) -> None:
        """require raises NotFoundError for unknown IDs."""
        with pytest.raises(NotFoundError):
            directory.require("nope")

    def test_get_all_sorted_by_name(self, directory: StudentDirectory) -> None:
        """Lists are sorted by name, ignoring case, never by insertion order."""
        _add(directory, "S1", "charlie")
        _add(directory, "S2", "Alice")
        _add(directory, "S3", "bob")

        assert [s.full_name for s in directory.get_all()] == ["Alice", "bob", "charlie"]

    def test_get_by_status(self, directory: StudentDirectory) -> None:
        """Only students with the given status are returned."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Brian")
        directory.update("S2", status=StudentStatus.GRADUATED)

        graduated = directory.get_by_status(StudentStatus.GRADUATED)

        assert [s.id for s in graduated] == ["S2"]


@pytest.mark.unit
class TestUpdateStudent:
    """Tests for update, deactivate and delete."""

    def test_update_fields(self, directory: StudentDirectory) -> None:
        """Only provided fields change."""
        _add(directory, "S1", "Ada", "ada@uni.edu")

        updated = directory.update("S1", full_name="Ada King", email="king@uni.edu")

        assert updated.full_name == "Ada King"
        assert updated.email == "king@uni.edu"
        assert updated.reg_no == "R-S1"

    def test_update_missing_raises(self, directory: StudentDirectory) -> None:
        """NotFoundError for unknown students."""
        with pytest.raises(NotFoundError):
            directory.update("nope", full_name="X")

    def test_update_bad_email_raises(self, directory: StudentDirectory) -> None:
        """Validation applies to updates and nothing is stored."""
        _add(directory, "S1", "Ada", "ada@uni.edu")

        with pytest.raises(InvalidInputError):
            directory.update("S1", email="not-an-email")

        assert directory.get_by_id("S1").email == "ada@uni.edu"

    def test_update_reg_no_taken_raises(self, directory: StudentDirectory) -> None:
        """A registration number belonging to someone else is rejected."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Brian")

        with pytest.raises(DuplicateEntityError):
            directory.update("S2", reg_no="R-S1")

    def test_deactivate(self, directory: StudentDirectory) -> None:
        """deactivate flips status but keeps the record."""
        _add(directory, "S1", "Ada")

        directory.deactivate("S1")

        student = directory.get_by_id("S1")
        assert student is not None
        assert student.status is StudentStatus.INACTIVE

    def test_deactivate_missing_raises(self, directory: StudentDirectory) -> None:
        """NotFoundError for unknown students."""
        with pytest.raises(NotFoundError):
            directory.deactivate("nope")

    def test_delete(self, directory: StudentDirectory) -> None:
        """delete removes the record."""
        _add(directory, "S1", "Ada")

        assert directory.delete("S1") is True
        assert directory.get_by_id("S1") is None

    def test_delete_missing_raises(self, directory: StudentDirectory) -> None:
        """NotFoundError for unknown students."""
        with pytest.raises(NotFoundError):
            directory.delete("nope")


@pytest.mark.unit
class TestSearchStudents:
    """Tests for search operations."""

    def test_search_by_name_case_insensitive(self, directory: StudentDirectory) -> None:
        """Substring match ignoring case."""
        _add(directory, "S1", "Ada Lovelace")
        _add(directory, "S2", "Grace Hopper")

        assert [s.id for s in directory.search_by_name("LOVE")] == ["S1"]
        assert directory.search_by_name("xyz") == []

    def test_search_by_name_literal_wildcards(self, directory: StudentDirectory) -> None:
        """SQL wildcard characters in the term match literally."""
        _add(directory, "S1", "Ada Lovelace")

        assert directory.search_by_name("%") == []

    def test_search_by_email(self, directory: StudentDirectory) -> None:
        """Substring match on email."""
        _add(directory, "S1", "Ada", "ada@math.uni.edu")
        _add(directory, "S2", "Brian", "bwk@cs.uni.edu")

        assert [s.id for s in directory.search_by_email("@CS.")] == ["S2"]

    def test_search_with_criteria(self, directory: StudentDirectory) -> None:
        """search accepts composed predicates."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Alan")
        _add(directory, "S3", "Brian")
        directory.update_gpa("S1", 3.8)
        directory.update_gpa("S2", 2.5)

        found = directory.search(
            criteria.all_of(criteria.name_contains("a"), criteria.gpa_at_least(3.0))
        )

        assert [s.id for s in found] == ["S1"]

    def test_advanced_search_sorted_by_gpa(self, directory: StudentDirectory) -> None:
        """Results are ordered by GPA, highest first."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Alan")
        _add(directory, "S3", "Alice")
        directory.update_gpa("S1", 2.0)
        directory.update_gpa("S2", 3.9)
        directory.update_gpa("S3", 3.1)

        found = directory.advanced_search(name="al", min_gpa=3.0)

        assert [s.id for s in found] == ["S2", "S3"]

    def test_advanced_search_by_status(self, directory: StudentDirectory) -> None:
        """Status filter combines with the others."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Alan")
        directory.update("S2", status=StudentStatus.SUSPENDED)

        found = directory.advanced_search(status=StudentStatus.SUSPENDED)

        assert [s.id for s in found] == ["S2"]

    def test_statistics_counts_every_status(self, directory: StudentDirectory) -> None:
        """Every status appears, with zero counts where empty."""
        _add(directory, "S1", "Ada")
        _add(directory, "S2", "Alan")
        directory.deactivate("S2")

        stats = directory.statistics()

        assert stats[StudentStatus.ACTIVE] == 1
        assert stats[StudentStatus.INACTIVE] == 1
        assert stats[StudentStatus.GRADUATED] == 0
        assert set(stats) == set(StudentStatus)


@pytest.mark.unit
class TestEnrollmentSupport:
    """Tests for the cache accessors used by the engines."""

    def test_can_enroll(self, directory: StudentDirectory) -> None:
        """Active students below the limit, not holding the code, can enroll."""
        _add(directory, "S1", "Ada")

        assert directory.can_enroll("S1", "C1")

        directory.update_enrollment_cache("S1", ["C1"], 3)
        assert not directory.can_enroll("S1", "C1")
        assert directory.can_enroll("S1", "C2")

    def test_can_enroll_false_at_limit(self, directory: StudentDirectory) -> None:
        """A student at the credit limit cannot enroll in anything."""
        _add(directory, "S1", "Ada")
        directory.update_enrollment_cache("S1", ["C1", "C2", "C3"], 18)

        assert not directory.can_enroll("S1", "C4")

    def test_can_enroll_false_for_ineligible_or_unknown(self, directory: StudentDirectory) -> None:
        """Unknown and inactive students cannot enroll."""
        _add(directory, "S1", "Ada")
        directory.deactivate("S1")

        assert not directory.can_enroll("S1", "C1")
        assert not directory.can_enroll("nope", "C1")

    def test_current_credits(self, directory: StudentDirectory) -> None:
        """Cached value, 0 for unknown students."""
        _add(directory, "S1", "Ada")
        directory.update_enrollment_cache("S1", ["C1"], 4)

        assert directory.current_credits("S1") == 4
        assert directory.current_credits("nope") == 0

    def test_update_gpa_out_of_range(self, directory: StudentDirectory) -> None:
        """GPA must stay within 0.0-4.0."""
        _add(directory, "S1", "Ada")

        with pytest.raises(InvalidInputError):
            directory.update_gpa("S1", 4.5)

    def test_update_caches_missing_student(self, directory: StudentDirectory) -> None:
        """NotFoundError for unknown students."""
        with pytest.raises(NotFoundError):
            directory.update_gpa("nope", 3.0)
        with pytest.raises(NotFoundError):
            directory.update_enrollment_cache("nope", [], 0)
