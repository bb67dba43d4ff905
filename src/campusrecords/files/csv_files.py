"""CSV import and export of the whole record set.

Each collection has its own file and header. Import replays rows through the
engines so every business rule applies to imported data exactly as it does
to live operations; derived columns (GPA, total credits, letter grade, grade
points) are written for readers but recomputed on import.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from campusrecords.store.exceptions import RecordsError
from campusrecords.store.models import (
    Course,
    EnrollmentStatus,
    Semester,
    Student,
    StudentStatus,
    new_course,
    new_student,
    validate_marks,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from campusrecords.registry import CampusRecords

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

STUDENTS_FILE = "students.csv"
COURSES_FILE = "courses.csv"
ENROLLMENTS_FILE = "enrollments.csv"
GRADES_FILE = "grades.csv"

# what errors="replace" substitutes for bytes that are not UTF-8
_UNDECODABLE = "\ufffd"

STUDENT_HEADER = ["ID", "RegNo", "Name", "Email", "Status", "EnrollmentDate", "GPA", "TotalCredits"]
COURSE_HEADER = ["Code", "Title", "Credits", "Department", "Semester", "Instructor", "Active"]
ENROLLMENT_HEADER = ["StudentID", "CourseCode", "EnrollmentDate", "Status"]
GRADE_HEADER = ["StudentID", "CourseCode", "Marks", "LetterGrade", "GradePoints", "RecordedDate"]

E = TypeVar("E", bound=Enum)
R = TypeVar("R")


@dataclass(frozen=True)
class EnrollmentRow:
    """An enrollment as read from CSV, not yet applied."""

    student_id: str
    course_code: str
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    enrollment_date: datetime | None = None


@dataclass(frozen=True)
class GradeRow:
    """A grade as read from CSV, not yet applied."""

    student_id: str
    course_code: str
    marks: float
    recorded_date: datetime | None = None


@dataclass
class ImportReport:
    """What an import applied and which rows it rejected."""

    students: int = 0
    courses: int = 0
    enrollments: int = 0
    grades: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.students + self.courses + self.enrollments + self.grades

    @property
    def ok(self) -> bool:
        return not self.errors


# --- Export ---


def _write(path: Path | str, header: list[str], rows: Iterable[list[Any]]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def _date(value: datetime | None) -> str:
    return value.strftime(DATE_FORMAT) if value is not None else ""


def export_students(students: Iterable[Student], path: Path | str) -> Path:
    return _write(
        path,
        STUDENT_HEADER,
        (
            [
                s.id,
                s.reg_no,
                s.full_name,
                s.email,
                s.status.name,
                _date(s.enrollment_date),
                f"{s.gpa:.2f}",
                s.total_credits,
            ]
            for s in students
        ),
    )


def export_courses(courses: Iterable[Course], path: Path | str) -> Path:
    return _write(
        path,
        COURSE_HEADER,
        (
            [
                c.code,
                c.title,
                c.credits,
                c.department,
                c.semester.name if c.semester is not None else "",
                c.instructor or "",
                "true" if c.is_active else "false",
            ]
            for c in courses
        ),
    )


def export_enrollments(records: CampusRecords, path: Path | str) -> Path:
    return _write(
        path,
        ENROLLMENT_HEADER,
        (
            [e.student_id, e.course_code, _date(e.enrollment_date), e.status.name]
            for e in records.enrollments.get_all()
        ),
    )


def export_grades(records: CampusRecords, path: Path | str) -> Path:
    return _write(
        path,
        GRADE_HEADER,
        (
            [
                g.student_id,
                g.course_code,
                f"{g.marks:.2f}",
                g.letter_grade.value,
                f"{g.grade_points:.2f}",
                _date(g.recorded_date),
            ]
            for g in records.grades.get_all()
        ),
    )


def export_all(records: CampusRecords, directory: Path | str) -> list[Path]:
    """Write all four CSV files into directory.

    Returns:
        Paths of the files written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    paths = [
        export_students(records.students.get_all(), directory / STUDENTS_FILE),
        export_courses(records.courses.get_all(), directory / COURSES_FILE),
        export_enrollments(records, directory / ENROLLMENTS_FILE),
        export_grades(records, directory / GRADES_FILE),
    ]
    logger.info("Exported records to %s", directory)
    return paths


# --- Parsing ---


def _required(row: dict[str, str | None], column: str) -> str:
    value = (row.get(column) or "").strip()
    if not value:
        raise ValueError(f"missing value for '{column}'")
    return value


def _optional(row: dict[str, str | None], column: str) -> str | None:
    value = (row.get(column) or "").strip()
    return value or None


def _enum(enum_type: type[E], value: str) -> E:
    try:
        return enum_type[value.strip().upper()]
    except KeyError:
        raise ValueError(f"unknown {enum_type.__name__} '{value}'") from None


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.strptime(value, DATE_FORMAT)


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return True
    return value.strip().lower() not in ("false", "0", "no", "n")


def parse_student(row: dict[str, str | None]) -> Student:
    status = _optional(row, "Status")
    return new_student(
        student_id=_required(row, "ID"),
        reg_no=_required(row, "RegNo"),
        full_name=_required(row, "Name"),
        email=_required(row, "Email"),
        status=_enum(StudentStatus, status) if status else StudentStatus.ACTIVE,
        enrollment_date=_parse_date(_optional(row, "EnrollmentDate")),
    )


def parse_course(row: dict[str, str | None]) -> Course:
    semester = _optional(row, "Semester")
    return new_course(
        code=_required(row, "Code"),
        title=_required(row, "Title"),
        credits=int(_required(row, "Credits")),
        department=_required(row, "Department"),
        semester=_enum(Semester, semester) if semester else None,
        instructor=_optional(row, "Instructor"),
        is_active=_parse_bool(_optional(row, "Active")),
    )


def parse_enrollment(row: dict[str, str | None]) -> EnrollmentRow:
    status = _optional(row, "Status")
    return EnrollmentRow(
        student_id=_required(row, "StudentID"),
        course_code=_required(row, "CourseCode"),
        status=_enum(EnrollmentStatus, status) if status else EnrollmentStatus.ENROLLED,
        enrollment_date=_parse_date(_optional(row, "EnrollmentDate")),
    )


def parse_grade(row: dict[str, str | None]) -> GradeRow:
    return GradeRow(
        student_id=_required(row, "StudentID"),
        course_code=_required(row, "CourseCode"),
        marks=validate_marks(_required(row, "Marks")),
        recorded_date=_parse_date(_optional(row, "RecordedDate")),
    )


def _read(
    path: Path | str,
    parse: Callable[[dict[str, str | None]], R],
    errors: list[str] | None,
) -> list[R]:
    """Parse every data row; malformed rows are logged, collected and skipped.

    Bytes that are not UTF-8 make their row malformed.

    Raises:
        FileNotFoundError: If path doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    items: list[R] = []
    with path.open(newline="", encoding="utf-8-sig", errors="replace") as f:
        # line 1 is the header
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            try:
                if any(_UNDECODABLE in (value or "") for value in row.values()):
                    raise ValueError("row is not valid UTF-8")
                items.append(parse(row))
            except (RecordsError, ValueError) as e:
                message = f"{path.name}:{line_no}: {e}"
                logger.warning("Skipping row %s", message)
                if errors is not None:
                    errors.append(message)
    return items


def read_students(path: Path | str, errors: list[str] | None = None) -> list[Student]:
    return _read(path, parse_student, errors)


def read_courses(path: Path | str, errors: list[str] | None = None) -> list[Course]:
    return _read(path, parse_course, errors)


def read_enrollments(path: Path | str, errors: list[str] | None = None) -> list[EnrollmentRow]:
    return _read(path, parse_enrollment, errors)


def read_grades(path: Path | str, errors: list[str] | None = None) -> list[GradeRow]:
    return _read(path, parse_grade, errors)


# --- Import ---


def import_all(records: CampusRecords, directory: Path | str) -> ImportReport:
    """Load the CSV files in directory into records.

    Courses and students are added first, with every student temporarily
    ACTIVE. Enrollments are replayed through enroll(), grades through
    record_grade(), then non-ENROLLED enrollment statuses and the students'
    own statuses are applied. Files that are absent are skipped.

    Args:
        records: Target records (normally empty)
        directory: Directory holding the CSV files

    Returns:
        Counts of applied rows and a message per rejected row
    """
    directory = Path(directory)
    report = ImportReport()

    def rows(name: str, reader: Callable[..., list[R]]) -> list[R]:
        path = directory / name
        if not path.exists():
            logger.info("No %s in %s, skipping", name, directory)
            return []
        return reader(path, report.errors)

    def apply(label: str, action: Callable[[], object]) -> bool:
        try:
            action()
        except RecordsError as e:
            message = f"{label}: {e}"
            logger.warning("Import rejected %s", message)
            report.errors.append(message)
            return False
        return True

    for course in rows(COURSES_FILE, read_courses):
        if apply(f"course {course.code}", lambda c=course: records.courses.add(c)):
            report.courses += 1

    final_status: dict[str, StudentStatus] = {}
    for student in rows(STUDENTS_FILE, read_students):
        final_status[student.id] = student.status
        student.status = StudentStatus.ACTIVE
        if apply(f"student {student.id}", lambda s=student: records.students.add(s)):
            report.students += 1

    enrollment_rows = rows(ENROLLMENTS_FILE, read_enrollments)
    for row in enrollment_rows:
        label = f"enrollment {row.student_id}/{row.course_code}"
        if apply(
            label,
            lambda r=row: records.enrollments.enroll(
                r.student_id, r.course_code, enrollment_date=r.enrollment_date
            ),
        ):
            report.enrollments += 1

    for grade in rows(GRADES_FILE, read_grades):
        label = f"grade {grade.student_id}/{grade.course_code}"
        if apply(
            label,
            lambda g=grade: records.grades.record_grade(
                g.student_id, g.course_code, g.marks, recorded_date=g.recorded_date
            ),
        ):
            report.grades += 1

    for row in enrollment_rows:
        if row.status is EnrollmentStatus.ENROLLED:
            continue
        if records.enrollments.get_enrollment(row.student_id, row.course_code) is None:
            continue
        apply(
            f"enrollment status {row.student_id}/{row.course_code}",
            lambda r=row: records.enrollments.update_status(r.student_id, r.course_code, r.status),
        )

    for student_id, status in final_status.items():
        if status is StudentStatus.ACTIVE or records.students.get_by_id(student_id) is None:
            continue
        records.students.update(student_id, status=status)

    logger.info(
        "Imported %d students, %d courses, %d enrollments, %d grades from %s (%d errors)",
        report.students,
        report.courses,
        report.enrollments,
        report.grades,
        directory,
        len(report.errors),
    )
    return report
