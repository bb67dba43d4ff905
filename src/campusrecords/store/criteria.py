"""Reusable search predicates for students, courses, enrollments and grades.

Each factory returns a plain callable suitable for StudentDirectory.search or
CourseCatalog.search; all_of, any_of and negate combine them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from campusrecords.store.models import (
    Course,
    Enrollment,
    EnrollmentStatus,
    Grade,
    LetterGrade,
    Semester,
    Student,
    StudentStatus,
)

T = TypeVar("T")
Predicate = Callable[[T], bool]


def all_of(*predicates: Predicate[T]) -> Predicate[T]:
    return lambda item: all(p(item) for p in predicates)


def any_of(*predicates: Predicate[T]) -> Predicate[T]:
    return lambda item: any(p(item) for p in predicates)


def negate(predicate: Predicate[T]) -> Predicate[T]:
    return lambda item: not predicate(item)


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle.strip().lower() in haystack.lower()


# Students


def name_contains(part: str) -> Predicate[Student]:
    return lambda s: _contains(s.full_name, part)


def email_contains(part: str) -> Predicate[Student]:
    return lambda s: _contains(s.email, part)


def has_status(status: StudentStatus) -> Predicate[Student]:
    return lambda s: s.status is status


def gpa_at_least(minimum: float) -> Predicate[Student]:
    return lambda s: s.gpa >= minimum


def gpa_below(maximum: float) -> Predicate[Student]:
    return lambda s: s.gpa < maximum


def gpa_between(minimum: float, maximum: float) -> Predicate[Student]:
    """Inclusive on both ends."""
    return lambda s: minimum <= s.gpa <= maximum


def credits_at_least(minimum: int) -> Predicate[Student]:
    return lambda s: s.total_credits >= minimum


def enrolled_in(course_code: str) -> Predicate[Student]:
    return lambda s: course_code in s.enrolled_courses


def eligible_for_enrollment() -> Predicate[Student]:
    return lambda s: s.is_eligible_for_enrollment


# Courses


def code_contains(part: str) -> Predicate[Course]:
    return lambda c: _contains(c.code, part)


def title_contains(part: str) -> Predicate[Course]:
    return lambda c: _contains(c.title, part)


def in_department(department: str) -> Predicate[Course]:
    return lambda c: c.department.lower() == department.strip().lower()


def in_semester(semester: Semester) -> Predicate[Course]:
    return lambda c: c.semester is semester


def taught_by(instructor: str) -> Predicate[Course]:
    return lambda c: bool(instructor.strip()) and _contains(c.instructor, instructor)


def worth_credits(credits: int) -> Predicate[Course]:
    return lambda c: c.credits == credits


def is_active_course() -> Predicate[Course]:
    return lambda c: c.is_active


# Enrollments and grades


def enrollment_status(status: EnrollmentStatus) -> Predicate[Enrollment]:
    return lambda e: e.status is status


def letter_grade(letter: LetterGrade) -> Predicate[Grade]:
    return lambda g: g.letter_grade is letter


def passing() -> Predicate[Grade]:
    return lambda g: g.letter_grade.is_passing


def marks_at_least(minimum: float) -> Predicate[Grade]:
    return lambda g: g.marks >= minimum
