"""SQLAlchemy models for the records store."""

from __future__ import annotations

import re
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates

from campusrecords.store.exceptions import InvalidInputError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

MIN_CREDITS = 1
MAX_CREDITS = 6
MIN_MARKS = 0.0
MAX_MARKS = 100.0
MAX_GPA = 4.0


class StudentStatus(StrEnum):
    """Student lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    SUSPENDED = "suspended"
    WITHDRAWN = "withdrawn"

    @property
    def allows_enrollment(self) -> bool:
        return self is StudentStatus.ACTIVE


class Semester(StrEnum):
    """Semester enum, in calendar order."""

    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def order(self) -> int:
        return list(Semester).index(self) + 1


class EnrollmentStatus(StrEnum):
    """Enrollment status enum."""

    ENROLLED = "enrolled"
    DROPPED = "dropped"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


class LetterGrade(StrEnum):
    """Letter grade bands, best first."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @property
    def grade_points(self) -> float:
        return _GRADE_POINTS[self]

    @property
    def min_marks(self) -> float:
        return _BAND_FLOORS[self]

    @property
    def is_passing(self) -> bool:
        return self is not LetterGrade.F

    @property
    def is_honor_level(self) -> bool:
        return self.grade_points >= 3.5

    @classmethod
    def from_marks(cls, marks: float) -> LetterGrade:
        """Map marks to the band whose floor they reach.

        Floors are inclusive, so 90.0 is an A and 89.9 is a B.
        """
        for grade in cls:
            if marks >= grade.min_marks:
                return grade
        return cls.F


_GRADE_POINTS = {
    LetterGrade.A: 4.0,
    LetterGrade.B: 3.0,
    LetterGrade.C: 2.0,
    LetterGrade.D: 1.0,
    LetterGrade.F: 0.0,
}

_BAND_FLOORS = {
    LetterGrade.A: 90.0,
    LetterGrade.B: 80.0,
    LetterGrade.C: 70.0,
    LetterGrade.D: 60.0,
    LetterGrade.F: 0.0,
}


class PersonRole(StrEnum):
    """Kind of person a record describes."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"


def is_eligible_for_enrollment(role: PersonRole, status: StudentStatus | None) -> bool:
    """Only active students may enroll; instructors never do."""
    return role is PersonRole.STUDENT and status is StudentStatus.ACTIVE


def _now() -> datetime:
    return datetime.now()


def _require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} cannot be empty", field=field, value=value)
    return value.strip()


def _require_unchanged(instance: Any, field: str, value: str) -> str:
    current = instance.__dict__.get(field)
    if current is not None and current != value:
        raise InvalidInputError(f"{field} cannot be changed once set", field=field, value=value)
    return value


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Student(Base):
    """Student model - identity, contact details and engine-maintained caches."""

    __tablename__ = "students"

    role = PersonRole.STUDENT

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reg_no: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[StudentStatus] = mapped_column(
        SAEnum(StudentStatus, native_enum=False, length=20), nullable=False
    )
    enrollment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    enrolled_courses: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    gpa: Mapped[float] = mapped_column(Float, nullable=False)
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now, onupdate=_now
    )

    def __init__(
        self,
        id: str,
        reg_no: str,
        full_name: str,
        email: str,
        status: StudentStatus = StudentStatus.ACTIVE,
        enrollment_date: datetime | None = None,
        enrolled_courses: list[str] | None = None,
        gpa: float = 0.0,
        total_credits: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.reg_no = reg_no
        self.full_name = full_name
        self.email = email
        self.status = status
        self.enrollment_date = enrollment_date if enrollment_date is not None else _now()
        self.enrolled_courses = enrolled_courses if enrolled_courses is not None else []
        self.gpa = gpa
        self.total_credits = total_credits

    @validates("id")
    def _validate_id(self, key: str, value: Any) -> str:
        return _require_unchanged(self, key, _require_text("Student ID", value))

    @validates("reg_no", "full_name")
    def _validate_text(self, key: str, value: Any) -> str:
        return _require_text(key, value)

    @validates("email")
    def _validate_email(self, key: str, value: Any) -> str:
        email = _require_text(key, value)
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError(f"Invalid email format: {email}", field=key, value=value)
        return email

    @validates("status")
    def _validate_status(self, key: str, value: Any) -> StudentStatus:
        if not isinstance(value, StudentStatus):
            raise InvalidInputError(f"Unknown student status: {value!r}", field=key, value=value)
        return value

    @validates("gpa")
    def _validate_gpa(self, key: str, value: Any) -> float:
        gpa = float(value)
        if not 0.0 <= gpa <= MAX_GPA:
            raise InvalidInputError(
                f"GPA must be between 0.0 and {MAX_GPA}: {gpa}", field=key, value=value
            )
        return gpa

    @validates("total_credits")
    def _validate_total_credits(self, key: str, value: Any) -> int:
        if value < 0:
            raise InvalidInputError(
                f"Total credits cannot be negative: {value}", field=key, value=value
            )
        return int(value)

    @validates("enrolled_courses")
    def _validate_enrolled_courses(self, key: str, value: Any) -> list[str]:
        return sorted(set(value))

    @property
    def is_eligible_for_enrollment(self) -> bool:
        return is_eligible_for_enrollment(self.role, self.status)

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, name={self.full_name!r}, status={self.status!r})>"


class Course(Base):
    """Course model - catalog entry with a fixed credit value."""

    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    department: Mapped[str] = mapped_column(String(255), nullable=False)
    semester: Mapped[Semester | None] = mapped_column(
        SAEnum(Semester, native_enum=False, length=20), nullable=True
    )
    instructor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now, onupdate=_now
    )

    def __init__(
        self,
        code: str,
        title: str,
        credits: int,
        department: str,
        semester: Semester | None = None,
        instructor: str | None = None,
        is_active: bool = True,
        description: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.code = code
        self.title = title
        self.credits = credits
        self.department = department
        self.semester = semester
        self.instructor = instructor
        self.is_active = is_active
        self.description = description

    @validates("code")
    def _validate_code(self, key: str, value: Any) -> str:
        return _require_unchanged(self, key, _require_text("Course code", value))

    @validates("title", "department")
    def _validate_text(self, key: str, value: Any) -> str:
        return _require_text(key, value)

    @validates("credits")
    def _validate_credits(self, key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"Credits must be an integer: {value!r}", field=key, value=value)
        if not MIN_CREDITS <= value <= MAX_CREDITS:
            raise InvalidInputError(
                f"Credits must be between {MIN_CREDITS}-{MAX_CREDITS}: {value}",
                field=key,
                value=value,
            )
        return value

    @validates("semester")
    def _validate_semester(self, key: str, value: Any) -> Semester | None:
        if value is not None and not isinstance(value, Semester):
            raise InvalidInputError(f"Unknown semester: {value!r}", field=key, value=value)
        return value

    @validates("instructor")
    def _validate_instructor(self, key: str, value: Any) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def __repr__(self) -> str:
        return f"<Course(code={self.code!r}, title={self.title!r}, credits={self.credits!r})>"


class Enrollment(Base):
    """Enrollment model - one record per (student, course) pair."""

    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    course_code: Mapped[str] = mapped_column(String(32), primary_key=True)
    enrollment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[EnrollmentStatus] = mapped_column(
        SAEnum(EnrollmentStatus, native_enum=False, length=20), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now, onupdate=_now
    )

    def __init__(
        self,
        student_id: str,
        course_code: str,
        status: EnrollmentStatus = EnrollmentStatus.ENROLLED,
        enrollment_date: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_id = student_id
        self.course_code = course_code
        self.status = status
        self.enrollment_date = enrollment_date if enrollment_date is not None else _now()

    @validates("student_id", "course_code")
    def _validate_key(self, key: str, value: Any) -> str:
        return _require_unchanged(self, key, _require_text(key, value))

    @property
    def is_active(self) -> bool:
        """Whether the enrollment can carry a grade."""
        return self.status in (EnrollmentStatus.ENROLLED, EnrollmentStatus.COMPLETED)

    def __repr__(self) -> str:
        return (
            f"<Enrollment(student_id={self.student_id!r}, course_code={self.course_code!r}, "
            f"status={self.status!r})>"
        )


class Grade(Base):
    """Grade model - marks plus the letter grade and points derived from them."""

    __tablename__ = "grades"

    student_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    course_code: Mapped[str] = mapped_column(String(32), primary_key=True)
    marks: Mapped[float] = mapped_column(Float, nullable=False)
    letter_grade: Mapped[LetterGrade] = mapped_column(
        SAEnum(LetterGrade, native_enum=False, length=2), nullable=False
    )
    grade_points: Mapped[float] = mapped_column(Float, nullable=False)
    recorded_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now, onupdate=_now
    )

    def __init__(
        self,
        student_id: str,
        course_code: str,
        marks: float,
        comments: str | None = None,
        recorded_date: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.student_id = student_id
        self.course_code = course_code
        self.marks = marks
        self.comments = comments
        self.recorded_date = recorded_date if recorded_date is not None else _now()

    @validates("student_id", "course_code")
    def _validate_key(self, key: str, value: Any) -> str:
        return _require_unchanged(self, key, _require_text(key, value))

    @validates("marks")
    def _validate_marks(self, key: str, value: Any) -> float:
        marks = validate_marks(value)
        # letter grade and points always follow marks
        letter = LetterGrade.from_marks(marks)
        self.letter_grade = letter
        self.grade_points = letter.grade_points
        return marks

    def __repr__(self) -> str:
        return (
            f"<Grade(student_id={self.student_id!r}, course_code={self.course_code!r}, "
            f"marks={self.marks!r}, letter_grade={self.letter_grade!r})>"
        )


def validate_marks(marks: Any) -> float:
    """Return marks as a float, or raise InvalidInputError outside [0, 100]."""
    try:
        value = float(marks)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Marks must be a number: {marks!r}", field="marks", value=marks) from e
    if not MIN_MARKS <= value <= MAX_MARKS:
        raise InvalidInputError(
            f"Marks must be between {MIN_MARKS:g} and {MAX_MARKS:g}: {marks}",
            field="marks",
            value=marks,
        )
    return value


def new_student(
    student_id: str,
    reg_no: str,
    full_name: str,
    email: str,
    status: StudentStatus = StudentStatus.ACTIVE,
    enrollment_date: datetime | None = None,
) -> Student:
    """Build a validated Student with empty enrollment caches.

    Raises:
        InvalidInputError: If any required field is blank or the email is malformed.
    """
    return Student(
        id=student_id,
        reg_no=reg_no,
        full_name=" ".join(_require_text("Full name", full_name).split()),
        email=email,
        status=status,
        enrollment_date=enrollment_date,
    )


def new_course(
    code: str,
    title: str,
    credits: int,
    department: str,
    semester: Semester | None = None,
    instructor: str | None = None,
    description: str | None = None,
    is_active: bool = True,
) -> Course:
    """Build a validated Course.

    Raises:
        InvalidInputError: If a required field is blank or credits are outside 1-6.
    """
    return Course(
        code=code,
        title=title,
        credits=credits,
        department=department,
        semester=semester,
        instructor=instructor,
        is_active=is_active,
        description=description,
    )
