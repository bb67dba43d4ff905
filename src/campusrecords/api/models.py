"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from campusrecords.store.models import (
    MAX_CREDITS,
    MIN_CREDITS,
    EnrollmentStatus,
    LetterGrade,
    Semester,
    StudentStatus,
)

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Student models


class StudentCreate(BaseModel):
    """Request model for adding a student."""

    id: str = Field(..., min_length=1, max_length=64)
    reg_no: str = Field(..., min_length=1, max_length=64)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    status: StudentStatus = StudentStatus.ACTIVE
    enrollment_date: datetime | None = None


class StudentUpdate(BaseModel):
    """Request model for updating a student (partial update)."""

    reg_no: str | None = Field(default=None, min_length=1, max_length=64)
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    status: StudentStatus | None = None
    enrollment_date: datetime | None = None


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    reg_no: str
    full_name: str
    email: str
    status: StudentStatus
    enrollment_date: datetime
    enrolled_courses: list[str]
    gpa: float
    total_credits: int
    created_at: datetime
    updated_at: datetime


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


# Course models


class CourseCreate(BaseModel):
    """Request model for adding a course."""

    code: str = Field(..., min_length=1, max_length=32)
    title: str = Field(..., min_length=1, max_length=255)
    credits: int = Field(..., ge=MIN_CREDITS, le=MAX_CREDITS)
    department: str = Field(..., min_length=1, max_length=255)
    semester: Semester | None = None
    instructor: str | None = Field(default=None, max_length=255)
    description: str | None = None
    is_active: bool = True


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    credits: int | None = Field(default=None, ge=MIN_CREDITS, le=MAX_CREDITS)
    department: str | None = Field(default=None, min_length=1, max_length=255)
    semester: Semester | None = None
    instructor: str | None = Field(default=None, max_length=255)
    description: str | None = None
    is_active: bool | None = None


class InstructorAssignment(BaseModel):
    """Request model for assigning an instructor."""

    instructor: str = Field(..., min_length=1, max_length=255)


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    title: str
    credits: int
    department: str
    semester: Semester | None
    instructor: str | None
    is_active: bool
    description: str | None
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


class DepartmentStatsResponse(BaseModel):
    """Per-department course totals."""

    model_config = ConfigDict(from_attributes=True)

    department: str
    total_courses: int
    active_courses: int
    total_credits: int
    average_credits: float


class CourseGradeSummary(BaseModel):
    """Average marks and letter distribution for one course."""

    course_code: str
    average_marks: float
    distribution: dict[LetterGrade, int]


# Enrollment models


class EnrollmentCreate(BaseModel):
    """Request model for enrolling a student."""

    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)


class EnrollmentStatusUpdate(BaseModel):
    """Request model for changing an enrollment's status."""

    status: EnrollmentStatus


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    course_code: str
    enrollment_date: datetime
    status: EnrollmentStatus


def enrollment_to_response(enrollment: Any) -> EnrollmentResponse:
    """Convert an Enrollment model to EnrollmentResponse."""
    return EnrollmentResponse.model_validate(enrollment)


class EnrollmentStatsResponse(BaseModel):
    """Enrollment counts."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    by_status: dict[EnrollmentStatus, int]
    by_course: dict[str, int]


# Grade models


class GradeCreate(BaseModel):
    """Request model for recording a grade."""

    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    marks: float
    comments: str | None = None


class GradeUpdate(BaseModel):
    """Request model for changing a grade's marks."""

    marks: float
    comments: str | None = None


class GradeResponse(BaseModel):
    """Response model for a grade."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    course_code: str
    marks: float
    letter_grade: LetterGrade
    grade_points: float
    recorded_date: datetime
    comments: str | None


def grade_to_response(grade: Any) -> GradeResponse:
    """Convert a Grade model to GradeResponse."""
    return GradeResponse.model_validate(grade)


class GradeStatsResponse(BaseModel):
    """Statistics over every recorded grade."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    average_marks: float
    distribution: dict[LetterGrade, int]
    pass_rate: float


# Transcript models


class TranscriptEntryResponse(BaseModel):
    """One transcript line."""

    model_config = ConfigDict(from_attributes=True)

    course_code: str
    title: str
    credits: int
    semester: Semester | None
    marks: float
    letter_grade: LetterGrade
    grade_points: float
    quality_points: float


class TranscriptSummaryResponse(BaseModel):
    """Transcript totals."""

    model_config = ConfigDict(from_attributes=True)

    credits_attempted: int
    credits_earned: int
    quality_points: float
    gpa: float
    standing: str
    distribution: dict[LetterGrade, int]


class TranscriptResponse(BaseModel):
    """Response model for a transcript."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    full_name: str
    reg_no: str
    email: str
    status: StudentStatus
    generated_at: datetime
    entries: list[TranscriptEntryResponse]
    summary: TranscriptSummaryResponse


def transcript_to_response(transcript: Any) -> TranscriptResponse:
    """Convert a Transcript to TranscriptResponse."""
    return TranscriptResponse.model_validate(transcript)
