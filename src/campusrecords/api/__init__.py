"""REST API for Campus Records."""

from campusrecords.api.app import app, create_app, register_exception_handlers
from campusrecords.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    EnrollmentResponse,
    GradeResponse,
    StudentCreate,
    StudentResponse,
    TranscriptResponse,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "EnrollmentResponse",
    "GradeResponse",
    "StudentCreate",
    "StudentResponse",
    "TranscriptResponse",
    "app",
    "create_app",
    "register_exception_handlers",
]
