"""Records Store - entity model, in-memory database and the student/course stores."""

from campusrecords.store.courses import CourseCatalog, DepartmentStats
from campusrecords.store.database import Database
from campusrecords.store.exceptions import (
    CreditLimitExceededError,
    DuplicateEnrollmentError,
    DuplicateEntityError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    RecordsError,
)
from campusrecords.store.locks import KeyedLock
from campusrecords.store.models import (
    Course,
    Enrollment,
    EnrollmentStatus,
    Grade,
    LetterGrade,
    PersonRole,
    Semester,
    Student,
    StudentStatus,
    is_eligible_for_enrollment,
    new_course,
    new_student,
    validate_marks,
)
from campusrecords.store.students import StudentDirectory

__all__ = [
    "Course",
    "CourseCatalog",
    "CreditLimitExceededError",
    "Database",
    "DepartmentStats",
    "DuplicateEnrollmentError",
    "DuplicateEntityError",
    "Enrollment",
    "EnrollmentStatus",
    "Grade",
    "InvalidInputError",
    "InvalidTransitionError",
    "KeyedLock",
    "LetterGrade",
    "NotFoundError",
    "PersonRole",
    "RecordsError",
    "Semester",
    "Student",
    "StudentDirectory",
    "StudentStatus",
    "is_eligible_for_enrollment",
    "new_course",
    "new_student",
    "validate_marks",
]
