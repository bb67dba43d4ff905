"""Custom exceptions for the records store and engines."""

from __future__ import annotations

from typing import Any


class RecordsError(Exception):
    """Base exception for records errors."""

    error_code = "RECORDS_ERROR"


class NotFoundError(RecordsError):
    """Referenced key does not exist, or the referenced student is ineligible."""

    error_code = "ENTITY_NOT_FOUND"

    def __init__(self, entity_type: str, key: str, message: str | None = None) -> None:
        self.entity_type = entity_type
        self.key = key
        super().__init__(message or f"{entity_type} with id '{key}' not found")


class DuplicateEntityError(RecordsError):
    """Entity with given key already exists."""

    error_code = "DUPLICATE_ENTITY"

    def __init__(self, entity_type: str, key: str, message: str | None = None) -> None:
        self.entity_type = entity_type
        self.key = key
        super().__init__(message or f"{entity_type} with id '{key}' already exists")


class DuplicateEnrollmentError(RecordsError):
    """Student already has an enrollment record for the course."""

    error_code = "DUPLICATE_ENROLLMENT"

    def __init__(self, student_id: str, course_code: str) -> None:
        self.student_id = student_id
        self.course_code = course_code
        super().__init__(f"Student '{student_id}' is already enrolled in course '{course_code}'")


class CreditLimitExceededError(RecordsError):
    """Enrollment would push the student past the per-semester credit limit."""

    error_code = "MAX_CREDIT_LIMIT_EXCEEDED"

    def __init__(
        self,
        student_id: str,
        current_credits: int,
        attempted_credits: int,
        max_credits: int,
    ) -> None:
        self.student_id = student_id
        self.current_credits = current_credits
        self.attempted_credits = attempted_credits
        self.max_credits = max_credits
        super().__init__(
            f"Student '{student_id}' would exceed credit limit: "
            f"{current_credits} + {attempted_credits} > {max_credits}"
        )


class InvalidInputError(RecordsError):
    """Value is out of range or malformed."""

    error_code = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class InvalidTransitionError(InvalidInputError):
    """Enrollment status change is not allowed from the current status."""

    error_code = "INVALID_TRANSITION"
