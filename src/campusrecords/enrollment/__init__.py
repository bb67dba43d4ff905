"""Enrollment Engine - who is enrolled in what, within the credit limit."""

from campusrecords.enrollment.engine import EnrollmentEngine, EnrollmentStats

__all__ = [
    "EnrollmentEngine",
    "EnrollmentStats",
]
