"""Grade Engine - marks, letter grades and GPA."""

from campusrecords.grading.engine import GradeEngine
from campusrecords.grading.models import GradeStatistics

__all__ = [
    "GradeEngine",
    "GradeStatistics",
]
