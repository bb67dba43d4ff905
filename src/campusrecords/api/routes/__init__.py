"""API route modules."""

from campusrecords.api.routes import courses, enrollments, grades, students, transcripts

__all__ = ["courses", "enrollments", "grades", "students", "transcripts"]
