"""GradeEngine - marks, letter grades and cumulative GPA."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from campusrecords.grading.models import GradeStatistics, empty_distribution
from campusrecords.store.exceptions import DuplicateEntityError, NotFoundError, RecordsError
from campusrecords.store.models import Grade, LetterGrade, validate_marks

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from campusrecords.enrollment.engine import EnrollmentEngine
    from campusrecords.store.courses import CourseCatalog
    from campusrecords.store.database import Database
    from campusrecords.store.locks import KeyedLock
    from campusrecords.store.students import StudentDirectory

logger = logging.getLogger(__name__)


class GradeEngine:
    """Owns grade records and keeps each student's cached GPA current.

    GPA is the credit-weighted mean of grade points:
    sum(points * credits) / sum(credits), over grades whose course is still
    in the catalog. Refreshing the cached value is best-effort: a failure is
    logged and the grade operation still succeeds.
    """

    def __init__(
        self,
        database: Database,
        students: StudentDirectory,
        courses: CourseCatalog,
        enrollments: EnrollmentEngine,
        locks: KeyedLock,
    ) -> None:
        self._db = database
        self._students = students
        self._courses = courses
        self._enrollments = enrollments
        self._locks = locks

    # --- Mutations ---

    def record_grade(
        self,
        student_id: str,
        course_code: str,
        marks: float,
        comments: str | None = None,
        recorded_date: datetime | None = None,
    ) -> Grade:
        """Record a grade for an enrolled student.

        Args:
            student_id: The student's ID
            course_code: The course's code
            marks: Marks between 0 and 100 inclusive
            comments: Optional free-text note
            recorded_date: When the grade was recorded. Defaults to now.

        Returns:
            The created Grade with letter grade and points filled in

        Raises:
            InvalidInputError: If marks are outside 0-100
            NotFoundError: If the student, course or an active enrollment is missing
            DuplicateEntityError: If the pair already has a grade
        """
        marks = validate_marks(marks)
        with self._locks.hold(student_id):
            self._students.require(student_id)
            self._courses.require(course_code)
            if not self._enrollments.has_active_enrollment(student_id, course_code):
                raise NotFoundError(
                    "Enrollment",
                    f"{student_id}/{course_code}",
                    f"Student '{student_id}' has no active enrollment in course '{course_code}'",
                )

            with self._db.session_scope() as session:
                if session.get(Grade, (student_id, course_code)) is not None:
                    raise DuplicateEntityError(
                        "Grade",
                        f"{student_id}/{course_code}",
                        f"Grade for student '{student_id}' in course '{course_code}' "
                        "already exists",
                    )
                grade = Grade(
                    student_id=student_id,
                    course_code=course_code,
                    marks=marks,
                    comments=comments,
                    recorded_date=recorded_date,
                )
                session.add(grade)
                session.commit()
                session.refresh(grade)

            logger.info(
                "Recorded grade %s (%.1f) for student %s in %s",
                grade.letter_grade.value,
                grade.marks,
                student_id,
                course_code,
            )
            self.refresh_gpa(student_id)
            return grade

    def update_grade(
        self,
        student_id: str,
        course_code: str,
        marks: float,
        comments: str | None = None,
    ) -> Grade:
        """Overwrite the marks of an existing grade.

        Raises:
            InvalidInputError: If marks are outside 0-100
            NotFoundError: If the pair has no grade
        """
        marks = validate_marks(marks)
        with self._locks.hold(student_id):
            with self._db.session_scope() as session:
                grade = session.get(Grade, (student_id, course_code))
                if grade is None:
                    raise NotFoundError("Grade", f"{student_id}/{course_code}")
                grade.marks = marks
                if comments is not None:
                    grade.comments = comments
                session.commit()
                session.refresh(grade)

            logger.info(
                "Updated grade for student %s in %s to %s (%.1f)",
                student_id,
                course_code,
                grade.letter_grade.value,
                grade.marks,
            )
            self.refresh_gpa(student_id)
            return grade

    def delete_grade(self, student_id: str, course_code: str) -> bool:
        """Remove a grade.

        Raises:
            NotFoundError: If the pair has no grade
        """
        with self._locks.hold(student_id):
            with self._db.session_scope() as session:
                grade = session.get(Grade, (student_id, course_code))
                if grade is None:
                    raise NotFoundError("Grade", f"{student_id}/{course_code}")
                session.delete(grade)
                session.commit()

            logger.info("Deleted grade for student %s in %s", student_id, course_code)
            self.refresh_gpa(student_id)
            return True

    def refresh_gpa(self, student_id: str) -> None:
        """Recompute and store a student's cached GPA; failures are logged."""
        with self._locks.hold(student_id):
            try:
                self._students.update_gpa(student_id, self.calculate_gpa(student_id))
            except (RecordsError, SQLAlchemyError) as e:
                logger.warning("Could not refresh GPA for student %s: %s", student_id, e)

    def refresh_course(self, course_code: str) -> None:
        """Refresh the GPA of every student graded in a course.

        Called after the course's credits change or it leaves the catalog.
        """
        stmt = select(Grade.student_id).where(Grade.course_code == course_code)
        with self._db.session_scope() as session:
            student_ids = sorted(session.execute(stmt).scalars().all())
        for student_id in student_ids:
            self.refresh_gpa(student_id)
        if student_ids:
            logger.info(
                "Refreshed GPA for %d student(s) graded in %s", len(student_ids), course_code
            )

    # --- Reads ---

    def get_student_grades(self, student_id: str) -> list[Grade]:
        """All grades for a student, sorted by course code.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        self._students.require(student_id)
        return self._grades_for_student(student_id)

    def get_course_grades(self, course_code: str) -> list[Grade]:
        """All grades for a course, sorted by student ID.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        self._courses.require(course_code)
        stmt = select(Grade).where(Grade.course_code == course_code).order_by(Grade.student_id)
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_all(self) -> list[Grade]:
        stmt = select(Grade).order_by(Grade.student_id, Grade.course_code)
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_grade(self, student_id: str, course_code: str) -> Grade | None:
        with self._db.session_scope() as session:
            return session.get(Grade, (student_id, course_code))

    def has_grade(self, student_id: str, course_code: str) -> bool:
        return self.get_grade(student_id, course_code) is not None

    def _grades_for_student(self, student_id: str) -> list[Grade]:
        stmt = select(Grade).where(Grade.student_id == student_id).order_by(Grade.course_code)
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def calculate_gpa(self, student_id: str) -> float:
        """Credit-weighted GPA over the student's grades; 0.0 with no graded credits."""
        quality_points = 0.0
        credits = 0
        for grade in self._grades_for_student(student_id):
            course = self._courses.get_by_code(grade.course_code)
            if course is None:
                continue
            quality_points += grade.grade_points * course.credits
            credits += course.credits
        if credits == 0:
            return 0.0
        return quality_points / credits

    def calculate_course_average(self, course_code: str) -> float:
        """Mean marks across a course's grades, 0.0 when there are none.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        return _average_marks(self.get_course_grades(course_code))

    def course_grade_distribution(self, course_code: str) -> dict[LetterGrade, int]:
        """Count of each letter grade awarded in a course.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        return _distribution(self.get_course_grades(course_code))

    def statistics(self) -> GradeStatistics:
        """Totals, mean marks, distribution and pass rate (percent) over every grade."""
        grades = self.get_all()
        if not grades:
            return GradeStatistics()
        passing = sum(1 for grade in grades if grade.letter_grade.is_passing)
        return GradeStatistics(
            total=len(grades),
            average_marks=_average_marks(grades),
            distribution=_distribution(grades),
            pass_rate=passing * 100.0 / len(grades),
        )


def _average_marks(grades: list[Grade]) -> float:
    if not grades:
        return 0.0
    return sum(grade.marks for grade in grades) / len(grades)


def _distribution(grades: Iterable[Grade]) -> dict[LetterGrade, int]:
    counts = empty_distribution()
    for grade in grades:
        counts[grade.letter_grade] += 1
    return counts
