"""EnrollmentEngine - enroll/unenroll state machine and credit-limit enforcement."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy import select

from campusrecords.store.exceptions import (
    CreditLimitExceededError,
    DuplicateEnrollmentError,
    InvalidTransitionError,
    NotFoundError,
)
from campusrecords.store.models import Enrollment, EnrollmentStatus, Grade

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from sqlalchemy.orm import Session

    from campusrecords.config import RecordsConfig
    from campusrecords.store.courses import CourseCatalog
    from campusrecords.store.database import Database
    from campusrecords.store.locks import KeyedLock
    from campusrecords.store.students import StudentDirectory

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentStats:
    """Enrollment counts across the whole store."""

    total: int = 0
    by_status: dict[EnrollmentStatus, int] = field(
        default_factory=lambda: dict.fromkeys(EnrollmentStatus, 0)
    )
    by_course: dict[str, int] = field(default_factory=dict)


class EnrollmentEngine:
    """Owns enrollment records and keeps the student credit caches in step.

    Every mutation for a given student runs under that student's lock, so the
    credit-limit check and the insert it guards cannot interleave with another
    enrollment for the same student.

    A grade only exists while its pair has an ENROLLED or COMPLETED record.
    Unenrolling, dropping or withdrawing deletes the pair's grade in the same
    transaction and then calls grade_removed_callback with the student ID so
    the cached GPA can be recomputed.
    """

    def __init__(
        self,
        database: Database,
        students: StudentDirectory,
        courses: CourseCatalog,
        config: RecordsConfig,
        locks: KeyedLock,
    ) -> None:
        self._db = database
        self._students = students
        self._courses = courses
        self._config = config
        self._locks = locks
        self.grade_removed_callback: Callable[[str], None] | None = None

    # --- Mutations ---

    def enroll(
        self,
        student_id: str,
        course_code: str,
        enrollment_date: datetime | None = None,
    ) -> Enrollment:
        """Enroll a student in a course.

        Args:
            student_id: The student's ID
            course_code: The course's code
            enrollment_date: When the enrollment happened. Defaults to now.

        Returns:
            The created Enrollment, status ENROLLED

        Raises:
            NotFoundError: If the student or course doesn't exist, or the
                student is not eligible to enroll
            DuplicateEnrollmentError: If any record exists for the pair
            CreditLimitExceededError: If the course would push the student
                past the per-semester limit
        """
        with self._locks.hold(student_id):
            student = self._students.require(student_id)
            if not student.is_eligible_for_enrollment:
                raise NotFoundError(
                    "Student",
                    student_id,
                    f"Student '{student_id}' not eligible for enrollment "
                    f"(status: {student.status.name})",
                )
            course = self._courses.require(course_code)

            if self.get_enrollment(student_id, course_code) is not None:
                raise DuplicateEnrollmentError(student_id, course_code)

            current = self.credit_count(student_id)
            limit = self._config.max_credits_per_semester
            if current + course.credits > limit:
                raise CreditLimitExceededError(student_id, current, course.credits, limit)

            enrollment = Enrollment(
                student_id=student_id,
                course_code=course_code,
                enrollment_date=enrollment_date,
            )
            with self._db.session_scope() as session:
                session.add(enrollment)
                session.commit()
                session.refresh(enrollment)

            try:
                self._students.update_enrollment_cache(
                    student_id,
                    [*student.enrolled_courses, course_code],
                    current + course.credits,
                )
            except Exception:
                logger.warning(
                    "Student update failed after enrolling %s in %s; removing enrollment",
                    student_id,
                    course_code,
                )
                self._delete_record(student_id, course_code)
                raise

            logger.info(
                "Enrolled student %s in %s (%d credits, total %d)",
                student_id,
                course_code,
                course.credits,
                current + course.credits,
            )
            return enrollment

    def unenroll(self, student_id: str, course_code: str) -> bool:
        """Remove a student's enrollment record, and its grade, for a course.

        A course that has since left the catalog contributes 0 credits to
        the decrement.

        Returns:
            True

        Raises:
            NotFoundError: If no enrollment exists for the pair (nothing is
                changed), or the student record is gone
        """
        with self._locks.hold(student_id):
            with self._db.session_scope() as session:
                enrollment = session.get(Enrollment, (student_id, course_code))
                if enrollment is None:
                    raise NotFoundError(
                        "Enrollment",
                        f"{student_id}/{course_code}",
                        f"Student '{student_id}' is not enrolled in course '{course_code}'",
                    )
                session.delete(enrollment)
                graded = _delete_grade(session, student_id, course_code)
                session.commit()

            if graded:
                self._grade_removed(student_id)
            course = self._courses.get_by_code(course_code)
            credits = course.credits if course is not None else 0
            student = self._students.require(student_id)
            remaining = [code for code in student.enrolled_courses if code != course_code]
            self._students.update_enrollment_cache(
                student_id,
                remaining,
                max(0, student.total_credits - credits),
            )

            logger.info("Unenrolled student %s from %s", student_id, course_code)
            return True

    def update_status(
        self,
        student_id: str,
        course_code: str,
        status: EnrollmentStatus,
    ) -> Enrollment:
        """Move an ENROLLED record to another status.

        Moving to DROPPED or WITHDRAWN deletes the pair's grade.

        Raises:
            NotFoundError: If no enrollment exists for the pair
            InvalidTransitionError: If the record is not currently ENROLLED
        """
        with self._locks.hold(student_id):
            with self._db.session_scope() as session:
                enrollment = session.get(Enrollment, (student_id, course_code))
                if enrollment is None:
                    raise NotFoundError(
                        "Enrollment",
                        f"{student_id}/{course_code}",
                        f"Student '{student_id}' is not enrolled in course '{course_code}'",
                    )
                if enrollment.status is not EnrollmentStatus.ENROLLED:
                    raise InvalidTransitionError(
                        f"Cannot change enrollment status from {enrollment.status.name} "
                        f"to {status.name}",
                        field="status",
                        value=status,
                    )
                enrollment.status = status
                graded = not enrollment.is_active and _delete_grade(
                    session, student_id, course_code
                )
                session.commit()
                session.refresh(enrollment)

            logger.info(
                "Enrollment %s/%s status changed to %s", student_id, course_code, status.name
            )
            if graded:
                self._grade_removed(student_id)
            return enrollment

    def _delete_record(self, student_id: str, course_code: str) -> bool:
        with self._db.session_scope() as session:
            enrollment = session.get(Enrollment, (student_id, course_code))
            if enrollment is None:
                return False
            session.delete(enrollment)
            session.commit()
            return True

    def _grade_removed(self, student_id: str) -> None:
        logger.info("Removed grade for student %s with its enrollment", student_id)
        if self.grade_removed_callback:
            self.grade_removed_callback(student_id)

    # --- Reads ---

    def get_student_enrollments(self, student_id: str) -> list[Enrollment]:
        """All enrollment records for a student, sorted by course code.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        self._students.require(student_id)
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.course_code)
        )
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_course_enrollments(self, course_code: str) -> list[Enrollment]:
        """All enrollment records for a course, sorted by student ID.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        self._courses.require(course_code)
        stmt = (
            select(Enrollment)
            .where(Enrollment.course_code == course_code)
            .order_by(Enrollment.student_id)
        )
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_all(self) -> list[Enrollment]:
        """Every enrollment record, sorted by student ID then course code."""
        stmt = select(Enrollment).order_by(Enrollment.student_id, Enrollment.course_code)
        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get_enrollment(self, student_id: str, course_code: str) -> Enrollment | None:
        with self._db.session_scope() as session:
            return session.get(Enrollment, (student_id, course_code))

    def is_enrolled(self, student_id: str, course_code: str) -> bool:
        """Whether any record exists for the pair, whatever its status."""
        return self.get_enrollment(student_id, course_code) is not None

    def has_active_enrollment(self, student_id: str, course_code: str) -> bool:
        """Whether the pair has an ENROLLED or COMPLETED record."""
        enrollment = self.get_enrollment(student_id, course_code)
        return enrollment is not None and enrollment.is_active

    def credit_count(self, student_id: str) -> int:
        """Sum of catalog credits over the student's enrollment records.

        Courses no longer in the catalog count 0; an unknown student has 0.
        """
        with self._db.session_scope() as session:
            stmt = select(Enrollment.course_code).where(Enrollment.student_id == student_id)
            codes = list(session.execute(stmt).scalars().all())
        total = 0
        for code in codes:
            course = self._courses.get_by_code(code)
            if course is not None:
                total += course.credits
        return total

    def statistics(self) -> EnrollmentStats:
        """Totals per status and per course."""
        stats = EnrollmentStats()
        per_course: Counter[str] = Counter()
        for enrollment in self.get_all():
            stats.total += 1
            stats.by_status[enrollment.status] += 1
            per_course[enrollment.course_code] += 1
        stats.by_course = dict(sorted(per_course.items()))
        return stats


def _delete_grade(session: Session, student_id: str, course_code: str) -> bool:
    grade = session.get(Grade, (student_id, course_code))
    if grade is None:
        return False
    session.delete(grade)
    return True
