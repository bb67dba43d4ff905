"""StudentDirectory - CRUD and search over student records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select

from campusrecords.store.exceptions import DuplicateEntityError, NotFoundError
from campusrecords.store.models import Enrollment, Grade, Student, StudentStatus

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Select

    from campusrecords.config import RecordsConfig
    from campusrecords.store.database import Database

logger = logging.getLogger(__name__)


def _by_name(stmt: Select[tuple[Student]]) -> Select[tuple[Student]]:
    return stmt.order_by(func.lower(Student.full_name), Student.id)


class StudentDirectory:
    """Owns student records, keyed by student ID.

    Every list result is sorted by full name (case-insensitive), then ID.
    The GPA, credit and enrolled-course fields are caches written by the
    enrollment and grade engines through update_gpa and
    update_enrollment_cache; update() never touches them.
    """

    def __init__(self, database: Database, config: RecordsConfig) -> None:
        self._db = database
        self._config = config

    # --- CRUD ---

    def add(self, student: Student) -> Student:
        """Add a new student.

        Args:
            student: A validated Student (see new_student)

        Returns:
            The stored Student

        Raises:
            DuplicateEntityError: If the ID or registration number is already used
        """
        with self._db.session_scope() as session:
            if session.get(Student, student.id) is not None:
                raise DuplicateEntityError("Student", student.id)
            stmt = select(Student).where(Student.reg_no == student.reg_no)
            if session.execute(stmt).scalar_one_or_none() is not None:
                raise DuplicateEntityError(
                    "Student",
                    student.reg_no,
                    f"Student with registration number '{student.reg_no}' already exists",
                )
            session.add(student)
            session.commit()
            session.refresh(student)
            logger.info("Added student %s (%s)", student.id, student.full_name)
            return student

    def get_by_id(self, student_id: str) -> Student | None:
        """Get student by ID, or None if absent."""
        with self._db.session_scope() as session:
            return session.get(Student, student_id)

    def require(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        student = self.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def get_all(self) -> list[Student]:
        """List all students."""
        with self._db.session_scope() as session:
            return list(session.execute(_by_name(select(Student))).scalars().all())

    def get_by_status(self, status: StudentStatus) -> list[Student]:
        """List students with the given status."""
        with self._db.session_scope() as session:
            stmt = _by_name(select(Student).where(Student.status == status))
            return list(session.execute(stmt).scalars().all())

    def update(
        self,
        student_id: str,
        reg_no: str | None = None,
        full_name: str | None = None,
        email: str | None = None,
        status: StudentStatus | None = None,
        enrollment_date: datetime | None = None,
    ) -> Student:
        """Update student fields. Only provided fields are updated.

        Args:
            student_id: The student's ID
            reg_no: New registration number (optional)
            full_name: New full name (optional)
            email: New email (optional)
            status: New status (optional)
            enrollment_date: New enrollment date (optional)

        Returns:
            The updated Student

        Raises:
            NotFoundError: If the student doesn't exist
            DuplicateEntityError: If reg_no belongs to another student
            InvalidInputError: If a field fails validation
        """
        with self._db.session_scope() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise NotFoundError("Student", student_id)

            if reg_no is not None and reg_no != student.reg_no:
                stmt = select(Student).where(Student.reg_no == reg_no)
                if session.execute(stmt).scalar_one_or_none() is not None:
                    raise DuplicateEntityError(
                        "Student",
                        reg_no,
                        f"Student with registration number '{reg_no}' already exists",
                    )
                student.reg_no = reg_no
            if full_name is not None:
                student.full_name = full_name
            if email is not None:
                student.email = email
            if status is not None:
                student.status = status
            if enrollment_date is not None:
                student.enrollment_date = enrollment_date

            session.commit()
            session.refresh(student)
            return student

    def deactivate(self, student_id: str) -> Student:
        """Flip a student's status to INACTIVE without removing the record.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        student = self.update(student_id, status=StudentStatus.INACTIVE)
        logger.info("Deactivated student %s", student_id)
        return student

    def delete(self, student_id: str) -> bool:
        """Physically remove a student along with their enrollments and grades.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        with self._db.session_scope() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise NotFoundError("Student", student_id)
            grades = session.execute(delete(Grade).where(Grade.student_id == student_id))
            enrollments = session.execute(
                delete(Enrollment).where(Enrollment.student_id == student_id)
            )
            session.delete(student)
            session.commit()
        logger.info(
            "Deleted student %s (%d enrollments, %d grades)",
            student_id,
            enrollments.rowcount,
            grades.rowcount,
        )
        return True

    # --- Search ---

    def search_by_name(self, name_part: str) -> list[Student]:
        """Case-insensitive substring search on full name."""
        term = name_part.strip().lower()
        with self._db.session_scope() as session:
            stmt = _by_name(
                select(Student).where(func.lower(Student.full_name).contains(term, autoescape=True))
            )
            return list(session.execute(stmt).scalars().all())

    def search_by_email(self, email_part: str) -> list[Student]:
        """Case-insensitive substring search on email."""
        term = email_part.strip().lower()
        with self._db.session_scope() as session:
            stmt = _by_name(
                select(Student).where(func.lower(Student.email).contains(term, autoescape=True))
            )
            return list(session.execute(stmt).scalars().all())

    def search(self, criteria: Callable[[Student], bool]) -> list[Student]:
        """Return students matching an arbitrary predicate."""
        return [student for student in self.get_all() if criteria(student)]

    def advanced_search(
        self,
        name: str | None = None,
        email: str | None = None,
        status: StudentStatus | None = None,
        min_gpa: float | None = None,
        max_gpa: float | None = None,
    ) -> list[Student]:
        """Combine optional filters; results are ordered by GPA, highest first."""
        stmt = select(Student)
        if name is not None:
            stmt = stmt.where(
                func.lower(Student.full_name).contains(name.strip().lower(), autoescape=True)
            )
        if email is not None:
            stmt = stmt.where(
                func.lower(Student.email).contains(email.strip().lower(), autoescape=True)
            )
        if status is not None:
            stmt = stmt.where(Student.status == status)
        if min_gpa is not None:
            stmt = stmt.where(Student.gpa >= min_gpa)
        if max_gpa is not None:
            stmt = stmt.where(Student.gpa <= max_gpa)
        stmt = stmt.order_by(Student.gpa.desc(), func.lower(Student.full_name), Student.id)

        with self._db.session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def statistics(self) -> dict[StudentStatus, int]:
        """Count students per status (every status is present)."""
        counts = dict.fromkeys(StudentStatus, 0)
        with self._db.session_scope() as session:
            stmt = select(Student.status, func.count(Student.id)).group_by(Student.status)
            for status, count in session.execute(stmt).all():
                counts[status] = count
        return counts

    # --- Enrollment support ---

    def can_enroll(self, student_id: str, course_code: str) -> bool:
        """Quick pre-check from cached fields; the enrollment engine re-checks everything."""
        student = self.get_by_id(student_id)
        if student is None or not student.is_eligible_for_enrollment:
            return False
        if course_code in student.enrolled_courses:
            return False
        return student.total_credits < self._config.max_credits_per_semester

    def current_credits(self, student_id: str) -> int:
        """Cached credit total, 0 for an unknown student."""
        student = self.get_by_id(student_id)
        return student.total_credits if student is not None else 0

    def update_gpa(self, student_id: str, gpa: float) -> Student:
        """Store a recomputed GPA.

        Raises:
            NotFoundError: If the student doesn't exist
            InvalidInputError: If gpa is outside 0.0-4.0
        """
        with self._db.session_scope() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise NotFoundError("Student", student_id)
            student.gpa = gpa
            session.commit()
            session.refresh(student)
            return student

    def update_enrollment_cache(
        self,
        student_id: str,
        enrolled_courses: Iterable[str],
        total_credits: int,
    ) -> Student:
        """Store the enrolled-course set and credit total.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        with self._db.session_scope() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise NotFoundError("Student", student_id)
            student.enrolled_courses = list(enrolled_courses)
            student.total_credits = total_credits
            session.commit()
            session.refresh(student)
            return student
