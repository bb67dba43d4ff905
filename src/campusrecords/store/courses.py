"""CourseCatalog - CRUD and search over catalog entries."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from campusrecords.store.exceptions import DuplicateEntityError, NotFoundError
from campusrecords.store.models import Course, Semester

if TYPE_CHECKING:
    from sqlalchemy import Select

    from campusrecords.store.database import Database

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(frozen=True)
class DepartmentStats:
    """Course counts and credit totals for one department."""

    department: str
    total_courses: int
    active_courses: int
    total_credits: int

    @property
    def average_credits(self) -> float:
        if self.total_courses == 0:
            return 0.0
        return self.total_credits / self.total_courses


def _by_code(stmt: Select[tuple[Course]]) -> Select[tuple[Course]]:
    return stmt.order_by(func.lower(Course.code), Course.code)


class CourseCatalog:
    """Owns course records, keyed by course code.

    List results are sorted by course code (case-insensitive). When a
    course's credits change or it is deleted, credits_changed_callback is
    called with its code.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self.credits_changed_callback: Callable[[str], None] | None = None

    def add(self, course: Course) -> Course:
        """Add a new course.

        Raises:
            DuplicateEntityError: If the code is already in the catalog
        """
        with self._db.session_scope() as session:
            if session.get(Course, course.code) is not None:
                raise DuplicateEntityError("Course", course.code)
            session.add(course)
            session.commit()
            session.refresh(course)
            logger.info("Added course %s (%d credits)", course.code, course.credits)
            return course

    def get_by_code(self, code: str) -> Course | None:
        """Get course by code, or None if absent."""
        with self._db.session_scope() as session:
            return session.get(Course, code)

    def require(self, code: str) -> Course:
        """Get course by code.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        course = self.get_by_code(code)
        if course is None:
            raise NotFoundError("Course", code)
        return course

    def get_all(self) -> list[Course]:
        with self._db.session_scope() as session:
            return list(session.execute(_by_code(select(Course))).scalars().all())

    def get_active(self) -> list[Course]:
        with self._db.session_scope() as session:
            stmt = _by_code(select(Course).where(Course.is_active.is_(True)))
            return list(session.execute(stmt).scalars().all())

    def update(
        self,
        code: str,
        title: str | None = None,
        credits: int | None = None,
        department: str | None = None,
        semester: Semester | None | object = _UNSET,
        instructor: str | None | object = _UNSET,
        description: str | None | object = _UNSET,
        is_active: bool | None = None,
    ) -> Course:
        """Update course fields. Only provided fields are updated.

        Semester, instructor and description may be passed as None to clear
        them.

        Raises:
            NotFoundError: If the course doesn't exist
            InvalidInputError: If a field fails validation
        """
        with self._db.session_scope() as session:
            course = session.get(Course, code)
            if course is None:
                raise NotFoundError("Course", code)

            if title is not None:
                course.title = title
            credits_changed = credits is not None and credits != course.credits
            if credits is not None:
                course.credits = credits
            if department is not None:
                course.department = department
            if semester is not _UNSET:
                course.semester = semester  # type: ignore[assignment]
            if instructor is not _UNSET:
                course.instructor = instructor  # type: ignore[assignment]
            if description is not _UNSET:
                course.description = description  # type: ignore[assignment]
            if is_active is not None:
                course.is_active = is_active

            session.commit()
            session.refresh(course)

        if credits_changed:
            logger.info("Course %s now carries %d credits", code, course.credits)
            self._credits_changed(code)
        return course

    def deactivate(self, code: str) -> Course:
        """Mark a course inactive without removing it.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        course = self.update(code, is_active=False)
        logger.info("Deactivated course %s", code)
        return course

    def delete(self, code: str) -> bool:
        """Physically remove a course.

        Enrollments and grades that reference it are left in place; credit and
        GPA calculations treat the missing course as contributing nothing, and
        the cached GPA of students graded in it is refreshed.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        with self._db.session_scope() as session:
            course = session.get(Course, code)
            if course is None:
                raise NotFoundError("Course", code)
            session.delete(course)
            session.commit()
        logger.info("Deleted course %s", code)
        self._credits_changed(code)
        return True

    def _credits_changed(self, code: str) -> None:
        if self.credits_changed_callback:
            self.credits_changed_callback(code)

    def get_by_department(self, department: str) -> list[Course]:
        """Courses whose department equals the argument, ignoring case."""
        with self._db.session_scope() as session:
            stmt = _by_code(
                select(Course).where(func.lower(Course.department) == department.strip().lower())
            )
            return list(session.execute(stmt).scalars().all())

    def get_by_semester(self, semester: Semester) -> list[Course]:
        with self._db.session_scope() as session:
            stmt = _by_code(select(Course).where(Course.semester == semester))
            return list(session.execute(stmt).scalars().all())

    def get_by_instructor(self, instructor: str) -> list[Course]:
        """Case-insensitive substring search on instructor; blank input matches nothing."""
        term = instructor.strip().lower() if instructor else ""
        if not term:
            return []
        with self._db.session_scope() as session:
            stmt = _by_code(
                select(Course).where(func.lower(Course.instructor).contains(term, autoescape=True))
            )
            return list(session.execute(stmt).scalars().all())

    def get_by_credits(self, credits: int) -> list[Course]:
        with self._db.session_scope() as session:
            stmt = _by_code(select(Course).where(Course.credits == credits))
            return list(session.execute(stmt).scalars().all())

    def search(self, criteria: Callable[[Course], bool]) -> list[Course]:
        """Return courses matching an arbitrary predicate."""
        return [course for course in self.get_all() if criteria(course)]

    def assign_instructor(self, code: str, instructor: str) -> Course:
        """Set the course's instructor.

        Raises:
            NotFoundError: If the course doesn't exist
        """
        course = self.update(code, instructor=instructor)
        logger.info("Assigned instructor %r to course %s", course.instructor, code)
        return course

    def department_statistics(self) -> dict[str, DepartmentStats]:
        """Per-department totals, keyed by department name."""
        totals: dict[str, list[int]] = {}
        for course in self.get_all():
            entry = totals.setdefault(course.department, [0, 0, 0])
            entry[0] += 1
            entry[1] += 1 if course.is_active else 0
            entry[2] += course.credits
        return {
            department: DepartmentStats(
                department=department,
                total_courses=total,
                active_courses=active,
                total_credits=credits,
            )
            for department, (total, active, credits) in sorted(totals.items())
        }
