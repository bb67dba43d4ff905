"""CampusRecords - wires the stores and engines around one database."""

from __future__ import annotations

import logging

from campusrecords.config import RecordsConfig
from campusrecords.enrollment.engine import EnrollmentEngine
from campusrecords.grading.engine import GradeEngine
from campusrecords.store.courses import CourseCatalog
from campusrecords.store.database import Database
from campusrecords.store.locks import KeyedLock
from campusrecords.store.students import StudentDirectory
from campusrecords.transcript.builder import TranscriptBuilder

logger = logging.getLogger(__name__)


class CampusRecords:
    """Entry point to the records core.

    Exposes students, courses, enrollments, grades and transcripts. The
    enrollment and grade engines share one set of per-student locks, and the
    grade engine refreshes cached GPAs when the catalog or an enrollment
    removes graded credits.
    """

    def __init__(self, config: RecordsConfig | None = None) -> None:
        """Create the database and every component on top of it.

        Args:
            config: Configuration to use. Defaults to RecordsConfig().
        """
        self.config = config if config is not None else RecordsConfig()
        self._db = Database(self.config.db_path)
        self._db.create_tables()

        locks = KeyedLock()
        self.students = StudentDirectory(self._db, self.config)
        self.courses = CourseCatalog(self._db)
        self.enrollments = EnrollmentEngine(
            self._db, self.students, self.courses, self.config, locks
        )
        self.grades = GradeEngine(self._db, self.students, self.courses, self.enrollments, locks)
        self.enrollments.grade_removed_callback = self.grades.refresh_gpa
        self.courses.credits_changed_callback = self.grades.refresh_course
        self.transcripts = TranscriptBuilder(self.students, self.courses, self.grades)

        logger.debug(
            "Records initialized (db=%s, max credits=%d)",
            self.config.db_path,
            self.config.max_credits_per_semester,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()
