"""TranscriptBuilder - assembles transcripts from the stores."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from campusrecords.transcript.models import Transcript, TranscriptEntry
from campusrecords.transcript.report import render_transcript

if TYPE_CHECKING:
    from campusrecords.grading.engine import GradeEngine
    from campusrecords.store.courses import CourseCatalog
    from campusrecords.store.students import StudentDirectory

logger = logging.getLogger(__name__)


class TranscriptBuilder:
    """Builds transcripts on demand.

    The GPA on a transcript is computed from its own entries, not read from
    the student's cached value; the two agree because both weight grade
    points by current catalog credits and skip courses that have been
    deleted.
    """

    def __init__(
        self,
        students: StudentDirectory,
        courses: CourseCatalog,
        grades: GradeEngine,
    ) -> None:
        self._students = students
        self._courses = courses
        self._grades = grades

    def generate(self, student_id: str) -> Transcript:
        """Build the transcript for a student.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        student = self._students.require(student_id)
        entries = []
        for grade in self._grades.get_student_grades(student_id):
            course = self._courses.get_by_code(grade.course_code)
            if course is None:
                continue
            entries.append(
                TranscriptEntry(
                    course_code=course.code,
                    title=course.title,
                    credits=course.credits,
                    semester=course.semester,
                    marks=grade.marks,
                    letter_grade=grade.letter_grade,
                    grade_points=grade.grade_points,
                )
            )
        return Transcript(
            student_id=student.id,
            full_name=student.full_name,
            reg_no=student.reg_no,
            email=student.email,
            status=student.status,
            generated_at=datetime.now(),
            entries=entries,
        )

    def render(self, student_id: str) -> str:
        """Plain-text transcript report.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        return render_transcript(self.generate(student_id))

    def export(self, student_id: str, path: Path | str) -> Path:
        """Write the text report to path, creating parent directories.

        Raises:
            NotFoundError: If the student doesn't exist
        """
        path = Path(path)
        report = self.render(student_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report, encoding="utf-8")
        logger.info("Exported transcript for %s to %s", student_id, path)
        return path
