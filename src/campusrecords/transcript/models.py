"""Transcript data types - a read-only projection of a student's grades."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from campusrecords.store.models import LetterGrade, Semester, StudentStatus

DEANS_LIST = "Dean's List"
GOOD_STANDING = "Good Standing"
SATISFACTORY = "Satisfactory"
ACADEMIC_WARNING = "Academic Warning"
ACADEMIC_PROBATION = "Academic Probation"

_STANDING_FLOORS = (
    (3.5, DEANS_LIST),
    (3.0, GOOD_STANDING),
    (2.0, SATISFACTORY),
    (1.0, ACADEMIC_WARNING),
)


def academic_standing(gpa: float) -> str:
    """Standing label for a cumulative GPA."""
    for floor, label in _STANDING_FLOORS:
        if gpa >= floor:
            return label
    return ACADEMIC_PROBATION


@dataclass(frozen=True)
class TranscriptEntry:
    """One graded course as it appears on a transcript."""

    course_code: str
    title: str
    credits: int
    semester: Semester | None
    marks: float
    letter_grade: LetterGrade
    grade_points: float

    @property
    def quality_points(self) -> float:
        return self.grade_points * self.credits

    @property
    def is_passing(self) -> bool:
        return self.letter_grade.is_passing


@dataclass(frozen=True)
class TranscriptSummary:
    """Totals over every entry on a transcript."""

    credits_attempted: int
    credits_earned: int
    quality_points: float
    gpa: float
    distribution: dict[LetterGrade, int]

    @property
    def standing(self) -> str:
        return academic_standing(self.gpa)

    @classmethod
    def from_entries(cls, entries: list[TranscriptEntry]) -> TranscriptSummary:
        attempted = 0
        earned = 0
        quality_points = 0.0
        distribution = dict.fromkeys(LetterGrade, 0)
        for entry in entries:
            attempted += entry.credits
            if entry.is_passing:
                earned += entry.credits
            quality_points += entry.quality_points
            distribution[entry.letter_grade] += 1
        return cls(
            credits_attempted=attempted,
            credits_earned=earned,
            quality_points=quality_points,
            gpa=quality_points / attempted if attempted else 0.0,
            distribution=distribution,
        )


@dataclass(frozen=True)
class Transcript:
    """A student's transcript, built on demand and never stored."""

    student_id: str
    full_name: str
    reg_no: str
    email: str
    status: StudentStatus
    generated_at: datetime
    entries: list[TranscriptEntry] = field(default_factory=list)

    @property
    def summary(self) -> TranscriptSummary:
        return TranscriptSummary.from_entries(self.entries)

    def by_semester(self) -> list[tuple[Semester | None, list[TranscriptEntry]]]:
        """Entries grouped by semester: SPRING, SUMMER, FALL, then unscheduled."""
        groups: dict[Semester | None, list[TranscriptEntry]] = {}
        for entry in self.entries:
            groups.setdefault(entry.semester, []).append(entry)
        return sorted(
            groups.items(),
            key=lambda item: item[0].order if item[0] is not None else len(Semester) + 1,
        )
