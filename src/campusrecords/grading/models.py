"""Summary types returned by the grade engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from campusrecords.store.models import LetterGrade


def empty_distribution() -> dict[LetterGrade, int]:
    """A count of 0 for every letter, best first."""
    return dict.fromkeys(LetterGrade, 0)


@dataclass
class GradeStatistics:
    """Aggregate view of a set of grades."""

    total: int = 0
    average_marks: float = 0.0
    distribution: dict[LetterGrade, int] = field(default_factory=empty_distribution)
    pass_rate: float = 0.0
