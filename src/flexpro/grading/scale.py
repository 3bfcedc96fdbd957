from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GradeResult:
    grade: str
    grade_points: float


# (inclusive lower bound, letter, points), evaluated top-down.
GRADE_SCALE: tuple[tuple[float, str, float], ...] = (
    (85.0, "A", 4.00),
    (80.0, "A-", 3.67),
    (75.0, "B+", 3.33),
    (70.0, "B", 3.00),
    (65.0, "B-", 2.67),
    (60.0, "C+", 2.33),
    (55.0, "C", 2.00),
    (50.0, "C-", 1.67),
    (40.0, "D", 1.00),
)
FAILING = GradeResult("F", 0.00)

# Points used when faculty enter a letter grade by hand.
DEFAULT_GRADE_POINTS: dict[str, float] = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.67,
    "B+": 3.33,
    "B": 3.0,
    "B-": 2.67,
    "C+": 2.33,
    "C": 2.0,
    "C-": 1.67,
    "D+": 1.33,
    "D": 1.0,
    "F": 0.0,
}


def score_to_grade(total: float) -> GradeResult:
    """
    Map a composite score to (letter, grade points).

    Totals are graded as given: nothing is clamped, so a negative total is an F
    and anything above 100 is still an A.
    """
    for lower, letter, points in GRADE_SCALE:
        if total >= lower:
            return GradeResult(letter, points)
    return FAILING


def points_for_letter(grade: str, explicit: Optional[float] = None) -> float:
    """Grade points for a manually entered letter; an explicit value wins, unknown letters score 0."""
    if explicit is not None:
        return float(explicit)
    return DEFAULT_GRADE_POINTS.get(grade.strip().upper(), 0.0)


def normalize_letter(grade: str) -> str:
    """Trimmed, upper-cased letter; blank input is rejected."""
    letter = (grade or "").strip().upper()
    if not letter:
        raise ValueError("Grade letter is required")
    return letter
