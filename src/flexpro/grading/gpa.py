from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Optional


@dataclass(frozen=True)
class GradedCredit:
    """One transcript line reduced to what GPA needs."""

    term_id: Hashable
    grade_points: float
    credit_hours: float
    term_name: Optional[str] = None

    @property
    def quality_points(self) -> float:
        return self.grade_points * self.credit_hours


@dataclass(frozen=True)
class TermSummary:
    term_id: Hashable
    term_name: Optional[str]
    credits: float
    gpa: float


def _weighted(entries: Iterable[GradedCredit]) -> Optional[float]:
    # fsum keeps the result independent of input order
    entries = [e for e in entries if e.credit_hours]
    credits = math.fsum(e.credit_hours for e in entries)
    if not credits:
        return None
    return math.fsum(e.quality_points for e in entries) / credits


def compute_term_gpa(entries: Iterable[GradedCredit], term_id: Any) -> Optional[float]:
    return _weighted(e for e in entries if e.term_id == term_id)


def compute_cgpa(entries: Iterable[GradedCredit]) -> Optional[float]:
    """Sum(points x credits) / Sum(credits) over everything; None without credits."""
    return _weighted(entries)


def total_credits(entries: Iterable[GradedCredit]) -> float:
    return math.fsum(e.credit_hours for e in entries)


def summarize_terms(entries: Iterable[GradedCredit]) -> list[TermSummary]:
    """Per-term GPA for every term that carries credits, in first-seen order."""
    buckets: dict[Hashable, list[GradedCredit]] = {}
    names: dict[Hashable, Optional[str]] = {}
    for e in entries:
        buckets.setdefault(e.term_id, []).append(e)
        names.setdefault(e.term_id, e.term_name)

    out: list[TermSummary] = []
    for term_id, rows in buckets.items():
        gpa = _weighted(rows)
        if gpa is None:
            continue
        out.append(
            TermSummary(
                term_id=term_id,
                term_name=names[term_id],
                credits=total_credits(rows),
                gpa=gpa,
            )
        )
    return out
