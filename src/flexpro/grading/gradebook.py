"""
Gradebook helpers: per-field statistics over a class and section-based
population selection.

Everything here is pure; callers load rows through the ORM and hand them in.
Students are matched to course sections by name, compared trimmed and
lower-cased.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

MARK_COMPONENTS: tuple[str, ...] = (
    "assignment1",
    "assignment2",
    "quiz1",
    "quiz2",
    "quiz3",
    "quiz4",
    "mid1",
    "mid2",
    "final_exam",
    "grace_marks",
)
MARK_FIELDS: tuple[str, ...] = MARK_COMPONENTS + ("total",)

ALL_SECTIONS = "ALL"
UNASSIGNED_SECTION = "__unassigned__"

T = TypeVar("T")


class SectionNotFound(LookupError):
    """Raised when a section selector names a section the course does not have."""

    def __init__(self, section_id: str):
        super().__init__(f"Section not found: {section_id}")
        self.section_id = section_id


@dataclass(frozen=True)
class FieldStats:
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"min": self.min, "max": self.max, "avg": self.avg}


def normalize_section(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def _read(row: Any, field: str) -> Any:
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def compute_field_stats(
    rows: Iterable[Any],
    fields: Sequence[str] = MARK_FIELDS,
) -> dict[str, FieldStats]:
    """
    min/max/avg per field across `rows` (mark objects or dicts).

    Missing values are ignored; a field with no values at all reports zeros.
    """
    values: dict[str, list[float]] = {f: [] for f in fields}
    for row in rows:
        for f in fields:
            v = _read(row, f)
            if v is not None:
                values[f].append(float(v))

    out: dict[str, FieldStats] = {}
    for f in fields:
        vs = values[f]
        if not vs:
            out[f] = FieldStats()
            continue
        out[f] = FieldStats(min=min(vs), max=max(vs), avg=sum(vs) / len(vs))
    return out


def empty_stats(fields: Sequence[str] = MARK_FIELDS) -> dict[str, FieldStats]:
    return {f: FieldStats() for f in fields}


def _default_section_of(item: Any) -> Optional[str]:
    user = getattr(item, "user", None)
    return getattr(user, "section", None)


def select_population(
    items: Iterable[T],
    sections: Sequence[Any],
    selector: Optional[str] = None,
    section_of: Callable[[T], Optional[str]] = _default_section_of,
) -> list[T]:
    """
    Filter enrollments of one course/term by a section selector.

    - None or "ALL": everything
    - "__unassigned__": students with no section, or one the course does not define
    - a section id: students whose section name matches that section's name

    `sections` are the course's section rows (anything with `id` and `name`).
    Raises SectionNotFound for an id that is not one of them.
    """
    items = list(items)
    if selector is None or selector == ALL_SECTIONS:
        return items

    if selector == UNASSIGNED_SECTION:
        known = {normalize_section(s.name) for s in sections}
        known.discard("")
        selected = []
        for item in items:
            name = normalize_section(section_of(item))
            if not name or name not in known:
                selected.append(item)
        return selected

    match = next((s for s in sections if str(s.id) == str(selector)), None)
    if match is None:
        raise SectionNotFound(str(selector))
    target = normalize_section(match.name)
    return [item for item in items if normalize_section(section_of(item)) == target]


def classmates(
    items: Iterable[T],
    section: Optional[str],
    section_of: Callable[[T], Optional[str]] = _default_section_of,
) -> list[T]:
    """Items whose student shares `section`; nobody shares an empty section."""
    target = normalize_section(section)
    if not target:
        return []
    return [item for item in items if normalize_section(section_of(item)) == target]


__all__ = [
    "MARK_COMPONENTS",
    "MARK_FIELDS",
    "ALL_SECTIONS",
    "UNASSIGNED_SECTION",
    "SectionNotFound",
    "FieldStats",
    "normalize_section",
    "compute_field_stats",
    "empty_stats",
    "select_population",
    "classmates",
]
