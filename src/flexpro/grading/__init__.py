# Pure grading logic. `flexpro.grading.finalize` touches the database and is
# imported explicitly by its callers.
from .scale import GradeResult, DEFAULT_GRADE_POINTS, normalize_letter, score_to_grade, points_for_letter
from .gradebook import (
    MARK_COMPONENTS,
    MARK_FIELDS,
    FieldStats,
    SectionNotFound,
    compute_field_stats,
    normalize_section,
    select_population,
)
from .gpa import GradedCredit, compute_cgpa, compute_term_gpa, summarize_terms
