import pytest

from flexpro.grading.scale import FAILING, GradeResult, points_for_letter, score_to_grade


@pytest.mark.parametrize(
    "total, grade, points",
    [
        (100, "A", 4.0),
        (85, "A", 4.0),
        (84.99, "A-", 3.67),
        (80, "A-", 3.67),
        (75, "B+", 3.33),
        (72, "B", 3.0),
        (65, "B-", 2.67),
        (60, "C+", 2.33),
        (55, "C", 2.0),
        (50, "C-", 1.67),
        (40, "D", 1.0),
        (39.99, "F", 0.0),
        (30, "F", 0.0),
    ],
)
def test_score_to_grade_boundaries(total, grade, points):
    assert score_to_grade(total) == GradeResult(grade, points)


def test_out_of_range_totals_are_not_clamped():
    assert score_to_grade(-5) == FAILING
    assert score_to_grade(130).grade == "A"


def test_points_for_letter_defaults():
    assert points_for_letter("A") == 4.0
    assert points_for_letter(" b+ ") == 3.33
    assert points_for_letter("F") == 0.0


def test_points_for_letter_explicit_value_wins():
    assert points_for_letter("A", 3.5) == 3.5
    assert points_for_letter("F", 0) == 0.0


def test_points_for_unknown_letter_is_zero():
    assert points_for_letter("Z") == 0.0
