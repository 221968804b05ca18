"""Map an achieved measurement onto the F..S tier ladder.

Comparison direction is decided per grading type: TIME challenges are
won by going lower, every other graded type by going higher. PASS_FAIL
has no targets and never resolves a tier from a value.
"""

import operator
from typing import Iterable, Optional

from app.schemas.challenge import GradingType
from app.services.ranks import rank_index


# achieved value vs. grade target -> grade cleared?
COMPARATORS = {
    GradingType.reps: operator.ge,
    GradingType.distance: operator.ge,
    GradingType.timed_reps: operator.ge,
    GradingType.weighted_reps: operator.ge,
    GradingType.time: operator.le,
}


def lower_is_better(grading_type) -> bool:
    return COMPARATORS.get(GradingType(grading_type)) is operator.le


def grade_cleared(grade, achieved_value: float, grading_type, achieved_weight: Optional[float] = None) -> bool:
    compare = COMPARATORS.get(GradingType(grading_type))
    if compare is None:
        return False
    if not compare(achieved_value, grade.target_value):
        return False
    target_weight = getattr(grade, "target_weight", None)
    if GradingType(grading_type) == GradingType.weighted_reps and target_weight is not None:
        return achieved_weight is not None and achieved_weight >= target_weight
    return True


def resolve_tier(
    achieved_value: Optional[float],
    grading_type,
    grades: Iterable,
    achieved_weight: Optional[float] = None,
) -> Optional[str]:
    """Highest rank whose grade the achieved value clears, or None.

    Zero, negative or missing values never clear anything. Duplicate targets
    are tolerated: among ties the highest rank wins.
    """
    if achieved_value is None or achieved_value <= 0:
        return None
    if GradingType(grading_type) not in COMPARATORS:
        return None

    best = None
    for grade in sorted(grades, key=lambda g: g.target_value):
        if not grade_cleared(grade, achieved_value, grading_type, achieved_weight):
            continue
        rank = getattr(grade.rank, "value", grade.rank)
        if best is None or rank_index(rank) > rank_index(best):
            best = rank
    return best


def select_grade_table(grades: Iterable, division_id: Optional[int], fallback_division_id: Optional[int]) -> list:
    """Grades for the athlete's division, else the fallback division's, else none."""
    grades = list(grades)
    if division_id is not None:
        own = [g for g in grades if g.division_id == division_id]
        if own:
            return own
    if fallback_division_id is not None:
        return [g for g in grades if g.division_id == fallback_division_id]
    return []
