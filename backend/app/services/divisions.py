"""Resolve an athlete's competitive division from gender and birth date."""

from datetime import date
from typing import Iterable, Optional

from app.core.time_utils import calculate_age


def division_matches(division, gender: Optional[str], age: int) -> bool:
    """True when `division` admits an athlete of this gender and whole-year age.

    NULL gender or NULL age bounds on the division match everyone.
    """
    div_gender = _value(division.gender)
    if div_gender is not None and div_gender != _value(gender):
        return False
    if division.age_min is not None and age < division.age_min:
        return False
    if division.age_max is not None and age > division.age_max:
        return False
    return True


def match_division(
    gender: Optional[str],
    date_of_birth: date,
    divisions: Iterable,
    today: Optional[date] = None,
):
    """Return the first matching division by ascending sort order, else None.

    None is not an error: callers show global/fallback data instead.
    """
    age = calculate_age(date_of_birth, today)
    for division in sorted(divisions, key=lambda d: d.sort_order or 0):
        if division_matches(division, gender, age):
            return division
    return None


def _value(v):
    return getattr(v, "value", v)
