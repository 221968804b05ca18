"""Can this athlete see and attempt this challenge?

Results carry every failing restriction so the caller can show them all;
nothing here raises for an ineligible athlete. The catalog applies the
same three predicates in SQL (see repositories.eligible_challenge_filters).
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass(frozen=True)
class AthleteContext:
    """Everything eligibility needs to know about the athlete, resolved up front."""

    athlete_id: int
    division_id: Optional[int] = None
    active_gym_ids: frozenset = frozenset()
    discipline_ids: frozenset = frozenset()


@dataclass
class EligibilityResult:
    eligible: bool
    reasons: list[str] = field(default_factory=list)


def gym_allows(challenge, ctx: AthleteContext) -> bool:
    return challenge.gym_id is None or challenge.gym_id in ctx.active_gym_ids


def division_allows(challenge, ctx: AthleteContext) -> bool:
    allowed = challenge.allowed_division_ids
    if not allowed:
        return True
    return ctx.division_id is not None and ctx.division_id in allowed


def missing_equipment(challenge, inventory: Iterable[int]) -> list[int]:
    """Required equipment ids absent from `inventory`, in challenge order."""
    have = set(inventory)
    return [e for e in challenge.required_equipment_ids if e not in have]


def evaluate_eligibility(
    challenge,
    ctx: AthleteContext,
    gym_inventory: Optional[Iterable[int]] = None,
) -> EligibilityResult:
    """Check gym membership, division restriction and, when an inventory is
    given (catalog filtering by a gym), required equipment.
    """
    reasons: list[str] = []

    if not gym_allows(challenge, ctx):
        reasons.append("This challenge is only available to members of its gym")

    if not division_allows(challenge, ctx):
        if ctx.division_id is None:
            reasons.append("This challenge is restricted to specific divisions and you have no matching division")
        else:
            reasons.append("Your division is not allowed to attempt this challenge")

    if gym_inventory is not None:
        missing = missing_equipment(challenge, gym_inventory)
        if missing:
            ids = ", ".join(str(e) for e in missing)
            reasons.append(f"Required equipment not available at this gym: {ids}")

    return EligibilityResult(eligible=not reasons, reasons=reasons)
