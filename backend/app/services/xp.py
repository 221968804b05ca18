"""XP awards for cleared tiers and their split across domains."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from app.core.config import settings
from app.core.math_utils import round_half_up
from app.schemas.challenge import GradingType
from app.services.ranks import ranks_through


@dataclass(frozen=True)
class XPAward:
    total: int
    rank: Optional[str] = None
    by_domain: list[tuple[int, int]] = field(default_factory=list)  # (domain_id, xp)

    def as_rows(self) -> list[dict]:
        return [{"domain_id": d, "xp": xp} for d, xp in self.by_domain]


def cumulative_xp(rank, tier_xp: Optional[Mapping[str, int]] = None) -> int:
    """Sum of the per-tier XP for F up through `rank`.

    Clearing C straight away still earns F+E+D+C.
    """
    table = tier_xp or settings.tier_xp
    return sum(table[r] for r in ranks_through(rank))


def pass_fail_xp(min_rank, max_rank, tier_xp: Optional[Mapping[str, int]] = None) -> int:
    """Fixed award for a PASS_FAIL challenge: midpoint of its rank range."""
    table = tier_xp or settings.tier_xp
    low = table[getattr(min_rank, "value", min_rank)]
    high = table[getattr(max_rank, "value", max_rank)]
    return round_half_up((low + high) / 2)


def split_by_domain(total: int, domains) -> list[tuple[int, int]]:
    """Round each domain's share independently.

    The parts are not forced to add up to `total`: 25 XP over 50/50
    gives 13 + 13.
    """
    return [(d.domain_id, round_half_up(total * d.xp_percent / 100)) for d in domains]


def calculate_award(
    challenge,
    rank: Optional[str] = None,
    passed: bool = False,
    tier_xp: Optional[Mapping[str, int]] = None,
) -> XPAward:
    """Absolute award for a submission; the ledger reconciles against prior credit.

    Graded challenges pay the cumulative value of `rank`; PASS_FAIL pays its
    fixed award when `passed`. No tier / not passed is a valid zero award.
    """
    if GradingType(challenge.grading_type) == GradingType.pass_fail:
        if not passed:
            return XPAward(total=0)
        total = pass_fail_xp(challenge.min_rank, challenge.max_rank, tier_xp)
        return XPAward(total=total, rank=None, by_domain=split_by_domain(total, challenge.domains))

    if rank is None:
        return XPAward(total=0)
    rank = getattr(rank, "value", rank)
    total = cumulative_xp(rank, tier_xp)
    return XPAward(total=total, rank=rank, by_domain=split_by_domain(total, challenge.domains))
