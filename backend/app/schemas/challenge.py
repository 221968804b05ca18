from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import MAX_CHALLENGE_DOMAINS, XP_PERCENT_TOTAL


class Rank(str, Enum):
    F = "F"
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"


class GradingType(str, Enum):
    pass_fail = "PASS_FAIL"
    reps = "REPS"
    time = "TIME"
    distance = "DISTANCE"
    timed_reps = "TIMED_REPS"
    weighted_reps = "WEIGHTED_REPS"


class TimeFormat(str, Enum):
    seconds = "seconds"
    mm_ss = "mm:ss"
    hh_mm_ss = "hh:mm:ss"


class ProofType(str, Enum):
    video = "VIDEO"
    image = "IMAGE"
    strava = "STRAVA"
    garmin = "GARMIN"
    manual = "MANUAL"


class DomainShare(BaseModel):
    domain_id: int
    xp_percent: int = Field(gt=0, le=XP_PERCENT_TOTAL)

    model_config = ConfigDict(from_attributes=True)


class ActivityConstraints(BaseModel):
    """Proof-source requirements; unset fields are unconstrained."""

    activity_type: Optional[str] = None
    min_distance: Optional[float] = None     # meters
    max_distance: Optional[float] = None     # meters
    min_elevation_gain: Optional[float] = None  # meters
    requires_gps: bool = False
    requires_heart_rate: bool = False

    model_config = ConfigDict(from_attributes=True)

    def is_empty(self) -> bool:
        return not (
            self.activity_type
            or self.min_distance is not None
            or self.max_distance is not None
            or self.min_elevation_gain is not None
            or self.requires_gps
            or self.requires_heart_rate
        )


class GradeRow(BaseModel):
    division_id: int
    rank: Rank
    label: Optional[str] = None  # Foundation .. Supreme
    target_value: float
    target_weight: Optional[float] = None
    # TIME targets in the challenge time format, e.g. "24:30"
    display_target: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ChallengeRules(BaseModel):
    """The parts of a challenge the rule core reads.

    Construction enforces the record invariants: one to three domains whose
    shares add up to 100, and at least one accepted proof type.
    """

    id: int
    name: str = ""
    grading_type: GradingType
    grading_unit: Optional[str] = None
    time_format: TimeFormat = TimeFormat.hh_mm_ss
    min_rank: Rank = Rank.F
    max_rank: Rank = Rank.S
    domains: list[DomainShare]
    allowed_division_ids: list[int] = []
    gym_id: Optional[int] = None
    required_equipment_ids: list[int] = []
    proof_types: list[ProofType]
    activity_constraints: Optional[ActivityConstraints] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def _check_invariants(self):
        if not self.domains:
            raise ValueError("at least one domain must be assigned")
        if len(self.domains) > MAX_CHALLENGE_DOMAINS:
            raise ValueError(f"at most {MAX_CHALLENGE_DOMAINS} domains may be assigned")
        total = sum(d.xp_percent for d in self.domains)
        if total != XP_PERCENT_TOTAL:
            raise ValueError(f"domain xp percentages must sum to {XP_PERCENT_TOTAL} (got {total})")
        if not self.proof_types:
            raise ValueError("at least one proof type is required")
        ranks = list(Rank)
        if ranks.index(self.min_rank) > ranks.index(self.max_rank):
            raise ValueError("min_rank must not be above max_rank")
        return self


class ChallengeSummary(BaseModel):
    id: int
    name: str
    slug: str
    grading_type: GradingType
    grading_unit: Optional[str] = None
    gym_id: Optional[int] = None
    partition: str  # for_you | others | completed

    model_config = ConfigDict(from_attributes=True)


class CatalogPage(BaseModel):
    items: list[ChallengeSummary]
    page: int
    total_pages: int
    total_count: int


class EligibilityRead(BaseModel):
    eligible: bool
    reasons: list[str] = []


class ChallengeDetail(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    grading_type: GradingType
    grading_unit: Optional[str] = None
    time_format: TimeFormat
    gym_id: Optional[int] = None
    proof_types: list[ProofType]
    domains: list[DomainShare]
    lower_is_better: bool = False
    activity_constraints: Optional[ActivityConstraints] = None
    grades: list[GradeRow] = []
    eligibility: Optional[EligibilityRead] = None
