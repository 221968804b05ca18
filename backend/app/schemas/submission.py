from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.activity import ActivityRecord
from app.schemas.challenge import ProofType, Rank


class SubmissionStatus(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    needs_revision = "NEEDS_REVISION"


class SubmissionCreate(BaseModel):
    """Schema for creating (or replacing) an athlete's submission."""

    athlete_id: int
    challenge_id: int
    proof_type: ProofType = ProofType.video

    # Proof-type specific fields; which one is required depends on proof_type
    video_url: Optional[str] = None
    image_url: Optional[str] = None
    strava_activity_id: Optional[str] = None
    strava_activity_url: Optional[str] = None
    garmin_activity_id: Optional[str] = None
    garmin_activity_url: Optional[str] = None
    supervisor_id: Optional[int] = None
    supervisor_name: Optional[str] = None

    # Activity summary fetched from the proof source before submitting
    activity: Optional[ActivityRecord] = None

    achieved_value: Optional[float] = Field(default=None, gt=0)
    achieved_weight: Optional[float] = Field(default=None, gt=0)
    # For TIME challenges the value may be typed in the challenge's time format
    achieved_time: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    # Role of whoever is submitting; coaches and admins auto-approve
    submitter_role: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ReviewCreate(BaseModel):
    status: SubmissionStatus
    review_notes: Optional[str] = Field(default=None, max_length=2000)
    # Reviewer can adjust/set the achieved value
    achieved_value: Optional[float] = Field(default=None, gt=0)
    reviewer_id: Optional[int] = None


class DomainXP(BaseModel):
    domain_id: int
    xp: int


class SubmissionRead(BaseModel):
    id: int
    athlete_id: int
    challenge_id: int
    proof_type: ProofType
    proof_details: Optional[dict] = None
    achieved_value: Optional[float] = None
    achieved_weight: Optional[float] = None
    achieved_rank: Optional[Rank] = None
    xp_awarded: int = 0
    xp_by_domain: list[DomainXP] = []
    status: SubmissionStatus
    review_notes: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    version: int = 1

    model_config = ConfigDict(from_attributes=True)


class SubmissionHistoryRead(BaseModel):
    version: int
    proof_type: ProofType
    proof_details: Optional[dict] = None
    achieved_value: Optional[float] = None
    achieved_rank: Optional[Rank] = None
    xp_awarded: int = 0
    status: SubmissionStatus
    review_notes: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
