from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, JSON, Text, Boolean, UniqueConstraint,
)
from sqlalchemy.sql import func
from app.db import Base


class Submission(Base):
    """One row per (athlete, challenge); resubmission replaces it in place."""

    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("athlete_id", "challenge_id", name="uq_submission_athlete_challenge"),)

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)

    proof_type = Column(String(10), nullable=False)
    proof_details = Column(JSON, nullable=True)   # tagged proof variant, see services.proof
    activity = Column(JSON, nullable=True)        # cached ActivityRecord
    notes = Column(Text, nullable=True)

    achieved_value = Column(Float, nullable=True)
    achieved_weight = Column(Float, nullable=True)
    achieved_rank = Column(String(1), nullable=True)
    xp_awarded = Column(Integer, nullable=False, server_default="0")
    xp_by_domain = Column(JSON, nullable=True)    # [{domain_id, xp}]

    # PENDING, APPROVED, REJECTED, NEEDS_REVISION
    status = Column(String(20), nullable=False, server_default="PENDING")
    auto_approved = Column(Boolean, nullable=False, server_default="0")
    review_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False, server_default="1")
    submitted_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class SubmissionHistory(Base):
    """Archived copy of a submission taken just before it was replaced."""

    __tablename__ = "submission_history"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    proof_type = Column(String(10), nullable=False)
    proof_details = Column(JSON, nullable=True)
    achieved_value = Column(Float, nullable=True)
    achieved_rank = Column(String(1), nullable=True)
    xp_awarded = Column(Integer, nullable=False, server_default="0")
    status = Column(String(20), nullable=False)
    review_notes = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
