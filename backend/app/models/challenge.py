from sqlalchemy import (
    Column, Integer, String, Boolean, Float, ForeignKey, JSON, Text, UniqueConstraint,
)
from app.db import Base


class Challenge(Base):
    __tablename__ = "challenges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)

    # PASS_FAIL, REPS, TIME, DISTANCE, TIMED_REPS, WEIGHTED_REPS
    grading_type = Column(String(20), nullable=False, server_default="PASS_FAIL")
    grading_unit = Column(String(20), nullable=True)  # reps, seconds, meters
    time_format = Column(String(10), nullable=False, server_default="hh:mm:ss")

    # Difficulty range; PASS_FAIL awards are keyed on it
    min_rank = Column(String(1), nullable=False, server_default="F")
    max_rank = Column(String(1), nullable=False, server_default="S")

    # NULL gym = global challenge
    gym_id = Column(Integer, ForeignKey("gyms.id", ondelete="SET NULL"), nullable=True, index=True)

    # ["VIDEO", "STRAVA", ...]
    proof_types = Column(JSON, nullable=False, default=lambda: ["VIDEO"])

    # Activity proof constraints (Strava/Garmin)
    activity_type = Column(String(40), nullable=True)
    min_distance = Column(Float, nullable=True)        # meters
    max_distance = Column(Float, nullable=True)        # meters
    min_elevation_gain = Column(Float, nullable=True)  # meters
    requires_gps = Column(Boolean, nullable=False, server_default="0")
    requires_heart_rate = Column(Boolean, nullable=False, server_default="0")

    is_active = Column(Boolean, nullable=False, server_default="1")


class ChallengeDomain(Base):
    """XP split: 1-3 rows per challenge, xp_percent summing to 100."""

    __tablename__ = "challenge_domains"
    __table_args__ = (UniqueConstraint("challenge_id", "domain_id"),)

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    xp_percent = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, server_default="0")  # 0 = primary


class ChallengeDivision(Base):
    """Allowed divisions; no rows means every division may attempt."""

    __tablename__ = "challenge_divisions"
    __table_args__ = (UniqueConstraint("challenge_id", "division_id"),)

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    division_id = Column(Integer, ForeignKey("divisions.id", ondelete="CASCADE"), nullable=False)


class ChallengeEquipment(Base):
    __tablename__ = "challenge_equipment"
    __table_args__ = (UniqueConstraint("challenge_id", "equipment_id"),)

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False)
    # Optional equipment never excludes a challenge
    is_required = Column(Boolean, nullable=False, server_default="1")


class ChallengeDiscipline(Base):
    __tablename__ = "challenge_disciplines"
    __table_args__ = (UniqueConstraint("challenge_id", "discipline_id"),)

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    discipline_id = Column(Integer, ForeignKey("disciplines.id", ondelete="CASCADE"), nullable=False)


class ChallengeGrade(Base):
    """Per-division, per-rank target for a graded challenge."""

    __tablename__ = "challenge_grades"
    __table_args__ = (UniqueConstraint("challenge_id", "division_id", "rank"),)

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    division_id = Column(Integer, ForeignKey("divisions.id", ondelete="CASCADE"), nullable=False, index=True)
    rank = Column(String(1), nullable=False)
    target_value = Column(Float, nullable=False)
    target_weight = Column(Float, nullable=True)  # WEIGHTED_REPS only
