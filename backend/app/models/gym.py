from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from app.db import Base


class Gym(Base):
    __tablename__ = "gyms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, server_default="1")


class GymMember(Base):
    __tablename__ = "gym_members"
    __table_args__ = (UniqueConstraint("gym_id", "athlete_id"),)

    id = Column(Integer, primary_key=True, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id", ondelete="CASCADE"), nullable=False, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, server_default="MEMBER")  # MEMBER, COACH, ADMIN
    is_active = Column(Boolean, nullable=False, server_default="1")


class GymEquipment(Base):
    """A gym's equipment inventory."""

    __tablename__ = "gym_equipment"
    __table_args__ = (UniqueConstraint("gym_id", "equipment_id"),)

    id = Column(Integer, primary_key=True, index=True)
    gym_id = Column(Integer, ForeignKey("gyms.id", ondelete="CASCADE"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False)
