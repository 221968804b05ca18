from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from app.db import Base


class Athlete(Base):
    __tablename__ = "athletes"

    id = Column(Integer, primary_key=True, index=True)
    display_name = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=True)  # MALE, FEMALE


class AthleteDiscipline(Base):
    __tablename__ = "athlete_disciplines"
    __table_args__ = (UniqueConstraint("athlete_id", "discipline_id"),)

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False, index=True)
    discipline_id = Column(Integer, ForeignKey("disciplines.id", ondelete="CASCADE"), nullable=False)
