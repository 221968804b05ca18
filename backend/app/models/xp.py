from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.db import Base


class XPTransaction(Base):
    """Append-only XP ledger; negative amounts revoke earlier credit."""

    __tablename__ = "xp_transactions"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False, index=True)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Integer, nullable=False)
    source = Column(String(20), nullable=False, server_default="CHALLENGE")
    # Plain id, not a foreign key: the trail outlives a deleted submission
    source_id = Column(Integer, nullable=True, index=True)
    note = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class DomainLevel(Base):
    __tablename__ = "domain_levels"
    __table_args__ = (UniqueConstraint("athlete_id", "domain_id"),)

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id", ondelete="CASCADE"), nullable=False, index=True)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    current_xp = Column(Integer, nullable=False, server_default="0")
