from sqlalchemy import Column, Integer, String, Boolean
from app.db import Base


class Division(Base):
    __tablename__ = "divisions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    # NULL gender/age bounds match everyone
    gender = Column(String(10), nullable=True)
    age_min = Column(Integer, nullable=True)
    age_max = Column(Integer, nullable=True)

    # Lowest sort_order wins when several divisions match
    sort_order = Column(Integer, nullable=False, server_default="0")
    is_active = Column(Boolean, nullable=False, server_default="1")
