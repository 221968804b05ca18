from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Gender(str, Enum):
    male = "MALE"
    female = "FEMALE"


class DivisionRead(BaseModel):
    id: int
    name: str
    gender: Optional[Gender] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class DivisionMatch(BaseModel):
    athlete_id: int
    age: int
    division: Optional[DivisionRead] = None  # None means show global/fallback data
