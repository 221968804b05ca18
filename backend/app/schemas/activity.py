from typing import Optional

from pydantic import BaseModel, ConfigDict


class ActivityRecord(BaseModel):
    """Summary of one activity as reported by an external proof source."""

    distance_meters: float = 0.0
    moving_time_seconds: int = 0
    elevation_gain_meters: float = 0.0
    activity_type: Optional[str] = None
    has_gps: bool = False
    has_heart_rate: bool = False
    # typed in by hand on the proof source rather than recorded by a device
    is_manual: bool = False

    # Source bookkeeping, not used by the rules
    source: Optional[str] = None  # strava | gpx | fit
    source_activity_id: Optional[str] = None
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProofValidation(BaseModel):
    valid: bool
    errors: list[str] = []


class ActivityCheck(BaseModel):
    """An activity record together with its validation against a challenge."""

    activity: ActivityRecord
    validation: Optional[ProofValidation] = None
    auto_filled_value: Optional[float] = None
