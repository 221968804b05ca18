"""Proof checks for submissions.

Two concerns live here:
  - `validate_activity`: rule-by-rule check of an activity summary against a
    challenge's activity constraints. Every failing rule adds a message;
    nothing short-circuits and nothing raises.
  - Proof details: one small dataclass per proof type, built from the raw
    submission payload by `build_proof_details`.
"""

from dataclasses import asdict, dataclass
from typing import Optional, Union

from app.core.errors import ValidationError
from app.core.math_utils import round_half_up
from app.schemas.activity import ActivityRecord, ProofValidation
from app.schemas.challenge import ActivityConstraints, GradingType, ProofType


def _km(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def validate_activity(constraints: Optional[ActivityConstraints], record: ActivityRecord) -> ProofValidation:
    errors: list[str] = []
    if constraints is None:
        constraints = ActivityConstraints()

    # Case-sensitive: "Run" does not accept "run" or "TrailRun"
    if constraints.activity_type and record.activity_type != constraints.activity_type:
        errors.append(
            f"Activity type must be {constraints.activity_type} (got {record.activity_type or 'unknown'})"
        )

    if constraints.min_distance is not None and record.distance_meters < constraints.min_distance:
        errors.append(
            f"Distance must be at least {_km(constraints.min_distance)} (got {_km(record.distance_meters)})"
        )
    if constraints.max_distance is not None and record.distance_meters > constraints.max_distance:
        errors.append(
            f"Distance must be at most {_km(constraints.max_distance)} (got {_km(record.distance_meters)})"
        )

    if constraints.min_elevation_gain is not None and record.elevation_gain_meters < constraints.min_elevation_gain:
        errors.append(
            f"Elevation gain must be at least {constraints.min_elevation_gain:g}m "
            f"(got {round(record.elevation_gain_meters)}m)"
        )

    if constraints.requires_gps and not record.has_gps:
        errors.append("Activity must be outdoor with GPS (no treadmill/trainer)")

    if constraints.requires_heart_rate and not record.has_heart_rate:
        errors.append("Activity must have heart rate data")

    if record.is_manual:
        errors.append("Manually entered activities are not accepted")

    return ProofValidation(valid=not errors, errors=errors)


def auto_fill_value(grading_type, record: ActivityRecord) -> Optional[float]:
    """Achieved value implied by an activity record, if the grading type has one.

    TIME -> moving seconds, DISTANCE -> meters rounded half up.
    Rep-based types have no activity field and are always entered by hand.
    """
    grading_type = GradingType(grading_type)
    if grading_type == GradingType.time:
        return record.moving_time_seconds
    if grading_type == GradingType.distance:
        return round_half_up(record.distance_meters)
    return None


# --------- Proof details (one variant per proof type) --------- #

@dataclass(frozen=True)
class VideoProof:
    url: str
    kind: str = "VIDEO"


@dataclass(frozen=True)
class ImageProof:
    url: str
    kind: str = "IMAGE"


@dataclass(frozen=True)
class StravaProof:
    activity_id: str
    activity_url: Optional[str] = None
    kind: str = "STRAVA"


@dataclass(frozen=True)
class GarminProof:
    activity_id: str
    activity_url: Optional[str] = None
    kind: str = "GARMIN"


@dataclass(frozen=True)
class ManualProof:
    supervisor_id: int
    supervisor_name: Optional[str] = None
    kind: str = "MANUAL"


ProofDetails = Union[VideoProof, ImageProof, StravaProof, GarminProof, ManualProof]


def build_proof_details(proof_type, payload) -> ProofDetails:
    """Pick the variant for `proof_type` out of a submission payload.

    Raises ValidationError when the field that proof type depends on is missing.
    """
    proof_type = ProofType(proof_type)
    if proof_type == ProofType.video:
        if not payload.video_url:
            raise ValidationError("A video URL is required for VIDEO proof")
        return VideoProof(url=payload.video_url)
    if proof_type == ProofType.image:
        if not payload.image_url:
            raise ValidationError("An image URL is required for IMAGE proof")
        return ImageProof(url=payload.image_url)
    if proof_type == ProofType.strava:
        if not payload.strava_activity_id:
            raise ValidationError("A Strava activity is required for STRAVA proof")
        return StravaProof(activity_id=payload.strava_activity_id, activity_url=payload.strava_activity_url)
    if proof_type == ProofType.garmin:
        if not payload.garmin_activity_id:
            raise ValidationError("A Garmin activity is required for GARMIN proof")
        return GarminProof(activity_id=payload.garmin_activity_id, activity_url=payload.garmin_activity_url)
    if proof_type == ProofType.manual:
        if payload.supervisor_id is None:
            raise ValidationError("A supervising coach is required for MANUAL proof")
        return ManualProof(supervisor_id=payload.supervisor_id, supervisor_name=payload.supervisor_name)
    raise ValidationError(f"Unsupported proof type: {proof_type.value}")


def needs_activity_record(details: ProofDetails) -> bool:
    """Strava and Garmin proofs are checked against the activity constraints."""
    if isinstance(details, (StravaProof, GarminProof)):
        return True
    if isinstance(details, (VideoProof, ImageProof, ManualProof)):
        return False
    raise ValidationError(f"Unsupported proof details: {type(details).__name__}")


def proof_details_to_dict(details: ProofDetails) -> dict:
    return asdict(details)
