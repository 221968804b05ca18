"""Turn uploaded GPX/FIT files into activity summaries for proof checks."""

import io
import logging
import math
from typing import Optional

import gpxpy
import gpxpy.gpx
from fitparse import FitFile
from fitparse.utils import FitParseError

from app.schemas.activity import ActivityRecord

logger = logging.getLogger(__name__)

MOVING_SPEED_MPS = 0.5  # below this we treat as stopped


class ActivityFileError(ValueError):
    """The uploaded file could not be read as GPX or FIT."""


# FIT `sport` values -> the activity type names used on challenges
FIT_SPORT_TYPES = {
    "running": "Run",
    "cycling": "Ride",
    "walking": "Walk",
    "hiking": "Hike",
    "swimming": "Swim",
    "rowing": "Rowing",
}


def haversine(lat1, lon1, lat2, lon2):
    """Return great-circle distance in meters between two WGS84 points."""
    R = 6371000.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def _semicircles_to_degrees(val):
    return val * (180 / 2**31) if val is not None else None


def _point_has_hr(point) -> bool:
    # Garmin TrackPointExtension: <gpxtpx:hr>
    for ext in point.extensions or []:
        for el in ext.iter():
            if str(el.tag).split("}")[-1] == "hr" and (el.text or "").strip():
                return True
    return False


def _gpx_activity_type(gpx) -> Optional[str]:
    for track in gpx.tracks:
        if track.type:
            t = track.type.strip()
            return FIT_SPORT_TYPES.get(t.lower(), t)
    return None


def parse_gpx(text: str, name: Optional[str] = None) -> ActivityRecord:
    """Summarize a GPX document.

    Distance is the haversine sum over consecutive points; moving time only
    counts segments faster than MOVING_SPEED_MPS; elevation gain sums rises.
    """
    try:
        gpx = gpxpy.parse(text)
    except gpxpy.gpx.GPXException as e:
        raise ActivityFileError(f"Invalid GPX file: {e}") from e

    total_m = 0.0
    elev_gain = 0.0
    moving_s = 0.0
    points = 0
    has_hr = False
    last = None

    for track in gpx.tracks:
        for segment in track.segments:
            for p in segment.points:
                points += 1
                if not has_hr and _point_has_hr(p):
                    has_hr = True
                if last is not None:
                    d = haversine(last.latitude, last.longitude, p.latitude, p.longitude)
                    total_m += d
                    if p.elevation is not None and last.elevation is not None and p.elevation > last.elevation:
                        elev_gain += p.elevation - last.elevation
                    if p.time and last.time:
                        dt = (p.time - last.time).total_seconds()
                        if dt > 0 and d / dt >= MOVING_SPEED_MPS:
                            moving_s += dt
                last = p

    track_name = next((t.name for t in gpx.tracks if t.name), None)
    logger.debug("Parsed GPX: %s points, %.0f m", points, total_m)
    return ActivityRecord(
        distance_meters=round(total_m, 1),
        moving_time_seconds=int(moving_s),
        elevation_gain_meters=round(elev_gain, 1),
        activity_type=_gpx_activity_type(gpx),
        has_gps=points > 1,
        has_heart_rate=has_hr,
        source="gpx",
        name=name or track_name,
    )


def parse_fit(data: bytes, name: Optional[str] = None) -> ActivityRecord:
    """Summarize a FIT file. Session totals win over record-derived values."""
    try:
        ff = FitFile(io.BytesIO(data))
        ff.parse()
    except FitParseError as e:
        raise ActivityFileError(f"Invalid FIT file: {e}") from e

    session: dict = {}
    for msg in ff.get_messages("session"):
        session = {f.name: f.value for f in msg}
        break

    total_m = 0.0
    elev_gain = 0.0
    has_gps = False
    has_hr = False
    prev = None
    prev_alt = None
    first_ts = None
    last_ts = None

    for record in ff.get_messages("record"):
        fields = {f.name: f.value for f in record}
        ts = fields.get("timestamp")
        if ts and first_ts is None:
            first_ts = ts
        if ts:
            last_ts = ts
        if fields.get("heart_rate") is not None:
            has_hr = True
        lat = _semicircles_to_degrees(fields.get("position_lat"))
        lon = _semicircles_to_degrees(fields.get("position_long"))
        if lat is not None and lon is not None:
            has_gps = True
            if prev is not None:
                total_m += haversine(prev[0], prev[1], lat, lon)
            prev = (lat, lon)
        alt = fields.get("enhanced_altitude", fields.get("altitude"))
        if alt is not None:
            if prev_alt is not None and alt > prev_alt:
                elev_gain += alt - prev_alt
            prev_alt = alt

    distance = session.get("total_distance")
    timer = session.get("total_timer_time")
    if timer is None and first_ts and last_ts:
        timer = (last_ts - first_ts).total_seconds()
    ascent = session.get("total_ascent")
    sport = session.get("sport")

    return ActivityRecord(
        distance_meters=round(float(distance if distance is not None else total_m), 1),
        moving_time_seconds=int(timer or 0),
        elevation_gain_meters=round(float(ascent if ascent is not None else elev_gain), 1),
        activity_type=FIT_SPORT_TYPES.get(str(sport).lower(), str(sport)) if sport else None,
        has_gps=has_gps,
        has_heart_rate=has_hr or session.get("avg_heart_rate") is not None,
        source="fit",
        name=name,
    )
