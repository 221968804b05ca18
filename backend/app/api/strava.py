from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.challenges import check_activity
from app.core.errors import NotFound
from app.db import get_db
from app.repositories import get_athlete
from app.schemas.activity import ActivityCheck, ActivityRecord
from app.services.strava_client import StravaClient, StravaError, auth_url, to_activity_record

router = APIRouter(prefix="/strava", tags=["strava"])


def get_strava_client() -> StravaClient:
    return StravaClient()


def _require_athlete(db: Session, athlete_id: int):
    if not get_athlete(db, athlete_id):
        raise NotFound("Athlete", athlete_id)


@router.get("/auth_url")
def get_auth_url(athlete_id: int = Query(...), db: Session = Depends(get_db)):
    _require_athlete(db, athlete_id)
    try:
        return {"url": auth_url(state=str(athlete_id))}
    except StravaError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/callback")
def oauth_callback(
    code: str,
    state: str = Query(..., description="Athlete id passed through the authorize step"),
    db: Session = Depends(get_db),
    client: StravaClient = Depends(get_strava_client),
):
    try:
        athlete_id = int(state)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid state")
    _require_athlete(db, athlete_id)
    try:
        client.exchange_code(athlete_id, code)
    except StravaError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Strava linked. You can close this window."}


@router.get("/activities", response_model=list[ActivityRecord])
def list_activities(
    athlete_id: int = Query(...),
    page: int = Query(1, ge=1),
    per_page: int = Query(30, ge=1, le=200),
    db: Session = Depends(get_db),
    client: StravaClient = Depends(get_strava_client),
):
    """Recent activities to pick a proof from."""
    _require_athlete(db, athlete_id)
    try:
        activities = client.list_activities(athlete_id, page=page, per_page=per_page)
    except StravaError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return [to_activity_record(a) for a in activities]


@router.get("/activities/{activity_id}", response_model=ActivityCheck)
def get_activity(
    activity_id: str,
    athlete_id: int = Query(...),
    challenge_id: Optional[int] = Query(None, description="Validate against this challenge"),
    db: Session = Depends(get_db),
    client: StravaClient = Depends(get_strava_client),
):
    _require_athlete(db, athlete_id)
    try:
        activity = client.get_activity(athlete_id, activity_id)
    except StravaError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return check_activity(db, to_activity_record(activity), challenge_id)
