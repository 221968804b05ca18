from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.core.time_utils import calculate_age
from app.db import get_db
from app.models.xp import DomainLevel
from app.repositories import get_athlete, sql_repositories
from app.schemas.athlete import DomainLevelRead
from app.schemas.division import DivisionMatch, DivisionRead
from app.services.divisions import match_division

router = APIRouter(prefix="/athletes", tags=["athletes"])


@router.get("/{athlete_id}/division", response_model=DivisionMatch)
def get_athlete_division(
    athlete_id: int,
    on: Optional[date] = Query(None, description="Evaluate the age on this date (default today)"),
    db: Session = Depends(get_db),
):
    """Matched division, or `division: null` when none applies."""
    athlete = get_athlete(db, athlete_id)
    if not athlete:
        raise NotFound("Athlete", athlete_id)

    today = on or date.today()
    divisions = sql_repositories(db).divisions.list_active()
    division = match_division(athlete.gender, athlete.date_of_birth, divisions, today)
    return DivisionMatch(
        athlete_id=athlete.id,
        age=calculate_age(athlete.date_of_birth, today),
        division=DivisionRead.model_validate(division) if division else None,
    )


@router.get("/{athlete_id}/xp", response_model=list[DomainLevelRead])
def get_athlete_xp(athlete_id: int, db: Session = Depends(get_db)):
    if not get_athlete(db, athlete_id):
        raise NotFound("Athlete", athlete_id)
    return (
        db.query(DomainLevel)
        .filter(DomainLevel.athlete_id == athlete_id)
        .order_by(DomainLevel.domain_id)
        .all()
    )
