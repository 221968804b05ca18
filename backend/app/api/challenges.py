from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFound
from app.core.time_utils import format_seconds
from app.db import get_db
from app.repositories import catalog_partitions, get_athlete, sql_repositories
from app.schemas.activity import ActivityCheck, ActivityRecord
from app.schemas.challenge import (
    CatalogPage,
    ChallengeDetail,
    ChallengeRules,
    ChallengeSummary,
    EligibilityRead,
    GradeRow,
    GradingType,
)
from app.services.catalog import compose_page
from app.services.eligibility import evaluate_eligibility
from app.services.grading import athlete_context
from app.services.proof import auto_fill_value, validate_activity
from app.services.ranks import rank_label
from app.services.tiers import lower_is_better, select_grade_table

router = APIRouter(prefix="/challenges", tags=["challenges"])


def _active_challenge(repos, challenge_id: int):
    challenge = repos.challenges.get(challenge_id)
    if not challenge or not challenge.is_active:
        raise NotFound("Challenge", challenge_id)
    return challenge


def _grade_row(grade, rules: ChallengeRules) -> GradeRow:
    row = GradeRow.model_validate(grade)
    row.label = rank_label(row.rank)
    if rules.grading_type == GradingType.time:
        row.display_target = format_seconds(grade.target_value, rules.time_format.value)
    return row


def check_activity(db: Session, record: ActivityRecord, challenge_id: Optional[int] = None) -> ActivityCheck:
    """Validate an activity against a challenge and work out its auto-filled value.

    Without a challenge the record is returned unchecked.
    """
    if challenge_id is None:
        return ActivityCheck(activity=record)
    repos = sql_repositories(db)
    rules = repos.challenges.rules_for(_active_challenge(repos, challenge_id))
    return ActivityCheck(
        activity=record,
        validation=validate_activity(rules.activity_constraints, record),
        auto_filled_value=auto_fill_value(rules.grading_type, record),
    )


@router.get("/", response_model=CatalogPage)
def list_challenges(
    athlete_id: int = Query(...),
    page: int = Query(1, description="1-based; clamped into the valid range"),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    discipline_ids: Optional[list[int]] = Query(None, description="Overrides the athlete's own disciplines"),
    gym_id: Optional[int] = Query(None, description="Only global challenges and this gym's"),
    equipment_filter: bool = Query(False, description="Hide challenges needing equipment gym_id lacks"),
    q: Optional[str] = Query(None, description="Case-insensitive name search"),
    db: Session = Depends(get_db),
):
    """
    Catalog page in priority order: for you, others, completed.

      GET /challenges?athlete_id=1&page=2&gym_id=3&equipment_filter=true
    """
    athlete = get_athlete(db, athlete_id)
    if not athlete:
        raise NotFound("Athlete", athlete_id)

    ctx, _ = athlete_context(sql_repositories(db), athlete)
    disciplines = frozenset(discipline_ids) if discipline_ids else ctx.discipline_ids
    partitions = catalog_partitions(
        db,
        ctx,
        disciplines,
        gym_filter_id=gym_id,
        equipment_filter_enabled=equipment_filter,
        search_text=q,
    )
    result = compose_page(partitions, page, page_size or settings.catalog_page_size)

    items = [
        ChallengeSummary(
            id=c.id,
            name=c.name,
            slug=c.slug,
            grading_type=c.grading_type,
            grading_unit=c.grading_unit,
            gym_id=c.gym_id,
            partition=partition,
        )
        for partition, c in result.items
    ]
    return CatalogPage(
        items=items,
        page=result.page,
        total_pages=result.total_pages,
        total_count=result.total_count,
    )


@router.get("/{challenge_id}", response_model=ChallengeDetail)
def get_challenge(
    challenge_id: int,
    athlete_id: Optional[int] = Query(None),
    gym_id: Optional[int] = Query(None, description="Also check required equipment against this gym"),
    db: Session = Depends(get_db),
):
    repos = sql_repositories(db)
    challenge = _active_challenge(repos, challenge_id)
    rules = repos.challenges.rules_for(challenge)
    grades = repos.grades.find_by_challenge(challenge.id)

    eligibility = None
    if athlete_id is not None:
        athlete = get_athlete(db, athlete_id)
        if not athlete:
            raise NotFound("Athlete", athlete_id)
        ctx, _ = athlete_context(repos, athlete)
        inventory = repos.memberships.gym_inventory(gym_id) if gym_id is not None else None
        result = evaluate_eligibility(rules, ctx, inventory)
        eligibility = EligibilityRead(eligible=result.eligible, reasons=result.reasons)
        # Only the table that would grade this athlete
        grades = select_grade_table(grades, ctx.division_id, settings.fallback_division_id)

    return ChallengeDetail(
        id=challenge.id,
        name=challenge.name,
        slug=challenge.slug,
        description=challenge.description,
        grading_type=rules.grading_type,
        grading_unit=rules.grading_unit,
        time_format=rules.time_format,
        gym_id=rules.gym_id,
        proof_types=rules.proof_types,
        domains=rules.domains,
        activity_constraints=rules.activity_constraints,
        lower_is_better=lower_is_better(rules.grading_type),
        grades=[_grade_row(g, rules) for g in grades],
        eligibility=eligibility,
    )


@router.post("/{challenge_id}/validate-activity", response_model=ActivityCheck)
def validate_challenge_activity(challenge_id: int, record: ActivityRecord, db: Session = Depends(get_db)):
    return check_activity(db, record, challenge_id)
