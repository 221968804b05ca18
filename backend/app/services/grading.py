"""Submission flow: validate, grade, store (create-or-replace), review, delete.

Grading itself (division -> grade table -> tier -> XP) is pure and lives in
the sibling modules; this module wires it to the store.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import PRIVILEGED_ROLES
from app.core.errors import NotEligible, NotFound, ProofInvalid, ResubmitTooSoon, ValidationError
from app.core.time_utils import parse_time
from app.models.submission import Submission, SubmissionHistory
from app.repositories import Repositories, get_athlete, sql_repositories
from app.schemas.challenge import ChallengeRules, GradingType
from app.schemas.submission import ReviewCreate, SubmissionCreate, SubmissionStatus
from app.services import ledger
from app.services.divisions import match_division
from app.services.eligibility import AthleteContext, evaluate_eligibility
from app.services.proof import (
    auto_fill_value,
    build_proof_details,
    needs_activity_record,
    proof_details_to_dict,
    validate_activity,
)
from app.services.tiers import resolve_tier, select_grade_table
from app.services.xp import XPAward, calculate_award

logger = logging.getLogger(__name__)


@dataclass
class GradingOutcome:
    rank: Optional[str]
    award: XPAward
    division_id: Optional[int]


def athlete_context(repos: Repositories, athlete, today: Optional[date] = None):
    """Resolve the athlete's division, gyms and disciplines in one place.

    Returns (AthleteContext, matched Division or None).
    """
    division = match_division(athlete.gender, athlete.date_of_birth, repos.divisions.list_active(), today)
    ctx = AthleteContext(
        athlete_id=athlete.id,
        division_id=division.id if division else None,
        active_gym_ids=repos.memberships.active_gym_ids(athlete.id),
        discipline_ids=repos.memberships.discipline_ids(athlete.id),
    )
    return ctx, division


def grade(
    rules: ChallengeRules,
    grades,
    division_id: Optional[int],
    achieved_value: Optional[float],
    achieved_weight: Optional[float] = None,
) -> GradingOutcome:
    """Tier and absolute XP for one attempt. A missing tier is a valid outcome."""
    if rules.grading_type == GradingType.pass_fail:
        award = calculate_award(rules, passed=True)
        return GradingOutcome(rank=None, award=award, division_id=division_id)

    table = select_grade_table(grades, division_id, settings.fallback_division_id)
    rank = resolve_tier(achieved_value, rules.grading_type, table, achieved_weight)
    return GradingOutcome(rank=rank, award=calculate_award(rules, rank=rank), division_id=division_id)


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands back naive datetimes; they are stored as UTC
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _check_cooldown(existing: Submission, now: datetime):
    hours = settings.resubmit_cooldown_hours
    if hours <= 0 or existing.submitted_at is None:
        return
    window_end = _aware(existing.submitted_at) + timedelta(hours=hours)
    if window_end > now:
        remaining = math.ceil((window_end - now).total_seconds() / 3600)
        logger.warning(
            "Rejected resubmission for athlete %s challenge %s (%sh remaining)",
            existing.athlete_id, existing.challenge_id, remaining,
        )
        raise ResubmitTooSoon(retry_after_hours=remaining)


def _resolve_achieved_value(payload: SubmissionCreate, rules: ChallengeRules) -> Optional[float]:
    if payload.achieved_value is not None:
        return payload.achieved_value
    if payload.achieved_time and rules.grading_type == GradingType.time:
        try:
            seconds = parse_time(payload.achieved_time, rules.time_format.value)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return seconds or None
    return None


def _archive(db: Session, row: Submission):
    db.add(
        SubmissionHistory(
            submission_id=row.id,
            version=row.version or 1,
            proof_type=row.proof_type,
            proof_details=row.proof_details,
            achieved_value=row.achieved_value,
            achieved_rank=row.achieved_rank,
            xp_awarded=row.xp_awarded or 0,
            status=row.status,
            review_notes=row.review_notes,
            submitted_at=row.submitted_at,
            reviewed_at=row.reviewed_at,
        )
    )


def submit(db: Session, payload: SubmissionCreate, now: Optional[datetime] = None):
    """Create or replace the athlete's submission for a challenge.

    Returns (submission, is_resubmission).
    """
    now = now or datetime.now(timezone.utc)
    repos = sql_repositories(db)

    athlete = get_athlete(db, payload.athlete_id)
    if not athlete:
        raise NotFound("Athlete", payload.athlete_id)
    challenge = repos.challenges.get(payload.challenge_id)
    if not challenge or not challenge.is_active:
        raise NotFound("Challenge", payload.challenge_id)
    rules = repos.challenges.rules_for(challenge)

    if payload.proof_type not in rules.proof_types:
        raise ValidationError(f"Proof type {payload.proof_type.value} is not allowed for this challenge")
    details = build_proof_details(payload.proof_type, payload)

    ctx, division = athlete_context(repos, athlete, now.date())
    eligibility = evaluate_eligibility(rules, ctx)
    if not eligibility.eligible:
        raise NotEligible(eligibility.reasons)

    privileged = (payload.submitter_role or "").upper() in PRIVILEGED_ROLES
    existing = repos.submissions.find(athlete.id, challenge.id)
    if existing and not privileged:
        _check_cooldown(existing, now)

    achieved_value = _resolve_achieved_value(payload, rules)
    if needs_activity_record(details):
        if payload.activity is None:
            raise ValidationError("An activity summary is required for STRAVA/GARMIN proof")
        check = validate_activity(rules.activity_constraints, payload.activity)
        if not check.valid:
            raise ProofInvalid(check.errors)
        if achieved_value is None:
            achieved_value = auto_fill_value(rules.grading_type, payload.activity)

    if rules.grading_type != GradingType.pass_fail and achieved_value is None:
        raise ValidationError("An achieved value is required for graded challenges")

    outcome = grade(
        rules,
        repos.grades.find_by_challenge(challenge.id),
        ctx.division_id,
        achieved_value,
        payload.achieved_weight,
    )

    fields = dict(
        proof_type=payload.proof_type.value,
        proof_details=proof_details_to_dict(details),
        activity=payload.activity.model_dump() if payload.activity else None,
        notes=payload.notes,
        achieved_value=achieved_value,
        achieved_weight=payload.achieved_weight,
        achieved_rank=outcome.rank,
        xp_awarded=outcome.award.total,
        xp_by_domain=outcome.award.as_rows(),
        status=(SubmissionStatus.approved if privileged else SubmissionStatus.pending).value,
        auto_approved=privileged,
        review_notes=None,
        reviewed_by=None,
        reviewed_at=now if privileged else None,
        submitted_at=now,
    )

    if existing is None:
        row, created = repos.submissions.insert_or_get(athlete.id, challenge.id, version=1, **fields)
    else:
        row, created = existing, False
    if not created:
        _archive(db, row)
        for key, value in fields.items():
            setattr(row, key, value)
        row.version = (row.version or 1) + 1
    db.flush()

    if privileged:
        _credit(db, row)

    db.commit()
    db.refresh(row)
    logger.info(
        "%s submission %s: athlete=%s challenge=%s rank=%s xp=%s status=%s",
        "Created" if created else "Replaced",
        row.id, athlete.id, challenge.id, row.achieved_rank, row.xp_awarded, row.status,
    )
    return row, not created


def _credit(db: Session, row: Submission):
    award = {r["domain_id"]: r["xp"] for r in (row.xp_by_domain or [])}
    if row.achieved_rank:
        note = f"Challenge {row.challenge_id} tier {row.achieved_rank}"
    else:
        note = f"Challenge {row.challenge_id} passed"
    ledger.reconcile_submission_xp(db, row.athlete_id, row.id, award, note)


def review(db: Session, submission_id: int, payload: ReviewCreate, now: Optional[datetime] = None) -> Submission:
    """Record a reviewer's decision on a PENDING submission.

    A reviewer-supplied value re-grades from scratch before the decision applies.
    """
    now = now or datetime.now(timezone.utc)
    repos = sql_repositories(db)

    row = repos.submissions.get(submission_id)
    if not row:
        raise NotFound("Submission", submission_id)
    if row.status != SubmissionStatus.pending.value:
        raise ValidationError("This submission has already been reviewed")
    if payload.status == SubmissionStatus.pending:
        raise ValidationError("A review must approve, reject or request revision")

    if payload.achieved_value is not None:
        challenge = repos.challenges.get(row.challenge_id)
        if not challenge:
            raise NotFound("Challenge", row.challenge_id)
        athlete = get_athlete(db, row.athlete_id)
        if not athlete:
            raise NotFound("Athlete", row.athlete_id)
        rules = repos.challenges.rules_for(challenge)
        ctx, _ = athlete_context(repos, athlete, now.date())
        outcome = grade(
            rules,
            repos.grades.find_by_challenge(challenge.id),
            ctx.division_id,
            payload.achieved_value,
            row.achieved_weight,
        )
        row.achieved_value = payload.achieved_value
        row.achieved_rank = outcome.rank
        row.xp_awarded = outcome.award.total
        row.xp_by_domain = outcome.award.as_rows()

    row.status = payload.status.value
    row.review_notes = payload.review_notes
    row.reviewed_by = payload.reviewer_id
    row.reviewed_at = now

    # Only PENDING versions reach here, so a rejection has nothing of its own
    # to take back; credit from an earlier approved version stays.
    if payload.status == SubmissionStatus.approved:
        _credit(db, row)

    db.commit()
    db.refresh(row)
    logger.info("Reviewed submission %s: %s (rank=%s xp=%s)", row.id, row.status, row.achieved_rank, row.xp_awarded)
    return row


def delete_submission(db: Session, submission_id: int):
    row = sql_repositories(db).submissions.get(submission_id)
    if not row:
        raise NotFound("Submission", submission_id)
    ledger.revoke_submission_xp(db, row.athlete_id, row.id, "Submission deleted")
    db.query(SubmissionHistory).filter(SubmissionHistory.submission_id == row.id).delete()
    db.delete(row)
    db.commit()
    logger.info("Deleted submission %s", submission_id)
