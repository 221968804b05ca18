"""Reconcile absolute XP awards against what a submission already credited.

The calculator always returns an absolute award. Here, per domain, the
difference between that award and the XP already credited for the same
submission is written as an XPTransaction and applied to DomainLevel, so
re-grading or revoking never double-counts.
"""

import logging
from typing import Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.xp import DomainLevel, XPTransaction

logger = logging.getLogger(__name__)

CHALLENGE_SOURCE = "CHALLENGE"


def credited_for(db: Session, submission_id: int) -> dict[int, int]:
    """Net XP per domain currently credited for a submission."""
    rows = (
        db.query(XPTransaction.domain_id, func.sum(XPTransaction.amount))
        .filter(XPTransaction.source == CHALLENGE_SOURCE)
        .filter(XPTransaction.source_id == submission_id)
        .group_by(XPTransaction.domain_id)
        .all()
    )
    return {domain_id: int(total or 0) for domain_id, total in rows}


def _apply(db: Session, athlete_id: int, domain_id: int, amount: int, submission_id: int, note: str):
    db.add(
        XPTransaction(
            athlete_id=athlete_id,
            domain_id=domain_id,
            amount=amount,
            source=CHALLENGE_SOURCE,
            source_id=submission_id,
            note=note,
        )
    )
    level = (
        db.query(DomainLevel)
        .filter(DomainLevel.athlete_id == athlete_id)
        .filter(DomainLevel.domain_id == domain_id)
        .first()
    )
    if not level:
        level = DomainLevel(athlete_id=athlete_id, domain_id=domain_id, current_xp=0)
        db.add(level)
    level.current_xp = int(level.current_xp or 0) + amount


def reconcile_submission_xp(
    db: Session,
    athlete_id: int,
    submission_id: int,
    award_by_domain: Mapping[int, int],
    note: str = "",
) -> dict[int, int]:
    """Bring the submission's credited XP to exactly `award_by_domain`.

    Domains missing from the award are brought back to zero. Returns the
    deltas written (positive or negative); nothing is written for a domain
    that is already correct.
    """
    current = credited_for(db, submission_id)
    written: dict[int, int] = {}
    for domain_id in sorted(set(current) | set(award_by_domain)):
        delta = int(award_by_domain.get(domain_id, 0)) - current.get(domain_id, 0)
        if delta == 0:
            continue
        _apply(db, athlete_id, domain_id, delta, submission_id, note)
        written[domain_id] = delta
    if written:
        logger.info(
            "XP ledger for submission %s (athlete %s): %s", submission_id, athlete_id, written
        )
    return written


def revoke_submission_xp(db: Session, athlete_id: int, submission_id: int, note: str = "Revoked") -> dict[int, int]:
    """Write negating transactions for everything a submission credited."""
    return reconcile_submission_xp(db, athlete_id, submission_id, {}, note)
