"""Store access for the grading core.

The rule services only see the small Protocols below; the Sql* classes are
the relational implementations used by the API.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import pydantic
from sqlalchemy import and_, exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.athlete import Athlete, AthleteDiscipline
from app.models.challenge import (
    Challenge,
    ChallengeDiscipline,
    ChallengeDivision,
    ChallengeDomain,
    ChallengeEquipment,
    ChallengeGrade,
)
from app.models.division import Division
from app.models.gym import GymEquipment, GymMember
from app.models.submission import Submission
from app.schemas.challenge import ActivityConstraints, ChallengeRules, DomainShare
from app.services.catalog import COMPLETED, FOR_YOU, OTHERS, ListPartition, Partition
from app.services.eligibility import AthleteContext


class GradeRepository(Protocol):
    def find_by_challenge(self, challenge_id: int) -> list: ...


class DivisionRepository(Protocol):
    def list_active(self) -> list: ...


class ChallengeRepository(Protocol):
    def get(self, challenge_id: int): ...

    def rules_for(self, challenge) -> ChallengeRules: ...


class MembershipRepository(Protocol):
    def active_gym_ids(self, athlete_id: int) -> frozenset: ...

    def discipline_ids(self, athlete_id: int) -> frozenset: ...

    def gym_inventory(self, gym_id: int) -> set: ...


class SubmissionRepository(Protocol):
    def get(self, submission_id: int): ...

    def find(self, athlete_id: int, challenge_id: int): ...

    def insert_or_get(self, athlete_id: int, challenge_id: int, **fields): ...


class SqlGradeRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_challenge(self, challenge_id: int) -> list:
        return (
            self.db.query(ChallengeGrade)
            .filter(ChallengeGrade.challenge_id == challenge_id)
            .order_by(ChallengeGrade.target_value)
            .all()
        )


class SqlDivisionRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> list:
        return (
            self.db.query(Division)
            .filter(Division.is_active.is_(True))
            .order_by(Division.sort_order, Division.id)
            .all()
        )


class SqlChallengeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, challenge_id: int):
        return self.db.query(Challenge).filter(Challenge.id == challenge_id).first()

    def rules_for(self, challenge) -> ChallengeRules:
        domains = (
            self.db.query(ChallengeDomain)
            .filter(ChallengeDomain.challenge_id == challenge.id)
            .order_by(ChallengeDomain.position, ChallengeDomain.id)
            .all()
        )
        allowed = [
            row.division_id
            for row in self.db.query(ChallengeDivision.division_id)
            .filter(ChallengeDivision.challenge_id == challenge.id)
            .all()
        ]
        required = [
            row.equipment_id
            for row in self.db.query(ChallengeEquipment.equipment_id)
            .filter(ChallengeEquipment.challenge_id == challenge.id)
            .filter(ChallengeEquipment.is_required.is_(True))
            .order_by(ChallengeEquipment.equipment_id)
            .all()
        ]
        constraints = ActivityConstraints.model_validate(challenge)
        try:
            return ChallengeRules(
                id=challenge.id,
                name=challenge.name,
                grading_type=challenge.grading_type,
                grading_unit=challenge.grading_unit,
                time_format=challenge.time_format,
                min_rank=challenge.min_rank,
                max_rank=challenge.max_rank,
                domains=[DomainShare.model_validate(d) for d in domains],
                allowed_division_ids=allowed,
                gym_id=challenge.gym_id,
                required_equipment_ids=required,
                proof_types=list(challenge.proof_types or []),
                activity_constraints=None if constraints.is_empty() else constraints,
            )
        except pydantic.ValidationError as e:
            raise ValidationError(f"Challenge {challenge.id} is misconfigured: {e}") from e


class SqlMembershipRepository:
    def __init__(self, db: Session):
        self.db = db

    def active_gym_ids(self, athlete_id: int) -> frozenset:
        rows = (
            self.db.query(GymMember.gym_id)
            .filter(GymMember.athlete_id == athlete_id)
            .filter(GymMember.is_active.is_(True))
            .all()
        )
        return frozenset(r.gym_id for r in rows)

    def gym_inventory(self, gym_id: int) -> set:
        rows = self.db.query(GymEquipment.equipment_id).filter(GymEquipment.gym_id == gym_id).all()
        return {r.equipment_id for r in rows}

    def discipline_ids(self, athlete_id: int) -> frozenset:
        rows = (
            self.db.query(AthleteDiscipline.discipline_id)
            .filter(AthleteDiscipline.athlete_id == athlete_id)
            .all()
        )
        return frozenset(r.discipline_id for r in rows)


class SqlSubmissionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, submission_id: int):
        return self.db.query(Submission).filter(Submission.id == submission_id).first()

    def find(self, athlete_id: int, challenge_id: int):
        return (
            self.db.query(Submission)
            .filter(Submission.athlete_id == athlete_id)
            .filter(Submission.challenge_id == challenge_id)
            .first()
        )

    def insert_or_get(self, athlete_id: int, challenge_id: int, **fields):
        """Insert a fresh row; if a concurrent writer got there first, return theirs.

        Returns (row, created). The caller then overwrites the row, so the
        last writer wins and the unique key prevents duplicates. Must be the
        first write of the transaction: a lost race rolls the session back.
        """
        row = Submission(athlete_id=athlete_id, challenge_id=challenge_id, **fields)
        try:
            self.db.add(row)
            self.db.flush()
            return row, True
        except IntegrityError:
            self.db.rollback()
            existing = self.find(athlete_id, challenge_id)
            if existing is None:
                raise
            return existing, False


@dataclass
class Repositories:
    challenges: ChallengeRepository
    grades: GradeRepository
    divisions: DivisionRepository
    memberships: MembershipRepository
    submissions: SubmissionRepository


def sql_repositories(db: Session) -> Repositories:
    return Repositories(
        challenges=SqlChallengeRepository(db),
        grades=SqlGradeRepository(db),
        divisions=SqlDivisionRepository(db),
        memberships=SqlMembershipRepository(db),
        submissions=SqlSubmissionRepository(db),
    )


def get_athlete(db: Session, athlete_id: int) -> Optional[Athlete]:
    return db.query(Athlete).filter(Athlete.id == athlete_id).first()


# --------- Catalog (SQL form of the eligibility predicates) --------- #

def eligible_challenge_filters(ctx: AthleteContext, equipment_gym_id: Optional[int] = None) -> list:
    """WHERE clauses over Challenge matching services.eligibility.evaluate_eligibility."""
    clauses = [Challenge.is_active.is_(True)]

    gym_ids = sorted(ctx.active_gym_ids)
    if gym_ids:
        clauses.append(or_(Challenge.gym_id.is_(None), Challenge.gym_id.in_(gym_ids)))
    else:
        clauses.append(Challenge.gym_id.is_(None))

    restricted = exists().where(ChallengeDivision.challenge_id == Challenge.id)
    if ctx.division_id is None:
        clauses.append(~restricted)
    else:
        allowed = exists().where(
            and_(
                ChallengeDivision.challenge_id == Challenge.id,
                ChallengeDivision.division_id == ctx.division_id,
            )
        )
        clauses.append(or_(~restricted, allowed))

    if equipment_gym_id is not None:
        inventory = select(GymEquipment.equipment_id).where(GymEquipment.gym_id == equipment_gym_id)
        missing_required = exists().where(
            and_(
                ChallengeEquipment.challenge_id == Challenge.id,
                ChallengeEquipment.is_required.is_(True),
                ChallengeEquipment.equipment_id.not_in(inventory),
            )
        )
        clauses.append(~missing_required)

    return clauses


class SqlChallengePartition:
    def __init__(self, name: str, query):
        self.name = name
        self.query = query

    def count(self) -> int:
        return self.query.count()

    def fetch(self, offset: int, limit: int) -> list:
        return self.query.order_by(Challenge.name, Challenge.id).offset(offset).limit(limit).all()


def catalog_partitions(
    db: Session,
    ctx: AthleteContext,
    discipline_ids: frozenset,
    gym_filter_id: Optional[int] = None,
    equipment_filter_enabled: bool = False,
    search_text: Optional[str] = None,
) -> list[Partition]:
    """The three disjoint, name-ordered partitions in priority order."""
    equipment_gym_id = gym_filter_id if equipment_filter_enabled else None
    base = db.query(Challenge).filter(*eligible_challenge_filters(ctx, equipment_gym_id))

    if gym_filter_id is not None:
        base = base.filter(or_(Challenge.gym_id.is_(None), Challenge.gym_id == gym_filter_id))
    if search_text:
        base = base.filter(Challenge.name.icontains(search_text.strip(), autoescape=True))

    completed = exists().where(
        and_(
            Submission.challenge_id == Challenge.id,
            Submission.athlete_id == ctx.athlete_id,
            Submission.status == "APPROVED",
        )
    )
    if discipline_ids:
        matches = exists().where(
            and_(
                ChallengeDiscipline.challenge_id == Challenge.id,
                ChallengeDiscipline.discipline_id.in_(sorted(discipline_ids)),
            )
        )
        for_you = SqlChallengePartition(FOR_YOU, base.filter(~completed, matches))
        others = base.filter(~completed, ~matches)
    else:
        # No disciplines: nothing is "for you", and nothing to query
        for_you = ListPartition(FOR_YOU, [])
        others = base.filter(~completed)

    return [
        for_you,
        SqlChallengePartition(OTHERS, others),
        SqlChallengePartition(COMPLETED, base.filter(completed)),
    ]
