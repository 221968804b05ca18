import os
from datetime import date

import pytest

# Use in-memory sqlite for tests; must be set before the app creates its engine
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient  # noqa: E402

from app.db import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.athlete import Athlete, AthleteDiscipline  # noqa: E402
from app.models.catalog import Discipline, Domain, Equipment  # noqa: E402
from app.models.challenge import (  # noqa: E402
    Challenge,
    ChallengeDiscipline,
    ChallengeDivision,
    ChallengeDomain,
    ChallengeEquipment,
    ChallengeGrade,
)
from app.models.division import Division  # noqa: E402
from app.models.gym import Gym, GymEquipment, GymMember  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def _override():
        yield db

    app.dependency_overrides[get_db] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class Factory:
    """Small row builders; every call commits so the API sees the rows."""

    def __init__(self, db):
        self.db = db
        self._n = 0

    def _slug(self, prefix):
        self._n += 1
        return f"{prefix}-{self._n}"

    def _save(self, *rows):
        self.db.add_all(rows)
        self.db.commit()
        for r in rows:
            self.db.refresh(r)
        return rows[0] if len(rows) == 1 else rows

    def domain(self, name="Strength"):
        return self._save(Domain(name=name, slug=self._slug(name.lower())))

    def discipline(self, name="Running"):
        return self._save(Discipline(name=name, slug=self._slug(name.lower())))

    def equipment(self, name="Barbell"):
        return self._save(Equipment(name=name))

    def division(self, name="Open", gender=None, age_min=None, age_max=None, sort_order=0):
        return self._save(
            Division(name=name, gender=gender, age_min=age_min, age_max=age_max, sort_order=sort_order)
        )

    def athlete(self, dob=date(1995, 1, 1), gender="MALE", disciplines=()):
        a = self._save(Athlete(display_name=self._slug("athlete"), date_of_birth=dob, gender=gender))
        for d in disciplines:
            self._save(AthleteDiscipline(athlete_id=a.id, discipline_id=d.id))
        return a

    def gym(self, inventory=(), members=()):
        g = self._save(Gym(name=self._slug("gym"), slug=self._slug("gym")))
        for e in inventory:
            self._save(GymEquipment(gym_id=g.id, equipment_id=e.id))
        for a in members:
            self._save(GymMember(gym_id=g.id, athlete_id=a.id))
        return g

    def challenge(
        self,
        name=None,
        grading_type="REPS",
        domains=(),
        proof_types=("VIDEO",),
        gym=None,
        divisions=(),
        equipment=(),
        disciplines=(),
        grades=None,
        **cols,
    ):
        """`domains` is [(Domain, percent)], `equipment` is [(Equipment, required)],
        `grades` is {division_id: {rank: target or (target, weight)}}.
        """
        name = name or self._slug("Challenge")
        c = self._save(
            Challenge(
                name=name,
                slug=self._slug("challenge"),
                grading_type=grading_type,
                proof_types=list(proof_types),
                gym_id=gym.id if gym else None,
                **cols,
            )
        )
        for pos, (d, pct) in enumerate(domains):
            self._save(ChallengeDomain(challenge_id=c.id, domain_id=d.id, xp_percent=pct, position=pos))
        for div in divisions:
            self._save(ChallengeDivision(challenge_id=c.id, division_id=div.id))
        for e, required in equipment:
            self._save(ChallengeEquipment(challenge_id=c.id, equipment_id=e.id, is_required=required))
        for disc in disciplines:
            self._save(ChallengeDiscipline(challenge_id=c.id, discipline_id=disc.id))
        for division_id, table in (grades or {}).items():
            for rank, target in table.items():
                weight = None
                if isinstance(target, tuple):
                    target, weight = target
                self._save(
                    ChallengeGrade(
                        challenge_id=c.id,
                        division_id=division_id,
                        rank=rank,
                        target_value=target,
                        target_weight=weight,
                    )
                )
        return c


@pytest.fixture
def make(db):
    return Factory(db)
