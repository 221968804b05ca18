from datetime import date

from app.core.constants import RANKS
from app.db import Base, SessionLocal, engine
from app.models.athlete import Athlete, AthleteDiscipline
from app.models.catalog import Discipline, Domain, Equipment
from app.models.challenge import (
    Challenge,
    ChallengeDiscipline,
    ChallengeDomain,
    ChallengeEquipment,
    ChallengeGrade,
)
from app.models.division import Division
from app.models.gym import Gym, GymEquipment, GymMember
from app.models import submission, xp  # noqa: F401  (register tables)



def clear_catalog(db) -> None:
    """Drop everything so we can reseed cleanly."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def _grades(challenge_id, division_id, targets, weights=None):
    rows = []
    for i, target in enumerate(targets):
        rows.append(
            ChallengeGrade(
                challenge_id=challenge_id,
                division_id=division_id,
                rank=RANKS[i],
                target_value=target,
                target_weight=weights[i] if weights else None,
            )
        )
    return rows


def seed_demo_catalog(db) -> None:
    """Domains, divisions, one gym and a handful of challenges across grading types."""
    strength, skill, endurance, speed = [
        Domain(name=n, slug=n.lower()) for n in ("Strength", "Skill", "Endurance", "Speed")
    ]
    running, calisthenics, lifting = [
        Discipline(name=n, slug=n.lower()) for n in ("Running", "Calisthenics", "Weightlifting")
    ]
    barbell, pullup_bar = Equipment(name="Barbell"), Equipment(name="Pull-up bar")
    db.add_all([strength, skill, endurance, speed, running, calisthenics, lifting, barbell, pullup_bar])

    youth = Division(name="Youth", age_min=13, age_max=17, sort_order=1)
    men = Division(name="Men Open", gender="MALE", age_min=18, sort_order=2)
    women = Division(name="Women Open", gender="FEMALE", age_min=18, sort_order=3)
    open_div = Division(name="Open", sort_order=99)
    db.add_all([youth, men, women, open_div])

    gym = Gym(name="Summit Barbell", slug="summit-barbell")
    db.add(gym)
    db.flush()
    db.add(GymEquipment(gym_id=gym.id, equipment_id=barbell.id))

    five_k = Challenge(
        name="5K Run", slug="5k-run", grading_type="TIME", grading_unit="seconds",
        time_format="mm:ss", proof_types=["STRAVA", "GARMIN", "VIDEO"],
        activity_type="Run", min_distance=5000, requires_gps=True,
    )
    push_ups = Challenge(
        name="Max Push-ups", slug="max-push-ups", grading_type="REPS", grading_unit="reps",
        proof_types=["VIDEO"],
    )
    bench = Challenge(
        name="Bench Press", slug="bench-press", grading_type="WEIGHTED_REPS", grading_unit="reps",
        proof_types=["VIDEO", "MANUAL"], gym_id=gym.id,
    )
    muscle_up = Challenge(
        name="Strict Muscle-up", slug="strict-muscle-up", grading_type="PASS_FAIL",
        min_rank="C", max_rank="A", proof_types=["VIDEO"],
    )
    db.add_all([five_k, push_ups, bench, muscle_up])
    db.flush()

    db.add_all([
        ChallengeDomain(challenge_id=five_k.id, domain_id=endurance.id, xp_percent=60, position=0),
        ChallengeDomain(challenge_id=five_k.id, domain_id=speed.id, xp_percent=40, position=1),
        ChallengeDomain(challenge_id=push_ups.id, domain_id=strength.id, xp_percent=100),
        ChallengeDomain(challenge_id=bench.id, domain_id=strength.id, xp_percent=100),
        ChallengeDomain(challenge_id=muscle_up.id, domain_id=skill.id, xp_percent=50, position=0),
        ChallengeDomain(challenge_id=muscle_up.id, domain_id=strength.id, xp_percent=50, position=1),
        ChallengeDiscipline(challenge_id=five_k.id, discipline_id=running.id),
        ChallengeDiscipline(challenge_id=push_ups.id, discipline_id=calisthenics.id),
        ChallengeDiscipline(challenge_id=muscle_up.id, discipline_id=calisthenics.id),
        ChallengeDiscipline(challenge_id=bench.id, discipline_id=lifting.id),
        ChallengeEquipment(challenge_id=bench.id, equipment_id=barbell.id),
        ChallengeEquipment(challenge_id=muscle_up.id, equipment_id=pullup_bar.id),
    ])

    # 5K times in seconds: lower is better
    db.add_all(_grades(five_k.id, open_div.id, [2400, 2100, 1800, 1560, 1380, 1230, 1080]))
    db.add_all(_grades(push_ups.id, open_div.id, [10, 20, 30, 40, 50, 65, 80]))
    db.add_all(_grades(push_ups.id, youth.id, [5, 10, 15, 25, 35, 45, 60]))
    db.add_all(_grades(bench.id, open_div.id, [5] * 7, weights=[40, 60, 80, 100, 120, 140, 160]))

    athlete = Athlete(display_name="Demo Athlete", date_of_birth=date(1995, 4, 12), gender="MALE")
    db.add(athlete)
    db.flush()
    db.add_all([
        AthleteDiscipline(athlete_id=athlete.id, discipline_id=running.id),
        GymMember(gym_id=gym.id, athlete_id=athlete.id),
    ])
    db.commit()

    print(f"Seeded 4 challenges; fallback division id = {open_div.id}, demo athlete id = {athlete.id}")


def main():
    db = SessionLocal()
    try:
        clear_catalog(db)
        seed_demo_catalog(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
