from datetime import date

import pytest

from app.core.config import settings
from app.models.xp import XPTransaction


@pytest.fixture
def world(make, monkeypatch):
    """An adult male athlete, an Open fallback division and a REPS challenge."""
    strength, skill = make.domain("Strength"), make.domain("Skill")
    open_div = make.division("Open", sort_order=99)
    men = make.division("Men", gender="MALE", age_min=18, sort_order=1)
    monkeypatch.setattr(settings, "fallback_division_id", open_div.id)
    athlete = make.athlete(dob=date(1990, 3, 1), gender="MALE")
    push_ups = make.challenge(
        "Push-ups",
        domains=[(strength, 60), (skill, 40)],
        proof_types=["VIDEO", "MANUAL"],
        grades={open_div.id: {"F": 10, "E": 20, "D": 30, "C": 40}},
    )
    return {
        "athlete": athlete,
        "challenge": push_ups,
        "strength": strength,
        "skill": skill,
        "open": open_div,
        "men": men,
    }


def _submit(client, athlete, challenge, **kw):
    payload = {
        "athlete_id": athlete.id,
        "challenge_id": challenge.id,
        "proof_type": "VIDEO",
        "video_url": "https://example.com/v.mp4",
    }
    payload.update(kw)
    return client.post("/submissions/", json=payload)


def _xp(client, athlete):
    r = client.get(f"/athletes/{athlete.id}/xp")
    assert r.status_code == 200
    return {row["domain_id"]: row["current_xp"] for row in r.json()}


def test_submit_grades_against_fallback_table(client, world):
    r = _submit(client, world["athlete"], world["challenge"], achieved_value=25)
    assert r.status_code == 200, r.text
    sub = r.json()
    assert sub["achieved_rank"] == "E"
    assert sub["xp_awarded"] == 75
    assert sub["xp_by_domain"] == [
        {"domain_id": world["strength"].id, "xp": 45},
        {"domain_id": world["skill"].id, "xp": 30},
    ]
    assert sub["status"] == "PENDING"
    assert sub["version"] == 1
    assert sub["proof_details"]["kind"] == "VIDEO"
    # Nothing credited before review
    assert _xp(client, world["athlete"]) == {}


def test_own_division_table_wins_over_fallback(client, make, world):
    c = make.challenge(
        "Pull-ups",
        domains=[(world["strength"], 100)],
        grades={
            world["open"].id: {"F": 10, "E": 20},
            world["men"].id: {"F": 5, "E": 8, "D": 12},
        },
    )
    r = _submit(client, world["athlete"], c, achieved_value=12)
    assert r.json()["achieved_rank"] == "D"


def test_value_below_every_grade_is_pending_without_tier(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=3).json()
    assert sub["achieved_rank"] is None
    assert sub["xp_awarded"] == 0


def test_graded_submission_requires_a_value(client, world):
    r = _submit(client, world["athlete"], world["challenge"])
    assert r.status_code == 422


def test_approval_credits_xp_ledger(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=25).json()
    r = client.post(f"/submissions/{sub['id']}/review", json={"status": "APPROVED", "reviewer_id": 99})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "APPROVED"
    assert _xp(client, world["athlete"]) == {world["strength"].id: 45, world["skill"].id: 30}


def test_reviewer_override_regrades(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=25).json()
    r = client.post(
        f"/submissions/{sub['id']}/review",
        json={"status": "APPROVED", "achieved_value": 40},
    )
    body = r.json()
    assert body["achieved_rank"] == "C"
    assert body["xp_awarded"] == 250
    assert _xp(client, world["athlete"]) == {world["strength"].id: 150, world["skill"].id: 100}


def test_only_pending_submissions_can_be_reviewed(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=25).json()
    client.post(f"/submissions/{sub['id']}/review", json={"status": "REJECTED"})
    r = client.post(f"/submissions/{sub['id']}/review", json={"status": "APPROVED"})
    assert r.status_code == 422


def test_resubmission_within_cooldown_is_refused(client, world):
    _submit(client, world["athlete"], world["challenge"], achieved_value=25)
    r = _submit(client, world["athlete"], world["challenge"], achieved_value=30)
    assert r.status_code == 429
    assert r.json()["retry_after_hours"] == 24


def test_resubmission_replaces_and_archives(client, world, monkeypatch):
    monkeypatch.setattr(settings, "resubmit_cooldown_hours", 0)
    first = _submit(client, world["athlete"], world["challenge"], achieved_value=25).json()
    second = _submit(client, world["athlete"], world["challenge"], achieved_value=35).json()

    assert second["id"] == first["id"]
    assert second["version"] == 2
    assert second["achieved_rank"] == "D"

    history = client.get(f"/submissions/{first['id']}/history").json()
    assert [(h["version"], h["achieved_rank"]) for h in history] == [(1, "E")]

    listed = client.get("/submissions/", params={"athlete_id": world["athlete"].id}).json()
    assert len(listed) == 1


def test_coach_submission_auto_approves_and_reconciles(client, db, world):
    a, c = world["athlete"], world["challenge"]
    first = _submit(client, a, c, achieved_value=25, submitter_role="COACH").json()
    assert first["status"] == "APPROVED"
    assert _xp(client, a) == {world["strength"].id: 45, world["skill"].id: 30}

    # cooldown does not apply; the new absolute award replaces the old one
    second = _submit(client, a, c, achieved_value=40, submitter_role="coach").json()
    assert second["xp_awarded"] == 250
    assert _xp(client, a) == {world["strength"].id: 150, world["skill"].id: 100}

    third = _submit(client, a, c, achieved_value=12, submitter_role="COACH").json()
    assert third["achieved_rank"] == "F"
    assert _xp(client, a) == {world["strength"].id: 15, world["skill"].id: 10}

    rows = (
        db.query(XPTransaction)
        .filter(XPTransaction.domain_id == world["strength"].id)
        .order_by(XPTransaction.id)
        .all()
    )
    amounts = [t.amount for t in rows]
    assert amounts == [45, 105, -135]


def test_delete_revokes_credit(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=25, submitter_role="COACH").json()
    r = client.delete(f"/submissions/{sub['id']}")
    assert r.status_code == 200
    assert _xp(client, world["athlete"]) == {world["strength"].id: 0, world["skill"].id: 0}
    assert client.get(f"/submissions/{sub['id']}").status_code == 404


def test_rejected_resubmission_keeps_earlier_approved_credit(client, world, monkeypatch):
    monkeypatch.setattr(settings, "resubmit_cooldown_hours", 0)
    a, c = world["athlete"], world["challenge"]
    _submit(client, a, c, achieved_value=25, submitter_role="COACH")
    pending = _submit(client, a, c, achieved_value=40).json()
    assert pending["status"] == "PENDING"
    r = client.post(f"/submissions/{pending['id']}/review", json={"status": "REJECTED"})
    assert r.json()["status"] == "REJECTED"
    assert _xp(client, a) == {world["strength"].id: 45, world["skill"].id: 30}


def test_rejecting_a_first_attempt_credits_nothing(client, world):
    sub = _submit(client, world["athlete"], world["challenge"], achieved_value=25).json()
    client.post(f"/submissions/{sub['id']}/review", json={"status": "REJECTED"})
    assert _xp(client, world["athlete"]) == {}


def test_unknown_or_inactive_challenge_is_404(client, make, world):
    a = world["athlete"]
    r = client.post("/submissions/", json={"athlete_id": a.id, "challenge_id": 9999, "video_url": "x"})
    assert r.status_code == 404
    retired = make.challenge("Retired", domains=[(world["strength"], 100)], is_active=False)
    assert _submit(client, a, retired, achieved_value=5).status_code == 404


def test_disallowed_proof_type(client, world):
    r = _submit(client, world["athlete"], world["challenge"], proof_type="IMAGE", image_url="x", achieved_value=5)
    assert r.status_code == 422


def test_ineligible_athlete_gets_403_with_reasons(client, make, world):
    youth = make.division("Youth", age_min=13, age_max=17)
    gym = make.gym()
    c = make.challenge("Gym Youth", domains=[(world["strength"], 100)], gym=gym, divisions=[youth])
    r = _submit(client, world["athlete"], c, achieved_value=5)
    assert r.status_code == 403
    assert len(r.json()["reasons"]) == 2


def test_strava_proof_is_validated_and_auto_filled(client, make, world):
    run = make.challenge(
        "5K",
        grading_type="TIME",
        time_format="mm:ss",
        domains=[(world["strength"], 100)],
        proof_types=["STRAVA"],
        activity_type="Run",
        min_distance=5000,
        requires_gps=True,
        grades={world["open"].id: {"F": 2400, "E": 2100, "D": 1800}},
    )
    bad = _submit(
        client, world["athlete"], run, proof_type="STRAVA", strava_activity_id="42",
        activity={"distance_meters": 4800, "moving_time_seconds": 1500, "activity_type": "Run", "has_gps": False},
    )
    assert bad.status_code == 422
    assert len(bad.json()["errors"]) == 2

    good = _submit(
        client, world["athlete"], run, proof_type="STRAVA", strava_activity_id="43",
        activity={"distance_meters": 5010, "moving_time_seconds": 1990, "activity_type": "Run", "has_gps": True},
    )
    assert good.status_code == 200, good.text
    assert good.json()["achieved_value"] == 1990
    assert good.json()["achieved_rank"] == "E"


def test_time_can_be_entered_in_display_format(client, make, world):
    run = make.challenge(
        "Row 2K",
        grading_type="TIME",
        time_format="mm:ss",
        domains=[(world["strength"], 100)],
        grades={world["open"].id: {"F": 600, "E": 540, "D": 480}},
    )
    sub = _submit(client, world["athlete"], run, achieved_time="8:30").json()
    assert sub["achieved_value"] == 510
    assert sub["achieved_rank"] == "E"


def test_pass_fail_awards_fixed_xp_on_approval(client, make, world):
    c = make.challenge(
        "Muscle-up", grading_type="PASS_FAIL", min_rank="C", max_rank="A",
        domains=[(world["skill"], 100)],
    )
    sub = _submit(client, world["athlete"], c).json()
    assert sub["xp_awarded"] == 150
    client.post(f"/submissions/{sub['id']}/review", json={"status": "APPROVED"})
    assert _xp(client, world["athlete"]) == {world["skill"].id: 150}
