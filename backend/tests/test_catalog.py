from datetime import date

import pytest

from app.core.errors import ValidationError
from app.models.submission import Submission
from app.repositories import SqlChallengePartition, catalog_partitions
from app.services.catalog import (
    COMPLETED,
    FOR_YOU,
    OTHERS,
    ListPartition,
    PageSlice,
    compose_page,
    plan_page,
)
from app.services.eligibility import AthleteContext


def _partitions(for_you=3, others=0, completed=5):
    return [
        ListPartition(FOR_YOU, [f"y{i}" for i in range(for_you)]),
        ListPartition(OTHERS, [f"o{i}" for i in range(others)]),
        ListPartition(COMPLETED, [f"c{i}" for i in range(completed)]),
    ]


def _all_pages(partitions, page_size):
    first = compose_page(partitions, 1, page_size)
    items = list(first.items)
    for page in range(2, first.total_pages + 1):
        items.extend(compose_page(partitions, page, page_size).items)
    return first, items


@pytest.mark.parametrize("page_size", [1, 2, 3, 4, 7, 8, 12])
@pytest.mark.parametrize("sizes", [(3, 0, 5), (0, 0, 4), (12, 12, 1), (5, 5, 5)])
def test_pages_concatenate_to_the_partitions_in_order(page_size, sizes):
    partitions = _partitions(*sizes)
    first, items = _all_pages(partitions, page_size)

    expected = [(p.name, x) for p in partitions for x in p.items]
    assert items == expected
    assert len(items) == first.total_count == sum(sizes)


def test_total_pages_rounds_up():
    assert compose_page(_partitions(3, 0, 5), 1, 3).total_pages == 3
    assert compose_page(_partitions(3, 0, 3), 1, 3).total_pages == 2


def test_out_of_range_pages_clamp():
    partitions = _partitions(3, 0, 5)
    assert compose_page(partitions, 0, 3).page == 1
    assert compose_page(partitions, -4, 3).page == 1
    last = compose_page(partitions, 99, 3)
    assert last.page == 3
    assert [x for _, x in last.items] == ["c3", "c4"]


def test_empty_catalog_is_one_empty_page():
    result = compose_page(_partitions(0, 0, 0), 5, 12)
    assert result.page == 1
    assert result.total_pages == 0
    assert result.items == []


def test_plan_only_touches_overlapping_partitions():
    assert plan_page([2, 2, 5], 2, 3) == [
        PageSlice(partition_index=1, offset=1, limit=1),
        PageSlice(partition_index=2, offset=0, limit=2),
    ]
    assert plan_page([2, 2, 5], 1, 2) == [PageSlice(partition_index=0, offset=0, limit=2)]


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        compose_page(_partitions(), 1, 0)


class _ShrinkingPartition(ListPartition):
    """Loses its last row between count() and fetch()."""

    def fetch(self, offset, limit):
        return list(self.items[:-1][offset:offset + limit])


def test_membership_change_between_count_and_fetch_is_tolerated():
    # Eventually consistent: the page comes back one short, totals unchanged
    partitions = [_ShrinkingPartition(FOR_YOU, ["a", "b", "c"]), ListPartition(OTHERS, ["d"])]
    result = compose_page(partitions, 1, 4)
    assert result.total_count == 4
    assert [x for _, x in result.items] == ["a", "b", "d"]


# --------- SQL-backed catalog through the API --------- #

def _catalog(client, athlete, **params):
    r = client.get("/challenges/", params={"athlete_id": athlete.id, **params})
    assert r.status_code == 200, r.text
    return r.json()


def test_catalog_partitions_in_priority_order(client, db, make):
    strength = make.domain()
    running = make.discipline("Running")
    athlete = make.athlete(disciplines=[running])
    for_you = make.challenge("Zone 2 Run", domains=[(strength, 100)], disciplines=[running])
    make.challenge("Air Squats", domains=[(strength, 100)])
    done = make.challenge("Burpees", domains=[(strength, 100)])
    db.add(Submission(athlete_id=athlete.id, challenge_id=done.id, proof_type="VIDEO", status="APPROVED"))
    db.commit()

    data = _catalog(client, athlete)
    assert [(i["name"], i["partition"]) for i in data["items"]] == [
        ("Zone 2 Run", FOR_YOU),
        ("Air Squats", OTHERS),
        ("Burpees", COMPLETED),
    ]
    assert data["total_count"] == 3
    assert data["items"][0]["id"] == for_you.id


def test_catalog_discipline_filter_overrides_athlete(client, make):
    strength = make.domain()
    running, lifting = make.discipline("Running"), make.discipline("Lifting")
    athlete = make.athlete(disciplines=[running])
    make.challenge("Deadlift", domains=[(strength, 100)], disciplines=[lifting])
    make.challenge("Mile", domains=[(strength, 100)], disciplines=[running])

    data = _catalog(client, athlete, discipline_ids=[lifting.id])
    assert [(i["name"], i["partition"]) for i in data["items"]] == [("Deadlift", FOR_YOU), ("Mile", OTHERS)]


def test_catalog_hides_ineligible_challenges(client, make):
    strength = make.domain()
    barbell, rings = make.equipment("Barbell"), make.equipment("Rings")
    athlete = make.athlete(dob=date(1990, 1, 1))
    youth = make.division("Youth", age_min=13, age_max=17)
    own_gym = make.gym(inventory=[barbell], members=[athlete])
    other_gym = make.gym()

    make.challenge("Global", domains=[(strength, 100)])
    make.challenge("Own Gym Bench", domains=[(strength, 100)], gym=own_gym, equipment=[(barbell, True)])
    make.challenge("Other Gym", domains=[(strength, 100)], gym=other_gym)
    make.challenge("Youth Only", domains=[(strength, 100)], divisions=[youth])
    make.challenge("Ring Dips", domains=[(strength, 100)], equipment=[(rings, True)])
    make.challenge("Optional Rings", domains=[(strength, 100)], equipment=[(rings, False)])

    names = [i["name"] for i in _catalog(client, athlete)["items"]]
    assert names == ["Global", "Optional Rings", "Own Gym Bench", "Ring Dips"]

    filtered = _catalog(client, athlete, gym_id=own_gym.id, equipment_filter=True)
    assert [i["name"] for i in filtered["items"]] == ["Global", "Optional Rings", "Own Gym Bench"]


def test_catalog_search_and_paging(client, make):
    strength = make.domain()
    athlete = make.athlete()
    for name in ["Pull-ups", "Push-ups", "Push Press", "Plank"]:
        make.challenge(name, domains=[(strength, 100)])

    data = _catalog(client, athlete, q="push")
    assert [i["name"] for i in data["items"]] == ["Push Press", "Push-ups"]

    page2 = _catalog(client, athlete, page=2, page_size=3)
    assert page2["page"] == 2
    assert page2["total_pages"] == 2
    assert [i["name"] for i in page2["items"]] == ["Push-ups"]

    clamped = _catalog(client, athlete, page=0, page_size=3)
    assert clamped["page"] == 1


def test_catalog_inactive_challenge_not_listed(client, make):
    strength = make.domain()
    athlete = make.athlete()
    make.challenge("Retired", domains=[(strength, 100)], is_active=False)
    assert _catalog(client, athlete)["total_count"] == 0


def test_catalog_search_treats_wildcards_literally(client, make):
    strength = make.domain()
    athlete = make.athlete()
    make.challenge("100% Effort", domains=[(strength, 100)])
    make.challenge("Plank", domains=[(strength, 100)])
    make.challenge("Snatch_Grip Deadlift", domains=[(strength, 100)])

    assert [i["name"] for i in _catalog(client, athlete, q="%")["items"]] == ["100% Effort"]
    assert [i["name"] for i in _catalog(client, athlete, q="_")["items"]] == ["Snatch_Grip Deadlift"]


def test_no_disciplines_gives_an_empty_for_you_partition(db, make):
    strength = make.domain()
    athlete = make.athlete()
    make.challenge("Air Squats", domains=[(strength, 100)])

    for_you, others, completed = catalog_partitions(db, AthleteContext(athlete_id=athlete.id), frozenset())
    assert isinstance(for_you, ListPartition)
    assert for_you.count() == 0
    assert isinstance(others, SqlChallengePartition)
    assert others.count() == 1
    assert completed.count() == 0
