"""
Conflict Resolver: assign, swap, displace and clear day-group slots through
PATCH /api/day-groups/{id}/assignment.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from padel_league.models import DayGroup
from padel_league.utils.errors import ConflictError
from padel_league.utils.field_update import UNCHANGED, FieldUpdate
from padel_league.utils.slot_assignment import compare_and_set_slot, reassign_day_group
from tests.conftest import MATCH_DATE


@pytest.fixture
def two_groups(league, session: Session):
    season = league.season()
    category = league.category(season)
    courts = league.courts(season, 2)
    match_day = league.match_day(category, 1)
    a = league.group(match_day, season, 1, league.players(category, 4, prefix="A"))
    b = league.group(match_day, season, 2, league.players(category, 4, prefix="B"))
    return {"season": season, "courts": courts, "a": a, "b": b, "match_day": match_day, "category": category}


def set_slot(session: Session, group: DayGroup, slot, court_id=None):
    group.match_date, group.time_slot, group.court_index = slot
    group.court_id = court_id
    session.add(group)
    session.commit()
    session.refresh(group)


def patch(client: TestClient, group_id: int, **body):
    return client.patch(f"/api/day-groups/{group_id}/assignment", json=body)


def reload(session: Session, group: DayGroup) -> DayGroup:
    session.expire_all()
    return session.get(DayGroup, group.id)


def test_assign_to_free_slot(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]
    court = two_groups["courts"][1]

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="19:45:00", court_index=2)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "action": "assigned",
        "day_group_id": a.id,
        "displaced_group_id": None,
        "displaced_group_number": None,
    }

    stored = reload(session, a)
    assert stored.slot == (MATCH_DATE, "19:45", 2)
    assert stored.court_id == court.id
    assert stored.version == 2


def test_assign_by_court_id_derives_court_index(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]
    court = two_groups["courts"][1]

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="18:30", court_id=court.id)
    assert resp.status_code == 200
    assert reload(session, a).court_index == 2


def test_swap_when_mover_had_a_slot(client: TestClient, session: Session, two_groups):
    a, b = two_groups["a"], two_groups["b"]
    set_slot(session, a, (MATCH_DATE, "18:30", 1))
    set_slot(session, b, (MATCH_DATE, "21:00", 2))

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="21:00", court_index=2)
    assert resp.status_code == 200
    data = resp.json()
    assert data["action"] == "swapped"
    assert data["displaced_group_id"] == b.id
    assert data["displaced_group_number"] == 2

    assert reload(session, a).slot == (MATCH_DATE, "21:00", 2)
    assert reload(session, b).slot == (MATCH_DATE, "18:30", 1)


def test_displace_when_mover_had_no_slot(client: TestClient, session: Session, two_groups):
    a, b = two_groups["a"], two_groups["b"]
    set_slot(session, b, (MATCH_DATE, "21:00", 2))

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="21:00", court_index=2)
    assert resp.status_code == 200
    assert resp.json()["action"] == "displaced"

    assert reload(session, a).slot == (MATCH_DATE, "21:00", 2)
    displaced = reload(session, b)
    assert displaced.slot is None
    assert displaced.court_id is None


def test_clear_assignment(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]
    set_slot(session, a, (MATCH_DATE, "18:30", 1))

    resp = patch(client, a.id, match_date=None, time_slot=None, court_index=None)
    assert resp.status_code == 200
    assert resp.json()["action"] == "cleared"
    assert reload(session, a).slot is None


def test_moving_onto_own_slot_is_a_conflict(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]
    set_slot(session, a, (MATCH_DATE, "18:30", 1))

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="18:30", court_index=1)
    assert resp.status_code == 409
    assert "already holds this slot" in resp.json()["detail"]


def test_time_slot_without_court_is_rejected(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="18:30")
    assert resp.status_code == 400
    assert reload(session, a).version == 1


def test_partial_slot_is_rejected(client: TestClient, session: Session, two_groups):
    """time_slot + court without a date on an unassigned group"""
    a = two_groups["a"]

    resp = patch(client, a.id, time_slot="18:30", court_index=1)
    assert resp.status_code == 400


def test_empty_body_is_rejected(client: TestClient, two_groups):
    resp = patch(client, two_groups["a"].id)
    assert resp.status_code == 400


def test_malformed_time_slot_is_rejected(client: TestClient, two_groups):
    resp = patch(client, two_groups["a"].id, match_date=MATCH_DATE.isoformat(), time_slot="25:99", court_index=1)
    assert resp.status_code == 400


def test_court_from_another_season_is_rejected(client: TestClient, league, two_groups):
    other = league.season(name="Other")
    (foreign_court,) = league.courts(other, 1)

    resp = patch(
        client, two_groups["a"].id, match_date=MATCH_DATE.isoformat(), time_slot="18:30", court_id=foreign_court.id
    )
    assert resp.status_code == 400


def test_inconsistent_court_index_and_id_is_rejected(client: TestClient, two_groups):
    court = two_groups["courts"][0]

    resp = patch(
        client,
        two_groups["a"].id,
        match_date=MATCH_DATE.isoformat(),
        time_slot="18:30",
        court_index=2,
        court_id=court.id,
    )
    assert resp.status_code == 400


@pytest.mark.parametrize("court_fields", ["index_set_id_null", "id_set_index_null"])
def test_court_set_with_other_court_field_null_is_rejected(
    client: TestClient, session: Session, two_groups, court_fields
):
    a = two_groups["a"]
    court = two_groups["courts"][1]
    if court_fields == "index_set_id_null":
        court_body = {"court_index": 2, "court_id": None}
    else:
        court_body = {"court_index": None, "court_id": court.id}

    resp = patch(client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="18:30", **court_body)
    assert resp.status_code == 400
    assert "contradict" in resp.json()["detail"]

    stored = reload(session, a)
    assert stored.slot is None
    assert stored.court_id is None
    assert stored.version == 1


def test_stale_expected_version_is_a_conflict(client: TestClient, session: Session, two_groups):
    a = two_groups["a"]

    resp = patch(
        client, a.id, match_date=MATCH_DATE.isoformat(), time_slot="18:30", court_index=1, expected_version=7
    )
    assert resp.status_code == 409
    assert reload(session, a).slot is None


def test_unknown_group_returns_404(client: TestClient, session: Session):
    resp = patch(client, 999, match_date=MATCH_DATE.isoformat(), time_slot="18:30", court_index=1)
    assert resp.status_code == 404


def test_compare_and_set_rejects_stale_version(session: Session, two_groups):
    a = two_groups["a"]

    with pytest.raises(ConflictError):
        compare_and_set_slot(session, a.id, a.version + 1, (MATCH_DATE, "18:30", 1, None))
    session.rollback()

    assert compare_and_set_slot(session, a.id, a.version, (MATCH_DATE, "18:30", 1, None)) == 2
    session.commit()


def test_store_rejects_two_groups_in_one_slot(session: Session, two_groups):
    a, b = two_groups["a"], two_groups["b"]
    set_slot(session, a, (MATCH_DATE, "18:30", 1))

    with pytest.raises(IntegrityError):
        compare_and_set_slot(session, b.id, b.version, (MATCH_DATE, "18:30", 1, None))
    session.rollback()


def test_swap_never_leaves_shared_or_empty_slots(session: Session, two_groups, league):
    """Sequence of swaps/displacements keeps every slot held by at most one group"""
    a, b = two_groups["a"], two_groups["b"]
    c = league.group(
        two_groups["match_day"], two_groups["season"], 3, league.players(two_groups["category"], 4, prefix="C")
    )
    set_slot(session, a, (MATCH_DATE, "18:30", 1))
    set_slot(session, b, (MATCH_DATE, "18:30", 2))

    moves = [
        (c.id, (MATCH_DATE, "18:30", 1)),  # displaces a
        (a.id, (MATCH_DATE, "18:30", 2)),  # displaces b
        (c.id, (MATCH_DATE, "18:30", 2)),  # swaps with a
    ]
    for group_id, (d, t, court) in moves:
        reassign_day_group(
            session,
            group_id,
            match_date=FieldUpdate.set_to(d),
            time_slot=FieldUpdate.set_to(t),
            court_index=FieldUpdate.set_to(court),
            court_id=UNCHANGED,
        )
        session.expire_all()
        held = [session.get(DayGroup, gid).slot for gid in (a.id, b.id, c.id)]
        taken = [s for s in held if s is not None]
        assert len(taken) == len(set(taken))

    session.expire_all()
    assert session.get(DayGroup, c.id).slot == (MATCH_DATE, "18:30", 2)
    assert session.get(DayGroup, a.id).slot == (MATCH_DATE, "18:30", 1)
    assert session.get(DayGroup, b.id).slot is None
