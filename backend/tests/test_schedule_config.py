"""
Season schedule defaults, per-matchday overrides and the master schedule view.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from padel_league.models import DayGroup
from padel_league.services.schedule_config import resolve_matchday_config
from tests.conftest import MATCH_DATE


def test_defaults_round_trip(client: TestClient, league):
    season = league.season()

    assert client.get(f"/api/seasons/{season.id}/schedule/defaults").json() == {
        "default_number_of_courts": 4,
        "default_time_slots": ["18:30", "19:45", "21:00"],
    }

    resp = client.put(
        f"/api/seasons/{season.id}/schedule/defaults",
        json={"default_number_of_courts": 6, "default_time_slots": ["20:00", "9:30", "20:00:00"]},
    )
    assert resp.status_code == 200
    assert resp.json() == {"default_number_of_courts": 6, "default_time_slots": ["09:30", "20:00"]}


def test_defaults_reject_bad_values(client: TestClient, league):
    season = league.season()

    resp = client.put(
        f"/api/seasons/{season.id}/schedule/defaults",
        json={"default_number_of_courts": 0, "default_time_slots": ["18:30"]},
    )
    assert resp.status_code == 422


def test_override_create_duplicate_and_tri_state_patch(client: TestClient, league):
    season = league.season()
    url = f"/api/seasons/{season.id}/schedule/overrides"

    created = client.post(
        url,
        json={
            "matchday_number": 2,
            "match_date": MATCH_DATE.isoformat(),
            "number_of_courts_override": 3,
            "time_slots_override": ["20:00"],
        },
    )
    assert created.status_code == 201

    duplicate = client.post(url, json={"matchday_number": 2, "match_date": MATCH_DATE.isoformat()})
    assert duplicate.status_code == 409

    # Clearing one override field leaves the other untouched
    patched = client.patch(f"{url}/2", json={"number_of_courts_override": None})
    assert patched.status_code == 200
    assert patched.json()["number_of_courts_override"] is None
    assert patched.json()["time_slots_override"] == ["20:00"]

    assert client.patch(f"{url}/2", json={"match_date": None}).status_code == 400

    listed = client.get(url).json()
    assert [o["matchday_number"] for o in listed] == [2]

    assert client.delete(f"{url}/2").status_code == 200
    assert client.delete(f"{url}/2").status_code == 404


def test_resolve_config_falls_back_to_season_defaults(session: Session, league):
    season = league.season(default_number_of_courts=5)
    league.matchday_override(season, 3, time_slots_override=["19:00"])

    plain = resolve_matchday_config(session, season.id, 1)
    assert (plain.number_of_courts, plain.time_slots, plain.match_date, plain.source) == (
        5,
        ["18:30", "19:45", "21:00"],
        None,
        "season",
    )

    overridden = resolve_matchday_config(session, season.id, 3)
    assert (overridden.number_of_courts, overridden.time_slots, overridden.match_date, overridden.source) == (
        5,
        ["19:00"],
        MATCH_DATE,
        "override",
    )


def test_clear_matchday_unassigns_groups(client: TestClient, session: Session, league):
    season = league.season()
    category = league.category(season)
    match_day = league.match_day(category, 1)
    assigned = league.group(match_day, season, 1, league.players(category, 4), slot=(MATCH_DATE, "18:30", 1))
    league.group(match_day, season, 2, league.players(category, 4, prefix="Other"))

    resp = client.post(f"/api/seasons/{season.id}/schedule/matchdays/1/clear")
    assert resp.status_code == 200
    assert resp.json()["day_group_ids"] == [assigned.id]

    session.expire_all()
    assert session.get(DayGroup, assigned.id).slot is None


def test_master_schedule_lists_match_days_and_groups(client: TestClient, league):
    season = league.season()
    category = league.category(season)
    league.matchday_override(season, 1)
    day1 = league.match_day(category, 1)
    league.match_day(category, 2)
    players = league.players(category, 4)
    league.group(day1, season, 1, players, slot=(MATCH_DATE, "19:45", 2))

    resp = client.get(f"/api/seasons/{season.id}/schedule/categories/{category.id}")
    assert resp.status_code == 200
    data = resp.json()

    assert [d["match_number"] for d in data["match_days"]] == [1, 2]
    first = data["match_days"][0]
    assert first["scheduled_date"] == MATCH_DATE.isoformat()
    assert first["groups"][0]["time_slot"] == "19:45"
    assert [p["name"] for p in first["groups"][0]["players"]] == ["Player 1", "Player 2", "Player 3", "Player 4"]
    assert data["match_days"][1]["scheduled_date"] is None


def test_master_schedule_rejects_category_of_other_season(client: TestClient, league):
    season = league.season()
    other = league.season(name="Other")
    category = league.category(other)

    resp = client.get(f"/api/seasons/{season.id}/schedule/categories/{category.id}")
    assert resp.status_code == 404
