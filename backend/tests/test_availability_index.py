"""
Availability Index: date overrides beat weekly defaults, missing data fails closed.
"""

from datetime import date

from padel_league.models import PlayerAvailability, PlayerAvailabilityOverride
from padel_league.utils.availability_index import (
    NO_AVAILABILITY_REASON,
    AvailabilityIndex,
    OpenAvailability,
    load_availability_index,
)
from tests.conftest import MATCH_DATE, MATCH_DOW


def weekly(player_id, slots, dow=MATCH_DOW):
    return PlayerAvailability(player_id=player_id, season_id=1, day_of_week=dow, available_time_slots=slots)


def override(player_id, slots=(), unavailable=False, reason=None, on_date=MATCH_DATE):
    return PlayerAvailabilityOverride(
        player_id=player_id,
        season_id=1,
        override_date=on_date,
        available_time_slots=list(slots),
        is_unavailable=unavailable,
        reason=reason,
    )


def test_weekly_default_decides_without_override():
    index = AvailabilityIndex(weekly=[weekly(1, ["18:30", "21:00"])])

    assert index.is_available(1, MATCH_DATE, "18:30")
    assert index.is_available(1, MATCH_DATE, "21:00")
    check = index.check(1, MATCH_DATE, "19:45")
    assert not check.available
    assert check.reason == "Not available at 19:45"


def test_day_of_week_counts_from_sunday():
    sunday = date(2026, 3, 1)
    index = AvailabilityIndex(weekly=[weekly(1, ["18:30"], dow=0)])

    assert index.is_available(1, sunday, "18:30")
    assert not index.is_available(1, MATCH_DATE, "18:30")


def test_override_beats_weekly_default():
    """Weekly says 19:45 is fine; the date override only allows 21:00"""
    index = AvailabilityIndex(
        weekly=[weekly(1, ["18:30", "19:45"])],
        overrides=[override(1, ["21:00"])],
    )

    assert not index.is_available(1, MATCH_DATE, "19:45")
    assert index.is_available(1, MATCH_DATE, "21:00")
    # Other Wednesdays still use the weekly default
    assert index.is_available(1, date(2026, 3, 11), "19:45")


def test_unavailable_override_ignores_slots():
    index = AvailabilityIndex(
        weekly=[weekly(1, ["18:30"])],
        overrides=[override(1, ["18:30"], unavailable=True, reason="Travelling")],
    )

    check = index.check(1, MATCH_DATE, "18:30")
    assert not check.available
    assert check.reason == "Travelling"


def test_unavailable_override_default_reason():
    index = AvailabilityIndex(overrides=[override(1, unavailable=True)])

    assert index.check(1, MATCH_DATE, "18:30").reason == "Marked unavailable"


def test_no_records_means_unavailable():
    index = AvailabilityIndex()

    check = index.check(42, MATCH_DATE, "18:30")
    assert not check.available
    assert check.reason == NO_AVAILABILITY_REASON


def test_time_slot_format_is_normalized():
    index = AvailabilityIndex(weekly=[weekly(1, ["18:30:00", "9:00"])])

    assert index.is_available(1, MATCH_DATE, "18:30")
    assert index.is_available(1, MATCH_DATE, "09:00:00")


def test_open_availability_accepts_everyone():
    assert OpenAvailability().is_available(99, MATCH_DATE, "18:30")


def test_load_reads_fresh_rows(session, league):
    season = league.season()
    category = league.category(season)
    p1, p2 = league.players(category, 2)
    league.weekly(p1, season, slots=["18:30"])

    index = load_availability_index(session, season.id)
    assert index.is_available(p1.id, MATCH_DATE, "18:30")
    assert not index.is_available(p2.id, MATCH_DATE, "18:30")

    league.override(p1, season, unavailable=True, reason="Injured")
    league.weekly(p2, season, slots=["18:30"])

    index = load_availability_index(session, season.id)
    assert index.check(p1.id, MATCH_DATE, "18:30").reason == "Injured"
    assert index.is_available(p2.id, MATCH_DATE, "18:30")


def test_load_is_scoped_to_season(session, league):
    season = league.season()
    other = league.season(name="Autumn 2026")
    category = league.category(season)
    (player,) = league.players(category, 1)
    league.weekly(player, other, slots=["18:30"])

    index = load_availability_index(session, season.id)
    assert not index.is_available(player.id, MATCH_DATE, "18:30")
