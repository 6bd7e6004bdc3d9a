"""
Effective schedule configuration for one matchday: the season defaults with
the matchday override (if any) laid on top.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from sqlmodel import Session, select

from padel_league.models.court import SeasonCourt
from padel_league.models.matchday_override import MatchdayScheduleOverride
from padel_league.models.season import Season
from padel_league.utils.errors import NotFoundError
from padel_league.utils.time_slots import normalize_time_slots


@dataclass
class MatchdayConfig:
    season_id: int
    matchday_number: int
    number_of_courts: int
    time_slots: List[str]
    match_date: Optional[date]
    source: str  # "season" | "override"


def get_season_or_404(session: Session, season_id: int) -> Season:
    season = session.get(Season, season_id)
    if not season:
        raise NotFoundError(f"Season {season_id} not found")
    return season


def get_matchday_override(
    session: Session, season_id: int, matchday_number: int
) -> Optional[MatchdayScheduleOverride]:
    return session.exec(
        select(MatchdayScheduleOverride).where(
            MatchdayScheduleOverride.season_id == season_id,
            MatchdayScheduleOverride.matchday_number == matchday_number,
        )
    ).first()


def resolve_matchday_config(session: Session, season_id: int, matchday_number: int) -> MatchdayConfig:
    season = get_season_or_404(session, season_id)
    override = get_matchday_override(session, season_id, matchday_number)

    number_of_courts = season.default_number_of_courts
    time_slots = season.default_time_slots or []
    match_date = None
    source = "season"

    if override:
        match_date = override.match_date
        if override.number_of_courts_override is not None:
            number_of_courts = override.number_of_courts_override
            source = "override"
        if override.time_slots_override is not None:
            time_slots = override.time_slots_override
            source = "override"

    return MatchdayConfig(
        season_id=season_id,
        matchday_number=matchday_number,
        number_of_courts=number_of_courts,
        time_slots=normalize_time_slots(time_slots),
        match_date=match_date,
        source=source,
    )


def active_court_ids_by_number(session: Session, season_id: int) -> Dict[int, int]:
    """court_number -> SeasonCourt.id for active courts of the season."""
    courts = session.exec(
        select(SeasonCourt).where(SeasonCourt.season_id == season_id, SeasonCourt.is_active == True)  # noqa: E712
    ).all()
    return {court.court_number: court.id for court in courts}
