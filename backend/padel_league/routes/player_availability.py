import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from padel_league.database import get_session
from padel_league.models.category import LeagueCategory
from padel_league.models.player import LeaguePlayer
from padel_league.models.player_availability import PlayerAvailability, PlayerAvailabilityOverride
from padel_league.models.season import Season
from padel_league.services.schedule_config import resolve_matchday_config
from padel_league.utils.availability_index import load_availability_index
from padel_league.utils.errors import SchedulingError, to_http_exception
from padel_league.utils.field_update import apply_updates
from padel_league.utils.time_slots import normalize_time_slot, normalize_time_slots

logger = logging.getLogger(__name__)

router = APIRouter()


class WeeklyAvailability(BaseModel):
    day_of_week: int  # 0=Sunday .. 6=Saturday
    available_time_slots: List[str]

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v):
        if not 0 <= v <= 6:
            raise ValueError("day_of_week must be 0 (Sunday) to 6 (Saturday)")
        return v

    @field_validator("available_time_slots")
    @classmethod
    def validate_time_slots(cls, v):
        return normalize_time_slots(v)


class BatchAvailabilityRequest(BaseModel):
    player_id: int
    season_id: int
    availabilities: List[WeeklyAvailability]

    @field_validator("availabilities")
    @classmethod
    def validate_unique_days(cls, v):
        days = [a.day_of_week for a in v]
        if len(days) != len(set(days)):
            raise ValueError("each day_of_week may appear only once")
        return v


class AvailabilityResponse(BaseModel):
    id: int
    player_id: int
    season_id: int
    day_of_week: int
    available_time_slots: List[str]

    class Config:
        from_attributes = True


class OverrideCreate(BaseModel):
    player_id: int
    season_id: int
    override_date: date
    available_time_slots: List[str] = []
    is_unavailable: bool = False
    reason: Optional[str] = None

    @field_validator("available_time_slots")
    @classmethod
    def validate_time_slots(cls, v):
        return normalize_time_slots(v)


class OverrideUpdate(BaseModel):
    """Absent fields are left alone; explicit null clears reason."""

    available_time_slots: Optional[List[str]] = None
    is_unavailable: Optional[bool] = None
    reason: Optional[str] = None

    @field_validator("available_time_slots")
    @classmethod
    def validate_time_slots(cls, v):
        return normalize_time_slots(v) if v is not None else v


class OverrideResponse(BaseModel):
    id: int
    player_id: int
    season_id: int
    override_date: date
    available_time_slots: List[str]
    is_unavailable: bool
    reason: Optional[str]

    class Config:
        from_attributes = True


def _get_player_or_404(session: Session, player_id: int) -> LeaguePlayer:
    player = session.get(LeaguePlayer, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player


def _get_season_or_404(session: Session, season_id: int) -> Season:
    season = session.get(Season, season_id)
    if not season:
        raise HTTPException(status_code=404, detail="Season not found")
    return season


@router.get("/player-availability/check-slot")
def check_slot(
    category_id: int = Query(..., alias="categoryId"),
    season_id: int = Query(..., alias="seasonId"),
    on_date: date = Query(..., alias="date"),
    time_slot: str = Query(..., alias="timeSlot"),
    session: Session = Depends(get_session),
):
    """Which players of a category can play at (date, timeSlot)"""
    try:
        slot = normalize_time_slot(time_slot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    category = session.get(LeagueCategory, category_id)
    if not category or category.season_id != season_id:
        raise HTTPException(status_code=404, detail="Category not found")

    players = session.exec(
        select(LeaguePlayer)
        .where(LeaguePlayer.category_id == category_id, LeaguePlayer.is_waiting_list == False)  # noqa: E712
        .order_by(LeaguePlayer.name)
    ).all()
    index = load_availability_index(session, season_id, player_ids=[p.id for p in players], dates=[on_date])

    available = []
    unavailable = []
    for player in players:
        check = index.check(player.id, on_date, slot)
        if check.available:
            available.append({"id": player.id, "name": player.name})
        else:
            unavailable.append({"id": player.id, "name": player.name, "reason": check.reason})

    return {
        "date": on_date.isoformat(),
        "time_slot": slot,
        "available_players": available,
        "unavailable_players": unavailable,
    }


@router.get("/player-availability/player/{player_id}", response_model=List[AvailabilityResponse])
def get_player_availability(
    player_id: int, season_id: int = Query(..., alias="seasonId"), session: Session = Depends(get_session)
):
    """Weekly availability of one player"""
    _get_player_or_404(session, player_id)
    return session.exec(
        select(PlayerAvailability)
        .where(PlayerAvailability.player_id == player_id, PlayerAvailability.season_id == season_id)
        .order_by(PlayerAvailability.day_of_week)
    ).all()


@router.get("/player-availability/season/{season_id}", response_model=List[AvailabilityResponse])
def get_season_availability(season_id: int, session: Session = Depends(get_session)):
    _get_season_or_404(session, season_id)
    return session.exec(
        select(PlayerAvailability)
        .where(PlayerAvailability.season_id == season_id)
        .order_by(PlayerAvailability.player_id, PlayerAvailability.day_of_week)
    ).all()


@router.get("/player-availability/season/{season_id}/matchday/{matchday_number}")
def get_matchday_availability(season_id: int, matchday_number: int, session: Session = Depends(get_session)):
    """
    Availability of every season player on a matchday's scheduled date, for
    each of the matchday's time slots.
    """
    try:
        config = resolve_matchday_config(session, season_id, matchday_number)
    except SchedulingError as e:
        raise to_http_exception(e)
    if config.match_date is None:
        raise HTTPException(status_code=404, detail=f"Matchday {matchday_number} has no scheduled date")

    players = session.exec(
        select(LeaguePlayer)
        .join(LeagueCategory, LeaguePlayer.category_id == LeagueCategory.id)
        .where(LeagueCategory.season_id == season_id)
        .order_by(LeaguePlayer.category_id, LeaguePlayer.name)
    ).all()
    index = load_availability_index(
        session, season_id, player_ids=[p.id for p in players], dates=[config.match_date]
    )

    entries = []
    for player in players:
        available = []
        unavailable = {}
        for slot in config.time_slots:
            check = index.check(player.id, config.match_date, slot)
            if check.available:
                available.append(slot)
            else:
                unavailable[slot] = check.reason
        entries.append(
            {
                "player_id": player.id,
                "name": player.name,
                "category_id": player.category_id,
                "is_waiting_list": player.is_waiting_list,
                "available_time_slots": available,
                "unavailable_reasons": unavailable,
            }
        )

    return {
        "season_id": season_id,
        "matchday_number": matchday_number,
        "match_date": config.match_date.isoformat(),
        "time_slots": config.time_slots,
        "players": entries,
    }


@router.get("/player-availability/summary/{player_id}")
def get_availability_summary(
    player_id: int, season_id: int = Query(..., alias="seasonId"), session: Session = Depends(get_session)
):
    """Weekly slots per day plus every date override for one player"""
    player = _get_player_or_404(session, player_id)

    weekly: Dict[int, List[str]] = {
        record.day_of_week: record.available_time_slots
        for record in session.exec(
            select(PlayerAvailability).where(
                PlayerAvailability.player_id == player_id, PlayerAvailability.season_id == season_id
            )
        ).all()
    }
    overrides = session.exec(
        select(PlayerAvailabilityOverride)
        .where(
            PlayerAvailabilityOverride.player_id == player_id,
            PlayerAvailabilityOverride.season_id == season_id,
        )
        .order_by(PlayerAvailabilityOverride.override_date)
    ).all()

    return {
        "player_id": player.id,
        "player_name": player.name,
        "weekly_availability": weekly,
        "overrides": [OverrideResponse.model_validate(o).model_dump(mode="json") for o in overrides],
    }


@router.post("/player-availability/batch")
def replace_weekly_availability(body: BatchAvailabilityRequest, session: Session = Depends(get_session)):
    """Replace all weekly availability of a player for a season"""
    _get_player_or_404(session, body.player_id)
    _get_season_or_404(session, body.season_id)

    session.execute(
        delete(PlayerAvailability).where(
            PlayerAvailability.player_id == body.player_id, PlayerAvailability.season_id == body.season_id
        )
    )
    for entry in body.availabilities:
        session.add(
            PlayerAvailability(
                player_id=body.player_id,
                season_id=body.season_id,
                day_of_week=entry.day_of_week,
                available_time_slots=entry.available_time_slots,
            )
        )
    session.commit()

    logger.info(
        "Replaced weekly availability of player %d in season %d (%d days)",
        body.player_id,
        body.season_id,
        len(body.availabilities),
    )
    return {"success": True, "days": len(body.availabilities)}


@router.post("/player-availability/overrides", response_model=OverrideResponse, status_code=201)
def create_availability_override(body: OverrideCreate, session: Session = Depends(get_session)):
    """Date-specific availability that replaces the weekly default for that date"""
    _get_player_or_404(session, body.player_id)
    _get_season_or_404(session, body.season_id)

    override = PlayerAvailabilityOverride(**body.model_dump())
    session.add(override)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=409, detail=f"Player already has an override for {body.override_date.isoformat()}"
        )
    session.refresh(override)
    return override


@router.patch("/player-availability/overrides/{override_id}", response_model=OverrideResponse)
def update_availability_override(override_id: int, body: OverrideUpdate, session: Session = Depends(get_session)):
    override = session.get(PlayerAvailabilityOverride, override_id)
    if not override:
        raise HTTPException(status_code=404, detail="Availability override not found")

    for name in ("available_time_slots", "is_unavailable"):
        if name in body.model_fields_set and getattr(body, name) is None:
            raise HTTPException(status_code=400, detail=f"{name} cannot be null")

    if apply_updates(override, body, ["available_time_slots", "is_unavailable", "reason"]):
        session.add(override)
        session.commit()
        session.refresh(override)

    return override


@router.delete("/player-availability/overrides/{override_id}")
def delete_availability_override(override_id: int, session: Session = Depends(get_session)):
    override = session.get(PlayerAvailabilityOverride, override_id)
    if not override:
        raise HTTPException(status_code=404, detail="Availability override not found")

    session.delete(override)
    session.commit()
    return {"success": True}
