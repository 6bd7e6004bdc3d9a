from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from padel_league.database import get_session
from padel_league.models.category import LeagueCategory
from padel_league.models.day_group import DayGroup
from padel_league.models.match_day import MatchDay
from padel_league.models.matchday_override import MatchdayScheduleOverride
from padel_league.models.player import LeaguePlayer
from padel_league.services.auto_schedule import AutoScheduleRequest, auto_schedule
from padel_league.services.schedule_config import get_matchday_override, get_season_or_404
from padel_league.utils.errors import SchedulingError, to_http_exception
from padel_league.utils.field_update import apply_updates
from padel_league.utils.slot_assignment import clear_matchday_assignments
from padel_league.utils.time_slots import normalize_time_slots

router = APIRouter()


def _slots_or_none(v):
    if v is None:
        return v
    slots = normalize_time_slots(v)
    if not slots:
        raise ValueError("time slots must not be empty")
    return slots


class AutoScheduleBody(BaseModel):
    matchday_number: int
    match_date: Optional[date] = None
    category_dates: Dict[int, date] = {}
    category_ids: Optional[List[int]] = None
    respect_availability: bool = True
    prefer_time_slot_variety: bool = False
    strict_mode: bool = True
    clear_existing: bool = False


class ScheduleDefaults(BaseModel):
    default_number_of_courts: int
    default_time_slots: List[str]

    @field_validator("default_number_of_courts")
    @classmethod
    def validate_courts(cls, v):
        if v < 1:
            raise ValueError("default_number_of_courts must be >= 1")
        return v

    @field_validator("default_time_slots")
    @classmethod
    def validate_time_slots(cls, v):
        return _slots_or_none(v)


class OverrideCreate(BaseModel):
    matchday_number: int
    match_date: date
    number_of_courts_override: Optional[int] = None
    time_slots_override: Optional[List[str]] = None

    @field_validator("matchday_number")
    @classmethod
    def validate_matchday(cls, v):
        if v < 1:
            raise ValueError("matchday_number must be >= 1")
        return v

    @field_validator("number_of_courts_override")
    @classmethod
    def validate_courts(cls, v):
        if v is not None and v < 1:
            raise ValueError("number_of_courts_override must be >= 1")
        return v

    @field_validator("time_slots_override")
    @classmethod
    def validate_time_slots(cls, v):
        return _slots_or_none(v)


class OverrideUpdate(BaseModel):
    """Absent fields are left alone; explicit null clears an override field."""

    match_date: Optional[date] = None
    number_of_courts_override: Optional[int] = None
    time_slots_override: Optional[List[str]] = None

    @field_validator("number_of_courts_override")
    @classmethod
    def validate_courts(cls, v):
        if v is not None and v < 1:
            raise ValueError("number_of_courts_override must be >= 1")
        return v

    @field_validator("time_slots_override")
    @classmethod
    def validate_time_slots(cls, v):
        return _slots_or_none(v)


class OverrideResponse(BaseModel):
    id: int
    season_id: int
    matchday_number: int
    match_date: date
    number_of_courts_override: Optional[int]
    time_slots_override: Optional[List[str]]

    class Config:
        from_attributes = True


@router.post("/seasons/{season_id}/schedule/auto")
def auto_schedule_matchday(season_id: int, body: AutoScheduleBody, session: Session = Depends(get_session)):
    """
    Auto-assign the matchday's unassigned day-groups to (date, time_slot, court).

    Groups that cannot be placed are reported under "skipped" with a reason;
    the call itself only fails for an unknown season/category or a store error.
    """
    request = AutoScheduleRequest(**body.model_dump())
    try:
        result = auto_schedule(session, season_id, request)
    except SchedulingError as e:
        raise to_http_exception(e)
    return result.to_dict()


@router.get("/seasons/{season_id}/schedule/defaults", response_model=ScheduleDefaults)
def get_schedule_defaults(season_id: int, session: Session = Depends(get_session)):
    """Season-wide number of courts and time slots"""
    try:
        season = get_season_or_404(session, season_id)
    except SchedulingError as e:
        raise to_http_exception(e)
    return ScheduleDefaults(
        default_number_of_courts=season.default_number_of_courts,
        default_time_slots=season.default_time_slots,
    )


@router.put("/seasons/{season_id}/schedule/defaults", response_model=ScheduleDefaults)
def update_schedule_defaults(season_id: int, body: ScheduleDefaults, session: Session = Depends(get_session)):
    try:
        season = get_season_or_404(session, season_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    season.default_number_of_courts = body.default_number_of_courts
    season.default_time_slots = body.default_time_slots
    session.add(season)
    session.commit()
    session.refresh(season)

    return ScheduleDefaults(
        default_number_of_courts=season.default_number_of_courts,
        default_time_slots=season.default_time_slots,
    )


@router.get("/seasons/{season_id}/schedule/overrides", response_model=List[OverrideResponse])
def list_overrides(season_id: int, session: Session = Depends(get_session)):
    try:
        get_season_or_404(session, season_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    return session.exec(
        select(MatchdayScheduleOverride)
        .where(MatchdayScheduleOverride.season_id == season_id)
        .order_by(MatchdayScheduleOverride.matchday_number)
    ).all()


@router.post("/seasons/{season_id}/schedule/overrides", response_model=OverrideResponse, status_code=201)
def create_override(season_id: int, body: OverrideCreate, session: Session = Depends(get_session)):
    """Create a per-matchday date/courts/time-slots override"""
    try:
        get_season_or_404(session, season_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    if get_matchday_override(session, season_id, body.matchday_number):
        raise HTTPException(
            status_code=409, detail=f"Matchday {body.matchday_number} already has a schedule override"
        )

    override = MatchdayScheduleOverride(season_id=season_id, **body.model_dump())
    session.add(override)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=409, detail=f"Matchday {body.matchday_number} already has a schedule override"
        )
    session.refresh(override)
    return override


@router.patch("/seasons/{season_id}/schedule/overrides/{matchday_number}", response_model=OverrideResponse)
def update_override(
    season_id: int, matchday_number: int, body: OverrideUpdate, session: Session = Depends(get_session)
):
    override = get_matchday_override(session, season_id, matchday_number)
    if not override:
        raise HTTPException(status_code=404, detail=f"No schedule override for matchday {matchday_number}")

    if "match_date" in body.model_fields_set and body.match_date is None:
        raise HTTPException(status_code=400, detail="match_date cannot be cleared")

    if apply_updates(override, body, ["match_date", "number_of_courts_override", "time_slots_override"]):
        session.add(override)
        session.commit()
        session.refresh(override)

    return override


@router.delete("/seasons/{season_id}/schedule/overrides/{matchday_number}")
def delete_override(season_id: int, matchday_number: int, session: Session = Depends(get_session)):
    override = get_matchday_override(session, season_id, matchday_number)
    if not override:
        raise HTTPException(status_code=404, detail=f"No schedule override for matchday {matchday_number}")

    session.delete(override)
    session.commit()
    return {"success": True, "matchday_number": matchday_number}


@router.post("/seasons/{season_id}/schedule/matchdays/{matchday_number}/clear")
def clear_matchday(
    season_id: int,
    matchday_number: int,
    category_id: Optional[int] = Query(None),
    session: Session = Depends(get_session),
):
    """Unassign every day-group of a matchday (optionally one category only)"""
    try:
        get_season_or_404(session, season_id)
        cleared = clear_matchday_assignments(
            session, season_id, matchday_number, [category_id] if category_id is not None else None
        )
        session.commit()
    except SchedulingError as e:
        session.rollback()
        raise to_http_exception(e)

    return {
        "success": True,
        "matchday_number": matchday_number,
        "cleared_groups": len(cleared),
        "day_group_ids": [g.id for g in cleared],
    }


@router.get("/seasons/{season_id}/schedule/categories/{category_id}")
def get_master_schedule(season_id: int, category_id: int, session: Session = Depends(get_session)):
    """Defaults, overrides and every match day with its groups for one category"""
    try:
        season = get_season_or_404(session, season_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    category = session.get(LeagueCategory, category_id)
    if not category or category.season_id != season_id:
        raise HTTPException(status_code=404, detail="Category not found")

    overrides = {
        o.matchday_number: o
        for o in session.exec(
            select(MatchdayScheduleOverride).where(MatchdayScheduleOverride.season_id == season_id)
        ).all()
    }
    match_days = session.exec(
        select(MatchDay).where(MatchDay.category_id == category_id).order_by(MatchDay.match_number)
    ).all()
    player_names = {
        p.id: p.name
        for p in session.exec(select(LeaguePlayer).where(LeaguePlayer.category_id == category_id)).all()
    }

    days: List[Dict[str, Any]] = []
    for match_day in match_days:
        groups = session.exec(
            select(DayGroup).where(DayGroup.match_day_id == match_day.id).order_by(DayGroup.group_number)
        ).all()
        override = overrides.get(match_day.match_number)
        days.append(
            {
                "match_day_id": match_day.id,
                "match_number": match_day.match_number,
                "scheduled_date": override.match_date.isoformat() if override else None,
                "groups": [
                    {
                        "id": g.id,
                        "group_number": g.group_number,
                        "players": [{"id": pid, "name": player_names.get(pid)} for pid in g.player_ids or []],
                        "match_date": g.match_date.isoformat() if g.match_date else None,
                        "time_slot": g.time_slot,
                        "court_index": g.court_index,
                        "court_id": g.court_id,
                        "version": g.version,
                    }
                    for g in groups
                ],
            }
        )

    return {
        "season_id": season_id,
        "category_id": category_id,
        "category_name": category.name,
        "default_number_of_courts": season.default_number_of_courts,
        "default_time_slots": season.default_time_slots,
        "overrides": [
            {
                "matchday_number": o.matchday_number,
                "match_date": o.match_date.isoformat(),
                "number_of_courts_override": o.number_of_courts_override,
                "time_slots_override": o.time_slots_override,
            }
            for o in sorted(overrides.values(), key=lambda o: o.matchday_number)
        ],
        "match_days": days,
    }
