import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from padel_league.database import get_session
from padel_league.models.court import SeasonCourt
from padel_league.models.season import Season

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BULK_COURTS = 20


class CourtCreate(BaseModel):
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name must not be blank")
        return v.strip() if v else v


class BulkCourtsCreate(BaseModel):
    count: int

    @field_validator("count")
    @classmethod
    def validate_count(cls, v):
        if not 1 <= v <= MAX_BULK_COURTS:
            raise ValueError(f"count must be between 1 and {MAX_BULK_COURTS}")
        return v


class CourtUpdate(BaseModel):
    name: Optional[str] = None
    is_active: Optional[bool] = None


class CourtResponse(BaseModel):
    id: int
    season_id: int
    court_number: int
    name: str
    is_active: bool

    class Config:
        from_attributes = True


def _get_season_or_404(session: Session, season_id: int) -> Season:
    season = session.get(Season, season_id)
    if not season:
        raise HTTPException(status_code=404, detail="Season not found")
    return season


def _get_court_or_404(session: Session, court_id: int) -> SeasonCourt:
    court = session.get(SeasonCourt, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")
    return court


def next_court_number(session: Session, season_id: int) -> int:
    """Highest court number in the season (inactive included) + 1"""
    current = session.exec(select(func.max(SeasonCourt.court_number)).where(SeasonCourt.season_id == season_id)).one()
    return (current or 0) + 1


def _commit_courts(session: Session, courts: List[SeasonCourt], season_id: int) -> List[SeasonCourt]:
    for court in courts:
        session.add(court)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning("Court name or number already exists in season %d", season_id)
        raise HTTPException(status_code=409, detail="Court name or number already exists in this season")
    for court in courts:
        session.refresh(court)
    return courts


@router.get("/seasons/{season_id}/courts", response_model=List[CourtResponse])
def list_courts(
    season_id: int, include_inactive: bool = Query(False), session: Session = Depends(get_session)
):
    """Courts of a season ordered by court number"""
    _get_season_or_404(session, season_id)
    query = select(SeasonCourt).where(SeasonCourt.season_id == season_id)
    if not include_inactive:
        query = query.where(SeasonCourt.is_active == True)  # noqa: E712
    return session.exec(query.order_by(SeasonCourt.court_number)).all()


@router.post("/seasons/{season_id}/courts", response_model=CourtResponse, status_code=201)
def create_court(season_id: int, body: CourtCreate, session: Session = Depends(get_session)):
    """Create the next court of a season; the name defaults to its number"""
    _get_season_or_404(session, season_id)
    number = next_court_number(session, season_id)
    court = SeasonCourt(season_id=season_id, court_number=number, name=body.name or str(number))
    return _commit_courts(session, [court], season_id)[0]


@router.post("/seasons/{season_id}/courts/bulk", response_model=List[CourtResponse], status_code=201)
def bulk_create_courts(season_id: int, body: BulkCourtsCreate, session: Session = Depends(get_session)):
    _get_season_or_404(session, season_id)
    start = next_court_number(session, season_id)
    courts = [
        SeasonCourt(season_id=season_id, court_number=number, name=str(number))
        for number in range(start, start + body.count)
    ]
    return _commit_courts(session, courts, season_id)


@router.post(
    "/seasons/{season_id}/courts/copy-from/{source_season_id}",
    response_model=List[CourtResponse],
    status_code=201,
)
def copy_courts(season_id: int, source_season_id: int, session: Session = Depends(get_session)):
    """Copy every court (inactive included) with its number and name from another season"""
    _get_season_or_404(session, season_id)
    _get_season_or_404(session, source_season_id)
    if season_id == source_season_id:
        raise HTTPException(status_code=400, detail="Source and target season must differ")

    source = session.exec(
        select(SeasonCourt).where(SeasonCourt.season_id == source_season_id).order_by(SeasonCourt.court_number)
    ).all()
    if not source:
        raise HTTPException(status_code=404, detail="No courts found in source season")

    courts = [
        SeasonCourt(season_id=season_id, court_number=c.court_number, name=c.name, is_active=c.is_active)
        for c in source
    ]
    created = _commit_courts(session, courts, season_id)
    logger.info("Copied %d courts from season %d to season %d", len(created), source_season_id, season_id)
    return created


@router.get("/courts/{court_id}", response_model=CourtResponse)
def get_court(court_id: int, session: Session = Depends(get_session)):
    return _get_court_or_404(session, court_id)


@router.patch("/courts/{court_id}", response_model=CourtResponse)
def update_court(court_id: int, body: CourtUpdate, session: Session = Depends(get_session)):
    court = _get_court_or_404(session, court_id)

    if body.name is not None:
        if not body.name.strip():
            raise HTTPException(status_code=400, detail="name must not be blank")
        court.name = body.name.strip()
    if body.is_active is not None:
        court.is_active = body.is_active

    return _commit_courts(session, [court], court.season_id)[0]


@router.delete("/courts/{court_id}")
def delete_court(court_id: int, session: Session = Depends(get_session)):
    """Soft delete: the court stays referenced by past assignments"""
    court = _get_court_or_404(session, court_id)
    court.is_active = False
    session.add(court)
    session.commit()
    return {"success": True, "id": court_id, "is_active": False}


@router.post("/courts/{court_id}/reactivate", response_model=CourtResponse)
def reactivate_court(court_id: int, session: Session = Depends(get_session)):
    court = _get_court_or_404(session, court_id)
    court.is_active = True
    return _commit_courts(session, [court], court.season_id)[0]
