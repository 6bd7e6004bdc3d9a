from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from padel_league.database import get_session
from padel_league.models.day_group import DayGroup
from padel_league.models.match_day import MatchDay
from padel_league.models.player import LeaguePlayer
from padel_league.models.rotation import DoublesMatch, Rotation
from padel_league.utils.errors import SchedulingError, to_http_exception
from padel_league.utils.field_update import field_update
from padel_league.utils.rotations import CREATED, count_rotations, regenerate_rotations
from padel_league.utils.slot_assignment import reassign_day_group

router = APIRouter()


class AssignmentUpdate(BaseModel):
    """
    Slot fields of a day-group. An absent field is left unchanged, an
    explicit null clears it. Send court_index or court_id (or both).
    """

    match_date: Optional[date] = None
    time_slot: Optional[str] = None
    court_index: Optional[int] = None
    court_id: Optional[int] = None
    expected_version: Optional[int] = None


def _group_dict(session: Session, group: DayGroup):
    players = {
        p.id: p
        for p in session.exec(select(LeaguePlayer).where(LeaguePlayer.id.in_(group.player_ids or []))).all()
    }
    return {
        "id": group.id,
        "match_day_id": group.match_day_id,
        "season_id": group.season_id,
        "group_number": group.group_number,
        "players": [
            {
                "id": pid,
                "name": players[pid].name if pid in players else None,
                "is_waiting_list": players[pid].is_waiting_list if pid in players else None,
            }
            for pid in group.player_ids or []
        ],
        "match_date": group.match_date.isoformat() if group.match_date else None,
        "time_slot": group.time_slot,
        "court_index": group.court_index,
        "court_id": group.court_id,
        "version": group.version,
    }


def _get_group_or_404(session: Session, day_group_id: int) -> DayGroup:
    group = session.get(DayGroup, day_group_id)
    if not group:
        raise HTTPException(status_code=404, detail=f"Day group {day_group_id} not found")
    return group


@router.get("/day-groups/by-match-day")
def get_day_groups_by_match_day(
    match_day_id: int = Query(..., alias="matchDayId"), session: Session = Depends(get_session)
):
    """Every day-group of one match day, in group order"""
    if not session.get(MatchDay, match_day_id):
        raise HTTPException(status_code=404, detail=f"Match day {match_day_id} not found")

    groups = session.exec(
        select(DayGroup).where(DayGroup.match_day_id == match_day_id).order_by(DayGroup.group_number)
    ).all()
    return [_group_dict(session, group) for group in groups]


@router.get("/day-groups/{day_group_id}")
def get_day_group(day_group_id: int, session: Session = Depends(get_session)):
    """Day-group with its players, slot and current version"""
    return _group_dict(session, _get_group_or_404(session, day_group_id))


@router.patch("/day-groups/{day_group_id}/assignment")
def update_assignment(day_group_id: int, body: AssignmentUpdate, session: Session = Depends(get_session)):
    """
    Move a day-group to a (match_date, time_slot, court) slot.

    An occupied target is swapped with the mover's old slot, or its holder is
    unassigned if the mover had none. All-null clears the assignment.
    Returns 409 when the slot is already the group's own or when either group
    changed since it was read.
    """
    try:
        result = reassign_day_group(
            session,
            day_group_id,
            match_date=field_update(body, "match_date"),
            time_slot=field_update(body, "time_slot"),
            court_index=field_update(body, "court_index"),
            court_id=field_update(body, "court_id"),
            expected_version=body.expected_version,
        )
    except SchedulingError as e:
        raise to_http_exception(e)

    return result.to_dict()


@router.post("/day-groups/{day_group_id}/regenerate-rotations")
def regenerate_day_group_rotations(day_group_id: int, session: Session = Depends(get_session)):
    """Create the 3 doubles rotations of a 4-player group if they don't exist yet"""
    try:
        outcome = regenerate_rotations(session, day_group_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    if outcome == CREATED:
        return {"success": True, "status": outcome, "message": "Rotations created"}
    return {"success": True, "status": outcome, "message": "Rotations already exist"}


@router.get("/day-groups/{day_group_id}/rotations")
def get_rotations(day_group_id: int, session: Session = Depends(get_session)):
    _get_group_or_404(session, day_group_id)

    rows = session.exec(
        select(Rotation, DoublesMatch)
        .join(DoublesMatch, DoublesMatch.rotation_id == Rotation.id, isouter=True)
        .where(Rotation.day_group_id == day_group_id)
        .order_by(Rotation.rotation_number)
    ).all()

    rotations = []
    for rotation, match in rows:
        entry = {"id": rotation.id, "rotation_number": rotation.rotation_number, "match": None}
        if match:
            entry["match"] = {
                "id": match.id,
                "team1": [match.team1_player1_id, match.team1_player2_id],
                "team2": [match.team2_player1_id, match.team2_player2_id],
                "score_team1": match.score_team1,
                "score_team2": match.score_team2,
            }
        rotations.append(entry)

    return {"day_group_id": day_group_id, "rotations": rotations}


@router.get("/day-groups/{day_group_id}/rotation-count")
def get_rotation_count(day_group_id: int, session: Session = Depends(get_session)):
    _get_group_or_404(session, day_group_id)
    return {"day_group_id": day_group_id, "count": count_rotations(session, day_group_id)}
