"""
Auto-schedule a matchday: load groups, availability and capacity, run the
assignment engine and persist the plan.

All writes share one transaction. Each group's write runs in a savepoint
with a version compare-and-swap, so one failed group becomes a skip with a
warning and the rest of the batch still commits.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from padel_league.models.category import LeagueCategory
from padel_league.models.day_group import DayGroup
from padel_league.models.player import LeaguePlayer
from padel_league.services.schedule_config import active_court_ids_by_number, resolve_matchday_config
from padel_league.utils.assignment_engine import (
    GroupCandidate,
    PlannedAssignment,
    ScheduleOptions,
    SkippedGroup,
    Slot,
    group_label,
    plan_assignments,
)
from padel_league.utils.availability_index import OpenAvailability, load_availability_index
from padel_league.utils.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from padel_league.utils.slot_assignment import (
    clear_matchday_assignments,
    compare_and_set_slot,
    select_matchday_groups,
)

logger = logging.getLogger(__name__)


@dataclass
class AutoScheduleRequest:
    matchday_number: int
    match_date: Optional[date] = None
    category_dates: Dict[int, date] = field(default_factory=dict)
    category_ids: Optional[List[int]] = None
    respect_availability: bool = True
    prefer_time_slot_variety: bool = False
    strict_mode: bool = True
    clear_existing: bool = False

    @property
    def options(self) -> ScheduleOptions:
        return ScheduleOptions(
            respect_availability=self.respect_availability,
            prefer_time_slot_variety=self.prefer_time_slot_variety,
            strict_mode=self.strict_mode,
        )


class AutoScheduleResult:
    """Outcome of one auto-schedule run"""

    def __init__(self, season_id: int, matchday_number: int):
        self.season_id = season_id
        self.matchday_number = matchday_number
        self.number_of_courts = 0
        self.time_slots: List[str] = []
        self.config_source = "season"
        self.cleared_groups = 0
        self.assignments: List[Dict[str, Any]] = []
        self.skipped: List[Dict[str, Any]] = []
        self.warnings: List[str] = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "season_id": self.season_id,
            "matchday_number": self.matchday_number,
            "number_of_courts": self.number_of_courts,
            "time_slots": self.time_slots,
            "config_source": self.config_source,
            "total_groups": len(self.assignments) + len(self.skipped),
            "assigned_groups": len(self.assignments),
            "skipped_groups": len(self.skipped),
            "cleared_groups": self.cleared_groups,
            "assignments": self.assignments,
            "skipped": self.skipped,
            "warnings": self.warnings,
        }


def _assignment_dict(
    planned: PlannedAssignment, court_id: Optional[int], player_names: Dict[int, str]
) -> Dict[str, Any]:
    return {
        "day_group_id": planned.day_group_id,
        "group_number": planned.group_number,
        "category_id": planned.category_id,
        "category_name": planned.category_name,
        "match_date": planned.match_date.isoformat(),
        "time_slot": planned.time_slot,
        "court_index": planned.court_index,
        "court_id": court_id,
        "score": planned.score,
        "unavailable_player_ids": planned.unavailable_player_ids,
        "unavailable_players": [player_names.get(pid, str(pid)) for pid in planned.unavailable_player_ids],
    }


def _skipped_dict(skipped: SkippedGroup, player_names: Dict[int, str]) -> Dict[str, Any]:
    return {
        "day_group_id": skipped.day_group_id,
        "group_number": skipped.group_number,
        "category_id": skipped.category_id,
        "category_name": skipped.category_name,
        "reason": skipped.reason,
        "unavailable_player_ids": skipped.unavailable_player_ids,
        "unavailable_players": [player_names.get(pid, str(pid)) for pid in skipped.unavailable_player_ids],
    }


def _load_categories(session: Session, season_id: int, category_ids: Optional[List[int]]) -> Dict[int, LeagueCategory]:
    query = select(LeagueCategory).where(LeagueCategory.season_id == season_id)
    if category_ids:
        query = query.where(LeagueCategory.id.in_(category_ids))
    categories = {c.id: c for c in session.exec(query).all()}

    missing = sorted(set(category_ids or []) - set(categories))
    if missing:
        raise NotFoundError(f"Categories not found in season {season_id}: {missing}")
    return categories


def _occupied_slots(session: Session, season_id: int, dates: Set[date], exclude_ids: Set[int]) -> Set[Slot]:
    if not dates:
        return set()
    rows = session.exec(
        select(DayGroup).where(
            DayGroup.season_id == season_id,
            DayGroup.match_date.in_(list(dates)),
            DayGroup.time_slot.is_not(None),
            DayGroup.court_index.is_not(None),
        )
    ).all()
    return {g.slot for g in rows if g.id not in exclude_ids and g.slot is not None}


def auto_schedule(session: Session, season_id: int, request: AutoScheduleRequest) -> AutoScheduleResult:
    """
    Assign the matchday's unassigned day-groups to free slots.

    Raises:
        NotFoundError: season or a filtered category does not exist
        ValidationError: bad matchday number
        PersistenceError: the batch could not be committed
    """
    if request.matchday_number < 1:
        raise ValidationError("matchday_number must be >= 1")

    config = resolve_matchday_config(session, season_id, request.matchday_number)
    categories = _load_categories(session, season_id, request.category_ids)

    result = AutoScheduleResult(season_id, request.matchday_number)
    result.number_of_courts = config.number_of_courts
    result.time_slots = config.time_slots
    result.config_source = config.source

    try:
        if request.clear_existing:
            cleared = clear_matchday_assignments(session, season_id, request.matchday_number, request.category_ids)
            result.cleared_groups = len(cleared)

        groups = [
            g
            for g in session.exec(
                select_matchday_groups(season_id, request.matchday_number, request.category_ids)
            ).all()
            if g.slot is None
        ]
    except ConflictError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to load day groups for season %d matchday %d", season_id, request.matchday_number)
        raise PersistenceError(f"Failed to load day groups: {e}")

    all_player_ids = {pid for g in groups for pid in (g.player_ids or [])}
    players = (
        session.exec(select(LeaguePlayer).where(LeaguePlayer.id.in_(list(all_player_ids)))).all()
        if all_player_ids
        else []
    )
    active_ids = {p.id for p in players if not p.is_waiting_list}
    player_names = {p.id: p.name for p in players}

    candidates: List[GroupCandidate] = []
    versions: Dict[int, int] = {}
    for group in groups:
        category = categories.get(group.match_day.category_id)
        if category is None:
            continue
        target_date = request.category_dates.get(category.id) or request.match_date or config.match_date
        candidates.append(
            GroupCandidate(
                day_group_id=group.id,
                group_number=group.group_number,
                category_id=category.id,
                category_name=category.name,
                player_ids=[pid for pid in (group.player_ids or []) if pid in active_ids],
                match_date=target_date,
                recommended_courts=list(category.recommended_courts or []),
            )
        )
        versions[group.id] = group.version

    dates = {c.match_date for c in candidates if c.match_date is not None}
    occupied = _occupied_slots(session, season_id, dates, set(versions))

    if request.respect_availability:
        index = load_availability_index(session, season_id, player_ids=sorted(active_ids), dates=sorted(dates))
    else:
        index = OpenAvailability()

    plan = plan_assignments(
        candidates,
        config.time_slots,
        config.number_of_courts,
        index,
        options=request.options,
        occupied=occupied,
        player_names=player_names,
    )
    result.warnings.extend(plan.warnings)
    result.skipped.extend(_skipped_dict(s, player_names) for s in plan.skipped)

    court_ids = active_court_ids_by_number(session, season_id)
    by_id = {c.day_group_id: c for c in candidates}

    for planned in plan.assignments:
        court_id = court_ids.get(planned.court_index)
        fields = (planned.match_date, planned.time_slot, planned.court_index, court_id)
        reason = None
        try:
            with session.begin_nested():
                compare_and_set_slot(session, planned.day_group_id, versions[planned.day_group_id], fields)
        except ConflictError as e:
            reason = str(e)
        except IntegrityError:
            reason = "Target slot was taken by another request"

        if reason:
            label = group_label(by_id[planned.day_group_id])
            logger.warning("Auto-schedule write failed for %s: %s", label, reason)
            result.warnings.append(f"{label}: {reason}")
            result.skipped.append(
                {
                    "day_group_id": planned.day_group_id,
                    "group_number": planned.group_number,
                    "category_id": planned.category_id,
                    "category_name": planned.category_name,
                    "reason": reason,
                    "unavailable_player_ids": [],
                    "unavailable_players": [],
                }
            )
            continue
        result.assignments.append(_assignment_dict(planned, court_id, player_names))

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to commit auto-schedule for season %d matchday %d", season_id, request.matchday_number)
        raise PersistenceError(f"Failed to save schedule: {e}")

    for skipped in result.skipped:
        logger.warning(
            "Skipped group %d (%s): %s", skipped["group_number"], skipped["category_name"], skipped["reason"]
        )

    logger.info(
        "Auto-schedule season %d matchday %d: %d assigned, %d skipped, %d cleared",
        season_id,
        request.matchday_number,
        len(result.assignments),
        len(result.skipped),
        result.cleared_groups,
    )
    return result
