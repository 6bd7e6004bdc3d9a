"""
Conflict Resolver: organizer-driven move of one day-group to a specific
(date, time_slot, court).

Outcomes:

1. **assigned**: target slot was free
2. **swapped**: target held by another group and the mover had a slot;
   the other group takes the mover's former slot
3. **displaced**: target held by another group and the mover had no slot;
   the other group is unassigned
4. **cleared**: all slot fields sent as null

Every row write is a compare-and-swap on DayGroup.version and all writes of
one request share a transaction, so a concurrent move of either group
fails with ConflictError and leaves both rows untouched.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from padel_league.models.category import LeagueCategory
from padel_league.models.court import SeasonCourt
from padel_league.models.day_group import DayGroup
from padel_league.models.match_day import MatchDay
from padel_league.utils.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from padel_league.utils.field_update import FieldUpdate
from padel_league.utils.time_slots import normalize_time_slot

logger = logging.getLogger(__name__)

SlotFields = Tuple[Optional[date], Optional[str], Optional[int], Optional[int]]
EMPTY_SLOT: SlotFields = (None, None, None, None)


@dataclass
class SlotChangeResult:
    action: str  # "assigned" | "swapped" | "displaced" | "cleared"
    day_group_id: int
    displaced_group_id: Optional[int] = None
    displaced_group_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "action": self.action,
            "day_group_id": self.day_group_id,
            "displaced_group_id": self.displaced_group_id,
            "displaced_group_number": self.displaced_group_number,
        }


def compare_and_set_slot(session: Session, day_group_id: int, expected_version: int, fields: SlotFields) -> int:
    """
    Write a group's slot fields only if its version is still expected_version.

    Returns the new version. Raises ConflictError when another writer got
    there first.
    """
    match_date, time_slot, court_index, court_id = fields
    result = session.execute(
        update(DayGroup)
        .where(DayGroup.id == day_group_id, DayGroup.version == expected_version)
        .values(
            match_date=match_date,
            time_slot=time_slot,
            court_index=court_index,
            court_id=court_id,
            version=expected_version + 1,
        )
    )
    if result.rowcount != 1:
        raise ConflictError(f"Day group {day_group_id} was modified by another request; reload and retry")
    return expected_version + 1


def select_matchday_groups(season_id: int, matchday_number: int, category_ids: Optional[Sequence[int]] = None):
    """Query for every day-group of matchday N in a season."""
    query = (
        select(DayGroup)
        .join(MatchDay, DayGroup.match_day_id == MatchDay.id)
        .join(LeagueCategory, MatchDay.category_id == LeagueCategory.id)
        .where(LeagueCategory.season_id == season_id, MatchDay.match_number == matchday_number)
    )
    if category_ids:
        query = query.where(LeagueCategory.id.in_(list(category_ids)))
    return query.order_by(LeagueCategory.id, DayGroup.group_number, DayGroup.id)


def clear_matchday_assignments(
    session: Session, season_id: int, matchday_number: int, category_ids: Optional[Sequence[int]] = None
) -> List[DayGroup]:
    """
    Clear the slot of every assigned group in a matchday.

    Does not commit; the caller owns the transaction.
    """
    groups = session.exec(select_matchday_groups(season_id, matchday_number, category_ids)).all()
    cleared = []
    for group in groups:
        if group.slot is None and group.court_id is None:
            continue
        compare_and_set_slot(session, group.id, group.version, EMPTY_SLOT)
        cleared.append(group)
    return cleared


def _resolve_court(
    session: Session,
    group: DayGroup,
    court_index: FieldUpdate,
    court_id: FieldUpdate,
) -> Tuple[FieldUpdate, FieldUpdate]:
    """Make court_index and court_id agree. Both come back touched or both unchanged."""
    if court_index.is_unchanged and court_id.is_unchanged:
        return court_index, court_id

    if (court_id.is_set and court_index.is_cleared) or (court_index.is_set and court_id.is_cleared):
        raise ValidationError("court_index and court_id contradict each other: one is set, the other cleared")

    if court_id.is_set:
        court = session.get(SeasonCourt, court_id.value)
        if not court or court.season_id != group.season_id:
            raise ValidationError(f"Court {court_id.value} does not belong to this season")
        if not court.is_active:
            raise ValidationError(f"Court '{court.name}' is inactive")
        if court_index.is_set and court_index.value != court.court_number:
            raise ValidationError(
                f"court_index {court_index.value} does not match court '{court.name}' (number {court.court_number})"
            )
        return FieldUpdate.set_to(court.court_number), court_id

    if court_index.is_set:
        if court_index.value < 1:
            raise ValidationError("court_index must be >= 1")
        court = session.exec(
            select(SeasonCourt).where(
                SeasonCourt.season_id == group.season_id,
                SeasonCourt.court_number == court_index.value,
                SeasonCourt.is_active == True,  # noqa: E712
            )
        ).first()
        return court_index, FieldUpdate.set_to(court.id if court else None)

    # At least one side cleared and neither set
    return FieldUpdate.set_to(None), FieldUpdate.set_to(None)


def resolve_target(
    session: Session,
    group: DayGroup,
    match_date: FieldUpdate,
    time_slot: FieldUpdate,
    court_index: FieldUpdate,
    court_id: FieldUpdate,
) -> SlotFields:
    """
    Validate a PATCH body against the group's current slot and return the
    resulting (match_date, time_slot, court_index, court_id).

    Raises ValidationError for partial input; nothing is written.
    """
    court_touched = not (court_index.is_unchanged and court_id.is_unchanged)
    if match_date.is_unchanged and time_slot.is_unchanged and not court_touched:
        raise ValidationError("No assignment fields provided")
    if time_slot.is_unchanged != (not court_touched):
        raise ValidationError("time_slot and court must be updated together")

    if time_slot.is_set:
        try:
            time_slot = FieldUpdate.set_to(normalize_time_slot(time_slot.value))
        except ValueError as e:
            raise ValidationError(str(e))

    court_index, court_id = _resolve_court(session, group, court_index, court_id)

    new_date = match_date.apply(group.match_date)
    new_time = time_slot.apply(group.time_slot)
    new_court_index = court_index.apply(group.court_index)
    new_court_id = court_id.apply(group.court_id)

    triple = (new_date, new_time, new_court_index)
    if all(v is None for v in triple):
        return EMPTY_SLOT
    if any(v is None for v in triple):
        raise ValidationError("match_date, time_slot and court must be all set or all cleared")
    return (new_date, new_time, new_court_index, new_court_id)


def find_slot_occupant(session: Session, group: DayGroup, target: SlotFields) -> Optional[DayGroup]:
    match_date, time_slot, court_index, _ = target
    return session.exec(
        select(DayGroup).where(
            DayGroup.season_id == group.season_id,
            DayGroup.match_date == match_date,
            DayGroup.time_slot == time_slot,
            DayGroup.court_index == court_index,
            DayGroup.id != group.id,
        )
    ).first()


def reassign_day_group(
    session: Session,
    day_group_id: int,
    match_date: FieldUpdate,
    time_slot: FieldUpdate,
    court_index: FieldUpdate,
    court_id: FieldUpdate,
    expected_version: Optional[int] = None,
) -> SlotChangeResult:
    """
    Move, swap, displace or clear a day-group's slot in one transaction.

    Raises:
        NotFoundError: group does not exist
        ValidationError: partial or malformed slot fields
        ConflictError: target equals current slot, or a row changed underneath
        PersistenceError: the store failed; nothing was committed
    """
    group = session.get(DayGroup, day_group_id)
    if not group:
        raise NotFoundError(f"Day group {day_group_id} not found")

    target = resolve_target(session, group, match_date, time_slot, court_index, court_id)

    if expected_version is not None and expected_version != group.version:
        raise ConflictError(
            f"Day group {day_group_id} is at version {group.version}, not {expected_version}; reload and retry"
        )

    current: SlotFields = (group.match_date, group.time_slot, group.court_index, group.court_id)
    had_slot = group.slot is not None

    if target == EMPTY_SLOT:
        if current != EMPTY_SLOT:
            _commit_writes(session, [(group.id, group.version, EMPTY_SLOT)])
            logger.info("Cleared slot of day group %d", group.id)
        return SlotChangeResult(action="cleared", day_group_id=group.id)

    if had_slot and target[:3] == current[:3]:
        raise ConflictError(f"Group {group.group_number} already holds this slot")

    occupant = find_slot_occupant(session, group, target)

    if occupant is None:
        _commit_writes(session, [(group.id, group.version, target)])
        logger.info("Assigned day group %d to %s %s court %d", group.id, target[0], target[1], target[2])
        return SlotChangeResult(action="assigned", day_group_id=group.id)

    if had_slot:
        # Clear the occupant first so the unique slot constraint never sees two holders
        _commit_writes(
            session,
            [
                (occupant.id, occupant.version, EMPTY_SLOT),
                (group.id, group.version, target),
                (occupant.id, occupant.version + 1, current),
            ],
        )
        logger.info("Swapped slots of day groups %d and %d", group.id, occupant.id)
        action = "swapped"
    else:
        _commit_writes(
            session,
            [
                (occupant.id, occupant.version, EMPTY_SLOT),
                (group.id, group.version, target),
            ],
        )
        logger.info("Day group %d displaced day group %d", group.id, occupant.id)
        action = "displaced"

    return SlotChangeResult(
        action=action,
        day_group_id=group.id,
        displaced_group_id=occupant.id,
        displaced_group_number=occupant.group_number,
    )


def _commit_writes(session: Session, writes: List[Tuple[int, int, SlotFields]]) -> None:
    """Apply (group_id, expected_version, fields) writes atomically."""
    try:
        for group_id, expected_version, fields in writes:
            compare_and_set_slot(session, group_id, expected_version, fields)
        session.commit()
    except ConflictError:
        session.rollback()
        logger.warning("Slot change rejected: concurrent modification of day groups %s", [w[0] for w in writes])
        raise
    except IntegrityError:
        session.rollback()
        logger.warning("Slot change rejected: slot taken concurrently (groups %s)", [w[0] for w in writes])
        raise ConflictError("Target slot was taken by another request; reload and retry")
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to persist slot change for day groups %s", [w[0] for w in writes])
        raise PersistenceError(f"Failed to update assignment: {e}")
