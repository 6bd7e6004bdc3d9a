"""
Availability Index: "is player P free at (date, time_slot)?" for one season.

Resolution order for a player on a date:

1. A date override wins outright. is_unavailable=True means unavailable
   whatever the weekly data says; otherwise its slot list is the answer.
2. The weekly default for the date's day of week (0=Sunday).
3. Nothing recorded: unavailable ("No availability set").
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from sqlmodel import Session, select

from padel_league.models.player_availability import PlayerAvailability, PlayerAvailabilityOverride
from padel_league.utils.time_slots import day_of_week, normalize_time_slot

NO_AVAILABILITY_REASON = "No availability set"
MARKED_UNAVAILABLE_REASON = "Marked unavailable"


@dataclass(frozen=True)
class AvailabilityCheck:
    available: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class _OverrideEntry:
    slots: FrozenSet[str]
    is_unavailable: bool
    reason: Optional[str]


def _slot_set(slots: Iterable[str]) -> FrozenSet[str]:
    return frozenset(normalize_time_slot(s) for s in slots or [])


class AvailabilityIndex:
    def __init__(
        self,
        weekly: Iterable[PlayerAvailability] = (),
        overrides: Iterable[PlayerAvailabilityOverride] = (),
    ):
        self._weekly: Dict[Tuple[int, int], FrozenSet[str]] = {}
        self._overrides: Dict[Tuple[int, date], _OverrideEntry] = {}

        for record in weekly:
            self._weekly[(record.player_id, record.day_of_week)] = _slot_set(record.available_time_slots)

        for record in overrides:
            self._overrides[(record.player_id, record.override_date)] = _OverrideEntry(
                slots=_slot_set(record.available_time_slots),
                is_unavailable=bool(record.is_unavailable),
                reason=record.reason,
            )

    def check(self, player_id: int, on_date: date, time_slot: str) -> AvailabilityCheck:
        slot = normalize_time_slot(time_slot)

        override = self._overrides.get((player_id, on_date))
        if override is not None:
            if override.is_unavailable:
                return AvailabilityCheck(False, override.reason or MARKED_UNAVAILABLE_REASON)
            if slot in override.slots:
                return AvailabilityCheck(True)
            return AvailabilityCheck(False, f"Not available at {slot}")

        weekly = self._weekly.get((player_id, day_of_week(on_date)))
        if weekly is not None:
            if slot in weekly:
                return AvailabilityCheck(True)
            return AvailabilityCheck(False, f"Not available at {slot}")

        return AvailabilityCheck(False, NO_AVAILABILITY_REASON)

    def is_available(self, player_id: int, on_date: date, time_slot: str) -> bool:
        return self.check(player_id, on_date, time_slot).available


class OpenAvailability:
    """Stand-in index that treats every player as free (respect_availability=False)."""

    def check(self, player_id: int, on_date: date, time_slot: str) -> AvailabilityCheck:
        return AvailabilityCheck(True)

    def is_available(self, player_id: int, on_date: date, time_slot: str) -> bool:
        return True


def load_availability_index(
    session: Session,
    season_id: int,
    player_ids: Optional[Sequence[int]] = None,
    dates: Optional[Sequence[date]] = None,
) -> AvailabilityIndex:
    """Read weekly records and overrides for a season. Always hits the store."""
    weekly_query = select(PlayerAvailability).where(PlayerAvailability.season_id == season_id)
    override_query = select(PlayerAvailabilityOverride).where(PlayerAvailabilityOverride.season_id == season_id)

    if player_ids is not None:
        weekly_query = weekly_query.where(PlayerAvailability.player_id.in_(list(player_ids)))
        override_query = override_query.where(PlayerAvailabilityOverride.player_id.in_(list(player_ids)))
    if dates is not None:
        override_query = override_query.where(PlayerAvailabilityOverride.override_date.in_(list(dates)))

    return AvailabilityIndex(
        weekly=session.exec(weekly_query).all(),
        overrides=session.exec(override_query).all(),
    )
