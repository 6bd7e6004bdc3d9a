"""
Assignment Engine: deterministic greedy placement of day-groups into
(date, time_slot, court) slots.

Availability depends on the time slot only, so scores are computed once per
(group, time_slot) and the courts inside a time slot are interchangeable
capacity. Groups are processed best-score first (ties by group number) so
the easy groups keep their best slot, then each group takes the first free
court of its best acceptable time slot.

Acceptance:
- strict_mode: only slots where every active player is free.
- flexible: partial availability is fine; a group whose every slot scores 0
  is still placed, with a warning.
Capacity is an invariant in both modes: a slot already taken (by another
group in this run or by an existing assignment) is never reused.

Nothing here touches the database; see services/auto_schedule.py.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from padel_league.utils.availability_index import OpenAvailability
from padel_league.utils.slot_scorer import SlotScore, score_time_slots

Slot = Tuple[date, str, int]


@dataclass
class ScheduleOptions:
    respect_availability: bool = True
    prefer_time_slot_variety: bool = False
    strict_mode: bool = True


@dataclass
class GroupCandidate:
    day_group_id: int
    group_number: int
    category_id: int
    category_name: str
    player_ids: List[int]  # active players only
    match_date: Optional[date]
    recommended_courts: List[int] = field(default_factory=list)


@dataclass
class PlannedAssignment:
    day_group_id: int
    group_number: int
    category_id: int
    category_name: str
    match_date: date
    time_slot: str
    court_index: int
    score: float
    unavailable_player_ids: List[int] = field(default_factory=list)

    @property
    def slot(self) -> Slot:
        return (self.match_date, self.time_slot, self.court_index)


@dataclass
class SkippedGroup:
    day_group_id: int
    group_number: int
    category_id: int
    category_name: str
    reason: str
    unavailable_player_ids: List[int] = field(default_factory=list)


@dataclass
class AssignmentPlan:
    assignments: List[PlannedAssignment] = field(default_factory=list)
    skipped: List[SkippedGroup] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def group_label(group: GroupCandidate) -> str:
    return f"Group {group.group_number} ({group.category_name})"


def _names(player_ids: Iterable[int], player_names: Mapping[int, str]) -> str:
    return ", ".join(player_names.get(pid, str(pid)) for pid in player_ids)


def court_order(number_of_courts: int, recommended: Sequence[int]) -> List[int]:
    """Recommended courts first (in the given order), then the rest ascending."""
    preferred = []
    for court in recommended or []:
        if 1 <= court <= number_of_courts and court not in preferred:
            preferred.append(court)
    return preferred + [c for c in range(1, number_of_courts + 1) if c not in preferred]


def _acceptable(scores: List[SlotScore], options: ScheduleOptions) -> List[SlotScore]:
    if options.strict_mode:
        return [s for s in scores if s.is_full]
    positive = [s for s in scores if s.score > 0]
    # Nobody free anywhere: flexible mode still places the group
    return positive if positive else list(scores)


def plan_assignments(
    groups: Sequence[GroupCandidate],
    time_slots: Sequence[str],
    number_of_courts: int,
    index,
    options: Optional[ScheduleOptions] = None,
    occupied: Optional[Set[Slot]] = None,
    player_names: Optional[Mapping[int, str]] = None,
) -> AssignmentPlan:
    """
    Place each group into at most one free slot.

    Args:
        groups: Candidates with their target date and active player ids
        time_slots: Normalized "HH:MM" slots of the day
        number_of_courts: Courts are numbered 1..number_of_courts
        index: AvailabilityIndex (ignored when respect_availability is False)
        options: Scheduling policy flags
        occupied: Slots already held by groups outside this run
        player_names: Used to name unavailable players in warnings

    Returns:
        AssignmentPlan with one entry per group in either assignments or skipped
    """
    options = options or ScheduleOptions()
    player_names = player_names or {}
    taken: Set[Slot] = set(occupied or ())
    plan = AssignmentPlan()

    if not options.respect_availability:
        index = OpenAvailability()

    def skip(group: GroupCandidate, reason: str, unavailable: Optional[List[int]] = None) -> None:
        plan.skipped.append(
            SkippedGroup(
                day_group_id=group.day_group_id,
                group_number=group.group_number,
                category_id=group.category_id,
                category_name=group.category_name,
                reason=reason,
                unavailable_player_ids=list(unavailable or []),
            )
        )
        plan.warnings.append(f"{group_label(group)}: {reason}")

    # Score every schedulable group once
    scored: List[Tuple[GroupCandidate, List[SlotScore]]] = []
    for group in groups:
        if group.match_date is None:
            skip(group, "No match date configured for this category")
            continue
        if not group.player_ids:
            skip(group, "Group has no active players")
            continue
        if not time_slots or number_of_courts < 1:
            skip(group, "No time slots or courts configured")
            continue
        scores = score_time_slots(group.player_ids, index, group.match_date, time_slots)
        scored.append((group, scores))

    scored.sort(key=lambda item: (-item[1][0].score, item[0].group_number, item[0].category_id, item[0].day_group_id))

    usage: Dict[Tuple[date, str], int] = defaultdict(int)
    for slot in taken:
        usage[(slot[0], slot[1])] += 1

    for group, scores in scored:
        best = scores[0]
        candidates = _acceptable(scores, options)

        if options.prefer_time_slot_variety:
            candidates = sorted(candidates, key=lambda s: (-s.score, usage[(s.match_date, s.time_slot)], s.time_slot))

        courts = court_order(number_of_courts, group.recommended_courts)
        placed: Optional[PlannedAssignment] = None
        for candidate in candidates:
            for court in courts:
                slot = (candidate.match_date, candidate.time_slot, court)
                if slot in taken:
                    continue
                placed = PlannedAssignment(
                    day_group_id=group.day_group_id,
                    group_number=group.group_number,
                    category_id=group.category_id,
                    category_name=group.category_name,
                    match_date=candidate.match_date,
                    time_slot=candidate.time_slot,
                    court_index=court,
                    score=candidate.score,
                    unavailable_player_ids=list(candidate.unavailable_player_ids),
                )
                break
            if placed:
                break

        if placed:
            taken.add(placed.slot)
            usage[(placed.match_date, placed.time_slot)] += 1
            plan.assignments.append(placed)
            if best.score == 0:
                plan.warnings.append(
                    f"{group_label(group)} has no available players for any slot on {group.match_date.isoformat()}"
                )
            elif placed.unavailable_player_ids:
                plan.warnings.append(
                    f"{group_label(group)}: placed at {placed.time_slot} without "
                    f"{_names(placed.unavailable_player_ids, player_names)}"
                )
            continue

        if not candidates:
            if best.score == 0:
                reason = f"No available players for any slot on {group.match_date.isoformat()}"
            else:
                reason = (
                    f"No time slot on {group.match_date.isoformat()} where all {len(group.player_ids)} "
                    f"players are available"
                )
            reason += f". Unavailable players: {_names(best.unavailable_player_ids, player_names)}"
            skip(group, reason, best.unavailable_player_ids)
        else:
            skip(group, f"All courts are taken for the available time slots on {group.match_date.isoformat()}")

    return plan
