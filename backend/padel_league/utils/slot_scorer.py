"""
Slot Scorer: availability score of a day-group for a candidate
(date, time_slot).

score = available players / players in group, in [0, 1]. A group with no
active players scores 0.0 and is flagged so the engine can exclude it.
Ranking is score descending, then (date, time_slot) ascending, which keeps
output reproducible.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Sequence

from padel_league.utils.time_slots import normalize_time_slot


@dataclass(frozen=True)
class SlotScore:
    match_date: date
    time_slot: str
    score: float
    unavailable_player_ids: List[int] = field(default_factory=list)
    has_players: bool = True

    @property
    def is_full(self) -> bool:
        return self.has_players and self.score >= 1.0


def score_slot(player_ids: Sequence[int], index, on_date: date, time_slot: str) -> SlotScore:
    slot = normalize_time_slot(time_slot)
    if not player_ids:
        return SlotScore(on_date, slot, 0.0, [], has_players=False)

    unavailable = [pid for pid in player_ids if not index.is_available(pid, on_date, slot)]
    available_count = len(player_ids) - len(unavailable)
    return SlotScore(on_date, slot, available_count / len(player_ids), unavailable)


def slot_rank_key(slot_score: SlotScore):
    return (-slot_score.score, slot_score.match_date, slot_score.time_slot)


def rank_slots(scores: Iterable[SlotScore]) -> List[SlotScore]:
    """Best first; equal scores in (date, time_slot) order."""
    return sorted(scores, key=slot_rank_key)


def score_time_slots(player_ids: Sequence[int], index, on_date: date, time_slots: Iterable[str]) -> List[SlotScore]:
    """Ranked scores for every time slot on one date."""
    return rank_slots(score_slot(player_ids, index, on_date, ts) for ts in time_slots)
