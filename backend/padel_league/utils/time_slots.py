"""
Canonical parser for time-of-day slot strings.

Slots arrive as "18:30" or "18:30:00" depending on the client. Everything
stored or compared goes through normalize_time_slot() so that string order
equals chronological order.
"""

import re
from typing import Iterable, List

_SLOT_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def normalize_time_slot(value: str) -> str:
    """Return the zero-padded "HH:MM" form or raise ValueError."""
    match = _SLOT_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid time slot '{value}', expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time slot '{value}', expected HH:MM")
    return f"{hour:02d}:{minute:02d}"


def normalize_time_slots(values: Iterable[str]) -> List[str]:
    """Normalize, drop duplicates and sort."""
    return sorted({normalize_time_slot(v) for v in values})


def day_of_week(value) -> int:
    """0=Sunday .. 6=Saturday"""
    return value.isoweekday() % 7
