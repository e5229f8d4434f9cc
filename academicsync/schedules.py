"""
Schedule string decoding.

Both back-ends encode the weekly schedule of a class as space-separated
tokens, one per meeting, e.g.:

    "Lu(n)1:5 Mi(n)0:2"

- "Lu"  -> weekday abbreviation (Spanish)
- "(n)" -> turn (m = morning, t = afternoon, n = night)
- "1:5" -> first and last time slot of the meeting

Important rules:
- 1 token = 1 ScheduleSlot, in input order
- Sundays and "Sin definir" mean "unknown": the whole string maps to None
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from academicsync.errors import MalformedContentError
from academicsync.model import Day, ScheduleSlot, Turn


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

SUNDAY = "Do"

DAYS: Dict[str, Day] = {
    "Lu": Day.MON,
    "Ma": Day.TUE,
    "Mi": Day.WED,
    "Ju": Day.THU,
    "Vi": Day.FRI,
    "Sa": Day.SAT,
}

TURNS: Dict[str, Turn] = {
    "m": Turn.MORNING,
    "t": Turn.AFTERNOON,
    "n": Turn.NIGHT,
}

# Strings the sources use when the schedule is not known yet
UNDEFINED_SCHEDULES = ("Do(m)0:0", "Do(t)0:0", "Do(n)0:0", "Sin definir")

SCHEDULE_TOKEN_RE = re.compile(r"^(Lu|Ma|Mi|Ju|Vi|Sa|Do)\((m|t|n)\)(\d+):(\d+)$")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_schedules(text: str) -> Optional[Tuple[ScheduleSlot, ...]]:
    """
    Decode a full schedule string into slots.

    Returns None for the undefined/Sunday sentinels instead of a partial
    list. Raises MalformedContentError for anything outside the grammar.
    """
    raw = text.strip()
    if raw in UNDEFINED_SCHEDULES:
        return None

    tokens = raw.split()
    if not tokens:
        raise MalformedContentError("Empty schedule string", actual=text)

    slots = []
    for token in tokens:
        groups = SCHEDULE_TOKEN_RE.match(token)
        if not groups:
            raise MalformedContentError(
                f"Schedule couldn't be parsed: {token!r}",
                actual=token,
                content=text,
            )

        # Sunday is not a valid class day, treat the whole string as unknown
        if groups.group(1) == SUNDAY:
            return None

        slots.append(
            ScheduleSlot(
                day=DAYS[groups.group(1)],
                turn=TURNS[groups.group(2)],
                start_slot=int(groups.group(3)),
                end_slot=int(groups.group(4)),
            )
        )

    return tuple(slots)
