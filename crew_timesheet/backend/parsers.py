"""Clock and calendar normalization for timesheet cells.

Times travel in two shapes: the external 12-hour form used in CSV
(``08:00 AM``) and the 24-hour form used while editing (``08:00``). Dates are
``MM/DD/YYYY``. Every function here fails softly: malformed input yields an
empty string (or ``inf`` for sort keys) and never raises.
"""

from __future__ import annotations

import math
import re
from datetime import date as _date

_TIME_12_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", flags=re.IGNORECASE)
_TIME_SORT_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(am|pm)?")

# Sort key for anything that cannot be parsed. Always sorts last.
UNPARSEABLE = math.inf


def to_24_hour(time12: str | None) -> str:
    """Convert ``"4:15 pm"`` style input to ``"16:15"``.

    Minutes default to ``00``. Without a meridiem the hour is passed through
    unchanged. An hour outside 1-12 with a meridiem, an hour above 23
    without one, or minutes above 59 give ``""``.
    """
    s = (time12 or "").strip().lower()
    if not s:
        return ""
    m = _TIME_12_RE.search(s)
    if not m:
        return ""
    hour = int(m.group(1))
    minute = int(m.group(2)) if m.group(2) else 0
    ampm = m.group(3)
    if minute > 59 or hour > 23 or (ampm and not 1 <= hour <= 12):
        return ""
    if ampm == "pm" and hour != 12:
        hour += 12
    if ampm == "am" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minute:02d}"


def to_12_hour(time24: str | None) -> str:
    """Convert ``"16:15"`` to ``"04:15 PM"``; ``""`` when malformed."""
    minutes = _minutes_24(time24)
    if minutes is None:
        return ""
    hour, minute = divmod(minutes, 60)
    suffix = "PM" if hour >= 12 else "AM"
    display = hour % 12 or 12
    return f"{display:02d}:{minute:02d} {suffix}"


def elapsed_hours(start24: str | None, end24: str | None) -> str:
    """Return decimal hours between two 24-hour times as ``"X.XX"``.

    Rounds half-up to the nearest quarter hour. An end at or before the start
    is rejected with ``""``; shifts crossing midnight are not inferred.
    """
    start = _minutes_24(start24)
    end = _minutes_24(end24)
    if start is None or end is None or end <= start:
        return ""
    # quarters = round_half_up(diff / 15), in integer arithmetic
    quarters = (2 * (end - start) + 15) // 30
    return f"{quarters / 4:.2f}"


def canonical_time(value: str | None) -> str:
    """Normalize any accepted time spelling to ``hh:mm AM|PM``."""
    return to_12_hour(to_24_hour(value))


def compact_time(value: str | None) -> str:
    """Short report form: ``"08:00 AM"`` -> ``"8am"``, ``"01:15 PM"`` -> ``"1:15pm"``."""
    minutes = _minutes_24(to_24_hour(value))
    if minutes is None:
        return (value or "").strip()
    hour, minute = divmod(minutes, 60)
    suffix = "pm" if hour >= 12 else "am"
    display = hour % 12 or 12
    if minute == 0:
        return f"{display}{suffix}"
    return f"{display}:{minute:02d}{suffix}"


def date_sort_key(date_str: str | None) -> float:
    """Return ``yyyymmdd`` as a number for ``MM/DD/YYYY``.

    Month and day ranges are not checked, so ``13/01/2024`` still gets a
    finite key. Anything that is not three integers sorts last.
    """
    parts = (date_str or "").split("/")
    if len(parts) != 3:
        return UNPARSEABLE
    try:
        month, day, year = (int(p.strip()) for p in parts)
    except ValueError:
        return UNPARSEABLE
    return year * 10000 + month * 100 + day


def time_sort_key(time12: str | None) -> float:
    """Return minutes after midnight for ``H:MM[ AM|PM]``, else ``inf``."""
    s = (time12 or "").strip().lower()
    m = _TIME_SORT_RE.search(s)
    if not m:
        return UNPARSEABLE
    hour = int(m.group(1))
    minute = int(m.group(2))
    ampm = m.group(3)
    if ampm == "pm" and hour != 12:
        hour += 12
    if ampm == "am" and hour == 12:
        hour = 0
    return hour * 60 + minute


def normalize_date(value: str | None, today: _date | None = None) -> str:
    """Clean an edited date cell.

    A bare ``M/D`` gets zero-padded and completed with the current year so
    dates keep a four-digit year. Other values are returned trimmed.
    """
    s = (value or "").replace(",", " ").strip()
    parts = s.split("/")
    if len(parts) == 2 and all(p.strip().isdigit() for p in parts):
        year = (today or _date.today()).year
        month, day = (p.strip().zfill(2) for p in parts)
        return f"{month}/{day}/{year:04d}"
    return s


def _minutes_24(value: str | None) -> int | None:
    s = (value or "").strip()
    if ":" not in s:
        return None
    h, _, m = s.partition(":")
    try:
        hour = int(h)
        minute = int(m)
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour * 60 + minute
