"""Row model and validation for timesheet entries.

A row is one worker's shift on one date. Values are kept in their canonical
external form (``MM/DD/YYYY`` dates, ``hh:mm AM|PM`` times) so that rendering
back to CSV is a plain join.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace
from datetime import date as _date
from typing import Any

from .parsers import canonical_time, elapsed_hours, normalize_date, to_12_hour, to_24_hour
from .utils import parse_hours, strip_commas

_FULL_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}")


@dataclass
class TimesheetRow:
    """One worker-date-shift record."""

    date: str = ""
    job_site: str = ""
    worker: str = ""
    start: str = ""
    end: str = ""
    hours: float | None = None

    def is_empty(self) -> bool:
        blank_text = not (self.worker.strip() or self.start.strip() or self.end.strip())
        return blank_text and self.hours is None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def from_dict(data: dict[str, Any]) -> TimesheetRow:
    """Convert a dictionary to a `TimesheetRow` with basic coercion.

    Accepts either ``job_site`` or ``site`` for the location and canonicalizes
    both time fields.
    """
    return TimesheetRow(
        date=str(data.get("date") or "").strip(),
        job_site=str(data.get("job_site", data.get("site")) or "").strip(),
        worker=str(data.get("worker") or "").strip(),
        start=canonical_time(str(data.get("start") or "")),
        end=canonical_time(str(data.get("end") or "")),
        hours=parse_hours(data.get("hours")),
    )


def computed_hours(row: TimesheetRow) -> float | None:
    """Quarter-hour rounded hours implied by the row's times, if valid."""
    total = elapsed_hours(to_24_hour(row.start), to_24_hour(row.end))
    return float(total) if total else None


def recalculate_hours(row: TimesheetRow) -> TimesheetRow:
    """Return a copy with hours recomputed from start/end.

    An invalid or incomplete pair leaves hours blank.
    """
    return replace(row, hours=computed_hours(row))


def apply_edit(
    row: TimesheetRow,
    changes: dict[str, Any],
    *,
    today: _date | None = None,
) -> TimesheetRow:
    """Apply a cell edit from the editable table.

    ``start``/``end`` arrive in the 24-hour editing form. Changing either
    recomputes hours when the new pair is valid; otherwise the previous hours
    stay, matching how the table only overwrites hours on a good range.
    """
    updated = replace(row)
    if "date" in changes:
        updated.date = normalize_date(str(changes["date"] or ""), today=today)
    if "job_site" in changes:
        updated.job_site = strip_commas(str(changes["job_site"] or ""))
    if "worker" in changes:
        updated.worker = strip_commas(str(changes["worker"] or ""))
    if "start" in changes:
        updated.start = to_12_hour(str(changes["start"] or ""))
    if "end" in changes:
        updated.end = to_12_hour(str(changes["end"] or ""))
    if "hours" in changes:
        updated.hours = parse_hours(changes["hours"])
    if "start" in changes or "end" in changes:
        hours = computed_hours(updated)
        if hours is not None:
            updated.hours = hours
    return updated


def validate(row: TimesheetRow) -> list[str]:
    """Return a list of human-readable issues if validation fails."""
    issues: list[str] = []
    if not row.worker.strip():
        issues.append("Worker name is required.")
    if row.date and not _FULL_DATE_RE.fullmatch(row.date):
        issues.append(f"Date must be MM/DD/YYYY with a 4-digit year: {row.date}")
    if row.start and row.end:
        expected = computed_hours(row)
        if expected is None:
            issues.append(f"End time {row.end} is not after start time {row.start}.")
        elif row.hours is not None and abs(row.hours - expected) > 1e-9:
            issues.append(f"Hours {row.hours:.2f} do not match {row.start} to {row.end} ({expected:.2f}).")
    if row.hours is not None and row.hours < 0:
        issues.append("Hours cannot be negative.")
    return issues
