"""Plain-text final report built from the timesheet table and notes.

Two layouts are supported through `ReportMode`:

- ``detailed``: job header, a daily breakdown, per-worker summaries and notes.
- ``compact``: a title line and one short line per shift, e.g.
  ``Sam   8am - 12pm   4hrs``.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ..aggregate import (
    NO_DATE,
    date_range_label,
    group_by_date,
    pick_primary_job_site,
    sort_rows,
    summarize_by_worker,
)
from ..forms import TimesheetRow
from ..parsers import compact_time
from ..utils import compact_hours, format_hours

NO_ROWS_MESSAGE = "No rows found in the timesheet table."


class ReportMode(str, Enum):
    DETAILED = "detailed"
    COMPACT = "compact"


def build_report(
    rows: Iterable[TimesheetRow],
    notes: str | None = "",
    mode: ReportMode | str = ReportMode.DETAILED,
) -> str:
    """Render the final report for ``rows``.

    Args:
        rows: Timesheet rows in any order; empty rows are ignored.
        notes: Free-text notes, appended only when non-blank.
        mode: ``ReportMode`` or its string value.
    Returns:
        Report text, or ``NO_ROWS_MESSAGE`` when there are no rows.
    """
    mode = ReportMode(mode)
    rows = [r for r in rows if not r.is_empty()]
    if not rows:
        return NO_ROWS_MESSAGE
    clean_notes = (notes or "").strip()
    if mode is ReportMode.COMPACT:
        return _compact(rows, clean_notes)
    return _detailed(rows, clean_notes)


def _detailed(rows: list[TimesheetRow], notes: str) -> str:
    site = pick_primary_job_site(rows)
    lines = [
        f"Job: {site}",
        f"Dates Worked: {date_range_label(rows)}",
        f"Location: {site}",
        "",
        "-- DAILY BREAKDOWN --",
        "",
    ]

    for group in group_by_date(rows):
        label = "No specific date" if group.date == NO_DATE else group.date
        lines.append(f"{label}:")
        for r in group.rows:
            hrs = format_hours(r.hours) if r.hours else ""
            lines.append(f"- {r.worker}: {r.start} to {r.end} ({hrs} hrs)")
        lines.append("")

    lines.append("-- SUMMARY BY WORKER --")
    lines.append("")
    for summary in summarize_by_worker(rows):
        lines.append(f"{summary.worker}:")
        for date, hrs in summary.dates():
            label = "No date" if date == NO_DATE else date
            lines.append(f"- {label}: {format_hours(hrs)} hrs")
        lines.append(f"Total: {format_hours(summary.total)} hrs")
        lines.append("")

    if notes:
        lines.append("-- NOTES --")
        lines.append(notes)
    return "\n".join(lines)


def _compact(rows: list[TimesheetRow], notes: str) -> str:
    lines = [f"{pick_primary_job_site(rows)} work hrs", ""]
    for r in sort_rows(rows):
        start = compact_time(r.start)
        end = compact_time(r.end)
        lines.append(f"{r.worker}   {start} - {end}   {compact_hours(r.hours)}hrs")
    if notes:
        lines.append("")
        lines.append(notes)
    return "\n".join(lines)
