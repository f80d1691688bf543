"""Grouping, ordering and totals over timesheet rows."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from .forms import TimesheetRow
from .parsers import date_sort_key, time_sort_key

NO_DATE = "(no date)"
NO_NAME = "(no name)"
DEFAULT_JOB_SITE = "Job Site"


@dataclass
class DateGroup:
    """Rows sharing one date key, in start-time order."""

    date: str
    rows: list[TimesheetRow] = field(default_factory=list)


@dataclass
class WorkerSummary:
    """Per-worker total and per-date subtotals."""

    worker: str
    total: float = 0.0
    per_date: dict[str, float] = field(default_factory=dict)

    def add(self, date: str, hours: float) -> None:
        self.total += hours
        self.per_date[date] = self.per_date.get(date, 0.0) + hours

    def dates(self) -> list[tuple[str, float]]:
        """Per-date subtotals ordered by date; ``(no date)`` comes last."""
        return sorted(self.per_date.items(), key=lambda item: date_sort_key(item[0]))


def row_sort_key(row: TimesheetRow) -> tuple[float, float, str]:
    return (date_sort_key(row.date), time_sort_key(row.start), row.worker.lower())


def sort_rows(rows: Iterable[TimesheetRow]) -> list[TimesheetRow]:
    """Order rows by date, then start time, then worker (case-insensitive)."""
    return sorted(rows, key=row_sort_key)


def group_by_date(rows: Iterable[TimesheetRow]) -> list[DateGroup]:
    groups: dict[str, DateGroup] = {}
    for row in rows:
        key = row.date or NO_DATE
        groups.setdefault(key, DateGroup(date=key)).rows.append(row)

    ordered = sorted(groups.values(), key=lambda g: date_sort_key(g.date))
    for group in ordered:
        group.rows.sort(key=lambda r: (time_sort_key(r.start), r.worker.lower()))
    return ordered


def summarize_by_worker(rows: Iterable[TimesheetRow]) -> list[WorkerSummary]:
    summaries: dict[str, WorkerSummary] = {}
    for row in rows:
        name = row.worker or NO_NAME
        summary = summaries.setdefault(name, WorkerSummary(worker=name))
        summary.add(row.date or NO_DATE, row.hours or 0.0)
    return sorted(summaries.values(), key=lambda s: s.worker.lower())


def pick_primary_job_site(rows: Iterable[TimesheetRow]) -> str:
    """Most frequent non-empty job site; ties go to the first one seen."""
    counts = Counter(site for site in (r.job_site.strip() for r in rows) if site)
    if not counts:
        return DEFAULT_JOB_SITE
    return counts.most_common(1)[0][0]


def total_hours(rows: Iterable[TimesheetRow]) -> float:
    return sum(r.hours or 0.0 for r in rows)


def date_range_label(rows: Iterable[TimesheetRow]) -> str:
    """``first - last`` over known dates, a single date, or ``(no date)``."""
    dates = sorted((r.date for r in rows if r.date and r.date != NO_DATE), key=date_sort_key)
    if not dates:
        return NO_DATE
    first, last = dates[0], dates[-1]
    if first != last:
        return f"{first} - {last}"
    return first
