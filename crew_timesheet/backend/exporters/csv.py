"""CSV export utilities for timesheet rows.

Output is the positional, unquoted format the importer reads back: free-text
cells have commas stripped instead of being quoted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..aggregate import sort_rows, summarize_by_worker, total_hours
from ..forms import TimesheetRow
from ..importers.csv import CANONICAL_HEADER, SUMMARY_PREFIX, ColumnMap, parse_timesheet_csv
from ..parsers import canonical_time
from ..utils import format_hours, strip_commas

CSV_FILENAME = "timesheet.csv"
CSV_MIMETYPE = "text/csv"

SUMMARY_STYLES = ("worker", "worker_date")
TOTAL_LABEL = "Total Hours Overall"


def render_csv(
    rows: Iterable[TimesheetRow],
    header: Sequence[str] | None = None,
    *,
    summary_style: str = "worker",
) -> str:
    """Render rows to CSV text followed by freshly computed summary rows.

    - Columns follow ``header`` order; unknown header labels render empty.
    - Summary rows are only added when the header has an hours column.
    """
    if summary_style not in SUMMARY_STYLES:
        raise ValueError(f"Unknown summary style: {summary_style}")
    header = [h.strip() for h in (header or CANONICAL_HEADER)]
    columns = ColumnMap.from_header(header)
    rows = list(rows)

    lines = [",".join(header)]
    for row in rows:
        lines.append(",".join(_cell(row, columns.field_at(i)) for i in range(len(header))))

    if columns.hours is not None:
        lines.append("")
        lines.extend(summary_lines(rows, summary_style=summary_style))
    return "\n".join(lines)


def summary_lines(rows: Iterable[TimesheetRow], *, summary_style: str = "worker") -> list[str]:
    """``Summary,<label>,<hours>`` lines ending with the overall total."""
    rows = list(rows)
    out: list[str] = []
    summaries = summarize_by_worker(rows)
    if summary_style == "worker_date":
        out.append(f"{SUMMARY_PREFIX}Worker Name - Date,Hours")
        for summary in summaries:
            name = strip_commas(summary.worker)
            for date, hours in summary.dates():
                out.append(f"{SUMMARY_PREFIX}{name} - {date},{format_hours(hours)}")
    else:
        for summary in summaries:
            out.append(f"{SUMMARY_PREFIX}{strip_commas(summary.worker)},{format_hours(summary.total)}")
    out.append(f"{SUMMARY_PREFIX}{TOTAL_LABEL},{format_hours(total_hours(rows))}")
    return out


def normalize_csv(text: str, *, summary_style: str = "worker") -> str:
    """Parse, sort and re-render CSV text with recomputed summaries."""
    parsed = parse_timesheet_csv(text)
    return render_csv(sort_rows(parsed.rows), parsed.header, summary_style=summary_style)


def _cell(row: TimesheetRow, name: str | None) -> str:
    if name is None:
        return ""
    if name == "hours":
        return format_hours(row.hours)
    if name in ("start", "end"):
        return canonical_time(getattr(row, name))
    return strip_commas(getattr(row, name))
