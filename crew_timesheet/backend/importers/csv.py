"""CSV import for timesheet text produced by the language model or the table.

The format is positional and unquoted: cells are split on ``,`` and free-text
fields never contain commas. Column positions are resolved once from the
header through `ColumnMap`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..errors import CsvHeaderError
from ..forms import TimesheetRow, recalculate_hours
from ..parsers import canonical_time
from ..utils import parse_hours

CANONICAL_HEADER = ["Date", "Job Site", "Worker Name", "Start", "End", "Hours"]
SUMMARY_PREFIX = "Summary,"

# Accepted header labels per row field, compared in lowercase.
_HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date",),
    "job_site": ("job site",),
    "worker": ("worker name", "worker"),
    "start": ("start",),
    "end": ("end",),
    "hours": ("hours",),
}


@dataclass(frozen=True)
class ColumnMap:
    """Header positions for each row field; ``None`` when the column is absent."""

    date: int | None = None
    job_site: int | None = None
    worker: int | None = None
    start: int | None = None
    end: int | None = None
    hours: int | None = None

    @classmethod
    def from_header(cls, header: Sequence[str]) -> ColumnMap:
        labels = [h.strip().lower() for h in header]
        positions: dict[str, int | None] = {}
        for name, aliases in _HEADER_ALIASES.items():
            positions[name] = next((i for i, label in enumerate(labels) if label in aliases), None)
        return cls(**positions)

    def field_at(self, index: int) -> str | None:
        """Row field name rendered in header column ``index``, if any."""
        for name in _HEADER_ALIASES:
            if getattr(self, name) == index:
                return name
        return None

    def cell(self, cells: Sequence[str], name: str) -> str:
        idx = getattr(self, name)
        if idx is None or idx >= len(cells):
            return ""
        return cells[idx].strip()


@dataclass
class ParsedTimesheet:
    """Result of parsing CSV text."""

    header: list[str] = field(default_factory=lambda: list(CANONICAL_HEADER))
    rows: list[TimesheetRow] = field(default_factory=list)
    summary_lines: list[str] = field(default_factory=list)


def clean_model_output(text: str) -> str:
    """Drop markdown fences and a bare ``csv`` tag line from model output."""
    kept = []
    for raw in (text or "").splitlines():
        line = raw.strip()
        if line.startswith("```") or line.lower() == "csv":
            continue
        kept.append(line)
    return "\n".join(kept)


def parse_timesheet_csv(text: str) -> ParsedTimesheet:
    """Parse header, data rows and summary lines from CSV text.

    Raises:
        CsvHeaderError: when no line starts with ``Date,``.
    """
    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]

    header_index = next((i for i, line in enumerate(lines) if _is_header(line)), None)
    if header_index is None:
        raise CsvHeaderError("No valid CSV header")

    header = [h.strip() for h in lines[header_index].split(",")]
    columns = ColumnMap.from_header(header)
    parsed = ParsedTimesheet(header=header)
    in_summary = False
    for line in lines[header_index + 1 :]:
        if _is_header(line):
            continue
        if line.startswith(SUMMARY_PREFIX):
            in_summary = True
            parsed.summary_lines.append(line)
            continue
        if in_summary:
            continue
        row = row_from_cells(line.split(","), columns)
        if not row.is_empty():
            parsed.rows.append(row)
    return parsed


def row_from_cells(cells: Sequence[str], columns: ColumnMap) -> TimesheetRow:
    """Build a row from split cells; blank hours are filled from valid times."""
    row = TimesheetRow(
        date=columns.cell(cells, "date"),
        job_site=columns.cell(cells, "job_site"),
        worker=columns.cell(cells, "worker"),
        start=canonical_time(columns.cell(cells, "start")),
        end=canonical_time(columns.cell(cells, "end")),
        hours=parse_hours(columns.cell(cells, "hours")),
    )
    if row.hours is None:
        row = recalculate_hours(row)
    return row


def _is_header(line: str) -> bool:
    return line.lower().startswith("date,")
