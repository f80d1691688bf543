"""Session orchestration for the timesheet workflow.

The flow mirrors the page it backs:
    record/type transcript → build table → edit cells → export CSV / report.

`TimesheetSession` owns all mutable state for one user session. Every public
method returns `AgentEvent` objects so a CLI or server can relay progress and
errors; collaborator failures become ``error`` events and leave the previous
table untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any

from .aggregate import sort_rows
from .config import Settings
from .errors import CollaboratorError, CsvHeaderError
from .exporters.csv import CSV_FILENAME, CSV_MIMETYPE, render_csv
from .exporters.report import ReportMode, build_report
from .forms import TimesheetRow, apply_edit, from_dict, recalculate_hours, validate
from .importers.csv import CANONICAL_HEADER, clean_model_output, parse_timesheet_csv
from .io.llm import ReportWriter, TimesheetCsvGenerator
from .io.voice import SpeechToText
from .utils import append_text

logger = logging.getLogger(__name__)

NO_CSV_MESSAGE = "No CSV data yet. Build the table first."
BUSY_MESSAGE = "A request is already in progress."
RECORD_TARGETS = ("transcript", "notes")


@dataclass
class AgentEvent:
    """A simple event structure suitable for streaming to a UI."""

    type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class CsvDownload:
    """CSV offered to the user as a file attachment."""

    content: str
    filename: str = CSV_FILENAME
    mimetype: str = CSV_MIMETYPE


@dataclass
class SessionState:
    """Everything one session knows about the current timesheet."""

    transcript: str = ""
    notes: str = ""
    header: list[str] = field(default_factory=lambda: list(CANONICAL_HEADER))
    rows: list[TimesheetRow] = field(default_factory=list)
    csv_text: str = ""
    busy: bool = False


class TimesheetSession:
    """One user's transcript, table and notes."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transcriber: SpeechToText | None = None,
        csv_generator: TimesheetCsvGenerator | None = None,
        report_writer: ReportWriter | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.transcriber = transcriber
        self.csv_generator = csv_generator
        self.report_writer = report_writer
        self.state = SessionState()

    @property
    def rows(self) -> list[TimesheetRow]:
        return self.state.rows

    def record(
        self,
        audio_bytes: bytes,
        filename: str = "recording.webm",
        target: str = "transcript",
    ) -> list[AgentEvent]:
        """Transcribe audio and append the text to the transcript or notes."""
        if target not in RECORD_TARGETS:
            return [_error(f"Unknown recording target: {target}")]
        if self.transcriber is None:
            return [_error("Transcription is not configured.")]
        if self.state.busy:
            return [_error(BUSY_MESSAGE)]
        self.state.busy = True
        try:
            result = self.transcriber.transcribe(audio_bytes, filename)
        except CollaboratorError as e:
            logger.warning("Transcription failed: %s", e)
            return [_error(f"Error transcribing audio: {e}")]
        finally:
            self.state.busy = False
        updated = append_text(getattr(self.state, target), result.text)
        setattr(self.state, target, updated)
        return [AgentEvent(type="transcribed", payload={"target": target, "text": updated})]

    def build_table(self, transcript: str | None = None, today: _date | None = None) -> list[AgentEvent]:
        """Ask the CSV generator for rows and load them into the table."""
        text = (transcript if transcript is not None else self.state.transcript).strip()
        if not text:
            return [_error("Please speak or type some work details first.")]
        if self.csv_generator is None:
            return [_error("CSV generation is not configured.")]
        if self.state.busy:
            return [_error(BUSY_MESSAGE)]
        self.state.busy = True
        try:
            raw = self.csv_generator.generate_csv(text, today=today)
        except CollaboratorError as e:
            logger.warning("Timesheet build failed: %s", e)
            return [_error(f"Error generating table: {e}")]
        finally:
            self.state.busy = False
        self.state.transcript = text
        return self.load_csv(clean_model_output(raw))

    def load_csv(self, text: str) -> list[AgentEvent]:
        """Replace the table with rows parsed from CSV text, sorted."""
        try:
            parsed = parse_timesheet_csv(text)
        except CsvHeaderError as e:
            logger.warning("Rejected CSV: %s", e)
            return [_error(str(e))]
        return self._replace_table(parsed.header, parsed.rows)

    def load_rows(self, items: Iterable[Any]) -> list[AgentEvent]:
        """Replace the table with rows posted as dictionaries from the editable table.

        Non-dictionary items and empty rows are skipped; blank hours are
        filled from a valid start/end pair.
        """
        rows = []
        for item in items:
            if not isinstance(item, dict):
                continue
            row = from_dict(item)
            if row.hours is None:
                row = recalculate_hours(row)
            if not row.is_empty():
                rows.append(row)
        return self._replace_table(list(CANONICAL_HEADER), rows)

    def _replace_table(self, header: list[str], rows: list[TimesheetRow]) -> list[AgentEvent]:
        self.state.header = header
        self.state.rows = sort_rows(rows)
        self.state.csv_text = self._render()
        events = [
            AgentEvent(
                type="table_loaded",
                payload={"rows": [r.to_dict() for r in self.state.rows], "csv": self.state.csv_text},
            )
        ]
        if not self.state.rows:
            events.append(
                AgentEvent(
                    type="needs_revision",
                    payload={"message": "No worker rows found. Try dictating again."},
                )
            )
        return events

    def update_row(self, index: int, **changes: Any) -> list[AgentEvent]:
        """Edit one row in place; times are given in 24-hour form."""
        if not 0 <= index < len(self.state.rows):
            return [_error(f"No row at position {index}.")]
        row = apply_edit(self.state.rows[index], changes)
        self.state.rows[index] = row
        self.state.csv_text = self._render()
        events = [AgentEvent(type="row_updated", payload={"index": index, "row": row.to_dict()})]
        problems = validate(row)
        if problems:
            events.append(
                AgentEvent(type="needs_revision", payload={"index": index, "problems": problems})
            )
        return events

    def set_notes(self, notes: str) -> AgentEvent:
        self.state.notes = notes or ""
        return AgentEvent(type="notes_updated", payload={"notes": self.state.notes})

    def export_csv(self) -> AgentEvent:
        """Return the CSV for the current table with recomputed summaries."""
        if not self.state.rows:
            if not self.state.csv_text:
                return _error(NO_CSV_MESSAGE)
            return AgentEvent(type="csv", payload={"csv": self.state.csv_text})
        self.state.csv_text = self._render()
        return AgentEvent(type="csv", payload={"csv": self.state.csv_text})

    def download(self) -> CsvDownload | None:
        event = self.export_csv()
        if event.type == "error":
            return None
        return CsvDownload(content=event.payload["csv"])

    def build_report(
        self,
        notes: str | None = None,
        mode: ReportMode | str | None = None,
    ) -> AgentEvent:
        """Build the final report locally from the table and notes.

        With no rows the report is the builder's placeholder message.
        """
        if notes is not None:
            self.state.notes = notes
        report = build_report(
            self.state.rows,
            self.state.notes,
            mode or self.settings.report_mode,
        )
        return AgentEvent(type="report", payload={"report": report})

    def request_ai_report(self, notes: str | None = None) -> list[AgentEvent]:
        """Alternate path: have the language model write the report."""
        if self.report_writer is None:
            return [_error("Report generation is not configured.")]
        if notes is not None:
            self.state.notes = notes
        csv_text = self.state.csv_text
        if not csv_text and not self.state.notes.strip():
            return [_error("CSV or notes required")]
        try:
            report = self.report_writer.generate_report(csv_text, self.state.notes)
        except CollaboratorError as e:
            logger.warning("AI report failed: %s", e)
            return [_error(str(e))]
        return [AgentEvent(type="report", payload={"report": report})]

    def _render(self) -> str:
        return render_csv(
            self.state.rows,
            self.state.header,
            summary_style=self.settings.summary_style,
        )


def _error(message: str) -> AgentEvent:
    return AgentEvent(type="error", payload={"message": message})
