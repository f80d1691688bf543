"""Language-model collaborators: transcript -> CSV, and CSV + notes -> report.

Both wrap OpenAI chat completions. Output handling stays minimal here; the
CSV text is normalized by the importer/exporter pipeline afterwards.
"""

from __future__ import annotations

import logging
from datetime import date as _date
from typing import Any

from openai import OpenAI, OpenAIError

from ..errors import CsvGenerationError, ReportGenerationError

logger = logging.getLogger(__name__)

CSV_SYSTEM_PROMPT = "You are a strict timesheet CSV formatter."
REPORT_SYSTEM_PROMPT = "You write short, clear, professional work summaries in plain text."
NO_NOTES = "No additional notes were provided."

CSV_RULES = """\
You are an expert convention labor scheduler and timesheet formatter.
Read a casual, possibly incomplete log of work done at convention venues and
output ONLY CSV lines: no explanations, no JSON, no markdown fences.

Dates:
- Use MM/DD/YYYY with a 4-digit year, or leave the Date cell blank if no date
  can be inferred. Never invent dates.
- Prefer explicit calendar dates in the text. With exactly one explicit date,
  apply it to every worker unless another date is clearly stated.
- Resolve "today", "tomorrow", "yesterday" or "tonight" against today's date
  only when those words actually appear.
- A month and day without a year take the current year.
- Emit one row per worker per date when several dates are mentioned.

Job site:
- A job site is a hotel, casino, convention center, hall or similar. Combine
  the place with the booth when given, e.g. "Caesars Palace Booth W-3142".
- Once a booth is named for a venue, keep it on later days at that venue until
  a different booth is named.
- Never put commas inside a cell.

Workers and times:
- Use the simplest clear form of each worker's name.
- Start and End use 12-hour time with AM/PM, e.g. 08:00 AM, 04:30 PM.
  Normalize fuzzy ranges like "8 to 4:30" or "7:45-3".
- Hours is End minus Start in decimal hours rounded to the nearest 0.25 with
  2 decimals (8:00-4:00 = 8.00, 10:00-6:15 = 8.25).

Format:
Date,Job Site,Worker Name,Start,End,Hours
then one row per worker per date, then one empty line, then
Summary,<Worker Name>,<Total Hours> per worker sorted by name, then
Summary,Total Hours Overall,<total>.
"""

REPORT_RULES = """\
Write ONE block of plain text (no markdown, no bullets other than the worker
lines, no code fences) summarizing the work day for a client or bookkeeper:

Job: [short description of the job or job sites]
Date: [main job date, or a compact range]
Schedule: [overall window, e.g. 7:30 AM - 4:45 PM]
Location: [where the work took place]
Workers:
- [Worker] - [Job Site] - [Start]-[End] ([Hours] hrs)
Total hours overall: [total with up to 2 decimals]
Notes: [clean, professional rewrite of the supervisor's notes]

Do not invent workers or hours that are not in the CSV. If there is no
meaningful notes content, write "Notes: No additional notes were provided."
"""


def build_csv_prompt(transcript: str, today: _date | None = None) -> str:
    today_str = (today or _date.today()).strftime("%m/%d/%Y")
    return f'{CSV_RULES}\nTODAY\'S DATE: {today_str}\n\nTranscript:\n"""{transcript}"""\n'


def build_report_prompt(csv_text: str, notes: str | None) -> str:
    clean_notes = (notes or "").strip() or NO_NOTES
    return (
        f"{REPORT_RULES}\nTimesheet CSV:\n\"\"\"{csv_text or ''}\"\"\"\n\n"
        f"Supervisor notes:\n\"\"\"{clean_notes}\"\"\"\n"
    )


class _ChatCollaborator:
    system_prompt = ""
    max_tokens = 800

    def __init__(self, client: Any | None = None, model: str = "gpt-4o") -> None:
        self.client = client if client is not None else OpenAI()
        self.model = model

    def _complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
        )
        return (response.choices[0].message.content or "").strip()


class TimesheetCsvGenerator(_ChatCollaborator):
    """Turn a freeform transcript into raw timesheet CSV text."""

    system_prompt = CSV_SYSTEM_PROMPT
    max_tokens = 800

    def generate_csv(self, transcript: str, today: _date | None = None) -> str:
        """Return raw CSV text for ``transcript``.

        Raises:
            CsvGenerationError: on API failure or an empty reply.
        """
        try:
            raw = self._complete(build_csv_prompt(transcript, today))
        except OpenAIError as e:
            logger.error("CSV generation failed: %s", e)
            raise CsvGenerationError("AI call failed") from e
        if not raw:
            logger.error("Empty response from OpenAI")
            raise CsvGenerationError("Empty response from OpenAI")
        return raw


class ReportWriter(_ChatCollaborator):
    """Ask the model for a prose report from CSV text and notes."""

    system_prompt = REPORT_SYSTEM_PROMPT
    max_tokens = 600

    def generate_report(self, csv_text: str, notes: str | None = None) -> str:
        """Return the model-written report.

        Raises:
            ReportGenerationError: on API failure or an empty reply.
        """
        try:
            text = self._complete(build_report_prompt(csv_text, notes))
        except OpenAIError as e:
            logger.error("Report generation failed: %s", e)
            raise ReportGenerationError("AI call failed") from e
        if not text:
            raise ReportGenerationError("Empty report from AI")
        return text
