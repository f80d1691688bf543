from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, Literal

from dotenv import load_dotenv
from typing_extensions import NotRequired, TypedDict

from agents import Agent, ModelSettings, RunContextWrapper, function_tool, run_demo_loop

from .backend.agent import AgentEvent, TimesheetSession
from .backend.config import Settings, configure_logging, load_settings
from .backend.io.llm import CSV_RULES

logger = logging.getLogger(__name__)


@dataclass
class TimesheetContext:
    """Per-run context holding the session the tools operate on."""

    session: TimesheetSession = field(default_factory=TimesheetSession)


class RowChanges(TypedDict):
    """Cell edits for one table row.

    Fields:
        date: MM/DD/YYYY, or MM/DD to use the current year.
        job_site: Location label, without commas.
        worker: Worker name.
        start: Start time in 24-hour HH:MM.
        end: End time in 24-hour HH:MM.
        hours: Decimal hours; recomputed automatically when start/end change.
    """

    date: NotRequired[str]
    job_site: NotRequired[str]
    worker: NotRequired[str]
    start: NotRequired[str]
    end: NotRequired[str]
    hours: NotRequired[float]


@function_tool
def load_timesheet_csv(ctx: RunContextWrapper[TimesheetContext], csv_text: str) -> dict[str, Any]:
    """Load timesheet CSV (header Date,Job Site,Worker Name,Start,End,Hours) into the table.

    Args:
        csv_text: CSV lines exactly as produced from the work log.
    """
    return _result(ctx.context.session.load_csv(csv_text))


@function_tool
def list_rows(ctx: RunContextWrapper[TimesheetContext]) -> dict[str, Any]:
    """Return the current table rows with their positions for editing."""
    rows = ctx.context.session.rows
    return {
        "status": "ok" if rows else "empty",
        "rows": [{"index": i, **r.to_dict()} for i, r in enumerate(rows)],
    }


@function_tool
def update_row(
    ctx: RunContextWrapper[TimesheetContext],
    index: int,
    changes: RowChanges,
) -> dict[str, Any]:
    """Edit cells of one row. Times are 24-hour HH:MM; hours follow start/end automatically.

    Args:
        index: Row position as returned by list_rows.
        changes: Only the cells to change.
    """
    return _result(ctx.context.session.update_row(index, **_row_changes(changes)))


@function_tool
def set_notes(ctx: RunContextWrapper[TimesheetContext], notes: str) -> dict[str, Any]:
    """Store the supervisor's free-text notes for the final report."""
    return _result([ctx.context.session.set_notes(notes)])


@function_tool
def export_csv(ctx: RunContextWrapper[TimesheetContext]) -> str:
    """Export the table as CSV with per-worker summary rows and the overall total."""
    event = ctx.context.session.export_csv()
    if event.type == "error":
        return event.payload["message"]
    csv_text = event.payload["csv"]
    save_path = os.environ.get("TIMESHEET_SAVE_PATH")
    if save_path:
        _save_csv(csv_text, save_path)
    return csv_text


@function_tool
def final_report(
    ctx: RunContextWrapper[TimesheetContext],
    mode: Literal["detailed", "compact"] | None = None,
    notes: str | None = None,
) -> str:
    """Build the final plain-text report from the table.

    Args:
        mode: "detailed" (daily breakdown and worker summary) or "compact" (one line per shift).
        notes: Optional notes; replaces previously stored notes when given.
    """
    return ctx.context.session.build_report(notes, mode).payload["report"]


def _row_changes(changes: RowChanges | dict[str, Any]) -> dict[str, Any]:
    """Keep only the editable cells that were actually provided."""
    allowed = RowChanges.__annotations__.keys()
    return {k: v for k, v in dict(changes).items() if k in allowed and v is not None}


def _save_csv(csv_text: str, path: str) -> bool:
    try:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(csv_text)
    except OSError as e:
        logger.warning("Could not save CSV to %s: %s", path, e)
        return False
    return True


def _result(events: list[AgentEvent]) -> dict[str, Any]:
    errors = [e.payload.get("message") for e in events if e.type == "error"]
    if errors:
        return {"status": "error", "problems": errors}
    problems: list[str] = []
    for e in events:
        if e.type == "needs_revision":
            problems.extend(e.payload.get("problems") or [e.payload.get("message", "")])
    return {
        "status": "needs_revision" if problems else "ok",
        "problems": problems,
        **events[0].payload,
    }


def build_agent(model_name: str, today: _date | None = None) -> Agent[TimesheetContext]:
    today_str = (today or _date.today()).strftime("%m/%d/%Y")
    instructions = (
        "You are a meticulous timesheet assistant for a convention labor lead. "
        "When the user dictates or pastes a work log, convert it to CSV following these rules, "
        "then call load_timesheet_csv with the CSV. "
        f"Today's date is {today_str}.\n\n"
        f"{CSV_RULES}\n"
        "After loading, summarize the rows briefly and ask whether anything needs correcting. "
        "Use list_rows to see row positions and update_row to fix cells; give times to update_row in 24-hour HH:MM. "
        "If the user gives notes for the report, call set_notes. "
        "When asked for the report, call final_report with mode 'detailed' unless the user asks for the short or compact version. "
        "When the user indicates they are done, call export_csv and return only the CSV content as your final response. "
        "Be concise and ask one question at a time."
    )

    return Agent[TimesheetContext](
        name="Timesheet Agent",
        instructions=instructions,
        tools=[
            load_timesheet_csv,
            list_rows,
            update_row,
            set_notes,
            final_report,
            export_csv,
        ],
        model=model_name,
        model_settings=ModelSettings(),
    )


async def main(settings: Settings | None = None) -> None:
    settings = settings or load_settings()
    configure_logging(settings)

    if not os.environ.get("OPENAI_API_KEY"):
        print("Warning: OPENAI_API_KEY is not set. Set it in your shell or a .env file.")

    agent = build_agent(settings.openai_model)
    print("Timesheet Agent ready. Describe the work done or 'done' when finished. Ctrl+C to exit.")

    # Persist the session across turns
    context = TimesheetContext(session=TimesheetSession(settings=settings))
    await run_demo_loop(agent, stream=True, context=context)


def run() -> None:
    load_dotenv()
    asyncio.run(main())


if __name__ == "__main__":
    run()
