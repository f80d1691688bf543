from datetime import date

from crew_timesheet.backend.agent import AgentEvent
from crew_timesheet.cli import _result, _row_changes, _save_csv, build_agent


def test_row_changes_keeps_known_provided_cells():
    changes = {"worker": "Sam", "end": "16:00", "hours": None, "color": "red"}
    assert _row_changes(changes) == {"worker": "Sam", "end": "16:00"}


def test_result_statuses():
    ok = _result([AgentEvent(type="row_updated", payload={"index": 0})])
    assert ok == {"status": "ok", "problems": [], "index": 0}

    revision = _result(
        [
            AgentEvent(type="row_updated", payload={"index": 1}),
            AgentEvent(type="needs_revision", payload={"problems": ["Worker name is required."]}),
        ]
    )
    assert revision["status"] == "needs_revision"
    assert revision["problems"] == ["Worker name is required."]

    error = _result([AgentEvent(type="error", payload={"message": "No valid CSV header"})])
    assert error == {"status": "error", "problems": ["No valid CSV header"]}


def test_save_csv_creates_folder(tmp_path):
    path = tmp_path / "out" / "timesheet.csv"
    assert _save_csv("Date,Job Site\n", str(path))
    assert path.read_text(encoding="utf-8") == "Date,Job Site\n"


def test_save_csv_reports_failure(tmp_path):
    assert _save_csv("x", str(tmp_path)) is False


def test_build_agent_tools_and_date():
    agent = build_agent("gpt-4o", today=date(2025, 3, 7))
    assert "Today's date is 03/07/2025." in agent.instructions
    assert [t.name for t in agent.tools] == [
        "load_timesheet_csv",
        "list_rows",
        "update_row",
        "set_notes",
        "final_report",
        "export_csv",
    ]
