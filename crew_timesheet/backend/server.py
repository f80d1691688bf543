"""HTTP endpoints for the timesheet page.

Each request gets its own `TimesheetSession`; the page holds the table state
and posts the current CSV back with every request.

Run with:
    crew-timesheet-server
or:
    flask --app crew_timesheet.backend.server:create_app run --port 3000
"""

from __future__ import annotations

import io
import logging
from typing import Any

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, request, send_file
from openai import OpenAIError

from .agent import AgentEvent, TimesheetSession
from .config import Settings, configure_logging, load_settings
from .exporters.report import ReportMode
from .io.llm import ReportWriter, TimesheetCsvGenerator
from .io.voice import SpeechToText, WhisperSpeechToText

logger = logging.getLogger(__name__)

_EXTENSION = "crew_timesheet"


def create_app(
    settings: Settings | None = None,
    *,
    transcriber: SpeechToText | None = None,
    csv_generator: TimesheetCsvGenerator | None = None,
    report_writer: ReportWriter | None = None,
) -> Flask:
    """Build the Flask app.

    Collaborators that are not passed in are created on first use from
    ``settings``, so the app can start without an API key.
    """
    app = Flask(__name__)
    app.extensions[_EXTENSION] = {
        "settings": settings or load_settings(),
        "transcriber": transcriber,
        "csv_generator": csv_generator,
        "report_writer": report_writer,
    }

    @app.errorhandler(OpenAIError)
    def openai_error(e: OpenAIError):
        logger.error("OpenAI client error: %s", e)
        return jsonify({"error": str(e) or "AI call failed"}), 500

    @app.post("/api/whisper")
    def whisper():
        upload = request.files.get("audio")
        if upload is None:
            return _fail("No audio file uploaded", 400)
        audio = upload.read()
        if not audio:
            return _fail("No audio file uploaded", 400)
        session = _session(transcriber=True)
        events = session.record(audio, upload.filename or "recording.webm")
        error = _first_error(events)
        if error:
            return _fail(error, 500)
        return jsonify({"transcript": session.state.transcript})

    @app.post("/api/timesheet")
    def timesheet():
        data = request.get_json(silent=True) or {}
        transcript = str(data.get("transcript") or "").strip()
        if not transcript:
            return _fail("Transcript required", 400)
        session = _session(csv_generator=True)
        events = session.build_table(transcript)
        error = _first_error(events)
        if error:
            return _fail(error, 500)
        return jsonify(
            {
                "csv": session.state.csv_text,
                "rows": [r.to_dict() for r in session.rows],
            }
        )

    @app.post("/api/report")
    def report():
        data = request.get_json(silent=True) or {}
        csv_text = str(data.get("csv") or "")
        notes = str(data.get("notes") or "")
        if not csv_text and not notes:
            return _fail("CSV or notes required", 400)
        session = _session(report_writer=True)
        session.state.csv_text = csv_text
        events = session.request_ai_report(notes)
        error = _first_error(events)
        if error:
            return _fail(error, 500)
        return jsonify({"report": events[-1].payload["report"]})

    @app.post("/api/final-report")
    def final_report():
        data = request.get_json(silent=True) or {}
        session = _session()
        error = _first_error(_load_table(session, data))
        if error:
            return _fail(error, 400)
        mode = data.get("mode") or session.settings.report_mode
        try:
            mode = ReportMode(mode)
        except ValueError:
            return _fail(f"Unknown report mode: {mode}", 400)
        event = session.build_report(str(data.get("notes") or ""), mode)
        return jsonify({"report": event.payload["report"]})

    @app.post("/api/csv")
    def download_csv():
        data = request.get_json(silent=True) or {}
        session = _session()
        error = _first_error(_load_table(session, data))
        if error:
            return _fail(error, 400)
        download = session.download()
        if download is None:
            return _fail("No CSV data yet. Build the table first.", 400)
        return send_file(
            io.BytesIO(download.content.encode("utf-8")),
            mimetype=download.mimetype,
            as_attachment=True,
            download_name=download.filename,
        )

    return app


def _session(
    *,
    transcriber: bool = False,
    csv_generator: bool = False,
    report_writer: bool = False,
) -> TimesheetSession:
    ext: dict[str, Any] = current_app.extensions[_EXTENSION]
    settings: Settings = ext["settings"]
    if transcriber and ext["transcriber"] is None:
        ext["transcriber"] = WhisperSpeechToText(model=settings.transcribe_model)
    if csv_generator and ext["csv_generator"] is None:
        ext["csv_generator"] = TimesheetCsvGenerator(model=settings.openai_model)
    if report_writer and ext["report_writer"] is None:
        ext["report_writer"] = ReportWriter(model=settings.openai_model)
    return TimesheetSession(
        settings=settings,
        transcriber=ext["transcriber"],
        csv_generator=ext["csv_generator"],
        report_writer=ext["report_writer"],
    )


def _load_table(session: TimesheetSession, data: dict[str, Any]) -> list[AgentEvent]:
    """Load edited table rows when the page posts them, otherwise its CSV text."""
    rows = data.get("rows")
    if isinstance(rows, list):
        return session.load_rows(rows)
    return session.load_csv(str(data.get("csv") or ""))


def _first_error(events: list[AgentEvent]) -> str | None:
    for e in events:
        if e.type == "error":
            return str(e.payload.get("message") or "Request failed")
    return None


def _fail(message: str, status: int):
    logger.info("%s %s -> %d: %s", request.method, request.path, status, message)
    return jsonify({"error": message}), status


def main() -> None:
    load_dotenv()
    settings = load_settings()
    configure_logging(settings)
    app = create_app(settings)
    logger.info("Server running on port %d", settings.port)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
