from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import is_dataclass
from typing import Any, Dict, List, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from . import analysis, exporting
from .config import Settings, configure_logging
from .enrichment import GeminiClient
from .models import DEFAULT_TIME_SLOTS, WEEKDAYS, DaySlots, Student
from .roster import RosterStore

logger = logging.getLogger(__name__)


def _clean_slots(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    return [str(slot).strip() for slot in raw if str(slot).strip()]


def _parse_time_slots(raw: Any) -> List[DaySlots]:
    by_day: Dict[str, List[str]] = {}
    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                continue
            day = item.get("day")
            # first entry for a day wins; unknown days are dropped
            if day in WEEKDAYS and day not in by_day:
                by_day[day] = _clean_slots(item.get("slots"))
    return [DaySlots(day=day, slots=by_day.get(day, [])) for day in WEEKDAYS]


def _serialize(item: Any) -> Any:
    if is_dataclass(item) and hasattr(item, "to_dict"):
        return item.to_dict()
    return item


def create_app(
    roster: Optional[RosterStore] = None,
    settings: Optional[Settings] = None,
    enrichment_client: Optional[GeminiClient] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    CORS(app)

    roster = roster if roster is not None else RosterStore()
    if enrichment_client is None and settings.enrichment_enabled:
        enrichment_client = GeminiClient.from_settings(settings)

    app.extensions["roster"] = roster

    @app.get("/api/health")
    def health() -> Any:
        return {"status": "ok"}

    # --- Reference data ---

    @app.get("/api/timeslots")
    def get_timeslots() -> Any:
        return jsonify({"days": WEEKDAYS, "slots": DEFAULT_TIME_SLOTS})

    # --- Students ---

    @app.get("/api/students")
    def list_students() -> Any:
        return jsonify([s.to_dict() for s in roster.get_all()])

    @app.get("/api/students/<student_id>")
    def get_student(student_id: str) -> Any:
        student = roster.get_by_id(student_id)
        if student is None:
            return jsonify({"error": "student not found"}), 404
        return jsonify(student.to_dict())

    @app.post("/api/students")
    def register_student() -> Any:
        data = request.get_json(force=True, silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "invalid request body"}), 400

        name = str(data.get("name") or "").strip()
        reg_no = str(data.get("regNo") or "").strip()
        roll_no = str(data.get("rollNo") or "").strip()
        time_slots = _parse_time_slots(data.get("timeSlots"))

        if not name:
            return jsonify({"error": "name is required"}), 400
        if not reg_no:
            return jsonify({"error": "registration number is required"}), 400
        if not roll_no:
            return jsonify({"error": "roll number is required"}), 400
        if not any(entry.slots for entry in time_slots):
            return jsonify({"error": "select at least one free time slot"}), 400

        images = data.get("timetableImages") or {}
        if not isinstance(images, dict):
            images = {}

        student = Student(
            id=str(uuid.uuid4()),
            name=name,
            reg_no=reg_no,
            roll_no=roll_no,
            time_slots=time_slots,
            timetable_images={
                day: str(url) for day, url in images.items() if day in WEEKDAYS and url
            },
        )
        roster.add(student)

        return jsonify(student.to_dict()), 201

    @app.delete("/api/students")
    def clear_students() -> Any:
        roster.clear()
        return "", 204

    # --- Analysis ---

    @app.post("/api/analysis")
    def run_analysis() -> Any:
        """Compute common free slots for everyone currently registered."""
        students = roster.get_all()
        if not students:
            return jsonify({"source": "none", "commonSlots": []})

        outcome = asyncio.run(analysis.analyze_outcome(students, enrichment_client))
        source = "remote" if isinstance(outcome, analysis.Remote) else "fallback"
        logger.info("Analyzed %d students (%s)", len(students), source)

        return jsonify(
            {
                "source": source,
                "commonSlots": [_serialize(item) for item in outcome.result],
            }
        )

    # --- Export ---

    @app.get("/api/export/json")
    def export_json() -> Any:
        students = roster.get_all()
        if not students:
            return jsonify({"error": "there are no students to export"}), 400
        return _attachment(
            exporting.students_to_json(students),
            "application/json",
            exporting.export_filename("json"),
        )

    @app.get("/api/export/csv")
    def export_csv() -> Any:
        students = roster.get_all()
        if not students:
            return jsonify({"error": "there are no students to export"}), 400
        return _attachment(
            exporting.students_to_csv(students),
            "text/csv",
            exporting.export_filename("csv"),
        )

    return app


def _attachment(body: str, mimetype: str, filename: str) -> Response:
    resp = Response(body, content_type=f"{mimetype}; charset=utf-8")
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    app.run(debug=True)
