# blueprints/schedule/routes.py
from __future__ import annotations
from flask import Blueprint, jsonify, request

from models import Offering, Term
from blueprints.schedule import services as svc
from .schemas import CopyIn, RescheduleIn, TeachingScheduleFilters, TeachingScheduleIn, TeachingScheduleOut

api_bp = Blueprint("schedule_api", __name__)

ENTRY_PATH = "/teaching-schedules/<int:professor_id>/<name>/<shift>/<int:year>/<int:half>"


def _out(ts) -> dict:
    return TeachingScheduleOut.model_validate(ts).model_dump(mode="json")


@api_bp.get("/teaching-schedules")
def api_teaching_schedules_list():
    f = TeachingScheduleFilters.model_validate(request.args.to_dict())
    rows = svc.list_teaching_schedules(
        term=f.term.to_term() if f.term else None,
        professor_id=f.professor_id, course=f.course,
        course_semester=f.course_semester, shift=f.shift,
    )
    return jsonify({"ok": True, "items": [_out(ts) for ts in rows]})

@api_bp.post("/teaching-schedules")
def api_teaching_schedules_create():
    p = TeachingScheduleIn.model_validate(request.get_json(silent=True) or {})
    ts = svc.create_teaching_schedule(
        p.professor_id, Offering(p.discipline_name, p.discipline_shift),
        p.term.to_term(), p.weekday, p.start_time,
    )
    return jsonify({"ok": True, "teaching_schedule": _out(ts)}), 201

@api_bp.put(ENTRY_PATH)
def api_teaching_schedules_reschedule(professor_id: int, name: str, shift: str, year: int, half: int):
    p = RescheduleIn.model_validate(request.get_json(silent=True) or {})
    ts = svc.reschedule_teaching_schedule(
        professor_id, Offering(name, shift), Term(year, half), p.weekday, p.start_time,
    )
    return jsonify({"ok": True, "teaching_schedule": _out(ts)})

@api_bp.delete(ENTRY_PATH)
def api_teaching_schedules_delete(professor_id: int, name: str, shift: str, year: int, half: int):
    svc.delete_teaching_schedule(professor_id, Offering(name, shift), Term(year, half))
    return "", 204

@api_bp.post("/teaching-schedules/copy")
def api_teaching_schedules_copy():
    p = CopyIn.model_validate(request.get_json(silent=True) or {})
    copied = svc.copy_term_schedule(p.source.to_term(), p.target.to_term())
    return jsonify({"ok": True, "copied": copied})
