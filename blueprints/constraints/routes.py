# blueprints/constraints/routes.py
from flask import Blueprint, request, jsonify

from models import Offering, Term
from blueprints.allocations.schemas import CheckIn
from .services import run_all_checks

api_bp = Blueprint("constraints_api", __name__)

@api_bp.post("/constraints/check")
def constraints_check():
    payload = CheckIn.model_validate(request.get_json(silent=True) or {})
    ok, errors = run_all_checks(
        Offering(payload.discipline_name, payload.discipline_shift),
        Term(payload.term.year, payload.term.half),
        payload.weekday, payload.start_time,
        professor_id=payload.professor_id,
        room_number=payload.room_number, room_type=payload.room_type,
    )
    if ok:
        return jsonify({"ok": True, "errors": []}), 200
    # business conflicts are 409
    return jsonify({"ok": False, "errors": [{"code": e.code, "details": e.details} for e in errors]}), 409
