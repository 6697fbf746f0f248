# blueprints/allocations/routes.py
from __future__ import annotations
from flask import Blueprint, jsonify, request

from models import AllocationKey, Offering
from . import services as svc
from .schemas import AllocationFilters, AllocationIn, AllocationOut, RoomChangeIn, StatusIn

api_bp = Blueprint("allocations_api", __name__)

KEY_PATH = "/allocations/<int:room_number>/<room_type>/<int:professor_id>/<name>/<shift>/<int:year>/<int:half>"

ROLE_HEADER = "X-Requester-Role"


def _key(room_number, room_type, professor_id, name, shift, year, half) -> AllocationKey:
    return AllocationKey(room_number, room_type, professor_id, name, shift, year, half)

def _out(alloc) -> dict:
    return AllocationOut.model_validate(alloc).model_dump(mode="json")


@api_bp.get("/allocations")
def api_allocations_list():
    filters = AllocationFilters.model_validate(request.args.to_dict())
    items = [_out(a) for a in svc.list_allocations(filters)]
    return jsonify({"ok": True, "items": items})

@api_bp.post("/allocations")
def api_allocations_create():
    payload = AllocationIn.model_validate(request.get_json(silent=True) or {})
    cmd = svc.CreateAllocationCommand(
        room_number=payload.room_number,
        room_type=payload.room_type,
        professor_id=payload.professor_id,
        offering=Offering(payload.discipline_name, payload.discipline_shift),
        term=payload.term.to_term(),
        kind=payload.kind,
        requester_role=request.headers.get(ROLE_HEADER),
        weekday=payload.weekday,
        start_time=payload.start_time,
    )
    alloc = svc.create_allocation(cmd)
    return jsonify({"ok": True, "allocation": _out(alloc)}), 201

@api_bp.put(KEY_PATH + "/status")
def api_allocations_status(**parts):
    payload = StatusIn.model_validate(request.get_json(silent=True) or {})
    alloc = svc.set_allocation_status(_key(**parts), payload.status)
    return jsonify({"ok": True, "allocation": _out(alloc)})

@api_bp.put(KEY_PATH + "/room")
def api_allocations_room(**parts):
    payload = RoomChangeIn.model_validate(request.get_json(silent=True) or {})
    alloc = svc.change_allocation_room(_key(**parts), payload.room_number, payload.room_type)
    return jsonify({"ok": True, "allocation": _out(alloc)})

@api_bp.delete(KEY_PATH)
def api_allocations_delete(**parts):
    svc.delete_allocation(_key(**parts))
    return "", 204
