from __future__ import annotations
import pytest

from app import create_app
from extensions import db
from fixtures.demo_catalog import seed_catalog
from models import Room, RoomStatus

KEY = "/api/v1/allocations/101/sala/7/Calculus/morning/2024/1"

@pytest.fixture()
def client():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        seed_catalog()
        yield app.test_client()
        db.session.remove()
        db.drop_all()

def _create(client, role=None, **overrides):
    payload = {
        "room_number": 101, "room_type": "sala", "professor_id": 7,
        "discipline_name": "Calculus", "discipline_shift": "morning", "term": "20241",
    }
    payload.update(overrides)
    headers = {"X-Requester-Role": role} if role else {}
    return client.post("/api/v1/allocations", json=payload, headers=headers)

def _room_status(number, room_type="sala"):
    db.session.expire_all()
    return db.session.get(Room, (number, room_type)).status

# ---------- allocations ----------
def test_create_as_professor(client):
    r = _create(client, role="professor")
    assert r.status_code == 201
    a = r.get_json()["allocation"]
    assert a["status"] == "pending"
    assert (a["weekday"], a["start_time"], a["year"], a["half"]) == (2, "08:00", 2024, 1)
    assert _room_status(101) is RoomStatus.FREE

def test_create_as_admin_with_term_object(client):
    r = _create(client, role="admin", term={"year": 2024, "half": 1})
    assert r.status_code == 201
    assert r.get_json()["allocation"]["status"] == "confirmed"
    assert _room_status(101) is RoomStatus.OCCUPIED

def test_create_overlap_is_409(client):
    assert _create(client, role="admin").status_code == 201
    r = _create(client, professor_id=8, discipline_name="Algorithms")
    assert r.status_code == 409
    js = r.get_json()
    assert js["ok"] is False and js["errors"][0]["code"] == "ROOM_CONFLICT"

def test_create_validation_error_is_422(client):
    r = _create(client, term="2024-1")
    assert r.status_code == 422
    err = r.get_json()["errors"][0]
    assert err["code"] == "VALIDATION_ERROR" and err["details"]

def test_create_unknown_room_is_404(client):
    r = _create(client, room_number=999)
    assert r.status_code == 404
    assert r.get_json()["errors"][0]["code"] == "ROOM_NOT_FOUND"

def test_status_transitions(client):
    _create(client)
    r = client.put(KEY + "/status", json={"status": "confirmed"})
    assert r.status_code == 200 and r.get_json()["allocation"]["status"] == "confirmed"
    assert _room_status(101) is RoomStatus.OCCUPIED

    r = client.put(KEY + "/status", json={"status": "archived"})
    assert r.status_code == 400 and r.get_json()["errors"][0]["code"] == "INVALID_STATUS"

    client.put(KEY + "/status", json={"status": "cancelled"})
    r = client.put(KEY + "/status", json={"status": "pending"})
    assert r.status_code == 409
    assert r.get_json()["errors"][0]["code"] == "INVALID_STATUS_TRANSITION"

def test_change_room(client):
    _create(client, role="admin")
    r = client.put(KEY + "/room", json={"room_number": 301, "room_type": "lab"})
    assert r.status_code == 200
    moved = r.get_json()["allocation"]
    assert (moved["room_number"], moved["room_type"], moved["status"]) == (301, "lab", "confirmed")
    assert _room_status(101) is RoomStatus.FREE
    assert _room_status(301, "lab") is RoomStatus.OCCUPIED
    assert client.put(KEY + "/room", json={"room_number": 202, "room_type": "sala"}).status_code == 404

def test_change_to_occupied_room(client):
    _create(client, role="admin")
    _create(client, role="admin", room_number=202, professor_id=9,
            discipline_name="Databases", discipline_shift="evening")
    r = client.put(KEY + "/room", json={"room_number": 202, "room_type": "sala"})
    assert r.status_code == 409
    assert r.get_json()["errors"][0]["code"] == "ROOM_UNAVAILABLE"
    assert _room_status(101) is RoomStatus.OCCUPIED

def test_delete(client):
    _create(client, role="admin")
    assert client.delete(KEY).status_code == 204
    assert _room_status(101) is RoomStatus.FREE
    assert client.delete(KEY).status_code == 404

def test_list_with_filters(client):
    _create(client, role="admin")
    _create(client, room_number=301, room_type="lab", professor_id=9,
            discipline_name="Databases", discipline_shift="evening")
    items = client.get("/api/v1/allocations").get_json()["items"]
    assert [i["discipline_name"] for i in items] == ["Calculus", "Databases"]
    items = client.get("/api/v1/allocations", query_string={"status": "pending", "course": "Computer Science"}).get_json()["items"]
    assert [i["discipline_name"] for i in items] == ["Databases"]
    assert client.get("/api/v1/allocations?status=lost").status_code == 422

# ---------- teaching schedules ----------
def test_teaching_schedule_crud(client):
    r = client.post("/api/v1/teaching-schedules", json={
        "professor_id": 9, "discipline_name": "Physics", "discipline_shift": "morning",
        "term": "20241", "weekday": 3, "start_time": "08:00",
    })
    assert r.status_code == 201
    assert r.get_json()["teaching_schedule"]["start_time"] == "08:00"

    path = "/api/v1/teaching-schedules/9/Physics/morning/2024/1"
    r = client.put(path, json={"weekday": 3, "start_time": "09:50"})
    assert r.status_code == 200 and r.get_json()["teaching_schedule"]["start_time"] == "09:50"

    items = client.get("/api/v1/teaching-schedules?term=20241&professor_id=9").get_json()["items"]
    assert {i["discipline_name"] for i in items} == {"Physics", "Databases"}

    assert client.delete(path).status_code == 204
    assert client.delete(path).status_code == 404

def test_teaching_schedule_conflict(client):
    r = client.post("/api/v1/teaching-schedules", json={
        "professor_id": 9, "discipline_name": "Physics", "discipline_shift": "morning",
        "term": "20241", "weekday": 2, "start_time": "08:50",
    })
    assert r.status_code == 409
    assert r.get_json()["errors"][0]["code"] == "COHORT_CONFLICT"

def test_copy_endpoint(client):
    r = client.post("/api/v1/teaching-schedules/copy", json={"source": "20241", "target": {"year": 2024, "half": 2}})
    assert r.status_code == 200 and r.get_json() == {"ok": True, "copied": 3}
    r = client.post("/api/v1/teaching-schedules/copy", json={"source": "20241", "target": "20242"})
    assert r.get_json()["copied"] == 0
    r = client.post("/api/v1/teaching-schedules/copy", json={"source": "20241", "target": "20241"})
    assert r.status_code == 200 and r.get_json()["copied"] == 0
