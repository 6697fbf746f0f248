from __future__ import annotations
from datetime import time
import pytest

from app import create_app
from errors import InternalError, InvalidStartTime
from extensions import db
from fixtures.demo_catalog import seed_catalog
from models import AllocationKey, Offering, Term
from blueprints.allocations import services as alloc_svc
from blueprints.constraints.services import (
    cohort_conflict, professor_conflict, room_conflict, run_all_checks,
)
from blueprints.constraints.slots import Session

T = Term(2024, 1)
CALCULUS = Offering("Calculus", "morning")

@pytest.fixture()
def app_ctx():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        seed_catalog()
        # Calculus (prof 7, d2 08:00, 2 slots) booked in 101/sala
        alloc_svc.create_allocation(alloc_svc.CreateAllocationCommand(
            room_number=101, room_type="sala", professor_id=7, offering=CALCULUS, term=T,
            requester_role="admin",
        ))
        yield app
        db.session.remove()
        db.drop_all()

def test_room_conflict_overlap(app_ctx):
    assert room_conflict(101, "sala", T, Session(2, time(8, 50), "morning", 1))

def test_room_conflict_adjacent_is_free(app_ctx):
    assert not room_conflict(101, "sala", T, Session(2, time(9, 50), "morning", 2))

def test_room_conflict_other_day_term_room(app_ctx):
    s = Session(2, time(8, 0), "morning", 2)
    assert not room_conflict(101, "sala", T, Session(3, time(8, 0), "morning", 2))
    assert not room_conflict(101, "sala", Term(2024, 2), s)
    assert not room_conflict(202, "sala", T, s)

def test_room_conflict_exclude_self(app_ctx):
    key = AllocationKey(101, "sala", 7, "Calculus", "morning", 2024, 1)
    assert not room_conflict(101, "sala", T, Session(2, time(8, 0), "morning", 2), exclude=key)

def test_cancelled_allocation_frees_slot(app_ctx):
    key = AllocationKey(101, "sala", 7, "Calculus", "morning", 2024, 1)
    alloc_svc.set_allocation_status(key, "cancelled")
    assert not room_conflict(101, "sala", T, Session(2, time(8, 0), "morning", 2))

def test_professor_conflict(app_ctx):
    # prof 7 teaches Calculus d2 08:00-08:50
    assert professor_conflict(7, T, Session(2, time(8, 50), "morning", 1))
    assert not professor_conflict(7, T, Session(2, time(8, 50), "morning", 1), exclude=CALCULUS)
    assert not professor_conflict(7, T, Session(2, time(9, 50), "morning", 1))

def test_cohort_conflict(app_ctx):
    # Engineering/1 has Calculus d2 08:00
    assert cohort_conflict("Engineering", 1, T, Session(2, time(7, 10), "morning", 2))
    assert not cohort_conflict("Engineering", 1, T, Session(2, time(7, 10), "morning", 1))
    assert not cohort_conflict("Engineering", 2, T, Session(2, time(8, 0), "morning", 2))

def test_cohort_conflict_exclude_names_one_entry(app_ctx):
    s = Session(2, time(8, 0), "morning", 2)
    assert not cohort_conflict("Engineering", 1, T, s, exclude=(7, CALCULUS))
    # another professor's section of the same offering still clashes
    assert cohort_conflict("Engineering", 1, T, s, exclude=(9, CALCULUS))

def test_run_all_checks_without_professor_counts_every_section(app_ctx):
    ok, errors = run_all_checks(CALCULUS, T, 2, time(8, 0))
    assert not ok
    assert [e.code for e in errors] == ["COHORT_BUSY"]

def test_malformed_candidate_raises_invalid_input(app_ctx):
    with pytest.raises(InvalidStartTime):
        room_conflict(101, "sala", T, Session(2, time(8, 5), "morning", 1))

def test_malformed_stored_row_is_internal(app_ctx):
    from models import TeachingSchedule
    ts = TeachingSchedule.query.filter_by(professor_id=9).one()
    ts.start_time = time(19, 5)  # not an evening slot
    db.session.commit()
    with pytest.raises(InternalError):
        professor_conflict(9, T, Session(4, time(19, 0), "evening", 1))

def test_run_all_checks_ok(app_ctx):
    ok, errors = run_all_checks(Offering("Physics", "morning"), T, 3, time(8, 0),
                                professor_id=8, room_number=101, room_type="sala")
    assert ok and errors == []

def test_run_all_checks_collects_codes(app_ctx):
    # Physics is Engineering/1 like Calculus; prof 8 teaches Algorithms d2 08:50
    ok, errors = run_all_checks(Offering("Physics", "morning"), T, 2, time(8, 50),
                                professor_id=8, room_number=101, room_type="sala")
    assert not ok
    assert [e.code for e in errors] == ["ROOM_BUSY", "PROFESSOR_BUSY", "COHORT_BUSY"]
    assert errors[0].details["discipline_name"] == "Calculus"

def test_run_all_checks_skips_own_entry(app_ctx):
    ok, errors = run_all_checks(CALCULUS, T, 2, time(8, 0),
                                professor_id=7, room_number=101, room_type="sala")
    assert ok, errors

def test_api_check_conflict(app_ctx):
    client = app_ctx.test_client()
    r = client.post("/api/v1/constraints/check", json={
        "discipline_name": "Physics", "discipline_shift": "morning", "term": "20241",
        "weekday": 2, "start_time": "08:50", "room_number": 101, "room_type": "sala",
    })
    assert r.status_code == 409
    js = r.get_json()
    assert js["ok"] is False
    assert {e["code"] for e in js["errors"]} == {"ROOM_BUSY", "COHORT_BUSY"}

def test_api_check_unknown_discipline(app_ctx):
    client = app_ctx.test_client()
    r = client.post("/api/v1/constraints/check", json={
        "discipline_name": "Chemistry", "discipline_shift": "morning",
        "term": {"year": 2024, "half": 1}, "weekday": 2, "start_time": "08:00",
    })
    assert r.status_code == 404
    assert r.get_json()["errors"][0]["code"] == "DISCIPLINE_NOT_FOUND"
