from __future__ import annotations
from datetime import time
import pytest

from app import create_app
from errors import InvalidLoad, InvalidShift, InvalidStartTime, InvalidWeekday
from blueprints.constraints import slots
from blueprints.constraints.slots import Session, occupied_slots, parse_time

def test_occupied_slots_morning_two():
    assert occupied_slots("morning", "08:00", 2) == (time(8, 0), time(8, 50))

def test_occupied_slots_accepts_time_and_seconds():
    assert occupied_slots("evening", time(19, 50), 1) == (time(19, 50),)
    assert occupied_slots("evening", "19:50:00", 1) == (time(19, 50),)

def test_occupied_slots_whole_shift():
    assert len(occupied_slots("afternoon", "13:00", 6)) == 6

def test_unknown_shift():
    with pytest.raises(InvalidShift):
        occupied_slots("night", "08:00", 1)

def test_start_not_in_shift():
    with pytest.raises(InvalidStartTime) as ei:
        occupied_slots("morning", "08:10", 1)
    assert ei.value.details["shift"] == "morning"

def test_start_unparseable():
    with pytest.raises(InvalidStartTime):
        parse_time("eight")

@pytest.mark.parametrize("load", [0, -1, 3])
def test_load_out_of_range(load):
    # 20:50 is the third of four evening slots
    with pytest.raises(InvalidLoad):
        occupied_slots("evening", "20:50", load)

def test_sessions_overlap_same_day():
    a = Session(2, time(8, 0), "morning", 2)
    b = Session(2, time(8, 50), "morning", 1)
    c = Session(2, time(9, 50), "morning", 1)
    assert a.overlaps(b) and b.overlaps(a)
    assert not a.overlaps(c)

def test_sessions_other_day_never_overlap():
    a = Session(2, time(8, 0), "morning", 2)
    b = Session(3, time(8, 0), "morning", 2)
    assert not a.overlaps(b)

def test_check_weekday():
    assert slots.check_weekday(7) == 7
    with pytest.raises(InvalidWeekday):
        slots.check_weekday(0)

def test_table_from_app_config():
    app = create_app("test")
    app.config["SHIFT_SLOTS"] = {"late": ("22:00", "22:50")}
    slots.init_app(app)
    with app.app_context():
        assert occupied_slots("late", "22:00", 2) == (time(22, 0), time(22, 50))
        with pytest.raises(InvalidShift):
            occupied_slots("morning", "08:00", 1)

def test_table_is_read_only():
    app = create_app("test")
    with app.app_context():
        with pytest.raises(TypeError):
            slots.slot_table()["morning"] = ()

def test_build_rejects_unsorted():
    with pytest.raises(ValueError):
        slots.build_slot_table({"morning": ("08:00", "07:10")})
