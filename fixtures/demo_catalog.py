# fixtures/demo_catalog.py
"""Small reference catalog used by the seed script, dev startup and tests."""
from datetime import time

from extensions import db
from models import Discipline, Professor, Room, RoomStatus, TeachingSchedule

PROFESSORS = [
    {"id": 7, "name": "Ana Souza", "email": "ana.souza@example.edu"},
    {"id": 8, "name": "Bruno Lima", "email": "bruno.lima@example.edu"},
    {"id": 9, "name": "Carla Mendes", "email": "carla.mendes@example.edu"},
]

DISCIPLINES = [
    {"name": "Calculus",   "shift": "morning",   "load": 2, "course": "Engineering",      "course_semester": 1},
    {"name": "Physics",    "shift": "morning",   "load": 2, "course": "Engineering",      "course_semester": 1},
    {"name": "Algorithms", "shift": "morning",   "load": 3, "course": "Computer Science", "course_semester": 2},
    {"name": "Statistics", "shift": "afternoon", "load": 2, "course": "Computer Science", "course_semester": 2},
    {"name": "Databases",  "shift": "evening",   "load": 2, "course": "Computer Science", "course_semester": 3},
]

ROOMS = [
    {"number": 101, "room_type": "sala"},
    {"number": 202, "room_type": "sala"},
    {"number": 301, "room_type": "lab"},
]

# (professor_id, discipline, shift, year, half, weekday, start)
SCHEDULES = [
    (7, "Calculus",   "morning", 2024, 1, 2, time(8, 0)),
    (8, "Algorithms", "morning", 2024, 1, 2, time(8, 50)),
    (9, "Databases",  "evening", 2024, 1, 4, time(19, 0)),
]

def get_or_create(model, defaults=None, **filters):
    inst = db.session.query(model).filter_by(**filters).first()
    if inst:
        return inst, False
    data = dict(filters)
    if defaults:
        data.update(defaults)
    inst = model(**data)
    db.session.add(inst)
    return inst, True

def seed_catalog(with_schedules: bool = True) -> int:
    """Idempotent. Returns the number of rows created."""
    created = 0
    for p in PROFESSORS:
        _, new = get_or_create(Professor, id=p["id"], defaults={"name": p["name"], "email": p["email"]})
        created += new
    for d in DISCIPLINES:
        _, new = get_or_create(Discipline, name=d["name"], shift=d["shift"],
                               defaults={k: d[k] for k in ("load", "course", "course_semester")})
        created += new
    for r in ROOMS:
        _, new = get_or_create(Room, number=r["number"], room_type=r["room_type"],
                               defaults={"status": RoomStatus.FREE})
        created += new
    db.session.flush()
    if with_schedules:
        for prof, name, shift, year, half, weekday, start in SCHEDULES:
            _, new = get_or_create(
                TeachingSchedule, professor_id=prof, discipline_name=name, discipline_shift=shift,
                year=year, half=half, defaults={"weekday": weekday, "start_time": start},
            )
            created += new
    db.session.commit()
    return created
