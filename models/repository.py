# models/repository.py
"""Data access for the scheduling core.

No policy lives here: functions load, insert and delete rows and flush so
that store errors surface inside the caller's ``atomic()`` block.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from datetime import time
from typing import Iterator

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from errors import SchedulingError, InternalError
from extensions import db
from models import (
    ACTIVE_STATUSES, Allocation, AllocationKey, AllocationStatus, Discipline,
    Offering, Professor, Room, RoomStatus, TeachingSchedule, Term,
)

log = logging.getLogger(__name__)


@contextmanager
def atomic() -> Iterator:
    """One unit of work: commit on success, roll back on any exception.

    Domain errors propagate unchanged; store failures become an opaque
    InternalError.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except SchedulingError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        log.exception("transaction rolled back")
        raise InternalError() from exc
    except Exception:
        session.rollback()
        raise


# ---------- Reference entities ----------
def get_room(number: int, room_type: str, for_update: bool = False) -> Room | None:
    stmt = select(Room).where(Room.number == number, Room.room_type == room_type)
    if for_update:
        stmt = stmt.with_for_update()
    return db.session.execute(stmt).scalar_one_or_none()


def set_room_status(room: Room, status: RoomStatus) -> None:
    room.status = status
    db.session.flush()


def get_professor(professor_id: int) -> Professor | None:
    return db.session.get(Professor, professor_id)


def get_discipline(offering: Offering) -> Discipline | None:
    return db.session.get(Discipline, (offering.name, offering.shift))


# ---------- Teaching schedules ----------
def get_teaching_schedule(professor_id: int, offering: Offering, term: Term) -> TeachingSchedule | None:
    stmt = select(TeachingSchedule).where(
        TeachingSchedule.professor_id == professor_id,
        TeachingSchedule.discipline_name == offering.name,
        TeachingSchedule.discipline_shift == offering.shift,
        TeachingSchedule.year == term.year,
        TeachingSchedule.half == term.half,
    )
    return db.session.execute(stmt).scalar_one_or_none()


def list_teaching_schedules(term: Term | None = None, professor_id: int | None = None,
                            course: str | None = None, course_semester: int | None = None,
                            shift: str | None = None) -> list[TeachingSchedule]:
    stmt = select(TeachingSchedule).join(TeachingSchedule.discipline)
    if term is not None:
        stmt = stmt.where(TeachingSchedule.year == term.year, TeachingSchedule.half == term.half)
    if professor_id is not None:
        stmt = stmt.where(TeachingSchedule.professor_id == professor_id)
    if course is not None:
        stmt = stmt.where(Discipline.course == course)
    if course_semester is not None:
        stmt = stmt.where(Discipline.course_semester == course_semester)
    if shift is not None:
        stmt = stmt.where(TeachingSchedule.discipline_shift == shift)
    stmt = stmt.order_by(
        TeachingSchedule.year, TeachingSchedule.half, TeachingSchedule.weekday,
        TeachingSchedule.start_time, TeachingSchedule.professor_id, TeachingSchedule.discipline_name,
    )
    return list(db.session.execute(stmt).scalars())


def professor_schedules_on_day(professor_id: int, term: Term, weekday: int) -> list[TeachingSchedule]:
    stmt = select(TeachingSchedule).where(
        TeachingSchedule.professor_id == professor_id,
        TeachingSchedule.year == term.year,
        TeachingSchedule.half == term.half,
        TeachingSchedule.weekday == weekday,
    )
    return list(db.session.execute(stmt).scalars())


def cohort_schedules_on_day(course: str, course_semester: int, term: Term, weekday: int) -> list[TeachingSchedule]:
    stmt = (
        select(TeachingSchedule)
        .join(TeachingSchedule.discipline)
        .where(
            Discipline.course == course,
            Discipline.course_semester == course_semester,
            TeachingSchedule.year == term.year,
            TeachingSchedule.half == term.half,
            TeachingSchedule.weekday == weekday,
        )
    )
    return list(db.session.execute(stmt).scalars())


def insert_teaching_schedule(professor_id: int, offering: Offering, term: Term,
                             weekday: int, start_time: time) -> TeachingSchedule:
    ts = TeachingSchedule(
        professor_id=professor_id,
        discipline_name=offering.name, discipline_shift=offering.shift,
        year=term.year, half=term.half,
        weekday=weekday, start_time=start_time,
    )
    db.session.add(ts)
    db.session.flush()
    return ts


def move_teaching_schedule(ts: TeachingSchedule, weekday: int, start_time: time) -> None:
    """Moves the entry and the day/time copied onto its allocations."""
    ts.weekday, ts.start_time = weekday, start_time
    for a in ts.allocations:
        a.weekday, a.start_time = weekday, start_time
    db.session.flush()


def delete_teaching_schedule(ts: TeachingSchedule) -> None:
    db.session.delete(ts)
    db.session.flush()


def savepoint():
    """Nested transaction for a step that may fail alone."""
    return db.session.begin_nested()


# ---------- Allocations ----------
def _key_clause(key: AllocationKey):
    return (
        Allocation.room_number == key.room_number,
        Allocation.room_type == key.room_type,
        Allocation.professor_id == key.professor_id,
        Allocation.discipline_name == key.discipline_name,
        Allocation.discipline_shift == key.discipline_shift,
        Allocation.year == key.year,
        Allocation.half == key.half,
    )


def get_allocation(key: AllocationKey, for_update: bool = False) -> Allocation | None:
    stmt = select(Allocation).where(*_key_clause(key))
    if for_update:
        stmt = stmt.with_for_update()
    return db.session.execute(stmt).scalar_one_or_none()


def active_allocations_for_room(room_number: int, room_type: str, term: Term, weekday: int) -> list[Allocation]:
    stmt = select(Allocation).where(
        Allocation.room_number == room_number,
        Allocation.room_type == room_type,
        Allocation.year == term.year,
        Allocation.half == term.half,
        Allocation.weekday == weekday,
        Allocation.status.in_(ACTIVE_STATUSES),
    )
    return list(db.session.execute(stmt).scalars())


def has_other_confirmed(room_number: int, room_type: str, term: Term,
                        exclude_id: int | None = None) -> bool:
    """True when another confirmed allocation of the same term holds the room."""
    stmt = select(Allocation.id).where(
        Allocation.room_number == room_number,
        Allocation.room_type == room_type,
        Allocation.year == term.year,
        Allocation.half == term.half,
        Allocation.status == AllocationStatus.CONFIRMED,
    )
    if exclude_id is not None:
        stmt = stmt.where(Allocation.id != exclude_id)
    return db.session.execute(stmt.limit(1)).first() is not None


def insert_allocation(ts: TeachingSchedule, room: Room, kind, status) -> Allocation:
    alloc = Allocation(
        room_number=room.number, room_type=room.room_type,
        teaching_schedule_id=ts.id,
        professor_id=ts.professor_id,
        discipline_name=ts.discipline_name, discipline_shift=ts.discipline_shift,
        year=ts.year, half=ts.half,
        weekday=ts.weekday, start_time=ts.start_time,
        kind=kind, status=status,
    )
    db.session.add(alloc)
    db.session.flush()
    return alloc


def delete_allocation(alloc: Allocation) -> None:
    db.session.delete(alloc)
    db.session.flush()


def query_allocations(**criteria) -> list[Allocation]:
    """AND-combined equality filters; keys absent or None are ignored."""
    stmt = select(Allocation).join(Allocation.discipline)
    direct = ("room_number", "room_type", "professor_id", "discipline_name",
              "discipline_shift", "year", "half", "kind", "status")
    for name in direct:
        value = criteria.get(name)
        if value is not None:
            stmt = stmt.where(getattr(Allocation, name) == value)
    if criteria.get("course") is not None:
        stmt = stmt.where(Discipline.course == criteria["course"])
    if criteria.get("course_semester") is not None:
        stmt = stmt.where(Discipline.course_semester == criteria["course_semester"])
    stmt = stmt.order_by(
        Allocation.year, Allocation.half, Allocation.weekday, Allocation.start_time,
        Allocation.room_number, Allocation.room_type,
    )
    return list(db.session.execute(stmt).scalars())
