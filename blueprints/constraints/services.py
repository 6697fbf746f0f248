# blueprints/constraints/services.py
from __future__ import annotations
import logging
from dataclasses import dataclass

from errors import InvalidInput, InternalError, DisciplineNotFound
from models import Allocation, AllocationKey, Offering, TeachingSchedule, Term
from models import repository as repo
from .slots import Session, SlotTable, occupied_slots, check_weekday, format_time

log = logging.getLogger(__name__)


@dataclass
class CheckError:
    code: str
    details: dict


def _stored_slots(shift: str, start_time, load: int, row, table: SlotTable | None) -> frozenset:
    """Slots of a persisted row; a row that does not fit its shift is corrupt data."""
    try:
        return frozenset(occupied_slots(shift, start_time, load, table))
    except InvalidInput as exc:
        log.error("malformed stored row %r: %s", row, exc.message)
        raise InternalError(row=repr(row)) from exc


def _candidate_slots(session: Session, table: SlotTable | None) -> frozenset:
    check_weekday(session.weekday)
    return session.slots(table)


def find_room_clash(room_number: int, room_type: str, term: Term, session: Session,
                    exclude: AllocationKey | None = None,
                    table: SlotTable | None = None) -> Allocation | None:
    wanted = _candidate_slots(session, table)
    for a in repo.active_allocations_for_room(room_number, room_type, term, session.weekday):
        if exclude is not None and a.key == exclude:
            continue
        if not wanted.isdisjoint(_stored_slots(a.discipline_shift, a.start_time, a.discipline.load, a, table)):
            return a
    return None


def find_professor_clash(professor_id: int, term: Term, session: Session,
                         exclude: Offering | None = None,
                         table: SlotTable | None = None) -> TeachingSchedule | None:
    wanted = _candidate_slots(session, table)
    for ts in repo.professor_schedules_on_day(professor_id, term, session.weekday):
        if exclude is not None and ts.offering == exclude:
            continue
        if not wanted.isdisjoint(_stored_slots(ts.discipline_shift, ts.start_time, ts.discipline.load, ts, table)):
            return ts
    return None


def find_cohort_clash(course: str, course_semester: int, term: Term, session: Session,
                      exclude: tuple[int, Offering] | None = None,
                      table: SlotTable | None = None) -> TeachingSchedule | None:
    """`exclude` is one entry as (professor_id, offering); other sections still count."""
    wanted = _candidate_slots(session, table)
    for ts in repo.cohort_schedules_on_day(course, course_semester, term, session.weekday):
        if exclude is not None and (ts.professor_id, ts.offering) == exclude:
            continue
        if not wanted.isdisjoint(_stored_slots(ts.discipline_shift, ts.start_time, ts.discipline.load, ts, table)):
            return ts
    return None


def room_conflict(room_number: int, room_type: str, term: Term, session: Session,
                  exclude: AllocationKey | None = None) -> bool:
    """True when a pending or confirmed allocation of the room overlaps `session`."""
    return find_room_clash(room_number, room_type, term, session, exclude) is not None


def professor_conflict(professor_id: int, term: Term, session: Session,
                       exclude: Offering | None = None) -> bool:
    return find_professor_clash(professor_id, term, session, exclude) is not None


def cohort_conflict(course: str, course_semester: int, term: Term, session: Session,
                    exclude: tuple[int, Offering] | None = None) -> bool:
    return find_cohort_clash(course, course_semester, term, session, exclude) is not None


def _session_details(row) -> dict:
    return {
        "professor_id": row.professor_id,
        "discipline_name": row.discipline_name,
        "discipline_shift": row.discipline_shift,
        "weekday": row.weekday,
        "start_time": format_time(row.start_time),
    }


def run_all_checks(offering: Offering, term: Term, weekday: int, start_time,
                   professor_id: int | None = None,
                   room_number: int | None = None, room_type: str | None = None,
                   ) -> tuple[bool, list[CheckError]]:
    """Dry run of every exclusivity rule for one proposed session.

    With a professor given, that professor's own entry of the offering is
    skipped so it can be checked against a new time.
    """
    discipline = repo.get_discipline(offering)
    if discipline is None:
        raise DisciplineNotFound(discipline_name=offering.name, discipline_shift=offering.shift)
    session = Session(weekday, start_time, discipline.shift, discipline.load)

    errors: list[CheckError] = []

    # 1) room, only when one is proposed
    if room_number is not None and room_type is not None:
        own = None
        if professor_id is not None:
            own = AllocationKey(room_number, room_type, professor_id,
                                offering.name, offering.shift, term.year, term.half)
        hit = find_room_clash(room_number, room_type, term, session, exclude=own)
        if hit is not None:
            errors.append(CheckError(code="ROOM_BUSY", details={
                "room_number": room_number, "room_type": room_type, **_session_details(hit)}))

    # 2) professor
    if professor_id is not None:
        hit = find_professor_clash(professor_id, term, session, exclude=offering)
        if hit is not None:
            errors.append(CheckError(code="PROFESSOR_BUSY", details=_session_details(hit)))

    # 3) cohort
    own_entry = (professor_id, offering) if professor_id is not None else None
    hit = find_cohort_clash(discipline.course, discipline.course_semester, term, session, exclude=own_entry)
    if hit is not None:
        errors.append(CheckError(code="COHORT_BUSY", details={
            "course": discipline.course, "course_semester": discipline.course_semester,
            **_session_details(hit)}))

    ok = len(errors) == 0
    return ok, errors
