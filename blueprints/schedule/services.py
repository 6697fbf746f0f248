# blueprints/schedule/services.py
from __future__ import annotations
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import (
    CohortConflict, DisciplineNotFound, DuplicateSchedule, InvalidTerm,
    ProfessorConflict, ProfessorNotFound, RoomConflict, ScheduleNotFound,
)
from models import ACTIVE_STATUSES, AllocationStatus, Offering, TeachingSchedule, Term
from models import repository as repo
from blueprints.allocations.services import release_room
from blueprints.constraints.services import cohort_conflict, professor_conflict, room_conflict
from blueprints.constraints.slots import Session, check_weekday, format_time, parse_time

log = logging.getLogger(__name__)


def _check_term(term: Term) -> Term:
    if term.half not in (1, 2) or not 1900 <= term.year <= 9999:
        raise InvalidTerm(f"invalid term {term}", year=term.year, half=term.half)
    return term

def _not_found(professor_id: int, offering: Offering, term: Term) -> ScheduleNotFound:
    return ScheduleNotFound(professor_id=professor_id, discipline_name=offering.name,
                            discipline_shift=offering.shift, term=str(term))

def _ensure_free(professor_id: int, discipline, term: Term, session: Session,
                 moving: Offering | None = None) -> None:
    """`moving` names the professor's entry being rescheduled, which is ignored."""
    if professor_conflict(professor_id, term, session, exclude=moving):
        raise ProfessorConflict(professor_id=professor_id, weekday=session.weekday,
                                start_time=format_time(session.start_time))
    own = (professor_id, moving) if moving is not None else None
    if cohort_conflict(discipline.course, discipline.course_semester, term, session, exclude=own):
        raise CohortConflict(course=discipline.course, course_semester=discipline.course_semester,
                             weekday=session.weekday, start_time=format_time(session.start_time))


def create_teaching_schedule(professor_id: int, offering: Offering, term: Term,
                             weekday: int, start_time) -> TeachingSchedule:
    _check_term(term)
    check_weekday(weekday)
    start = parse_time(start_time)
    with repo.atomic():
        if repo.get_professor(professor_id) is None:
            raise ProfessorNotFound(professor_id=professor_id)
        discipline = repo.get_discipline(offering)
        if discipline is None:
            raise DisciplineNotFound(discipline_name=offering.name, discipline_shift=offering.shift)
        session = Session(weekday, start, discipline.shift, discipline.load)
        session.slots()

        if repo.get_teaching_schedule(professor_id, offering, term) is not None:
            raise DuplicateSchedule(professor_id=professor_id, discipline_name=offering.name,
                                    discipline_shift=offering.shift, term=str(term))
        _ensure_free(professor_id, discipline, term, session)
        try:
            ts = repo.insert_teaching_schedule(professor_id, offering, term, weekday, start)
        except IntegrityError as exc:
            raise DuplicateSchedule(professor_id=professor_id, discipline_name=offering.name,
                                    discipline_shift=offering.shift, term=str(term)) from exc
    log.info("teaching schedule created: prof=%s %s/%s %s", professor_id, offering.name, offering.shift, term)
    return ts


def reschedule_teaching_schedule(professor_id: int, offering: Offering, term: Term,
                                 weekday: int, start_time) -> TeachingSchedule:
    """Moves an entry to a new day/time, carrying its active allocations along."""
    check_weekday(weekday)
    start = parse_time(start_time)
    with repo.atomic():
        ts = repo.get_teaching_schedule(professor_id, offering, term)
        if ts is None:
            raise _not_found(professor_id, offering, term)
        discipline = ts.discipline
        session = Session(weekday, start, discipline.shift, discipline.load)
        session.slots()

        _ensure_free(professor_id, discipline, term, session, moving=offering)
        for a in ts.allocations:
            if a.status not in ACTIVE_STATUSES:
                continue
            if room_conflict(a.room_number, a.room_type, term, session, exclude=a.key):
                raise RoomConflict(room_number=a.room_number, room_type=a.room_type,
                                   weekday=weekday, start_time=format_time(start))
        repo.move_teaching_schedule(ts, weekday, start)
    log.info("teaching schedule moved: prof=%s %s/%s %s -> d%s %s",
             professor_id, offering.name, offering.shift, term, weekday, format_time(start))
    return ts


def delete_teaching_schedule(professor_id: int, offering: Offering, term: Term) -> None:
    with repo.atomic():
        ts = repo.get_teaching_schedule(professor_id, offering, term)
        if ts is None:
            raise _not_found(professor_id, offering, term)
        held = {(a.room_number, a.room_type) for a in ts.allocations
                if a.status is AllocationStatus.CONFIRMED}
        repo.delete_teaching_schedule(ts)
        for number, room_type in sorted(held):
            release_room(repo.get_room(number, room_type, for_update=True), term)
    log.info("teaching schedule deleted: prof=%s %s/%s %s", professor_id, offering.name, offering.shift, term)


def list_teaching_schedules(term: Term | None = None, professor_id: int | None = None,
                            course: str | None = None, course_semester: int | None = None,
                            shift: str | None = None) -> list[TeachingSchedule]:
    return repo.list_teaching_schedules(term=term, professor_id=professor_id, course=course,
                                        course_semester=course_semester, shift=shift)


def copy_term_schedule(source: Term, target: Term) -> int:
    """Copies every teaching-schedule entry of `source` into `target`.

    Entries already present in the target are skipped; a row that fails
    for another reason is logged and the copy goes on. Returns the number
    of rows inserted.
    """
    _check_term(source)
    _check_term(target)

    copied = skipped = failed = 0
    with repo.atomic():
        for ts in repo.list_teaching_schedules(term=source):
            if repo.get_teaching_schedule(ts.professor_id, ts.offering, target) is not None:
                skipped += 1
                continue
            try:
                with repo.savepoint():
                    repo.insert_teaching_schedule(ts.professor_id, ts.offering, target,
                                                  ts.weekday, ts.start_time)
            except IntegrityError:
                log.debug("copy %s -> %s: %r already present", source, target, ts)
                skipped += 1
                continue
            except SQLAlchemyError as exc:
                log.warning("copy %s -> %s: row %r failed: %s", source, target, ts, exc)
                failed += 1
                continue
            copied += 1
    log.info("term copy %s -> %s: %d copied, %d skipped, %d failed", source, target, copied, skipped, failed)
    return copied
