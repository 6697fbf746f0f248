# blueprints/allocations/services.py
"""Allocation lifecycle: create, approve/cancel, move to another room, delete.

Every operation is one ``atomic()`` unit. Room.status is written in the
same transaction as the allocation row it follows.
"""
from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from datetime import time
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import (
    AllocationNotFound, DuplicateAllocation, InvalidStatus, InvalidStatusTransition,
    RoomConflict, RoomNotFound, RoomUnavailable, ScheduleNotFound,
)
from models import (
    Allocation, AllocationKey, AllocationKind, AllocationStatus, Offering, Room,
    RoomStatus, TeachingSchedule, Term,
)
from models import repository as repo
from blueprints.constraints.services import room_conflict
from blueprints.constraints.slots import Session, parse_time, check_weekday

log = logging.getLogger(__name__)


@dataclass
class CreateAllocationCommand:
    room_number: int
    room_type: str
    professor_id: int
    offering: Offering
    term: Term
    kind: AllocationKind = AllocationKind.RECURRING
    requester_role: Optional[str] = None
    weekday: Optional[int] = None
    start_time: Optional[time] = None

    @property
    def key(self) -> AllocationKey:
        return AllocationKey(
            self.room_number, self.room_type, self.professor_id,
            self.offering.name, self.offering.shift, self.term.year, self.term.half,
        )


def session_of(ts: TeachingSchedule) -> Session:
    return Session(ts.weekday, ts.start_time, ts.discipline_shift, ts.discipline.load)


def release_room(room: Room | None, term: Term, exclude_id: int | None = None) -> None:
    """Marks the room free, unless recompute is on and another confirmed
    allocation of `term` holds it."""
    if room is None:
        return
    if current_app.config.get("ROOM_STATUS_RECOMPUTE", True) and \
            repo.has_other_confirmed(room.number, room.room_type, term, exclude_id=exclude_id):
        return
    repo.set_room_status(room, RoomStatus.FREE)


def _parse_status(status) -> AllocationStatus:
    try:
        return AllocationStatus(status)
    except ValueError:
        raise InvalidStatus(f"unknown allocation status {status!r}", status=status,
                            allowed=[s.value for s in AllocationStatus])


def _load(key: AllocationKey) -> Allocation:
    alloc = repo.get_allocation(key, for_update=True)
    if alloc is None:
        raise AllocationNotFound(**asdict(key))
    return alloc


def create_allocation(cmd: CreateAllocationCommand) -> Allocation:
    key = cmd.key
    if cmd.weekday is not None:
        check_weekday(cmd.weekday)
    start = parse_time(cmd.start_time) if cmd.start_time is not None else None

    with repo.atomic():
        room = repo.get_room(cmd.room_number, cmd.room_type, for_update=True)
        if room is None:
            raise RoomNotFound(room_number=cmd.room_number, room_type=cmd.room_type)

        ts = repo.get_teaching_schedule(cmd.professor_id, cmd.offering, cmd.term)
        if ts is None or (cmd.weekday is not None and ts.weekday != cmd.weekday) \
                or (start is not None and ts.start_time != start):
            raise ScheduleNotFound(
                professor_id=cmd.professor_id, discipline_name=cmd.offering.name,
                discipline_shift=cmd.offering.shift, term=str(cmd.term),
            )

        if repo.get_allocation(key) is not None:
            raise DuplicateAllocation(**asdict(key))
        if room_conflict(room.number, room.room_type, cmd.term, session_of(ts)):
            raise RoomConflict(room_number=room.number, room_type=room.room_type,
                               weekday=ts.weekday, start_time=ts.start_time.strftime("%H:%M"))

        privileged = current_app.config.get("PRIVILEGED_ROLES", ("admin",))
        status = AllocationStatus.CONFIRMED if cmd.requester_role in privileged else AllocationStatus.PENDING
        try:
            alloc = repo.insert_allocation(ts, room, cmd.kind, status)
        except IntegrityError as exc:
            raise DuplicateAllocation(**asdict(key)) from exc
        if status is AllocationStatus.CONFIRMED:
            repo.set_room_status(room, RoomStatus.OCCUPIED)

    log.info("allocation created: %s -> %s", key, status.value)
    return alloc


def set_allocation_status(key: AllocationKey, status) -> Allocation:
    new = _parse_status(status)
    with repo.atomic():
        alloc = _load(key)
        old = alloc.status
        if old is AllocationStatus.CANCELLED and new is not AllocationStatus.CANCELLED:
            raise InvalidStatusTransition(**asdict(key), current=old.value, requested=new.value)

        room = repo.get_room(alloc.room_number, alloc.room_type, for_update=True)
        if new is AllocationStatus.CONFIRMED and old is not AllocationStatus.CONFIRMED \
                and current_app.config.get("ALLOCATION_RECHECK_ON_APPROVE", False):
            if room_conflict(alloc.room_number, alloc.room_type, alloc.term,
                             session_of(alloc.teaching_schedule), exclude=key):
                raise RoomConflict(room_number=alloc.room_number, room_type=alloc.room_type,
                                   weekday=alloc.weekday)

        alloc.status = new
        if new is AllocationStatus.CONFIRMED:
            repo.set_room_status(room, RoomStatus.OCCUPIED)
        else:
            release_room(room, alloc.term, exclude_id=alloc.id)

    log.info("allocation %s: %s -> %s", key, old.value, new.value)
    return alloc


def change_allocation_room(key: AllocationKey, room_number: int, room_type: str) -> Allocation:
    """Moves an allocation: the old row and room are released, a confirmed
    recurring allocation takes the new room. All or nothing."""
    with repo.atomic():
        alloc = _load(key)
        if alloc.status is AllocationStatus.CANCELLED:
            raise InvalidStatusTransition(**asdict(key), current=alloc.status.value)

        new_room = repo.get_room(room_number, room_type, for_update=True)
        if new_room is None:
            raise RoomNotFound(room_number=room_number, room_type=room_type)
        if new_room.status is RoomStatus.OCCUPIED:
            raise RoomUnavailable(room_number=room_number, room_type=room_type)

        ts = repo.get_teaching_schedule(key.professor_id, key.offering, key.term)
        if ts is None:
            raise ScheduleNotFound(professor_id=key.professor_id, discipline_name=key.discipline_name,
                                   discipline_shift=key.discipline_shift, term=str(key.term))
        if room_conflict(room_number, room_type, key.term, session_of(ts), exclude=key):
            raise RoomConflict(room_number=room_number, room_type=room_type,
                               weekday=ts.weekday, start_time=ts.start_time.strftime("%H:%M"))

        old_room = repo.get_room(alloc.room_number, alloc.room_type, for_update=True)
        old_id = alloc.id
        repo.delete_allocation(alloc)
        release_room(old_room, key.term, exclude_id=old_id)

        try:
            moved = repo.insert_allocation(ts, new_room, AllocationKind.RECURRING, AllocationStatus.CONFIRMED)
        except IntegrityError as exc:
            raise DuplicateAllocation(room_number=room_number, room_type=room_type) from exc
        repo.set_room_status(new_room, RoomStatus.OCCUPIED)

    log.info("allocation %s moved to room %s/%s", key, room_number, room_type)
    return moved


def delete_allocation(key: AllocationKey) -> None:
    with repo.atomic():
        alloc = _load(key)
        room = repo.get_room(alloc.room_number, alloc.room_type, for_update=True)
        alloc_id = alloc.id
        repo.delete_allocation(alloc)
        release_room(room, key.term, exclude_id=alloc_id)
    log.info("allocation deleted: %s", key)


def list_allocations(filters) -> list[Allocation]:
    return repo.query_allocations(**filters.model_dump(exclude_none=True))
