"""Typed failures returned by the scheduling core.

Every error carries a stable upper-case ``code`` (the same style as the
constraint check codes), a human readable message and a ``details`` dict.
The four category bases map onto HTTP statuses in ``blueprints.core``.
"""
from __future__ import annotations
from typing import Any


class SchedulingError(Exception):
    code = "SCHEDULING_ERROR"
    http_status = 500
    default_message = "scheduling error"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


# ---------- NotFound ----------
class NotFound(SchedulingError):
    code = "NOT_FOUND"
    http_status = 404
    default_message = "not found"

class ScheduleNotFound(NotFound):
    code = "SCHEDULE_NOT_FOUND"
    default_message = "no teaching schedule matches the request"

class AllocationNotFound(NotFound):
    code = "ALLOCATION_NOT_FOUND"
    default_message = "allocation not found"

class RoomNotFound(NotFound):
    code = "ROOM_NOT_FOUND"
    default_message = "room not found"

class ProfessorNotFound(NotFound):
    code = "PROFESSOR_NOT_FOUND"
    default_message = "professor not found"

class DisciplineNotFound(NotFound):
    code = "DISCIPLINE_NOT_FOUND"
    default_message = "discipline offering not found"


# ---------- Conflict ----------
class Conflict(SchedulingError):
    code = "CONFLICT"
    http_status = 409
    default_message = "conflict"

class RoomConflict(Conflict):
    code = "ROOM_CONFLICT"
    default_message = "room is already booked at an overlapping time"

class RoomUnavailable(Conflict):
    code = "ROOM_UNAVAILABLE"
    default_message = "room is occupied"

class ProfessorConflict(Conflict):
    code = "PROFESSOR_CONFLICT"
    default_message = "professor already teaches at an overlapping time"

class CohortConflict(Conflict):
    code = "COHORT_CONFLICT"
    default_message = "cohort already has a class at an overlapping time"

class DuplicateSchedule(Conflict):
    code = "SCHEDULE_EXISTS"
    default_message = "professor already teaches this offering in this term"

class DuplicateAllocation(Conflict):
    code = "ALLOCATION_EXISTS"
    default_message = "allocation already exists"

class InvalidStatusTransition(Conflict):
    code = "INVALID_STATUS_TRANSITION"
    default_message = "allocation status cannot change this way"


# ---------- InvalidInput ----------
class InvalidInput(SchedulingError):
    code = "INVALID_INPUT"
    http_status = 400
    default_message = "invalid input"

class InvalidShift(InvalidInput):
    code = "INVALID_SHIFT"
    default_message = "unknown shift"

class InvalidStartTime(InvalidInput):
    code = "INVALID_START_TIME"
    default_message = "start time is not a slot of the shift"

class InvalidLoad(InvalidInput):
    code = "INVALID_LOAD"
    default_message = "session does not fit in the shift"

class InvalidStatus(InvalidInput):
    code = "INVALID_STATUS"
    default_message = "unknown allocation status"

class InvalidWeekday(InvalidInput):
    code = "INVALID_WEEKDAY"
    default_message = "weekday must be between 1 and 7"

class InvalidTerm(InvalidInput):
    code = "INVALID_TERM"
    default_message = "invalid term"


# ---------- Internal ----------
class InternalError(SchedulingError):
    code = "INTERNAL"
    http_status = 500
    default_message = "internal error"

    def to_dict(self) -> dict[str, Any]:
        # opaque: no store messages leak to callers
        return {"code": self.code, "message": self.default_message, "details": {}}
