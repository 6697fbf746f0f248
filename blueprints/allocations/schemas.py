from __future__ import annotations
from datetime import datetime, time
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from models import AllocationKind, AllocationStatus, Term

# ---------- Term ----------
class TermIn(BaseModel):
    """Accepts ``{"year": 2024, "half": 1}`` or the compact ``"20241"``."""
    year: int = Field(ge=1900, le=9999)
    half: int = Field(ge=1, le=2)

    @model_validator(mode="before")
    @classmethod
    def _from_compact(cls, value):
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str):
            s = value.strip()
            if len(s) != 5 or not s.isdigit():
                raise ValueError("term must look like YYYYH, e.g. 20241")
            return {"year": int(s[:4]), "half": int(s[4])}
        return value

    def to_term(self) -> Term:
        return Term(self.year, self.half)

# ---------- Allocations ----------
class AllocationIn(BaseModel):
    room_number: int
    room_type: str = Field(min_length=1, max_length=64)
    professor_id: int
    discipline_name: str = Field(min_length=1, max_length=255)
    discipline_shift: str = Field(min_length=1, max_length=32)
    term: TermIn
    weekday: Optional[int] = None
    start_time: Optional[time] = None
    kind: AllocationKind = AllocationKind.RECURRING

class StatusIn(BaseModel):
    # validated by the lifecycle manager so unknown values map to INVALID_STATUS
    status: str

class RoomChangeIn(BaseModel):
    room_number: int
    room_type: str = Field(min_length=1, max_length=64)

class AllocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    room_number: int
    room_type: str
    professor_id: int
    discipline_name: str
    discipline_shift: str
    year: int
    half: int
    weekday: int
    start_time: time
    kind: AllocationKind
    status: AllocationStatus
    created_at: datetime

    @field_serializer("start_time")
    def _hhmm(self, t: time) -> str:
        return t.strftime("%H:%M")

class AllocationFilters(BaseModel):
    """Optional equality filters for listing; unset fields do not constrain."""
    room_number: Optional[int] = None
    room_type: Optional[str] = None
    professor_id: Optional[int] = None
    discipline_name: Optional[str] = None
    discipline_shift: Optional[str] = None
    year: Optional[int] = None
    half: Optional[int] = Field(None, ge=1, le=2)
    kind: Optional[AllocationKind] = None
    status: Optional[AllocationStatus] = None
    course: Optional[str] = None
    course_semester: Optional[int] = None

# ---------- Dry-run check ----------
class CheckIn(BaseModel):
    discipline_name: str = Field(min_length=1, max_length=255)
    discipline_shift: str = Field(min_length=1, max_length=32)
    term: TermIn
    weekday: int
    start_time: time
    professor_id: Optional[int] = None
    room_number: Optional[int] = None
    room_type: Optional[str] = None
