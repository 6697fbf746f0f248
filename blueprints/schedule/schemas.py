from __future__ import annotations
from datetime import time
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from blueprints.allocations.schemas import TermIn

class TeachingScheduleIn(BaseModel):
    professor_id: int
    discipline_name: str = Field(min_length=1, max_length=255)
    discipline_shift: str = Field(min_length=1, max_length=32)
    term: TermIn
    weekday: int
    start_time: time

class RescheduleIn(BaseModel):
    weekday: int
    start_time: time

class TeachingScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    professor_id: int
    discipline_name: str
    discipline_shift: str
    year: int
    half: int
    weekday: int
    start_time: time

    @field_serializer("start_time")
    def _hhmm(self, t: time) -> str:
        return t.strftime("%H:%M")

class TeachingScheduleFilters(BaseModel):
    term: Optional[TermIn] = None
    professor_id: Optional[int] = None
    course: Optional[str] = None
    course_semester: Optional[int] = None
    shift: Optional[str] = None

class CopyIn(BaseModel):
    source: TermIn
    target: TermIn
