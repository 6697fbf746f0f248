from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum as PyEnum

from sqlalchemy import (
    Enum, ForeignKey, ForeignKeyConstraint, UniqueConstraint, Index, CheckConstraint,
    DateTime, Time, Integer, String,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from extensions import db

# ---------- Enums ----------
class RoomStatus(str, PyEnum):
    FREE = "free"
    OCCUPIED = "occupied"

class AllocationStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

class AllocationKind(str, PyEnum):
    RECURRING = "recurring"
    ONE_OFF = "one_off"

# statuses that hold a room slot
ACTIVE_STATUSES = (AllocationStatus.PENDING, AllocationStatus.CONFIRMED)


def _enum(cls, name: str) -> Enum:
    # store the lower-case values, not the member names
    return Enum(cls, name=name, values_callable=lambda e: [m.value for m in e])


# ---------- Value types ----------
@dataclass(frozen=True)
class Term:
    year: int
    half: int

    def __str__(self) -> str:
        return f"{self.year}{self.half}"

@dataclass(frozen=True)
class Offering:
    name: str
    shift: str

@dataclass(frozen=True)
class AllocationKey:
    room_number: int
    room_type: str
    professor_id: int
    discipline_name: str
    discipline_shift: str
    year: int
    half: int

    @property
    def term(self) -> Term:
        return Term(self.year, self.half)

    @property
    def offering(self) -> Offering:
        return Offering(self.discipline_name, self.discipline_shift)


# ---------- Reference entities ----------
class Professor(db.Model):
    __tablename__ = "professor"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)

    def __repr__(self):
        return f"<Professor {self.name}>"


class Discipline(db.Model):
    __tablename__ = "discipline"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    shift: Mapped[str] = mapped_column(String(32), primary_key=True)
    load: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # consecutive slots
    course: Mapped[str] = mapped_column(String(255), nullable=False)
    course_semester: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("load >= 1", name="ck_discipline_load_positive"),
        Index("ix_discipline_cohort", "course", "course_semester"),
    )

    @property
    def offering(self) -> Offering:
        return Offering(self.name, self.shift)

    def __repr__(self):
        return f"<Discipline {self.name}/{self.shift}>"


class Room(db.Model):
    __tablename__ = "room"

    number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    room_type: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[RoomStatus] = mapped_column(
        _enum(RoomStatus, "room_status"), nullable=False, default=RoomStatus.FREE
    )

    def __repr__(self):
        return f"<Room {self.number}/{self.room_type} {self.status.value}>"


# ---------- Scheduling ----------
class TeachingSchedule(db.Model):
    __tablename__ = "teaching_schedule"

    id: Mapped[int] = mapped_column(primary_key=True)
    professor_id: Mapped[int] = mapped_column(ForeignKey("professor.id", ondelete="CASCADE"), nullable=False)
    discipline_name: Mapped[str] = mapped_column(String(255), nullable=False)
    discipline_shift: Mapped[str] = mapped_column(String(32), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    half: Mapped[int] = mapped_column(Integer, nullable=False)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..7
    start_time: Mapped[time] = mapped_column(Time, nullable=False)

    professor = relationship("Professor")
    discipline = relationship("Discipline")
    allocations = relationship(
        "Allocation", back_populates="teaching_schedule",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["discipline_name", "discipline_shift"], ["discipline.name", "discipline.shift"],
            ondelete="CASCADE", onupdate="CASCADE",
        ),
        UniqueConstraint("professor_id", "discipline_name", "discipline_shift", "year", "half",
                         name="uq_teaching_schedule_offering_term"),
        CheckConstraint("weekday BETWEEN 1 AND 7", name="ck_teaching_schedule_weekday"),
        Index("ix_teaching_schedule_term_day", "year", "half", "weekday"),
    )

    @property
    def term(self) -> Term:
        return Term(self.year, self.half)

    @property
    def offering(self) -> Offering:
        return Offering(self.discipline_name, self.discipline_shift)

    def __repr__(self):
        return (f"<TeachingSchedule prof={self.professor_id} {self.discipline_name}/"
                f"{self.discipline_shift} {self.term} d{self.weekday} {self.start_time}>")


class Allocation(db.Model):
    __tablename__ = "allocation"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    room_type: Mapped[str] = mapped_column(String(64), nullable=False)
    teaching_schedule_id: Mapped[int] = mapped_column(
        ForeignKey("teaching_schedule.id", ondelete="CASCADE"), nullable=False, index=True
    )
    professor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    discipline_name: Mapped[str] = mapped_column(String(255), nullable=False)
    discipline_shift: Mapped[str] = mapped_column(String(32), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    half: Mapped[int] = mapped_column(Integer, nullable=False)
    # copied from the teaching schedule for fast conflict lookup
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    kind: Mapped[AllocationKind] = mapped_column(
        _enum(AllocationKind, "allocation_kind"), nullable=False, default=AllocationKind.RECURRING
    )
    status: Mapped[AllocationStatus] = mapped_column(
        _enum(AllocationStatus, "allocation_status"), nullable=False, default=AllocationStatus.PENDING
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    room = relationship("Room")
    discipline = relationship("Discipline")
    teaching_schedule = relationship("TeachingSchedule", back_populates="allocations")

    __table_args__ = (
        ForeignKeyConstraint(
            ["room_number", "room_type"], ["room.number", "room.room_type"],
            ondelete="RESTRICT", onupdate="CASCADE",
        ),
        ForeignKeyConstraint(
            ["discipline_name", "discipline_shift"], ["discipline.name", "discipline.shift"],
            ondelete="CASCADE", onupdate="CASCADE",
        ),
        UniqueConstraint("room_number", "room_type", "professor_id", "discipline_name",
                         "discipline_shift", "year", "half", name="uq_allocation_key"),
        Index("ix_allocation_room_term_day", "room_number", "room_type", "year", "half", "weekday"),
    )

    @property
    def key(self) -> AllocationKey:
        return AllocationKey(
            room_number=self.room_number, room_type=self.room_type,
            professor_id=self.professor_id,
            discipline_name=self.discipline_name, discipline_shift=self.discipline_shift,
            year=self.year, half=self.half,
        )

    @property
    def term(self) -> Term:
        return Term(self.year, self.half)

    def __repr__(self):
        return (f"<Allocation {self.room_number}/{self.room_type} prof={self.professor_id} "
                f"{self.discipline_name}/{self.discipline_shift} {self.term} {self.status.value}>")
