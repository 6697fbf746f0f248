# blueprints/constraints/slots.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import time
from types import MappingProxyType
from typing import Mapping, Sequence

from flask import current_app, has_app_context

from config import SHIFT_SLOTS
from errors import InvalidShift, InvalidStartTime, InvalidLoad, InvalidWeekday

SlotTable = Mapping[str, tuple[time, ...]]

_EXT_KEY = "shift_slots"


def parse_time(value) -> time:
    """'08:00', '08:00:00' or a time -> time (seconds dropped)."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        parts = str(value).strip().split(":")
        return time(int(parts[0]), int(parts[1]))
    except (ValueError, IndexError):
        raise InvalidStartTime(f"cannot parse start time {value!r}", start_time=str(value))


def format_time(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def build_slot_table(raw: Mapping[str, Sequence]) -> SlotTable:
    table = {}
    for shift, starts in raw.items():
        slots = tuple(parse_time(s) for s in starts)
        if list(slots) != sorted(set(slots)):
            raise ValueError(f"slots of shift {shift!r} must be strictly increasing")
        table[shift.lower()] = slots
    return MappingProxyType(table)


def init_app(app) -> None:
    """Builds the slot table once per application from SHIFT_SLOTS."""
    app.extensions[_EXT_KEY] = build_slot_table(app.config.get("SHIFT_SLOTS", SHIFT_SLOTS))


_default_table: SlotTable | None = None

def slot_table() -> SlotTable:
    global _default_table
    if has_app_context() and _EXT_KEY in current_app.extensions:
        return current_app.extensions[_EXT_KEY]
    if _default_table is None:
        _default_table = build_slot_table(SHIFT_SLOTS)
    return _default_table


def shift_slots(shift: str, table: SlotTable | None = None) -> tuple[time, ...]:
    table = table if table is not None else slot_table()
    slots = table.get((shift or "").lower())
    if slots is None:
        raise InvalidShift(f"unknown shift {shift!r}", shift=shift, known=sorted(table))
    return slots


def occupied_slots(shift: str, start_time, load: int, table: SlotTable | None = None) -> tuple[time, ...]:
    """Slots taken by a session of `load` consecutive slots starting at `start_time`."""
    slots = shift_slots(shift, table)
    start = parse_time(start_time)
    try:
        idx = slots.index(start)
    except ValueError:
        raise InvalidStartTime(
            f"{format_time(start)} is not a slot of shift {shift!r}",
            shift=shift, start_time=format_time(start),
            slots=[format_time(s) for s in slots],
        )
    if load is None or load < 1 or idx + load > len(slots):
        raise InvalidLoad(
            f"a session of {load} slot(s) starting at {format_time(start)} does not fit in shift {shift!r}",
            shift=shift, start_time=format_time(start), load=load,
        )
    return slots[idx:idx + load]


def check_weekday(weekday: int) -> int:
    if not isinstance(weekday, int) or not 1 <= weekday <= 7:
        raise InvalidWeekday(weekday=weekday)
    return weekday


@dataclass(frozen=True)
class Session:
    """One weekly teaching session: where in the week it sits and how long it is."""
    weekday: int
    start_time: time
    shift: str
    load: int

    def slots(self, table: SlotTable | None = None) -> frozenset[time]:
        return frozenset(occupied_slots(self.shift, self.start_time, self.load, table))

    def overlaps(self, other: "Session", table: SlotTable | None = None) -> bool:
        if self.weekday != other.weekday:
            return False
        return not self.slots(table).isdisjoint(other.slots(table))
