from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional
from classbook.config import SlotGrid
from classbook.errors import InvalidIntervalError
from classbook.schemas.reservation import Reservation
from classbook.schemas.slot import Slot, SlotAvailability


def overlaps(s1: time, e1: time, s2: time, e2: time) -> bool:
    """Half-open intervals [s1, e1) and [s2, e2) share at least one instant."""
    return s1 < e2 and s2 < e1


def validate_interval(start: Optional[time], end: Optional[time]):
    if start is None or end is None:
        raise InvalidIntervalError("Select both a start and an end time.")
    if start >= end:
        raise InvalidIntervalError()


def find_conflicts(
    reservations: Iterable[Reservation],
    room_id: int,
    day: date,
    start: time,
    end: time,
) -> List[Reservation]:
    """
    Confirmed reservations for `room_id` on `day` that overlap [start, end).

    `reservations` should be a fresh fetch; the answer is advisory and only the
    backend's response to a submission is authoritative.
    """
    validate_interval(start, end)
    return [
        reservation
        for reservation in reservations
        if reservation.is_confirmed
        and reservation.room_id == room_id
        and reservation.date == day
        and overlaps(start, end, reservation.start_time, reservation.end_time)
    ]


def is_available(reservations, room_id: int, day: date, start: time, end: time) -> bool:
    return not find_conflicts(reservations, room_id, day, start, end)


def generate_slots(grid: Optional[SlotGrid] = None) -> List[Slot]:
    """Candidate slots on the configured grid; a trailing partial slot is dropped."""
    grid = grid or SlotGrid()
    anchor = date.min
    current = datetime.combine(anchor, grid.day_start)
    day_end = datetime.combine(anchor, grid.day_end)
    step = timedelta(minutes=grid.slot_minutes)

    slots = []
    while current + step <= day_end:
        slots.append(Slot(start=current.time(), end=(current + step).time()))
        current += step
    return slots


def annotate_slots(
    slots: Iterable[Slot], reservations, room_id: int, day: date
) -> List[SlotAvailability]:
    reservations = list(reservations)
    return [
        SlotAvailability(
            slot=slot,
            available=is_available(reservations, room_id, day, slot.start, slot.end),
        )
        for slot in slots
    ]
