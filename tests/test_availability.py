from datetime import date, time
import pytest

from classbook.config import SlotGrid
from classbook.errors import InvalidIntervalError
from classbook.schemas.reservation import Reservation
from classbook.services.availability import (
    annotate_slots,
    find_conflicts,
    generate_slots,
    is_available,
    overlaps,
)

DAY = date(2026, 11, 2)


def reservation(id=1, room_id=1, day=DAY, start=time(10, 30), end=time(11, 30), status="confirmed"):
    return Reservation(
        id=id, room_id=room_id, user_id=7, date=day, start_time=start, end_time=end, status=status
    )


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((time(9), time(10)), (time(10), time(11)), False),
        ((time(9), time(10)), (time(9, 59), time(11)), True),
        ((time(9), time(12)), (time(10), time(11)), True),
        ((time(10), time(11)), (time(10), time(11)), True),
        ((time(8), time(9)), (time(13), time(14)), False),
    ],
)
def test_overlap_is_half_open_and_symmetric(first, second, expected):
    assert overlaps(*first, *second) is expected
    assert overlaps(*second, *first) is expected


def test_exact_match_conflicts():
    existing = [reservation(start=time(10), end=time(11))]
    assert not is_available(existing, 1, DAY, time(10), time(11))


def test_back_to_back_is_available():
    existing = [reservation(start=time(10), end=time(11))]
    assert is_available(existing, 1, DAY, time(9), time(10))
    assert is_available(existing, 1, DAY, time(11), time(12))


def test_partial_overlap_reports_conflict():
    existing = [reservation(id=4)]
    conflicts = find_conflicts(existing, 1, DAY, time(10), time(11))
    assert [r.id for r in conflicts] == [4]


def test_cancelled_other_room_and_other_day_are_ignored():
    existing = [
        reservation(id=1, status="cancelled"),
        reservation(id=2, room_id=2),
        reservation(id=3, day=date(2026, 11, 3)),
        reservation(id=4, status="pending"),
    ]
    assert find_conflicts(existing, 1, DAY, time(10), time(11)) == []


@pytest.mark.parametrize("start, end", [(time(10), time(10)), (time(11), time(10))])
def test_empty_or_inverted_interval_is_rejected(start, end):
    with pytest.raises(InvalidIntervalError):
        is_available([], 1, DAY, start, end)


def test_default_grid_is_nine_hourly_slots():
    slots = generate_slots()
    assert len(slots) == 9
    assert (slots[0].start, slots[0].end) == (time(9), time(10))
    assert (slots[-1].start, slots[-1].end) == (time(17), time(18))
    assert str(slots[0]) == "09:00 - 10:00"


def test_grid_is_configurable():
    slots = generate_slots(SlotGrid(day_start=time(8), day_end=time(10, 15), slot_minutes=30))
    assert [(s.start, s.end) for s in slots] == [
        (time(8), time(8, 30)),
        (time(8, 30), time(9)),
        (time(9), time(9, 30)),
        (time(9, 30), time(10)),
    ]


def test_grid_rejects_empty_range():
    with pytest.raises(ValueError):
        SlotGrid(day_start=time(18), day_end=time(9))


def test_annotate_slots_marks_taken_hours():
    annotated = annotate_slots(generate_slots(), [reservation()], 1, DAY)
    taken = [a.slot.start for a in annotated if not a.available]
    assert taken == [time(10), time(11)]
