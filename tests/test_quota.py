from datetime import date, datetime, time, timedelta
import pytest

from classbook.errors import QuotaExceededError
from classbook.schemas.reservation import Reservation
from classbook.services.quota import check_quota, count_future_confirmed, is_future

NOW = datetime(2026, 10, 19, 14, 0, 0)


def reservation(day, start, status="confirmed", id=1):
    return Reservation(
        id=id,
        room_id=1,
        user_id=1,
        date=day,
        start_time=start,
        end_time=time(start.hour + 1, start.minute),
        status=status,
    )


def test_later_day_is_future():
    assert is_future(reservation(NOW.date() + timedelta(days=1), time(9)), NOW)


def test_earlier_day_is_past():
    assert not is_future(reservation(NOW.date() - timedelta(days=1), time(20)), NOW)


def test_start_equal_to_now_is_not_future():
    assert not is_future(reservation(NOW.date(), time(14, 0)), NOW)


def test_seconds_do_not_turn_the_current_minute_into_future():
    assert not is_future(reservation(NOW.date(), time(14, 0)), NOW.replace(second=45))


def test_start_one_minute_later_is_future():
    assert is_future(reservation(NOW.date(), time(14, 1)), NOW)


def test_only_confirmed_reservations_count():
    tomorrow = NOW.date() + timedelta(days=1)
    reservations = [
        reservation(tomorrow, time(9), id=1),
        reservation(tomorrow, time(11), status="cancelled", id=2),
        reservation(tomorrow, time(13), status="pending", id=3),
        reservation(NOW.date(), time(10), id=4),
    ]
    assert count_future_confirmed(reservations, NOW) == 1


def test_fourth_reservation_is_rejected():
    tomorrow = NOW.date() + timedelta(days=1)
    held = [reservation(tomorrow, time(9 + i), id=i) for i in range(3)]
    with pytest.raises(QuotaExceededError) as excinfo:
        check_quota(held, NOW)
    assert "at most 3" in excinfo.value.message


def test_third_reservation_is_allowed():
    tomorrow = NOW.date() + timedelta(days=1)
    held = [reservation(tomorrow, time(9 + i), id=i) for i in range(2)]
    assert check_quota(held, NOW) == 2


def test_reservation_starting_now_frees_a_quota_slot():
    tomorrow = NOW.date() + timedelta(days=1)
    held = [reservation(tomorrow, time(9 + i), id=i) for i in range(2)]
    held.append(reservation(NOW.date(), time(14, 0), id=9))
    assert check_quota(held, NOW) == 2
