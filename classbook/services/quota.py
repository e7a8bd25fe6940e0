import logging
from datetime import datetime
from typing import Iterable
from classbook.errors import QuotaExceededError
from classbook.schemas.reservation import Reservation

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_LIMIT = 3


def is_future(reservation: Reservation, now: datetime) -> bool:
    # Strictly later: a reservation starting this very minute is no longer upcoming.
    today = now.date()
    if reservation.date != today:
        return reservation.date > today
    return reservation.start_time > now.time().replace(second=0, microsecond=0)


def count_future_confirmed(reservations: Iterable[Reservation], now: datetime) -> int:
    return sum(
        1 for reservation in reservations
        if reservation.is_confirmed and is_future(reservation, now)
    )


def check_quota(reservations: Iterable[Reservation], now: datetime, limit: int = DEFAULT_QUOTA_LIMIT):
    """Raise QuotaExceededError when `limit` upcoming confirmed reservations are already held."""
    count = count_future_confirmed(reservations, now)
    if count >= limit:
        logger.error(f"Reservation quota exceeded: {count} >= {limit}")
        raise QuotaExceededError(f"You can hold at most {limit} upcoming reservations.")
    return count
