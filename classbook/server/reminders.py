import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from sqlalchemy.orm import Session
from classbook.config import get_settings
from classbook.server.models.notification import Notification
from classbook.server.models.reservation import Reservation

logger = logging.getLogger(__name__)


def dispatch_reminders(
    db: Session, now: datetime, lead_minutes: Optional[int] = None
) -> List[Notification]:
    """
    Create one reminder per confirmed reservation that starts within the next
    `lead_minutes`. Reservations already reminded are skipped.
    """
    if lead_minutes is None:
        lead_minutes = get_settings().reminder_lead_minutes
    horizon = now + timedelta(minutes=lead_minutes)
    candidates = db.query(Reservation).filter(
        Reservation.status == "confirmed",
        Reservation.reminded == 0,
        Reservation.date >= now.date(),
        Reservation.date <= horizon.date(),
    ).all()

    created = []
    for reservation in candidates:
        starts_at = datetime.combine(reservation.date, reservation.start_time)
        if not now < starts_at <= horizon:
            continue
        notification = Notification(
            user_id=reservation.user_id,
            message=(
                f"Your reservation of {reservation.room_name} starts at "
                f"{reservation.start_time.strftime('%H:%M')}."
            ),
            created_at=now,
        )
        reservation.reminded = 1
        db.add(notification)
        created.append(notification)

    db.commit()
    logger.debug(f"Dispatched {len(created)} reminders")
    return created


def run_reminder_pass(
    session_factory: Callable[[], Session], clock: Callable[[], datetime] = datetime.now
) -> int:
    """One reminder pass on a fresh session; returns the number of reminders sent."""
    db = session_factory()
    try:
        return len(dispatch_reminders(db, clock()))
    finally:
        db.close()


async def reminder_loop(
    session_factory: Callable[[], Session],
    interval_seconds: float,
    clock: Callable[[], datetime] = datetime.now,
):
    """Run reminder passes until cancelled. A failed pass is logged and the loop goes on."""
    while True:
        try:
            await asyncio.to_thread(run_reminder_pass, session_factory, clock)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Reminder pass failed: {e!r}")
        await asyncio.sleep(interval_seconds)
