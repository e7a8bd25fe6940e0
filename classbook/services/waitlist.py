import logging
from datetime import date, datetime, time
from typing import Iterable, List, Protocol
from classbook.api.client import BackendClient
from classbook.schemas.reservation import Reservation
from classbook.schemas.waitlist import WaitlistCreate, WaitlistEntry
from classbook.services.availability import overlaps
from classbook.session import UserSession

logger = logging.getLogger(__name__)


def active_entries(entries: Iterable[WaitlistEntry]) -> List[WaitlistEntry]:
    return [entry for entry in entries if entry.is_waiting]


def promotion_candidates(entries: Iterable[WaitlistEntry], freed: Reservation) -> List[WaitlistEntry]:
    """Waiting entries blocked by `freed`, first come first served."""
    candidates = [
        entry
        for entry in entries
        if entry.is_waiting
        and entry.room_id == freed.room_id
        and entry.date == freed.date
        and overlaps(entry.start_time, entry.end_time, freed.start_time, freed.end_time)
    ]
    return sorted(candidates, key=lambda entry: (entry.created_at or datetime.min, entry.id))


class PromotionPolicy(Protocol):
    """Decides what happens to waiting entries once a blocking reservation is cancelled."""

    async def on_reservation_cancelled(self, reservation: Reservation) -> List[WaitlistEntry]: ...


class ManualPromotion:
    """Promotion is an administrative step; nothing is promoted automatically."""

    async def on_reservation_cancelled(self, reservation: Reservation) -> List[WaitlistEntry]:
        logger.debug(f"Reservation {reservation.id} cancelled; waitlist promotion left to administrators")
        return []


class WaitlistManager:
    def __init__(self, client: BackendClient, session: UserSession):
        self.client = client
        self.session = session

    async def join(self, room_id: int, day: date, start: time, end: time) -> WaitlistEntry:
        user = self.session.require_user()
        entry = await self.client.create_waitlist_entry(
            WaitlistCreate(
                user_id=user.id, room_id=room_id, date=day, start_time=start, end_time=end
            )
        )
        logger.debug(f"Joined waitlist: {entry.id}, room_id: {room_id}, date: {day}")
        return entry

    async def active(self) -> List[WaitlistEntry]:
        user = self.session.require_user()
        return active_entries(await self.client.my_waitlist(user.id))

    async def cancel(self, entry_id: int):
        self.session.require_user()
        await self.client.cancel_waitlist_entry(entry_id)
        logger.debug(f"Cancelled waitlist entry: {entry_id}")

    async def mark_fulfilled(self, entry_id: int) -> WaitlistEntry:
        entry = await self.client.mark_waitlist_fulfilled(entry_id)
        logger.debug(f"Waitlist entry fulfilled: {entry_id}")
        return entry
