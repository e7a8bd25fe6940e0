import logging
from typing import List, Optional
from classbook.api.client import BackendClient
from classbook.errors import ClassbookError, NotFoundError
from classbook.schemas.reservation import Reservation
from classbook.schemas.waitlist import WaitlistEntry
from classbook.services.waitlist import ManualPromotion, PromotionPolicy
from classbook.session import UserSession

logger = logging.getLogger(__name__)


class MyReservations:
    """
    Reservations of the current user, as listed on the my-reservations page.

    Cancelled reservations stay in `history()`; `active()` leaves them out.
    After a cancellation the promotion policy decides what happens to the
    waitlist behind the freed slot.
    """

    def __init__(
        self,
        client: BackendClient,
        session: UserSession,
        promotion: Optional[PromotionPolicy] = None,
    ):
        self.client = client
        self.session = session
        self.promotion = promotion or ManualPromotion()
        self.reservations: List[Reservation] = []
        self.error: Optional[str] = None

    async def refresh(self) -> List[Reservation]:
        user = self.session.require_user()
        try:
            self.reservations = await self.client.my_reservations(user.id)
            self.error = None
        except ClassbookError as e:
            self.error = e.message
        return self.reservations

    def active(self) -> List[Reservation]:
        return [r for r in self.history() if not r.is_cancelled]

    def history(self) -> List[Reservation]:
        return sorted(self.reservations, key=lambda r: (r.date, r.start_time))

    async def cancel(self, reservation_id: int) -> List[WaitlistEntry]:
        """Cancel one of our reservations; returns the waitlist entries the policy promoted."""
        self.session.require_user()
        reservation = next((r for r in self.reservations if r.id == reservation_id), None)
        if reservation is None:
            raise NotFoundError("Reservation not found")
        await self.client.cancel_reservation(reservation_id)
        logger.debug(f"Cancelled reservation: {reservation_id}")
        await self.refresh()
        return await self.promotion.on_reservation_cancelled(reservation)
