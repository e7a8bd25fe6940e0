import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Callable, List, Optional
from classbook.api.client import BackendClient
from classbook.config import Settings, get_settings
from classbook.errors import (
    ClassbookError,
    ConflictError,
    SubmissionInProgressError,
    ValidationError,
)
from classbook.schemas.reservation import Reservation, ReservationCreate
from classbook.schemas.room import Room
from classbook.schemas.slot import Slot, SlotAvailability
from classbook.services.availability import (
    annotate_slots,
    generate_slots,
    is_available,
    validate_interval,
)
from classbook.services.quota import check_quota
from classbook.services.roster import ParticipantRoster
from classbook.services.waitlist import WaitlistManager
from classbook.session import UserSession

logger = logging.getLogger(__name__)

MY_RESERVATIONS_ROUTE = "/my-reservations"


class FormState(str, Enum):
    IDLE = "idle"
    SLOT_SELECTED = "slot_selected"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    WAITLIST_OFFERED = "waitlist_offered"
    WAITLIST_SUBMITTING = "waitlist_submitting"
    WAITLIST_CONFIRMED = "waitlist_confirmed"
    WAITLIST_REJECTED = "waitlist_rejected"


class ReservationForm:
    """
    One booking attempt, from slot selection to a confirmed reservation or a
    waitlist entry.

    Client-side checks (quota, capacity, slot availability) only spare the user
    a pointless round trip; a submission always goes to the backend, whose
    answer decides. Validation and backend errors end up in `error` as
    user-facing text; only a second submission while one is outstanding
    raises.
    """

    def __init__(
        self,
        client: BackendClient,
        session: UserSession,
        navigate: Optional[Callable[[str], None]] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.session = session
        self.settings = settings or get_settings()
        self.navigate = navigate or (lambda route: None)
        self.clock = clock
        self.waitlist = WaitlistManager(client, session)
        self.roster = ParticipantRoster()

        self.state = FormState.IDLE
        self.error: Optional[str] = None
        self.rooms: List[Room] = []
        self.room: Optional[Room] = None
        self.date: Optional[date] = None
        self.start_time: Optional[time] = None
        self.end_time: Optional[time] = None
        self.slots: List[SlotAvailability] = []
        self.room_reservations: List[Reservation] = []
        self.reservation: Optional[Reservation] = None
        self.disposed = False
        self._in_flight = False

    # Selection

    async def load_rooms(self) -> List[Room]:
        try:
            rooms = await self.client.list_rooms()
        except ClassbookError as e:
            self._fail(e)
            return self.rooms
        if not self.disposed:
            self.rooms = rooms
        return self.rooms

    def select_room(self, room: Room) -> bool:
        if not room.available:
            self.error = "This room is not available for reservations."
            return False
        self.room = room
        self.roster.clear()
        self._reset_interval()
        return True

    async def select_date(self, day: date) -> List[SlotAvailability]:
        self.date = day
        self._reset_interval()
        slots = generate_slots(self.settings.slot_grid())
        if self.room is None:
            self.slots = [SlotAvailability(slot=slot, available=True) for slot in slots]
            return self.slots
        try:
            reservations = await self.client.room_reservations(self.room.id, day)
        except ClassbookError as e:
            # Slots stay selectable; the submission is what decides.
            reservations = []
            self._fail(e)
        if self.disposed:
            return self.slots
        self.room_reservations = reservations
        self.slots = annotate_slots(slots, reservations, self.room.id, day)
        return self.slots

    def select_slot(self, start: time, end: time):
        self.start_time = start
        self.end_time = end
        self.error = None
        if self.room is not None and self.date is not None:
            self.state = FormState.SLOT_SELECTED

    def pick(self, slot: Slot):
        self.select_slot(slot.start, slot.end)

    def looks_available(self) -> bool:
        """Advisory: stale as soon as it is shown."""
        if self.room is None or self.date is None:
            return False
        try:
            return is_available(
                self.room_reservations, self.room.id, self.date, self.start_time, self.end_time
            )
        except ValidationError:
            return False

    def _reset_interval(self):
        self.start_time = None
        self.end_time = None
        self.error = None
        self.state = FormState.IDLE

    # Roster

    def add_member(self, member_id: int):
        self.roster.add_member(member_id)

    def remove_member(self, member_id: int):
        self.roster.remove_member(member_id)

    def add_guest(self, label: str) -> bool:
        return self.roster.add_guest(label)

    def remove_guest(self, label: str):
        self.roster.remove_guest(label)

    # Submission

    async def submit(self, purpose: str = "") -> FormState:
        if self._in_flight:
            raise SubmissionInProgressError()
        if self.state in (FormState.CONFIRMED, FormState.WAITLIST_CONFIRMED):
            self.error = "This reservation has already been submitted."
            return self.state
        self._in_flight = True
        try:
            return await self._submit(purpose)
        finally:
            self._in_flight = False

    async def _submit(self, purpose: str) -> FormState:
        self.error = None
        if self.room is None or self.date is None:
            self.error = "Select a room and a date."
            return self.state
        try:
            user = self.session.require_user()
            validate_interval(self.start_time, self.end_time)
            # Quota is counted on a fresh fetch, never on a cached list.
            mine = await self.client.my_reservations(user.id)
            check_quota(mine, self.clock(), self.settings.quota_limit)
            self.roster.check_capacity(self.room)
        except ClassbookError as e:
            self._fail(e)
            return self.state

        if self.disposed:
            return self.state
        self.state = FormState.SUBMITTING
        logger.debug(
            f"Submitting reservation for room_id: {self.room.id}, date: {self.date}, "
            f"{self.start_time}-{self.end_time}, participants: {len(self.roster)}"
        )
        try:
            reservation = await self.client.create_reservation(
                ReservationCreate(
                    room_id=self.room.id,
                    user_id=user.id,
                    date=self.date,
                    start_time=self.start_time,
                    end_time=self.end_time,
                    purpose=purpose,
                    participants=self.roster.participants(),
                )
            )
        except ConflictError as e:
            if self.disposed:
                return self.state
            self.error = e.message
            self.state = FormState.WAITLIST_OFFERED
            logger.debug(f"Slot taken, offering waitlist for room_id: {self.room.id}")
            return self.state
        except ClassbookError as e:
            if self.disposed:
                return self.state
            self.error = e.message
            self.state = FormState.REJECTED
            return self.state

        if self.disposed:
            logger.debug(f"Ignoring reservation response after dispose: {reservation.id}")
            return self.state
        self.reservation = reservation
        self.state = FormState.CONFIRMED
        logger.debug(f"Created reservation: {reservation.id}")
        self.navigate(MY_RESERVATIONS_ROUTE)
        return self.state

    async def join_waitlist(self) -> FormState:
        if self._in_flight:
            raise SubmissionInProgressError()
        if self.state not in (FormState.WAITLIST_OFFERED, FormState.WAITLIST_REJECTED):
            self.error = "The waitlist is only offered for a slot that is already booked."
            return self.state
        self._in_flight = True
        self.state = FormState.WAITLIST_SUBMITTING
        self.error = None
        try:
            await self.waitlist.join(self.room.id, self.date, self.start_time, self.end_time)
        except ClassbookError as e:
            if not self.disposed:
                self.error = e.message
                self.state = FormState.WAITLIST_REJECTED
            return self.state
        finally:
            self._in_flight = False

        if self.disposed:
            return self.state
        self.state = FormState.WAITLIST_CONFIRMED
        self.navigate(MY_RESERVATIONS_ROUTE)
        return self.state

    def dispose(self):
        """The view is gone; responses still in flight are ignored."""
        self.disposed = True

    def _fail(self, error: ClassbookError):
        if self.disposed:
            return
        logger.debug(f"Reservation form error: {error.message}")
        self.error = error.message
