import asyncio
import logging
from contextlib import contextmanager
from datetime import date, timedelta
from typing import Dict, List, Optional, Set
from classbook.api.client import BackendClient
from classbook.config import get_settings
from classbook.errors import ClassbookError
from classbook.realtime import EventFeed, ReservationUpdate, subscribe
from classbook.schemas.reservation import Reservation

logger = logging.getLogger(__name__)


class RoomTimeline:
    """
    Reservation timeline of one room, kept fresh by the live event feed.

    A `reservationUpdate` for this room only invalidates: the list is fetched
    again. Results from superseded fetches, or arriving after `close`, are
    dropped.
    """

    def __init__(self, client: BackendClient, room_id: int, window_days: Optional[int] = None):
        self.client = client
        self.room_id = room_id
        if window_days is None:
            window_days = get_settings().timeline_window_days
        self.window_days = window_days
        self.reservations: List[Reservation] = []
        self.error: Optional[str] = None
        self.closed = False
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def refresh(self) -> List[Reservation]:
        self._loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        try:
            reservations = await self.client.room_reservations(self.room_id)
        except ClassbookError as e:
            if self._is_current(generation):
                self.error = e.message
            return self.reservations
        if not self._is_current(generation):
            logger.debug(f"Discarding stale reservations for room_id: {self.room_id}")
            return self.reservations
        self.reservations = reservations
        self.error = None
        return self.reservations

    def _is_current(self, generation: int) -> bool:
        return not self.closed and generation == self._generation

    def handle_update(self, update: ReservationUpdate):
        if self.closed or update.room_id != self.room_id:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Delivered from a feed thread: hand over to the loop that owns the timeline.
            if self._loop is None:
                logger.error(f"Update for room_id: {self.room_id} before the first load; ignored")
                return
            self._loop.call_soon_threadsafe(self._start_refresh)
            return
        self._start_refresh()

    def _start_refresh(self):
        if self.closed:
            return
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def settle(self):
        """Wait for refetches started by live updates."""
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @contextmanager
    def live(self, feed: EventFeed):
        """Follow live updates for the lifetime of the block; the timeline is closed on exit."""
        with subscribe(feed, self.room_id, self.handle_update):
            try:
                yield self
            finally:
                self.close()

    def close(self):
        self.closed = True

    def visible(self, selected_date: Optional[date] = None, today: Optional[date] = None) -> List[Reservation]:
        if selected_date is not None:
            return [r for r in self.reservations if r.date == selected_date]
        since = (today or date.today()) - timedelta(days=self.window_days)
        return [r for r in self.reservations if r.date >= since]

    def by_date(self, selected_date: Optional[date] = None, today: Optional[date] = None) -> Dict[date, List[Reservation]]:
        grouped: Dict[date, List[Reservation]] = {}
        for reservation in self.visible(selected_date, today):
            grouped.setdefault(reservation.date, []).append(reservation)
        return {
            day: sorted(grouped[day], key=lambda r: r.start_time) for day in sorted(grouped)
        }
