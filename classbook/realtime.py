import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)

RESERVATION_UPDATE = "reservationUpdate"
CONNECT_ERROR = "connect_error"


@dataclass(frozen=True)
class ReservationUpdate:
    room_id: int

    @classmethod
    def from_payload(cls, payload: dict) -> "ReservationUpdate":
        return cls(room_id=int(payload["roomId"]))


Handler = Callable[[dict], None]


class EventFeed(Protocol):
    """Push channel from the backend. The transport behind it is not ours."""

    def on(self, event: str, handler: Handler) -> None: ...

    def off(self, event: str, handler: Handler) -> None: ...


class LocalEventFeed:
    """In-process feed used by the reference server and tests."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def emit(self, event: str, payload: dict) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:
                # One broken view must not stop delivery to the others.
                logger.exception(f"Handler for {event} failed")


def _log_connect_error(payload):
    logger.error(f"Event feed connection error: {payload}")


@contextmanager
def subscribe(feed: EventFeed, room_id: int, handler: Callable[[ReservationUpdate], None]):
    """
    Deliver `reservationUpdate` events for `room_id` to `handler` while the
    block is active. Listeners are always removed on exit.
    """

    def on_update(payload):
        try:
            update = ReservationUpdate.from_payload(payload)
        except (KeyError, TypeError, ValueError):
            logger.error(f"Malformed {RESERVATION_UPDATE} payload: {payload!r}")
            return
        if update.room_id == room_id:
            logger.debug(f"Reservation update for room_id: {room_id}")
            handler(update)

    feed.on(RESERVATION_UPDATE, on_update)
    feed.on(CONNECT_ERROR, _log_connect_error)
    try:
        yield
    finally:
        feed.off(RESERVATION_UPDATE, on_update)
        feed.off(CONNECT_ERROR, _log_connect_error)
