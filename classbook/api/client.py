import logging
import re
from datetime import date, time
from typing import List, Optional
import httpx
import pydantic
from classbook.config import Settings, get_settings
from classbook.errors import (
    AuthorizationError,
    BackendError,
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from classbook.schemas.base import format_clock
from classbook.schemas.notification import Notification
from classbook.schemas.reservation import Reservation, ReservationCreate
from classbook.schemas.room import Room, RoomCreate, RoomFilter, RoomUpdate
from classbook.schemas.user import Credentials, LoginResult, SessionUser, SignupRequest
from classbook.schemas.waitlist import WaitlistCreate, WaitlistEntry

logger = logging.getLogger(__name__)

# Backends phrase conflicts differently; any of these marks the waitlist path.
CONFLICT_PATTERN = re.compile(r"overlap|duplicate|already (booked|reserved)|중복", re.IGNORECASE)

UNEXPECTED_RESPONSE = "Unexpected response from the reservation service."


class BackendClient:
    """
    Async client for the Backend Reservation Service.

    Every method unwraps the `{"success", "message", "data"}` envelope and maps
    failures onto the `classbook.errors` taxonomy. Nothing is cached and
    nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    def _headers(self):
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, url: str, failure: str, **kwargs):
        try:
            response = await self._http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e!r}")
            raise TransportError() from e

        if response.is_success:
            if not response.content:
                return None
            try:
                body = response.json()
            except ValueError as e:
                logger.error(f"{method} {url} returned a non-JSON body")
                raise BackendError(UNEXPECTED_RESPONSE, status_code=response.status_code) from e
            if isinstance(body, dict) and "data" in body:
                return body["data"]
            return body

        message = _error_message(response) or failure
        logger.error(f"{method} {url} -> {response.status_code}: {message}")
        if response.status_code == 401:
            raise AuthorizationError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        if response.status_code == 409 or CONFLICT_PATTERN.search(message):
            raise ConflictError(message)
        if response.status_code in (400, 422):
            raise ValidationError(message)
        raise BackendError(message, status_code=response.status_code)

    # Auth

    async def login(self, credentials: Credentials) -> LoginResult:
        data = await self._request(
            "POST", "/login", "Login failed.", json=credentials.model_dump()
        )
        result = _parse(LoginResult, data)
        self.token = result.access_token
        return result

    async def signup(self, request: SignupRequest) -> SessionUser:
        data = await self._request(
            "POST", "/signup", "Signup failed.", json=request.model_dump(mode="json")
        )
        return _parse(SessionUser, data)

    # Rooms

    async def list_rooms(self, filters: Optional[RoomFilter] = None) -> List[Room]:
        params = filters.to_wire(exclude_none=True) if filters else {}
        data = await self._request(
            "GET", "/api/rooms", "Could not load rooms.", params=params
        )
        return _parse_list(Room, data)

    async def get_room(self, room_id: int) -> Room:
        data = await self._request("GET", f"/api/rooms/{room_id}", "Could not load room.")
        return _parse(Room, data)

    async def create_room(self, room: RoomCreate) -> Room:
        data = await self._request(
            "POST", "/api/rooms", "Could not create room.", json=room.to_wire()
        )
        return _parse(Room, data)

    async def update_room(self, room_id: int, room: RoomUpdate) -> Room:
        data = await self._request(
            "PUT",
            f"/api/rooms/{room_id}",
            "Could not update room.",
            json=room.to_wire(exclude_unset=True),
        )
        return _parse(Room, data)

    async def delete_room(self, room_id: int) -> None:
        await self._request("DELETE", f"/api/rooms/{room_id}", "Could not delete room.")

    async def search_available_rooms(self, day: date, start: time, end: time) -> List[Room]:
        params = {
            "date": day.isoformat(),
            "start_time": format_clock(start),
            "end_time": format_clock(end),
        }
        data = await self._request("GET", "/search", "Room search failed.", params=params)
        return _parse_list(Room, data)

    async def popular_rooms(self) -> List[dict]:
        data = await self._request("GET", "/api/stats/popular", "Could not load statistics.")
        return data or []

    # Reservations

    async def my_reservations(self, user_id: int) -> List[Reservation]:
        data = await self._request(
            "GET", f"/api/reservations/my/{user_id}", "Could not load your reservations."
        )
        return _parse_list(Reservation, data)

    async def room_reservations(self, room_id: int, day: Optional[date] = None) -> List[Reservation]:
        params = {"date": day.isoformat()} if day else {}
        data = await self._request(
            "GET",
            f"/api/reservations/room/{room_id}",
            "Could not load room reservations.",
            params=params,
        )
        return _parse_list(Reservation, data)

    async def create_reservation(self, reservation: ReservationCreate) -> Reservation:
        data = await self._request(
            "POST",
            "/api/reservations",
            "Reservation failed.",
            json=reservation.to_wire(),
        )
        return _parse(Reservation, data)

    async def cancel_reservation(self, reservation_id: int) -> None:
        await self._request(
            "DELETE", f"/api/reservations/{reservation_id}", "Could not cancel reservation."
        )

    # Waitlist

    async def create_waitlist_entry(self, entry: WaitlistCreate) -> WaitlistEntry:
        data = await self._request(
            "POST", "/api/waitlist", "Could not join the waitlist.", json=entry.to_wire()
        )
        return _parse(WaitlistEntry, data)

    async def my_waitlist(self, user_id: int) -> List[WaitlistEntry]:
        data = await self._request(
            "GET", f"/api/waitlist/{user_id}", "Could not load your waitlist."
        )
        return _parse_list(WaitlistEntry, data)

    async def cancel_waitlist_entry(self, entry_id: int) -> None:
        await self._request(
            "DELETE", f"/api/waitlist/{entry_id}", "Could not cancel the waitlist entry."
        )

    async def mark_waitlist_fulfilled(self, entry_id: int) -> WaitlistEntry:
        data = await self._request(
            "PATCH",
            f"/api/waitlist/{entry_id}",
            "Could not update the waitlist entry.",
            json={"status": "fulfilled"},
        )
        return _parse(WaitlistEntry, data)

    # Notifications

    async def my_notifications(self, user_id: int) -> List[Notification]:
        data = await self._request(
            "GET", f"/api/notifications/{user_id}", "Could not load notifications."
        )
        return _parse_list(Notification, data)

    async def mark_notification_read(self, notification_id: int) -> Notification:
        data = await self._request(
            "PATCH",
            f"/api/notifications/{notification_id}",
            "Could not mark the notification as read.",
        )
        return _parse(Notification, data)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message") or body.get("detail")
    return message if isinstance(message, str) else None


def _parse(model, data):
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        logger.error(f"Malformed {model.__name__} in response: {e}")
        raise BackendError(UNEXPECTED_RESPONSE) from e


def _parse_list(model, data):
    if data is None:
        return []
    if not isinstance(data, list):
        logger.error(f"Expected a list of {model.__name__}, got {type(data).__name__}")
        raise BackendError(UNEXPECTED_RESPONSE)
    return [_parse(model, item) for item in data]
