from datetime import time, timedelta
import pytest

from classbook.errors import AuthorizationError, BackendError, NotFoundError, ValidationError
from classbook.schemas.reservation import ReservationCreate, ReservationStatus
from classbook.schemas.room import RoomCreate, RoomFilter, RoomUpdate
from classbook.schemas.user import Role
from classbook.session import UserSession

from tests.conf_tests import (  # pylint: disable=unused-import
    PASSWORD,
    TOMORROW,
    admin,
    clear_db,
    client,
    make_reservation,
    make_room,
    session,
    student,
    test_db,
    test_room,
)

pytestmark = pytest.mark.anyio


def booking(room, user, start=time(10), end=time(11)):
    return ReservationCreate(
        room_id=room.id, user_id=user.id, date=TOMORROW, start_time=start, end_time=end, purpose="Review"
    )


# Session

# pylint: disable-next=redefined-outer-name
async def test_login_and_logout(client, student):
    user_session = UserSession(client)
    user = await user_session.login(student.email, PASSWORD)
    assert user.id == student.id
    assert user_session.token
    assert not user_session.is_admin

    user_session.logout()

    assert not user_session.is_authenticated
    assert user_session.token is None
    with pytest.raises(AuthorizationError):
        user_session.require_user()


# pylint: disable-next=redefined-outer-name
async def test_login_with_wrong_password(client, student):
    with pytest.raises(AuthorizationError) as excinfo:
        await UserSession(client).login(student.email, "wrong")
    assert excinfo.value.message == "Invalid email or password"


# pylint: disable-next=redefined-outer-name
async def test_signup_logs_in(client):
    user_session = UserSession(client)
    user = await user_session.signup("Lee", "lee@example.com", "secret", role=Role.ADMIN)
    assert user_session.is_admin
    assert user.email == "lee@example.com"


# Rooms

# pylint: disable-next=redefined-outer-name
async def test_admin_manages_rooms(client, admin):
    await UserSession(client).login(admin.email, PASSWORD)

    room = await client.create_room(
        RoomCreate(name="S201", location="Science 2F", capacity=40, equipments=["projector", "whiteboard"])
    )
    assert room.floor == "2F"

    updated = await client.update_room(room.id, RoomUpdate(capacity=45))
    assert (updated.name, updated.capacity) == ("S201", 45)

    await client.delete_room(room.id)
    with pytest.raises(NotFoundError):
        await client.get_room(room.id)


# pylint: disable-next=redefined-outer-name
async def test_student_cannot_create_rooms(client, session):
    with pytest.raises(BackendError) as excinfo:
        await client.create_room(RoomCreate(name="X", capacity=5))
    assert excinfo.value.status_code == 403


# pylint: disable-next=redefined-outer-name
async def test_list_rooms_with_filters(client, test_db):
    make_room(test_db, name="Small", capacity=10, location="Library 1F")
    make_room(test_db, name="Large", capacity=60, location="Main 2F")
    make_room(test_db, name="Closed", capacity=80, location="Main 3F", available=False)

    rooms = await client.list_rooms(RoomFilter(min_capacity=50, available=True))

    assert [room.name for room in rooms] == ["Large"]
    assert len(await client.list_rooms()) == 3


# pylint: disable-next=redefined-outer-name
async def test_search_available_rooms(client, student, test_db):
    busy = make_room(test_db, name="Busy")
    free = make_room(test_db, name="Free")
    make_reservation(test_db, busy, student, start=time(10), end=time(11))

    rooms = await client.search_available_rooms(TOMORROW, time(10, 30), time(11, 30))
    assert [room.id for room in rooms] == [free.id]

    rooms = await client.search_available_rooms(TOMORROW, time(11), time(12))
    assert {room.id for room in rooms} == {busy.id, free.id}


# pylint: disable-next=redefined-outer-name
async def test_popular_rooms(client, student, test_db):
    popular = make_room(test_db, name="Popular")
    quiet = make_room(test_db, name="Quiet")
    make_reservation(test_db, popular, student, start=time(9), end=time(10))
    make_reservation(test_db, popular, student, start=time(13), end=time(14))
    make_reservation(test_db, quiet, student, status="cancelled")

    stats = await client.popular_rooms()

    assert [(s["room"]["id"], s["reservationCount"]) for s in stats] == [(popular.id, 2)]


# Reservations

# pylint: disable-next=redefined-outer-name
async def test_my_reservations_requires_login(client, student):
    with pytest.raises(AuthorizationError):
        await client.my_reservations(student.id)


# pylint: disable-next=redefined-outer-name
async def test_cancel_keeps_historical_row(client, session, student, test_room):
    created = await client.create_reservation(booking(test_room, student))

    await client.cancel_reservation(created.id)

    mine = await client.my_reservations(student.id)
    assert [(r.id, r.status) for r in mine] == [(created.id, ReservationStatus.CANCELLED)]
    assert [r for r in mine if not r.is_cancelled] == []


# pylint: disable-next=redefined-outer-name
async def test_cancelled_slot_can_be_booked_again(client, session, student, test_room):
    created = await client.create_reservation(booking(test_room, student))
    await client.cancel_reservation(created.id)

    again = await client.create_reservation(booking(test_room, student))

    assert again.status == ReservationStatus.CONFIRMED


# pylint: disable-next=redefined-outer-name
async def test_cancel_missing_reservation(client, session):
    with pytest.raises(NotFoundError):
        await client.cancel_reservation(9999)


# pylint: disable-next=redefined-outer-name
async def test_room_reservations_by_date(client, student, test_room, test_db):
    make_reservation(test_db, test_room, student)
    make_reservation(test_db, test_room, student, day=TOMORROW + timedelta(days=1))

    assert len(await client.room_reservations(test_room.id)) == 2
    assert [r.date for r in await client.room_reservations(test_room.id, TOMORROW)] == [TOMORROW]


# pylint: disable-next=redefined-outer-name
async def test_backend_rejects_inverted_interval(client, session, student, test_room):
    payload = booking(test_room, student).to_wire()
    payload["startTime"], payload["endTime"] = "12:00", "11:00"
    with pytest.raises(ValidationError):
        await client._request("POST", "/api/reservations", "Reservation failed.", json=payload)

