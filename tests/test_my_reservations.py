from datetime import time

import pytest

from classbook.errors import AuthorizationError, NotFoundError
from classbook.schemas.reservation import ReservationStatus
from classbook.services.reservations import MyReservations
from classbook.session import UserSession

from tests.conf_tests import (  # pylint: disable=unused-import
    clear_db,
    client,
    make_reservation,
    session,
    student,
    test_db,
    test_room,
)

pytestmark = pytest.mark.anyio


class RecordingPromotion:
    def __init__(self):
        self.cancelled = []

    async def on_reservation_cancelled(self, reservation):
        self.cancelled.append(reservation)
        return []


# pylint: disable-next=redefined-outer-name
async def test_active_and_history(client, session, student, test_room, test_db):
    later = make_reservation(test_db, test_room, student, start=time(14), end=time(15))
    earlier = make_reservation(test_db, test_room, student, start=time(9), end=time(10))
    make_reservation(test_db, test_room, student, start=time(11), end=time(12), status="cancelled")
    mine = MyReservations(client, session)

    await mine.refresh()

    assert [r.id for r in mine.active()] == [earlier.id, later.id]
    assert len(mine.history()) == 3


# pylint: disable-next=redefined-outer-name
async def test_cancel_refetches_and_hands_over_to_policy(client, session, student, test_room, test_db):
    booked = make_reservation(test_db, test_room, student)
    promotion = RecordingPromotion()
    mine = MyReservations(client, session, promotion=promotion)
    await mine.refresh()

    await mine.cancel(booked.id)

    assert mine.active() == []
    assert [(r.id, r.status) for r in mine.history()] == [(booked.id, ReservationStatus.CANCELLED)]
    assert [r.id for r in promotion.cancelled] == [booked.id]


# pylint: disable-next=redefined-outer-name
async def test_default_policy_promotes_nothing(client, session, student, test_room, test_db):
    booked = make_reservation(test_db, test_room, student)
    mine = MyReservations(client, session)
    await mine.refresh()

    assert await mine.cancel(booked.id) == []


# pylint: disable-next=redefined-outer-name
async def test_cancel_unknown_reservation(client, session):
    mine = MyReservations(client, session)
    await mine.refresh()

    with pytest.raises(NotFoundError):
        await mine.cancel(9999)


# pylint: disable-next=redefined-outer-name
async def test_anonymous_list_requires_login(client):
    with pytest.raises(AuthorizationError):
        await MyReservations(client, UserSession(client)).refresh()
