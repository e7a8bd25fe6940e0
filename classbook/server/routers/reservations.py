import logging
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from classbook.config import get_settings
from classbook.realtime import RESERVATION_UPDATE
from classbook.schemas.reservation import Reservation as ReservationSchema, ReservationCreate
from classbook.server.auth import ensure_same_user, get_current_user
from classbook.server.db import get_db
from classbook.server.models.reservation import Reservation
from classbook.server.models.user import User
from classbook.server.responses import ok
from classbook.server.routers.rooms import get_room_or_404
from classbook.services.quota import count_future_confirmed

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/reservations",
    tags=["reservations"],
)


def serialize(reservation: Reservation):
    return ReservationSchema.model_validate(reservation).to_wire()


def publish_update(request: Request, room_id: int):
    feed = getattr(request.app.state, "event_feed", None)
    if feed is not None:
        feed.emit(RESERVATION_UPDATE, {"roomId": room_id})


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a reservation")
def create_reservation(
    reservation: ReservationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Reserve a room for a half-open time interval on one day.
    Requires authentication.

    - **roomId**, **date**, **startTime**, **endTime**: the slot.
    - **purpose**: free text.
    - **participants**: member ids (integers) and guest labels (strings).

    Overlapping a confirmed reservation of the same room and day is a 409.
    """
    ensure_same_user(current_user, reservation.user_id)
    logger.debug(f"Creating reservation for user: {current_user.id}, room_id: {reservation.room_id}")

    room = get_room_or_404(db, reservation.room_id)
    if not room.available:
        logger.error(f"Room closed for reservations: {room.id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room is not available for reservations")
    if reservation.participants and len(reservation.participants) + 1 > room.capacity:
        logger.error(f"Room capacity insufficient: {room.capacity} < {len(reservation.participants) + 1}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room capacity insufficient")

    settings = get_settings()
    mine = [
        ReservationSchema.model_validate(r)
        for r in db.query(Reservation).filter(Reservation.user_id == current_user.id).all()
    ]
    if count_future_confirmed(mine, datetime.now()) >= settings.quota_limit:
        logger.error(f"Reservation quota exceeded for user: {current_user.id}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Reservation quota exceeded: at most {settings.quota_limit} upcoming reservations",
        )

    # Check for overlapping reservations
    overlapping = db.query(Reservation).filter(
        Reservation.room_id == reservation.room_id,
        Reservation.date == reservation.date,
        Reservation.status == "confirmed",
        Reservation.start_time < reservation.end_time,
        Reservation.end_time > reservation.start_time,
    ).first()
    if overlapping:
        logger.error(
            f"Overlapping reservation found for room_id: {reservation.room_id}, "
            f"date: {reservation.date}, time: {reservation.start_time} to {reservation.end_time}"
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room is already booked for this time slot")

    db_reservation = Reservation(
        room_id=reservation.room_id,
        user_id=current_user.id,
        date=reservation.date,
        start_time=reservation.start_time,
        end_time=reservation.end_time,
        purpose=reservation.purpose,
        participants=reservation.to_wire()["participants"],
        status="confirmed",
    )
    db.add(db_reservation)
    db.commit()
    db.refresh(db_reservation)
    logger.debug(f"Created reservation: {db_reservation.id}")
    publish_update(request, db_reservation.room_id)
    return ok(serialize(db_reservation), "Reservation created")


@router.get("/my/{user_id}", summary="List my reservations")
def get_my_reservations(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All reservations of the user, cancelled ones included."""
    ensure_same_user(current_user, user_id)
    reservations = (
        db.query(Reservation)
        .filter(Reservation.user_id == user_id)
        .order_by(Reservation.date, Reservation.start_time)
        .all()
    )
    logger.debug(f"Retrieved {len(reservations)} reservations for user: {user_id}")
    return ok([serialize(r) for r in reservations])


@router.get("/room/{room_id}", summary="List room reservations")
def get_room_reservations(
    room_id: int,
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    """Reservations of one room, optionally for a single day."""
    query = db.query(Reservation).filter(Reservation.room_id == room_id)
    if day is not None:
        query = query.filter(Reservation.date == day)
    reservations = query.order_by(Reservation.date, Reservation.start_time).all()
    return ok([serialize(r) for r in reservations])


@router.delete("/{reservation_id}", summary="Cancel a reservation")
def cancel_reservation(
    reservation_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Cancel a reservation. The row is kept with status `cancelled`.
    Requires authentication and ownership.
    """
    db_reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not db_reservation:
        logger.error(f"Reservation not found: {reservation_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    if db_reservation.user_id != current_user.id:
        logger.error(f"User {current_user.id} not authorized to cancel reservation {reservation_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to cancel this reservation")

    db_reservation.status = "cancelled"
    db.commit()
    logger.debug(f"Cancelled reservation: {reservation_id}")
    publish_update(request, db_reservation.room_id)
    return ok(None, "Reservation cancelled")
