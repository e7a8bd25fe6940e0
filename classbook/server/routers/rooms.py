import logging
from datetime import date, time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from classbook.schemas.room import Room as RoomSchema, RoomCreate, RoomUpdate
from classbook.server.auth import get_current_admin
from classbook.server.db import get_db
from classbook.server.models.reservation import Reservation
from classbook.server.models.room import Room
from classbook.server.responses import ok

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rooms"])


def serialize(room: Room):
    return RoomSchema.model_validate(room).to_wire()


def get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        logger.error(f"Room not found: {room_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


@router.get("/api/rooms")
def get_rooms(
    location: Optional[str] = None,
    min_capacity: Optional[int] = Query(None, alias="minCapacity"),
    available: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """
    Retrieve classrooms, optionally filtered.

    - **location**: substring of the building/floor label.
    - **minCapacity**: smallest acceptable capacity.
    - **available**: only rooms open (or closed) for reservations.
    """
    query = db.query(Room)
    if location:
        query = query.filter(Room.location.contains(location))
    if min_capacity is not None:
        query = query.filter(Room.capacity >= min_capacity)
    if available is not None:
        query = query.filter(Room.available == available)
    return ok([serialize(room) for room in query.order_by(Room.id).all()])


@router.get("/api/rooms/{room_id}")
def get_room(room_id: int, db: Session = Depends(get_db)):
    """Retrieve a specific classroom by ID."""
    return ok(serialize(get_room_or_404(db, room_id)))


@router.post("/api/rooms", status_code=status.HTTP_201_CREATED)
def create_room(room: RoomCreate, db: Session = Depends(get_db), _=Depends(get_current_admin)):
    """
    Create a new classroom.
    Requires an admin account.
    """
    db_room = Room(**room.model_dump())
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    logger.debug(f"Created room: {db_room.id}")
    return ok(serialize(db_room), "Room created")


@router.put("/api/rooms/{room_id}")
def update_room(room_id: int, room_update: RoomUpdate, db: Session = Depends(get_db), _=Depends(get_current_admin)):
    """
    Update a classroom's details. Omitted fields are left unchanged.
    Requires an admin account.
    """
    db_room = get_room_or_404(db, room_id)
    for key, value in room_update.model_dump(exclude_unset=True).items():
        setattr(db_room, key, value)
    db.commit()
    db.refresh(db_room)
    logger.debug(f"Updated room: {room_id}")
    return ok(serialize(db_room), "Room updated")


@router.delete("/api/rooms/{room_id}")
def delete_room(room_id: int, db: Session = Depends(get_db), _=Depends(get_current_admin)):
    """
    Delete a classroom together with its reservations.
    Requires an admin account.
    """
    db_room = get_room_or_404(db, room_id)
    db.delete(db_room)
    db.commit()
    logger.debug(f"Deleted room: {room_id}")
    return ok(None, "Room deleted")


@router.get("/search")
def search_available_rooms(
    day: date = Query(..., alias="date"),
    start_time: time = Query(...),
    end_time: time = Query(...),
    db: Session = Depends(get_db),
):
    """Rooms open for reservations with no confirmed booking overlapping the interval."""
    if start_time >= end_time:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End time must be later than start time")
    busy = select(Reservation.room_id).where(
        Reservation.date == day,
        Reservation.status == "confirmed",
        Reservation.start_time < end_time,
        Reservation.end_time > start_time,
    )
    rooms = db.query(Room).filter(Room.available.is_(True), Room.id.not_in(busy)).order_by(Room.id).all()
    logger.debug(f"Found {len(rooms)} free rooms on {day} {start_time}-{end_time}")
    return ok([serialize(room) for room in rooms])


@router.get("/api/stats/popular")
def popular_rooms(db: Session = Depends(get_db)):
    """Top five rooms by confirmed reservations."""
    rows = (
        db.query(Room, func.count(Reservation.id).label("reservations"))
        .join(Reservation, Reservation.room_id == Room.id)
        .filter(Reservation.status == "confirmed")
        .group_by(Room.id)
        .order_by(func.count(Reservation.id).desc(), Room.id)
        .limit(5)
        .all()
    )
    return ok([{"room": serialize(room), "reservationCount": count} for room, count in rows])
