import logging
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from classbook.schemas.waitlist import WaitlistCreate, WaitlistEntry as WaitlistSchema, WaitlistStatus
from classbook.server.auth import ensure_same_user, get_current_user
from classbook.server.db import get_db
from classbook.server.models.user import User
from classbook.server.models.waitlist import WaitlistEntry
from classbook.server.responses import ok
from classbook.server.routers.rooms import get_room_or_404

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/waitlist",
    tags=["waitlist"],
)


class WaitlistStatusUpdate(BaseModel):
    status: WaitlistStatus


def serialize(entry: WaitlistEntry):
    return WaitlistSchema.model_validate(entry).to_wire()


def get_entry_or_404(db: Session, entry_id: int) -> WaitlistEntry:
    entry = db.query(WaitlistEntry).filter(WaitlistEntry.id == entry_id).first()
    if not entry:
        logger.error(f"Waitlist entry not found: {entry_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Waitlist entry not found")
    return entry


@router.post("", status_code=status.HTTP_201_CREATED)
def create_entry(entry: WaitlistCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Queue a standing request for a slot that is currently taken."""
    ensure_same_user(current_user, entry.user_id)
    get_room_or_404(db, entry.room_id)
    db_entry = WaitlistEntry(
        user_id=current_user.id,
        room_id=entry.room_id,
        date=entry.date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        status=WaitlistStatus.WAITING.value,
    )
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    logger.debug(f"Created waitlist entry: {db_entry.id}")
    return ok(serialize(db_entry), "Added to waitlist")


@router.get("/{user_id}")
def get_user_entries(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """All waitlist entries of the user, in queue order."""
    ensure_same_user(current_user, user_id)
    entries = (
        db.query(WaitlistEntry)
        .filter(WaitlistEntry.user_id == user_id)
        .order_by(WaitlistEntry.created_at, WaitlistEntry.id)
        .all()
    )
    return ok([serialize(entry) for entry in entries])


@router.delete("/{entry_id}")
def cancel_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Cancel a waitlist entry. Cancelling twice is accepted; a fulfilled entry
    cannot be cancelled.
    """
    entry = get_entry_or_404(db, entry_id)
    ensure_same_user(current_user, entry.user_id)
    if entry.status == WaitlistStatus.FULFILLED.value:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Waitlist entry was already fulfilled")
    entry.status = WaitlistStatus.CANCELLED.value
    db.commit()
    db.refresh(entry)
    logger.debug(f"Cancelled waitlist entry: {entry_id}")
    return ok(serialize(entry), "Waitlist entry cancelled")


@router.patch("/{entry_id}")
def update_entry_status(
    entry_id: int,
    update: WaitlistStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record a promotion. Only waiting entries can become fulfilled."""
    entry = get_entry_or_404(db, entry_id)
    if current_user.role != "admin":
        ensure_same_user(current_user, entry.user_id)
    if update.status != WaitlistStatus.FULFILLED or entry.status != WaitlistStatus.WAITING.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only waiting entries can be fulfilled")
    entry.status = WaitlistStatus.FULFILLED.value
    db.commit()
    db.refresh(entry)
    logger.debug(f"Fulfilled waitlist entry: {entry_id}")
    return ok(serialize(entry), "Waitlist entry fulfilled")
