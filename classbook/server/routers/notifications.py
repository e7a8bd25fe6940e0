import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from classbook.schemas.notification import Notification as NotificationSchema
from classbook.server.auth import ensure_same_user, get_current_user
from classbook.server.db import get_db
from classbook.server.models.notification import Notification
from classbook.server.models.user import User
from classbook.server.responses import ok

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
)


def serialize(notification: Notification):
    return NotificationSchema.model_validate(notification).to_wire()


@router.get("/{user_id}")
def get_notifications(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Newest first."""
    ensure_same_user(current_user, user_id)
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return ok([serialize(n) for n in notifications])


@router.patch("/{notification_id}")
def mark_read(notification_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        logger.error(f"Notification not found: {notification_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    ensure_same_user(current_user, notification.user_id)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return ok(serialize(notification), "Notification marked as read")
