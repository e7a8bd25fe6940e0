import logging
from typing import List, Optional
from classbook.api.client import BackendClient
from classbook.errors import ClassbookError
from classbook.schemas.notification import Notification
from classbook.session import UserSession

logger = logging.getLogger(__name__)


class NotificationFeed:
    """Notifications of the current user. The backend creates them; we only read and acknowledge."""

    def __init__(self, client: BackendClient, session: UserSession):
        self.client = client
        self.session = session
        self.notifications: List[Notification] = []
        self.error: Optional[str] = None

    @property
    def unread_count(self) -> int:
        return sum(1 for notification in self.notifications if not notification.read)

    async def refresh(self) -> List[Notification]:
        user = self.session.require_user()
        try:
            self.notifications = await self.client.my_notifications(user.id)
            self.error = None
        except ClassbookError as e:
            self.error = e.message
        return self.notifications

    async def mark_read(self, notification_id: int) -> bool:
        try:
            await self.client.mark_notification_read(notification_id)
        except ClassbookError as e:
            self.error = e.message
            return False
        # Local copy changes only after the backend has acknowledged.
        self.notifications = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n
            for n in self.notifications
        ]
        logger.debug(f"Marked notification read: {notification_id}")
        return True
