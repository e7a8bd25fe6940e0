from datetime import datetime
from typing import Optional
from classbook.schemas.base import WireModel


class Notification(WireModel):
    id: int
    user_id: int
    message: str
    created_at: Optional[datetime] = None
    read: bool = False
