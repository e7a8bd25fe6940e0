from datetime import datetime
from enum import Enum
from typing import Optional
from classbook.schemas.reservation import IntervalModel


class WaitlistStatus(str, Enum):
    WAITING = "waiting"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class WaitlistCreate(IntervalModel):
    user_id: int


class WaitlistEntry(WaitlistCreate):
    id: int
    status: WaitlistStatus = WaitlistStatus.WAITING
    created_at: Optional[datetime] = None

    @property
    def is_waiting(self) -> bool:
        return self.status == WaitlistStatus.WAITING
