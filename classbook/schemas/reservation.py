from datetime import date as Date, time
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_serializer, field_validator, model_validator
from classbook.schemas.base import WireModel, format_clock, truncate_clock
from classbook.schemas.participant import (
    Participant,
    decode_participants,
    encode_participants,
)


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class IntervalModel(WireModel):
    """A room, a day and a half-open [start_time, end_time) clock interval."""

    room_id: int
    date: Date
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time")
    @classmethod
    def check_minute_granularity(cls, value):
        return truncate_clock(value)

    @field_serializer("start_time", "end_time")
    def serialize_clock(self, value: time):
        return format_clock(value)

    @model_validator(mode="after")
    def check_interval(self):
        if self.start_time >= self.end_time:
            raise ValueError("end_time must be later than start_time")
        return self


class ReservationCreate(IntervalModel):
    user_id: int
    purpose: str = ""
    participants: List[Participant] = Field(default_factory=list)

    @field_validator("participants", mode="before")
    @classmethod
    def check_participants(cls, value):
        return decode_participants(value)

    @field_validator("purpose", mode="before")
    @classmethod
    def check_purpose(cls, value):
        return "" if value is None else str(value).strip()

    @field_serializer("participants")
    def serialize_participants(self, value):
        return encode_participants(value)


class Reservation(ReservationCreate):
    id: int
    status: ReservationStatus = ReservationStatus.CONFIRMED
    room_name: Optional[str] = None

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED
