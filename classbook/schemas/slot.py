from datetime import time
from pydantic import field_serializer
from classbook.schemas.base import WireModel, format_clock


class Slot(WireModel):
    start: time
    end: time

    @field_serializer("start", "end")
    def serialize_clock(self, value: time):
        return format_clock(value)

    def __str__(self):
        return f"{format_clock(self.start)} - {format_clock(self.end)}"


class SlotAvailability(WireModel):
    slot: Slot
    available: bool
