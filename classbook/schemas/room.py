from typing import List, Optional
from pydantic import Field
from classbook.schemas.base import WireModel


class RoomBase(WireModel):
    name: str
    location: Optional[str] = None
    capacity: int = Field(gt=0)
    equipments: List[str] = []
    available: bool = True


class RoomCreate(RoomBase):
    pass


class RoomUpdate(WireModel):
    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    equipments: Optional[List[str]] = None
    available: Optional[bool] = None


class Room(RoomBase):
    id: int

    @property
    def floor(self) -> Optional[str]:
        """Floor part of a "Building 3F" style location, if present."""
        if not self.location:
            return None
        parts = self.location.split()
        return parts[-1] if len(parts) > 1 else None


class RoomFilter(WireModel):
    location: Optional[str] = None
    min_capacity: Optional[int] = None
    available: Optional[bool] = None
