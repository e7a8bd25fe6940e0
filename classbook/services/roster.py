import logging
from typing import List
from classbook.errors import CapacityExceededError
from classbook.schemas.participant import Guest, Member, Participant
from classbook.schemas.room import Room

logger = logging.getLogger(__name__)


class ParticipantRoster:
    """Members picked from the user directory plus free-typed guest labels."""

    def __init__(self):
        self.member_ids: List[int] = []
        self.guest_labels: List[str] = []

    def add_member(self, member_id: int):
        if member_id not in self.member_ids:
            self.member_ids.append(member_id)

    def remove_member(self, member_id: int):
        if member_id in self.member_ids:
            self.member_ids.remove(member_id)

    def add_guest(self, label: str) -> bool:
        label = label.strip()
        if not label or label in self.guest_labels:
            return False
        self.guest_labels.append(label)
        return True

    def remove_guest(self, label: str):
        if label in self.guest_labels:
            self.guest_labels.remove(label)

    def clear(self):
        self.member_ids.clear()
        self.guest_labels.clear()

    def participants(self) -> List[Participant]:
        return [Member(id=i) for i in self.member_ids] + [
            Guest(label=label) for label in self.guest_labels
        ]

    def __len__(self):
        return len(self.member_ids) + len(self.guest_labels)

    def headcount(self) -> int:
        """Participants plus the reserver."""
        return len(self) + 1

    def check_capacity(self, room: Room):
        if not len(self):
            return
        if self.headcount() > room.capacity:
            logger.error(f"Room capacity exceeded: {self.headcount()} > {room.capacity}")
            raise CapacityExceededError(
                f"{self.headcount()} people (including you) exceed the room capacity of {room.capacity}."
            )
