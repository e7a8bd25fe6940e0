from typing import List, Union
from pydantic import BaseModel, ConfigDict


class Member(BaseModel):
    """A registered user added to someone else's reservation."""

    model_config = ConfigDict(frozen=True)

    id: int


class Guest(BaseModel):
    """A participant without an account, e.g. a student number."""

    model_config = ConfigDict(frozen=True)

    label: str


Participant = Union[Member, Guest]


def decode_participant(value) -> Participant:
    # Wire type decides: JSON integers are members, JSON strings are guests.
    if isinstance(value, (Member, Guest)):
        return value
    if isinstance(value, dict):
        return Member(**value) if "id" in value else Guest(**value)
    if isinstance(value, bool):
        raise ValueError(f"Invalid participant: {value!r}")
    if isinstance(value, int):
        return Member(id=value)
    if isinstance(value, str):
        return Guest(label=value)
    raise ValueError(f"Invalid participant: {value!r}")


def encode_participant(participant: Participant):
    if isinstance(participant, Member):
        return participant.id
    return participant.label


def decode_participants(values) -> List[Participant]:
    return [decode_participant(value) for value in values or []]


def encode_participants(participants) -> list:
    return [encode_participant(p) for p in participants]
