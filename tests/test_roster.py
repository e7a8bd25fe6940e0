from datetime import date, time
import pytest

from classbook.errors import CapacityExceededError
from classbook.schemas.participant import Guest, Member
from classbook.schemas.reservation import ReservationCreate
from classbook.schemas.room import Room
from classbook.services.roster import ParticipantRoster


def room(capacity=30):
    return Room(id=1, name="A101", location="Main 1F", capacity=capacity)


def test_guests_are_trimmed_and_deduplicated():
    roster = ParticipantRoster()
    assert roster.add_guest(" 20231234 ")
    assert not roster.add_guest("20231234")
    assert not roster.add_guest("   ")
    assert roster.guest_labels == ["20231234"]


def test_participants_merge_members_then_guests():
    roster = ParticipantRoster()
    roster.add_member(5)
    roster.add_guest("Kim")
    roster.add_member(9)
    roster.add_member(5)
    assert roster.participants() == [Member(id=5), Member(id=9), Guest(label="Kim")]
    assert roster.headcount() == 4


def test_removal():
    roster = ParticipantRoster()
    roster.add_member(5)
    roster.add_guest("Kim")
    roster.remove_member(5)
    roster.remove_guest("Kim")
    assert len(roster) == 0


def test_capacity_exceeded_by_one():
    roster = ParticipantRoster()
    for member_id in range(1, 29):
        roster.add_member(member_id)
    roster.add_guest("20230001")
    roster.add_guest("20230002")
    assert roster.headcount() == 31
    with pytest.raises(CapacityExceededError):
        roster.check_capacity(room(30))


def test_capacity_filled_exactly_is_allowed():
    roster = ParticipantRoster()
    for member_id in range(1, 30):
        roster.add_member(member_id)
    assert roster.headcount() == 30
    roster.check_capacity(room(30))


def test_empty_roster_skips_capacity_check():
    ParticipantRoster().check_capacity(room(1))


def test_wire_format_keeps_digit_only_guest_as_string():
    reservation = ReservationCreate(
        room_id=1,
        user_id=2,
        date=date(2026, 11, 2),
        start_time=time(10),
        end_time=time(11),
        participants=[Member(id=3), Guest(label="20231234")],
    )
    wire = reservation.to_wire()
    assert wire["participants"] == [3, "20231234"]
    assert wire["startTime"] == "10:00"
    decoded = ReservationCreate.model_validate(wire)
    assert decoded.participants == [Member(id=3), Guest(label="20231234")]
