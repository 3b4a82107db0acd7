from decimal import Decimal

import pytest

from hostelkit.core.exceptions import (
    CapacityUnderflowError,
    DuplicateRoomError,
    HostelNotFoundError,
    RoomOccupiedError,
)
from hostelkit.models.core import Hostel, Room
from hostelkit.schemas.room import RoomCreate, RoomUpdate


def test_create_room_grows_hostel_totals(rooms, hostel, fetch):
    rooms.create_room(RoomCreate(hostel_id=hostel.id, room_number="a-1", total_beds=3))
    rooms.create_room(RoomCreate(hostel_id=hostel.id, room_number="a-2", total_beds=2))

    record = fetch(Hostel, hostel.id)
    assert (record.total_rooms, record.total_beds) == (2, 5)


def test_room_number_is_normalized_and_unique(rooms, hostel):
    created = rooms.create_room(RoomCreate(hostel_id=hostel.id, room_number="b-7", total_beds=2))
    assert created.room_number == "B-7"

    with pytest.raises(DuplicateRoomError):
        rooms.create_room(RoomCreate(hostel_id=hostel.id, room_number="B-7", total_beds=4))


def test_create_room_for_unknown_hostel(rooms):
    with pytest.raises(HostelNotFoundError):
        rooms.create_room(RoomCreate(hostel_id="missing", room_number="1", total_beds=2))


def test_update_room_fields_and_capacity(rooms, room, hostel, fetch):
    updated = rooms.update_room(room.id, RoomUpdate(rent=Decimal("9500"), total_beds=4))

    assert updated.rent == Decimal("9500")
    assert updated.total_beds == 4
    assert fetch(Hostel, hostel.id).total_beds == 4


def test_update_cannot_shrink_below_occupancy(rooms, occupancy, room, make_student):
    occupancy.assign(make_student().id, room.id, "1")
    occupancy.assign(make_student().id, room.id, "2")

    with pytest.raises(CapacityUnderflowError):
        rooms.update_room(room.id, RoomUpdate(total_beds=1))


def test_list_only_available(rooms, occupancy, make_room, make_student):
    full = make_room(total_beds=1)
    open_room = make_room(total_beds=2)
    occupancy.assign(make_student().id, full.id, "1")

    available = rooms.list_rooms(full.hostel_id, only_available=True)

    assert [r.id for r in available] == [open_room.id]


class TestDeactivate:
    def test_occupied_room_cannot_be_deactivated(self, rooms, occupancy, room, make_student):
        occupancy.assign(make_student().id, room.id, "1")
        with pytest.raises(RoomOccupiedError):
            rooms.deactivate_room(room.id)

    def test_empty_room_leaves_hostel_totals(self, rooms, room, hostel, fetch):
        deactivated = rooms.deactivate_room(room.id)

        assert not deactivated.is_active
        record = fetch(Hostel, hostel.id)
        assert (record.total_rooms, record.total_beds) == (0, 0)

        # a second call changes nothing
        rooms.deactivate_room(room.id)
        assert fetch(Hostel, hostel.id).total_rooms == 0

    def test_resizing_inactive_room_keeps_hostel_totals(self, rooms, room, hostel, fetch):
        rooms.deactivate_room(room.id)

        resized = rooms.update_room(room.id, RoomUpdate(total_beds=6))

        assert resized.total_beds == 6
        record = fetch(Hostel, hostel.id)
        assert (record.total_rooms, record.total_beds) == (0, 0)


def test_reconcile_room_restores_counter(rooms, occupancy, room, make_student, session_factory):
    occupancy.assign(make_student().id, room.id, "2")
    with session_factory() as session:
        session.get(Room, room.id).occupied_beds = 2
        session.commit()

    assert rooms.reconcile_room(room.id).occupied_beds == 1
