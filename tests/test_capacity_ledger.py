import pytest

from hostelkit.core.exceptions import (
    CapacityUnderflowError,
    RoomFullError,
    RoomNotFoundError,
)
from hostelkit.models.core import Hostel, Room


class TestAdjust:
    def test_increment_and_decrement(self, ledger, room):
        assert ledger.adjust(room.id, +1).occupied_beds == 1
        assert ledger.adjust(room.id, +1).occupied_beds == 2
        assert ledger.adjust(room.id, -1).occupied_beds == 1

    def test_increment_past_capacity_is_rejected(self, ledger, room, fetch):
        ledger.adjust(room.id, +1)
        ledger.adjust(room.id, +1)

        with pytest.raises(RoomFullError) as exc_info:
            ledger.adjust(room.id, +1)

        assert exc_info.value.details["total_beds"] == 2
        assert fetch(Room, room.id).occupied_beds == 2

    def test_decrement_below_zero_is_rejected(self, ledger, room, fetch):
        with pytest.raises(CapacityUnderflowError):
            ledger.adjust(room.id, -1)
        assert fetch(Room, room.id).occupied_beds == 0

    def test_unknown_room(self, ledger):
        with pytest.raises(RoomNotFoundError):
            ledger.adjust("missing-room", +1)


class TestReconcile:
    def test_corrects_drift_from_active_students(self, ledger, occupancy, room, make_student, session_factory):
        student = make_student()
        occupancy.assign(student.id, room.id, "1")

        # simulate a counter left behind by an interrupted operation
        with session_factory() as session:
            session.get(Room, room.id).occupied_beds = 0
            session.commit()

        assert ledger.reconcile(room.id).occupied_beds == 1

    def test_no_change_when_consistent(self, ledger, room):
        assert ledger.reconcile(room.id).occupied_beds == 0

    def test_unknown_room(self, ledger):
        with pytest.raises(RoomNotFoundError):
            ledger.reconcile("missing-room")


class TestResize:
    def test_grow_carries_difference_to_hostel(self, ledger, room, hostel, fetch):
        resized = ledger.resize(room.id, 4)

        assert resized.total_beds == 4
        assert fetch(Hostel, hostel.id).total_beds == 4

    def test_shrink_below_occupancy_is_rejected(self, ledger, occupancy, make_room, make_student, fetch):
        room = make_room(total_beds=3)
        for bed in ("1", "2"):
            occupancy.assign(make_student().id, room.id, bed)

        with pytest.raises(CapacityUnderflowError):
            ledger.resize(room.id, 1)

        assert fetch(Room, room.id).total_beds == 3
        assert ledger.resize(room.id, 2).total_beds == 2

    def test_same_size_is_a_no_op(self, ledger, room, hostel, fetch):
        ledger.resize(room.id, 2)
        assert fetch(Hostel, hostel.id).total_beds == 2
