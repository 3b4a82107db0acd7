# hostelkit/services/occupancy/occupancy_service.py
"""
Occupancy assignment service.

Assigns, moves and releases a student's (room, bed) pair. Target checks
(bed uniqueness, then capacity) run against a reconciled room before any
record is touched. The student's placement and the room counters it
affects are then written in one UnitOfWork: a refused counter change
rolls the placement back with it, and no reader sees one without the
other.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError

from hostelkit.core.exceptions import (
    BedTakenError,
    CapacityUnderflowError,
    RoomFullError,
    RoomNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.core import Room, Student
from hostelkit.repositories.core import RoomRepository, StudentRepository
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork
from hostelkit.services.occupancy.capacity_ledger import CapacityLedger

logger = get_logger(__name__)


class OccupancyService:
    def __init__(
        self,
        session_factory: SessionFactory,
        ledger: Optional[CapacityLedger] = None,
    ) -> None:
        self.session_factory = session_factory
        self.ledger = ledger or CapacityLedger(session_factory)

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    def assign(self, student_id: str, room_id: str, bed_number: str) -> Student:
        """
        Give an active student without a bed the (room, bed) pair.

        Raises:
            StudentNotFoundError, RoomNotFoundError
            BedTakenError: If another active student holds the bed
            RoomFullError: If the room has no free capacity
        """
        student = self._load_student(student_id)
        self._require_active(student)
        if student.has_bed:
            if student.room_id == room_id and student.bed_number == bed_number:
                return student
            raise ValidationError(
                "Student already holds a bed; use move instead",
                {"room_id": ["student already assigned"]},
            )

        self.check_availability(student.hostel_id, room_id, bed_number, student_id)

        with self._placement(student_id, room_id, bed_number) as uow:
            self.ledger.adjust_within(uow, room_id, +1)

        logger.info(
            "Student assigned to bed",
            extra={"student_id": student_id, "room_id": room_id, "bed_number": bed_number},
        )
        return self._load_student(student_id)

    def move(self, student_id: str, new_room_id: str, new_bed_number: str) -> Student:
        """
        Move a student to another bed.

        The old room is decremented and the new room incremented in the
        same UnitOfWork as the placement; if the new room is full nothing
        is written and the student keeps the old bed.
        """
        student = self._load_student(student_id)
        self._require_active(student)
        if not student.has_bed:
            return self.assign(student_id, new_room_id, new_bed_number)

        old_room_id, old_bed_number = student.room_id, student.bed_number
        if old_room_id == new_room_id and old_bed_number == new_bed_number:
            return student

        same_room = old_room_id == new_room_id
        self.check_availability(
            student.hostel_id, new_room_id, new_bed_number, student_id, check_capacity=not same_room
        )
        if not same_room:
            self.ledger.reconcile(old_room_id)

        with self._placement(student_id, new_room_id, new_bed_number) as uow:
            if not same_room:
                self.ledger.adjust_within(uow, old_room_id, -1)
                self.ledger.adjust_within(uow, new_room_id, +1)

        logger.info(
            "Student moved",
            extra={
                "student_id": student_id,
                "from_room_id": old_room_id,
                "to_room_id": new_room_id,
                "bed_number": new_bed_number,
            },
        )
        return self._load_student(student_id)

    def release(self, student_id: str) -> Student:
        """
        Free the student's bed. Calling it on a student without a bed is
        a no-op.
        """
        student = self._load_student(student_id)
        if not student.has_bed:
            return student

        room_id = student.room_id
        underflow = False
        with UnitOfWork(self.session_factory) as uow:
            claimed = uow.get_repo(StudentRepository).clear_placement(student_id, room_id)
            if claimed:
                try:
                    self.ledger.adjust_within(uow, room_id, -1)
                except CapacityUnderflowError:
                    underflow = True
                except RoomNotFoundError:
                    logger.warning(
                        "Released bed in a room that no longer exists",
                        extra={"student_id": student_id, "room_id": room_id},
                    )
        if not claimed:
            # released concurrently
            return self._load_student(student_id)

        if underflow:
            logger.warning(
                "Counter already at zero on release, reconciling",
                extra={"student_id": student_id, "room_id": room_id},
            )
            self.ledger.reconcile(room_id)

        logger.info("Student bed released", extra={"student_id": student_id, "room_id": room_id})
        return self._load_student(student_id)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _load_student(self, student_id: str) -> Student:
        with UnitOfWork(self.session_factory) as uow:
            student = uow.get_repo(StudentRepository).get(student_id)
            if student is None:
                raise StudentNotFoundError(student_id)
            return student

    @staticmethod
    def _require_active(student: Student) -> None:
        if not student.is_active:
            raise ValidationError(
                "Only active students can hold a bed",
                {"status": [student.status.value]},
            )

    def check_availability(
        self,
        hostel_id: str,
        room_id: str,
        bed_number: str,
        student_id: Optional[str] = None,
        check_capacity: bool = True,
    ) -> Room:
        """
        Verify that `bed_number` in `room_id` can be taken, checking bed
        uniqueness first and capacity second against a reconciled room.
        """
        room = self.ledger.reconcile(room_id)
        if room.hostel_id != hostel_id or not room.is_active:
            raise RoomNotFoundError(room_id, "Room not found in this hostel")

        with UnitOfWork(self.session_factory) as uow:
            holder = uow.get_repo(RoomRepository).bed_holder(room_id, bed_number)
        if holder is not None and holder.id != student_id:
            raise BedTakenError(room_id, bed_number)

        if check_capacity and room.occupied_beds >= room.total_beds:
            raise RoomFullError(room_id, room.total_beds, room.occupied_beds)
        return room

    @contextmanager
    def _placement(self, student_id: str, room_id: str, bed_number: str) -> Iterator[UnitOfWork]:
        """
        Write the student's (room, bed) and yield the open UnitOfWork for
        the counter changes that go with it; everything commits on exit.
        """
        try:
            with UnitOfWork(self.session_factory) as uow:
                student = uow.get_repo(StudentRepository).get(student_id)
                if student is None:
                    raise StudentNotFoundError(student_id)
                student.room_id = room_id
                student.bed_number = bed_number
                uow.flush()
                yield uow
        except IntegrityError as exc:
            # partial unique index on (room_id, bed_number) for ACTIVE students
            raise BedTakenError(room_id, bed_number) from exc
