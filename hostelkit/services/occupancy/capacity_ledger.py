# hostelkit/services/occupancy/capacity_ledger.py
"""
Capacity ledger.

The only component allowed to write ``rooms.occupied_beds`` and
``rooms.total_beds``. Every write is a single conditional UPDATE so the
bounds check cannot be separated from the change by a concurrent caller.
"""
from __future__ import annotations

from hostelkit.core.exceptions import (
    CapacityUnderflowError,
    RoomFullError,
    RoomNotFoundError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.core import Room
from hostelkit.repositories.core import HostelRepository, RoomRepository
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork

logger = get_logger(__name__)


class CapacityLedger:
    """
    Keeps ``0 <= occupied_beds <= total_beds`` for every room.

    The public calls run in their own UnitOfWork and commit before
    returning. `adjust_within` joins a caller's UnitOfWork instead, so a
    placement and its counter change commit or roll back together.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def get_room(self, room_id: str) -> Room:
        with UnitOfWork(self.session_factory) as uow:
            room = uow.get_repo(RoomRepository).get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            return room

    def reconcile(self, room_id: str) -> Room:
        """
        Recompute occupied_beds from the ACTIVE students referencing the
        room and correct any drift left by an earlier partial failure.
        """
        with UnitOfWork(self.session_factory) as uow:
            repo = uow.get_repo(RoomRepository)
            room = repo.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)

            actual = repo.count_active_occupants(room_id)
            if actual == room.occupied_beds:
                return room

            logger.warning(
                "Room occupancy drift corrected",
                extra={"room_id": room_id, "recorded": room.occupied_beds, "actual": actual},
            )
            if not repo.set_occupied(room_id, actual):
                raise RoomFullError(room_id, room.total_beds, actual)
            uow.commit()

        return self.get_room(room_id)

    def adjust(self, room_id: str, delta: int) -> Room:
        """
        Atomically add ``delta`` to occupied_beds.

        Raises:
            RoomNotFoundError: If the room does not exist
            RoomFullError: If an increment would exceed total_beds
            CapacityUnderflowError: If a decrement would go below zero
        """
        with UnitOfWork(self.session_factory) as uow:
            self.adjust_within(uow, room_id, delta)
            uow.commit()

        logger.info("Room occupancy adjusted", extra={"room_id": room_id, "delta": delta})
        return self.get_room(room_id)

    def adjust_within(self, uow: UnitOfWork, room_id: str, delta: int) -> None:
        """Apply the conditional counter change inside an open UnitOfWork without committing."""
        repo = uow.get_repo(RoomRepository)
        if repo.adjust_occupied(room_id, delta):
            return

        room = repo.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        if delta > 0:
            raise RoomFullError(room_id, room.total_beds, room.occupied_beds)
        raise CapacityUnderflowError(
            room_id,
            "Room occupancy cannot drop below zero",
            {"occupied_beds": room.occupied_beds, "delta": delta},
        )

    def resize(self, room_id: str, total_beds: int) -> Room:
        """
        Change a room's bed count and carry the difference to the hostel
        aggregate. Rejected when occupancy would not fit. An inactive room
        is already out of the hostel totals, so only its own count changes.
        """
        room = self.reconcile(room_id)
        delta = total_beds - room.total_beds
        if delta == 0:
            return room

        with UnitOfWork(self.session_factory) as uow:
            if not uow.get_repo(RoomRepository).resize(room_id, total_beds):
                current = uow.get_repo(RoomRepository).get(room_id)
                raise CapacityUnderflowError(
                    room_id,
                    details={"requested_total_beds": total_beds, "occupied_beds": current.occupied_beds},
                )
            if room.is_active:
                uow.get_repo(HostelRepository).adjust_totals(room.hostel_id, beds_delta=delta)

        logger.info(
            "Room resized",
            extra={"room_id": room_id, "total_beds": total_beds, "beds_delta": delta},
        )
        return self.get_room(room_id)
