# hostelkit/services/room/room_service.py
"""
Room administration.

Room configuration lives here; the bed counters themselves are only
changed through the capacity ledger.
"""
from __future__ import annotations

from typing import List

from sqlalchemy.exc import IntegrityError

from hostelkit.core.exceptions import (
    DuplicateRoomError,
    HostelNotFoundError,
    RoomNotFoundError,
    RoomOccupiedError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.core import Room
from hostelkit.repositories.core import HostelRepository, RoomRepository
from hostelkit.schemas.room import RoomCreate, RoomUpdate
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork
from hostelkit.services.occupancy import CapacityLedger

logger = get_logger(__name__)


class RoomService:
    def __init__(self, session_factory: SessionFactory, ledger: CapacityLedger) -> None:
        self.session_factory = session_factory
        self.ledger = ledger

    def get_room(self, room_id: str) -> Room:
        return self.ledger.get_room(room_id)

    def list_rooms(self, hostel_id: str, only_available: bool = False) -> List[Room]:
        with UnitOfWork(self.session_factory) as uow:
            return uow.get_repo(RoomRepository).list_for_hostel(hostel_id, only_available=only_available)

    def create_room(self, data: RoomCreate) -> Room:
        """
        Add a room to a hostel and grow the hostel's room/bed totals.

        Raises:
            HostelNotFoundError: If the hostel does not exist
            DuplicateRoomError: If the room number is already used in the hostel
        """
        try:
            with UnitOfWork(self.session_factory) as uow:
                hostels = uow.get_repo(HostelRepository)
                rooms = uow.get_repo(RoomRepository)
                if hostels.get(data.hostel_id) is None:
                    raise HostelNotFoundError(data.hostel_id)
                if rooms.get_by_number(data.hostel_id, data.room_number) is not None:
                    raise DuplicateRoomError(data.room_number, data.hostel_id)

                room = rooms.create(
                    {
                        "hostel_id": data.hostel_id,
                        "room_number": data.room_number,
                        "floor": data.floor,
                        "room_type": data.room_type,
                        "total_beds": data.total_beds,
                        "occupied_beds": 0,
                        "rent": data.rent,
                        "amenities": list(data.amenities),
                    }
                )
                hostels.adjust_totals(data.hostel_id, rooms_delta=1, beds_delta=data.total_beds)
        except IntegrityError as exc:
            raise DuplicateRoomError(data.room_number, data.hostel_id) from exc

        logger.info(
            "Room created",
            extra={"room_id": room.id, "hostel_id": data.hostel_id, "total_beds": data.total_beds},
        )
        return room

    def update_room(self, room_id: str, data: RoomUpdate) -> Room:
        """Apply configuration changes; a new bed count goes through the ledger."""
        changes = data.model_dump(exclude_unset=True, exclude={"total_beds"})
        if changes:
            with UnitOfWork(self.session_factory) as uow:
                rooms = uow.get_repo(RoomRepository)
                room = rooms.get(room_id)
                if room is None:
                    raise RoomNotFoundError(room_id)
                rooms.update(room, changes)
            logger.info("Room updated", extra={"room_id": room_id, "fields": sorted(changes)})

        if data.total_beds is not None:
            return self.ledger.resize(room_id, data.total_beds)
        return self.ledger.get_room(room_id)

    def deactivate_room(self, room_id: str) -> Room:
        """
        Take a room out of service. Rejected while any bed is occupied.
        """
        room = self.ledger.reconcile(room_id)
        if room.occupied_beds > 0:
            raise RoomOccupiedError(room_id, room.occupied_beds)
        if not room.is_active:
            return room

        with UnitOfWork(self.session_factory) as uow:
            record = uow.get_repo(RoomRepository).get(room_id)
            record.is_active = False
            uow.get_repo(HostelRepository).adjust_totals(
                record.hostel_id, rooms_delta=-1, beds_delta=-record.total_beds
            )

        logger.info("Room deactivated", extra={"room_id": room_id})
        return self.ledger.get_room(room_id)

    def reconcile_room(self, room_id: str) -> Room:
        return self.ledger.reconcile(room_id)
