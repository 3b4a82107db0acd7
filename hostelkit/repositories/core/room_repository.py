# hostelkit/repositories/core/room_repository.py
"""
Room repository.

Counter writes go through conditional UPDATE statements so that the
bounds check and the write happen in one statement on the database.
"""

from typing import List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import Session

from hostelkit.models.base import StudentStatus
from hostelkit.models.core import Room, Student
from hostelkit.repositories.base import BaseRepository


class RoomRepository(BaseRepository[Room]):
    """Repository for Room entity and its occupancy counter."""

    def __init__(self, session: Session):
        super().__init__(Room, session)

    # ============================================================================
    # LOOKUPS
    # ============================================================================

    def get_by_number(self, hostel_id: str, room_number: str) -> Optional[Room]:
        stmt = select(Room).where(
            and_(Room.hostel_id == hostel_id, Room.room_number == room_number)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_hostel(
        self,
        hostel_id: str,
        *,
        only_active: bool = True,
        only_available: bool = False,
    ) -> List[Room]:
        stmt = select(Room).where(Room.hostel_id == hostel_id)
        if only_active:
            stmt = stmt.where(Room.is_active.is_(True))
        if only_available:
            stmt = stmt.where(Room.occupied_beds < Room.total_beds)
        stmt = stmt.order_by(Room.floor, Room.room_number)
        return list(self.session.execute(stmt).scalars().all())

    # ============================================================================
    # OCCUPANCY
    # ============================================================================

    def count_active_occupants(self, room_id: str) -> int:
        """Count ACTIVE students currently referencing the room."""
        stmt = select(func.count(Student.id)).where(
            and_(Student.room_id == room_id, Student.status == StudentStatus.ACTIVE)
        )
        return self.session.execute(stmt).scalar() or 0

    def bed_holder(self, room_id: str, bed_number: str) -> Optional[Student]:
        """Return the ACTIVE student holding the bed, if any."""
        stmt = select(Student).where(
            and_(
                Student.room_id == room_id,
                Student.bed_number == bed_number,
                Student.status == StudentStatus.ACTIVE,
            )
        )
        return self.session.execute(stmt).scalars().first()

    def set_occupied(self, room_id: str, occupied_beds: int) -> int:
        stmt = (
            update(Room)
            .where(and_(Room.id == room_id, Room.total_beds >= occupied_beds))
            .values(occupied_beds=occupied_beds)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    def adjust_occupied(self, room_id: str, delta: int) -> int:
        """
        Add `delta` to occupied_beds only if the result stays in
        [0, total_beds]. Returns the number of rows changed (0 or 1).
        """
        stmt = (
            update(Room)
            .where(
                and_(
                    Room.id == room_id,
                    Room.occupied_beds + delta >= 0,
                    Room.occupied_beds + delta <= Room.total_beds,
                )
            )
            .values(occupied_beds=Room.occupied_beds + delta)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    def resize(self, room_id: str, total_beds: int) -> int:
        """Change capacity only if current occupancy still fits."""
        stmt = (
            update(Room)
            .where(and_(Room.id == room_id, Room.occupied_beds <= total_beds))
            .values(total_beds=total_beds)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount
