# hostelkit/repositories/core/hostel_repository.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hostelkit.models.core import Hostel
from hostelkit.repositories.base import BaseRepository


class HostelRepository(BaseRepository[Hostel]):
    """Repository for Hostel entity."""

    def __init__(self, session: Session):
        super().__init__(Hostel, session)

    def list_active(self) -> List[Hostel]:
        stmt = select(Hostel).where(Hostel.is_active.is_(True)).order_by(Hostel.name)
        return list(self.session.execute(stmt).scalars().all())

    def adjust_totals(self, hostel_id: str, *, rooms_delta: int = 0, beds_delta: int = 0) -> int:
        stmt = (
            update(Hostel)
            .where(Hostel.id == hostel_id)
            .values(
                total_rooms=Hostel.total_rooms + rooms_delta,
                total_beds=Hostel.total_beds + beds_delta,
            )
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount
