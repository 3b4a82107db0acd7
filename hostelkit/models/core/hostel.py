# models/core/hostel.py
from decimal import Decimal
from typing import List, Union, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostelkit.models.base import TimestampModel

if TYPE_CHECKING:
    from hostelkit.models.core.room import Room


class Hostel(TimestampModel):
    """Tenant entity; rooms, students and payments are scoped to a hostel."""
    __tablename__ = "hostels"

    name: Mapped[str] = mapped_column(String(255), index=True)
    code: Mapped[str] = mapped_column(String(10), unique=True, index=True)
    city: Mapped[Union[str, None]] = mapped_column(String(100))

    # Platform billing rate charged per active student
    subscription_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    # Aggregates maintained alongside room configuration changes
    total_rooms: Mapped[int] = mapped_column(Integer, default=0)
    total_beds: Mapped[int] = mapped_column(Integer, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    rooms: Mapped[List["Room"]] = relationship(back_populates="hostel")

    def __repr__(self) -> str:
        return f"<Hostel id={self.id} name={self.name!r} code={self.code!r}>"
