# models/core/room.py
from decimal import Decimal
from typing import List, Union, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostelkit.models.base import RoomType, TimestampModel

if TYPE_CHECKING:
    from hostelkit.models.core.hostel import Hostel


class Room(TimestampModel):
    """
    Room with bed capacity.

    `occupied_beds` is a denormalized counter written only by the capacity
    ledger; it must equal the number of ACTIVE students referencing the room.
    """
    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hostel_id", "room_number", name="uq_room_number_per_hostel"),
        CheckConstraint("total_beds >= 1", name="ck_room_total_beds_positive"),
        CheckConstraint(
            "occupied_beds >= 0 AND occupied_beds <= total_beds",
            name="ck_room_occupied_within_capacity",
        ),
    )

    hostel_id: Mapped[str] = mapped_column(
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    room_number: Mapped[str] = mapped_column(String(20), index=True)
    floor: Mapped[int] = mapped_column(Integer, default=0)
    room_type: Mapped[RoomType] = mapped_column(SAEnum(RoomType, name="room_type"), default=RoomType.DOUBLE)

    total_beds: Mapped[int] = mapped_column(Integer, default=1)
    occupied_beds: Mapped[int] = mapped_column(Integer, default=0)

    rent: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    amenities: Mapped[List[str]] = mapped_column(JSON, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    hostel: Mapped[Union["Hostel", None]] = relationship(back_populates="rooms")

    @property
    def available_beds(self) -> int:
        return self.total_beds - self.occupied_beds

    @property
    def occupancy_rate(self) -> float:
        return (self.occupied_beds / self.total_beds) * 100 if self.total_beds > 0 else 0.0

    def __repr__(self) -> str:
        return f"<Room id={self.id} number={self.room_number!r} {self.occupied_beds}/{self.total_beds}>"
