# hostelkit/schemas/room/room.py
"""
Room request/response schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from hostelkit.models.base import RoomType
from hostelkit.schemas.common import BaseResponseSchema, BaseSchema

__all__ = [
    "RoomCreate",
    "RoomUpdate",
    "RoomResponse",
]


class RoomCreate(BaseSchema):
    hostel_id: str
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(default=0, ge=0)
    room_type: RoomType = RoomType.DOUBLE
    total_beds: int = Field(..., ge=1, le=50)
    rent: Decimal = Field(default=Decimal("0"), ge=0)
    amenities: List[str] = Field(default_factory=list)

    @field_validator("room_number")
    @classmethod
    def normalize_room_number(cls, v: str) -> str:
        return v.upper()


class RoomUpdate(BaseSchema):
    """Partial update; changing total_beds goes through the capacity ledger."""

    floor: Optional[int] = Field(default=None, ge=0)
    room_type: Optional[RoomType] = None
    total_beds: Optional[int] = Field(default=None, ge=1, le=50)
    rent: Optional[Decimal] = Field(default=None, ge=0)
    amenities: Optional[List[str]] = None


class RoomResponse(BaseResponseSchema):
    hostel_id: str
    room_number: str
    floor: int
    room_type: RoomType
    total_beds: int
    occupied_beds: int
    available_beds: int
    occupancy_rate: float
    rent: Decimal
    amenities: List[str] = Field(default_factory=list)
    is_active: bool
