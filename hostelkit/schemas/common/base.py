# hostelkit/schemas/common/base.py
"""
Base schema classes and pagination metadata.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")

__all__ = [
    "BaseSchema",
    "BaseResponseSchema",
    "PaginationMeta",
    "PaginatedResponse",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All request and response schemas inherit from this so ORM objects can
    be validated directly and enums keep their type.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseResponseSchema(BaseSchema):
    """Response schema for persisted entities."""

    id: str = Field(..., description="Unique identifier")


class PaginationMeta(BaseSchema):
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)

    @computed_field  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        if self.total_items == 0:
            return 0
        return (self.total_items + self.page_size - 1) // self.page_size

    @computed_field  # type: ignore[misc]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class PaginatedResponse(BaseSchema, Generic[T]):
    """Page of items plus pagination metadata."""

    items: List[T]
    pagination: PaginationMeta
    generated_at: Optional[datetime] = None
