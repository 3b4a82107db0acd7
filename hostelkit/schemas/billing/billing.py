# hostelkit/schemas/billing/billing.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from hostelkit.models.base import SubscriptionInvoiceStatus
from hostelkit.schemas.common import BaseResponseSchema, BaseSchema

__all__ = [
    "GenerateDuesRequest",
    "BillingError",
    "BillingRunResult",
    "MarkOverdueRequest",
    "OverdueResult",
    "SubscriptionInvoiceRequest",
    "SubscriptionInvoiceResponse",
]


class GenerateDuesRequest(BaseSchema):
    """Target period; both default to the current month and year."""

    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=2000, le=2100)


class BillingError(BaseSchema):
    student_id: str
    error: str


class BillingRunResult(BaseSchema):
    billing_cycle_id: str
    created: int = 0
    skipped: int = 0
    errors: List[BillingError] = Field(default_factory=list)


class MarkOverdueRequest(BaseSchema):
    as_of: Optional[datetime] = None


class OverdueResult(BaseSchema):
    marked: int = 0
    students_refreshed: int = 0


class SubscriptionInvoiceRequest(BaseSchema):
    hostel_id: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class SubscriptionInvoiceResponse(BaseResponseSchema):
    hostel_id: str
    month: int
    year: int
    student_count: int
    rate_per_student: Decimal
    amount: Decimal
    status: SubscriptionInvoiceStatus
    paid_at: Optional[datetime] = None
