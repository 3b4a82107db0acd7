# hostelkit/schemas/payment/payment.py
"""
Payment schemas: proof submission, verification, manual recording and
the read projection exposed for reporting.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from hostelkit.models.base import PaymentMethod, PaymentStatus, PaymentType
from hostelkit.schemas.common import BaseResponseSchema, BaseSchema, PaginatedResponse

__all__ = [
    "ProofSubmission",
    "RecordPaymentRequest",
    "PaymentResponse",
    "PaymentList",
]


class ProofSubmission(BaseSchema):
    proof_ref: str = Field(..., min_length=1, max_length=500)


class RecordPaymentRequest(BaseSchema):
    student_id: str
    amount: Decimal = Field(..., gt=0)
    payment_type: PaymentType = PaymentType.RENT
    payment_method: PaymentMethod = PaymentMethod.CASH
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    description: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(BaseResponseSchema):
    student_id: Optional[str] = None
    hostel_id: str
    receipt_number: str
    amount: Decimal
    payment_type: PaymentType
    payment_method: Optional[PaymentMethod] = None
    month: int
    year: int
    billing_cycle_id: Optional[str] = None
    status: PaymentStatus
    is_verified: bool
    payment_proof: Optional[str] = None
    due_date: Optional[datetime] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    description: Optional[str] = None


PaymentList = PaginatedResponse[PaymentResponse]
