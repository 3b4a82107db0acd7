# hostelkit/schemas/student/student.py
"""
Student admission, move and response schemas.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from hostelkit.models.base import FeeStatus, Gender, StudentStatus
from hostelkit.schemas.common import BaseResponseSchema, BaseSchema

__all__ = [
    "AdmissionRequest",
    "MoveRequest",
    "StudentResponse",
    "AdmissionResult",
    "DepartureResult",
]


class AdmissionRequest(BaseSchema):
    """Full profile plus the target room and bed."""

    full_name: str = Field(..., min_length=2, max_length=100)
    father_name: Optional[str] = Field(default=None, max_length=100)
    cnic: str = Field(..., min_length=13, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    permanent_address: Optional[str] = Field(default=None, max_length=500)

    emergency_contact_name: Optional[str] = Field(default=None, max_length=100)
    emergency_contact_relation: Optional[str] = Field(default=None, max_length=50)
    emergency_contact_phone: Optional[str] = Field(default=None, max_length=20)

    institution: Optional[str] = Field(default=None, max_length=200)
    course: Optional[str] = Field(default=None, max_length=100)

    hostel_id: str
    room_id: str
    bed_number: str = Field(..., min_length=1, max_length=10)
    monthly_fee: Decimal = Field(default=Decimal("0"), ge=0)
    security_deposit: Decimal = Field(default=Decimal("0"), ge=0)
    join_date: Optional[date] = None

    @field_validator("cnic")
    @classmethod
    def validate_cnic(cls, v: str) -> str:
        digits = "".join(ch for ch in v if ch.isdigit())
        if len(digits) != 13:
            raise ValueError("CNIC must contain 13 digits")
        return v


class MoveRequest(BaseSchema):
    target_room_id: str
    target_bed_number: str = Field(..., min_length=1, max_length=10)


class StudentResponse(BaseResponseSchema):
    hostel_id: str
    user_id: Optional[str] = None
    full_name: str
    cnic: str
    room_id: Optional[str] = None
    bed_number: Optional[str] = None
    monthly_fee: Decimal
    security_deposit: Decimal
    fee_status: FeeStatus
    status: StudentStatus
    join_date: Optional[date] = None
    leave_date: Optional[date] = None


class AdmissionResult(BaseSchema):
    """Admitted student plus the generated credentials, shown once."""

    student: StudentResponse
    username: str
    password: str
    invoice_receipt_number: str


class DepartureResult(BaseSchema):
    student_id: str
    deleted: bool
    status: Optional[StudentStatus] = None
