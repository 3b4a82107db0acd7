# models/core/payment.py
from datetime import datetime
from decimal import Decimal
from typing import Union

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from hostelkit.models.base import PaymentMethod, PaymentStatus, PaymentType, TimestampModel


class Payment(TimestampModel):
    """
    Invoice/payment record for one student, one period and one amount.

    At most one RENT record may exist per (student, month, year); the
    billing cycle enforces this with existence checks rather than a
    table constraint.
    """
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_positive"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_payment_month_range"),
        Index("ix_payment_student_period", "student_id", "month", "year"),
        Index("ix_payment_hostel_status", "hostel_id", "status"),
        Index("ix_payment_cycle_type", "billing_cycle_id", "payment_type"),
    )

    student_id: Mapped[Union[str, None]] = mapped_column(
        ForeignKey("students.id", ondelete="SET NULL"),
        index=True,
    )
    hostel_id: Mapped[str] = mapped_column(
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    payment_type: Mapped[PaymentType] = mapped_column(SAEnum(PaymentType, name="payment_type"))
    payment_method: Mapped[Union[PaymentMethod, None]] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method")
    )
    status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.UNPAID,
        index=True,
    )

    # Billing period
    month: Mapped[int] = mapped_column(Integer)
    year: Mapped[int] = mapped_column(Integer)
    billing_cycle_id: Mapped[Union[str, None]] = mapped_column(String(7))
    due_date: Mapped[Union[datetime, None]] = mapped_column(DateTime(timezone=True))
    description: Mapped[Union[str, None]] = mapped_column(String(255))

    receipt_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)

    # Proof & verification
    payment_proof: Mapped[Union[str, None]] = mapped_column(String(500))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_by: Mapped[Union[str, None]] = mapped_column(String(36))
    verified_at: Mapped[Union[datetime, None]] = mapped_column(DateTime(timezone=True))
    paid_at: Mapped[Union[datetime, None]] = mapped_column(DateTime(timezone=True))
    collected_by: Mapped[Union[str, None]] = mapped_column(String(36))
    notes: Mapped[Union[str, None]] = mapped_column(String(500))

    @property
    def is_open(self) -> bool:
        return self.status != PaymentStatus.COMPLETED

    def __repr__(self) -> str:
        return f"<Payment id={self.id} receipt={self.receipt_number!r} status={self.status.value}>"
