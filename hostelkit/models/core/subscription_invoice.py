"""
Hostel subscription invoice model.

Platform-level charge to a hostel, separate from student rent.
"""

from datetime import datetime
from decimal import Decimal
from typing import Union

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from hostelkit.models.base import SubscriptionInvoiceStatus, TimestampModel

__all__ = [
    "HostelSubscriptionInvoice",
]


class HostelSubscriptionInvoice(TimestampModel):
    """
    Monthly platform invoice for a hostel.

    amount = student_count x rate_per_student, one row per (hostel, month, year).
    """

    __tablename__ = "hostel_subscription_invoices"
    __table_args__ = (
        UniqueConstraint("hostel_id", "month", "year", name="uq_subscription_invoice_period"),
        CheckConstraint("amount >= 0", name="ck_subscription_invoice_amount_positive"),
        CheckConstraint("student_count >= 0", name="ck_subscription_invoice_count_positive"),
    )

    hostel_id: Mapped[str] = mapped_column(
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month: Mapped[int] = mapped_column(Integer)
    year: Mapped[int] = mapped_column(Integer)

    student_count: Mapped[int] = mapped_column(Integer, default=0)
    rate_per_student: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    status: Mapped[SubscriptionInvoiceStatus] = mapped_column(
        SAEnum(SubscriptionInvoiceStatus, name="subscription_invoice_status"),
        default=SubscriptionInvoiceStatus.PENDING,
        index=True,
    )
    paid_at: Mapped[Union[datetime, None]] = mapped_column(DateTime(timezone=True))
