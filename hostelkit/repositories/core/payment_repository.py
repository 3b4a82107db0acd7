# hostelkit/repositories/core/payment_repository.py
"""
Payment repository with period lookups and receipt sequencing.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, func, select, true, update
from sqlalchemy.orm import Session

from hostelkit.models.base import OPEN_PAYMENT_STATUSES, PaymentStatus, PaymentType
from hostelkit.models.core import Payment
from hostelkit.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment entity."""

    def __init__(self, session: Session):
        super().__init__(Payment, session)

    # ============================================================================
    # PERIOD LOOKUPS
    # ============================================================================

    def find_for_period(
        self,
        student_id: str,
        month: int,
        year: int,
        payment_types: Sequence[PaymentType],
        statuses: Optional[Sequence[PaymentStatus]] = None,
    ) -> List[Payment]:
        stmt = select(Payment).where(
            and_(
                Payment.student_id == student_id,
                Payment.month == month,
                Payment.year == year,
                Payment.payment_type.in_(payment_types),
            )
        )
        if statuses is not None:
            stmt = stmt.where(Payment.status.in_(statuses))
        stmt = stmt.order_by(Payment.created_at)
        return list(self.session.execute(stmt).scalars().all())

    def has_invoice_for_period(
        self,
        student_id: str,
        month: int,
        year: int,
        payment_types: Sequence[PaymentType],
    ) -> bool:
        stmt = select(func.count(Payment.id)).where(
            and_(
                Payment.student_id == student_id,
                Payment.month == month,
                Payment.year == year,
                Payment.payment_type.in_(payment_types),
            )
        )
        return (self.session.execute(stmt).scalar() or 0) > 0

    def count_for_cycle(self, billing_cycle_id: str, payment_type: PaymentType) -> int:
        stmt = select(func.count(Payment.id)).where(
            and_(
                Payment.billing_cycle_id == billing_cycle_id,
                Payment.payment_type == payment_type,
            )
        )
        return self.session.execute(stmt).scalar() or 0

    def open_for_student(self, student_id: str) -> List[Payment]:
        stmt = select(Payment).where(
            and_(Payment.student_id == student_id, Payment.status.in_(OPEN_PAYMENT_STATUSES))
        )
        return list(self.session.execute(stmt).scalars().all())

    def completed_periods(self, student_id: str) -> List[Tuple[int, int]]:
        stmt = (
            select(Payment.month, Payment.year)
            .where(and_(Payment.student_id == student_id, Payment.status == PaymentStatus.COMPLETED))
            .distinct()
        )
        return [(row.month, row.year) for row in self.session.execute(stmt).all()]

    def overdue_candidates(self, as_of: datetime) -> List[Payment]:
        stmt = select(Payment).where(
            and_(
                Payment.payment_type == PaymentType.RENT,
                Payment.status == PaymentStatus.UNPAID,
                Payment.due_date.is_not(None),
                Payment.due_date < as_of,
            )
        )
        return list(self.session.execute(stmt).scalars().all())

    def mark_status_if_current(
        self,
        payment_id: str,
        current: PaymentStatus,
        values: Dict[str, Any],
    ) -> int:
        """Apply `values` only while the row is still in `current` status."""
        stmt = (
            update(Payment)
            .where(and_(Payment.id == payment_id, Payment.status == current))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    # ============================================================================
    # LISTING
    # ============================================================================

    def search(
        self,
        *,
        hostel_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Payment], int]:
        conditions = []
        if hostel_id is not None:
            conditions.append(Payment.hostel_id == hostel_id)
        if student_id is not None:
            conditions.append(Payment.student_id == student_id)
        if status is not None:
            conditions.append(Payment.status == status)
        if payment_type is not None:
            conditions.append(Payment.payment_type == payment_type)
        if month is not None:
            conditions.append(Payment.month == month)
        if year is not None:
            conditions.append(Payment.year == year)

        where = and_(true(), *conditions)
        total = self.session.execute(select(func.count(Payment.id)).where(where)).scalar() or 0
        stmt = (
            select(Payment)
            .where(where)
            .order_by(Payment.year.desc(), Payment.month.desc(), Payment.receipt_number)
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all()), total

    # ============================================================================
    # RECEIPTS
    # ============================================================================

    def receipt_exists(self, receipt_number: str) -> bool:
        return self.exists({"receipt_number": receipt_number})

    def next_receipt_number(self, prefix: str, width: int) -> str:
        """
        Next sequential receipt for `prefix` (e.g. ``RCP-202503``).

        Starts from the count of existing receipts under the prefix and
        skips forward past numbers already taken.
        """
        stmt = select(func.count(Payment.id)).where(Payment.receipt_number.like(f"{prefix}-%"))
        sequence = (self.session.execute(stmt).scalar() or 0) + 1
        candidate = f"{prefix}-{sequence:0{width}d}"
        while self.receipt_exists(candidate):
            sequence += 1
            candidate = f"{prefix}-{sequence:0{width}d}"
        return candidate
