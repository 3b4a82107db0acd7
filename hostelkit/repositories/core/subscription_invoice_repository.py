# hostelkit/repositories/core/subscription_invoice_repository.py
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from hostelkit.models.base import SubscriptionInvoiceStatus
from hostelkit.models.core import HostelSubscriptionInvoice
from hostelkit.repositories.base import BaseRepository


class SubscriptionInvoiceRepository(BaseRepository[HostelSubscriptionInvoice]):
    """Repository for platform subscription invoices."""

    def __init__(self, session: Session):
        super().__init__(HostelSubscriptionInvoice, session)

    def get_for_period(self, hostel_id: str, month: int, year: int) -> Optional[HostelSubscriptionInvoice]:
        stmt = select(HostelSubscriptionInvoice).where(
            and_(
                HostelSubscriptionInvoice.hostel_id == hostel_id,
                HostelSubscriptionInvoice.month == month,
                HostelSubscriptionInvoice.year == year,
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_pending(self, hostel_id: Optional[str] = None) -> List[HostelSubscriptionInvoice]:
        stmt = select(HostelSubscriptionInvoice).where(
            HostelSubscriptionInvoice.status == SubscriptionInvoiceStatus.PENDING
        )
        if hostel_id is not None:
            stmt = stmt.where(HostelSubscriptionInvoice.hostel_id == hostel_id)
        stmt = stmt.order_by(HostelSubscriptionInvoice.year, HostelSubscriptionInvoice.month)
        return list(self.session.execute(stmt).scalars().all())
