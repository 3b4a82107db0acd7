# hostelkit/services/subscription/subscription_service.py
"""
Platform subscription ledger.

Charges each hostel per active student per month. Kept apart from
student rent: nothing here touches payments or fee status.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from hostelkit.config.settings import settings
from hostelkit.core.exceptions import HostelNotFoundError, InvoiceNotFoundError
from hostelkit.core.logging import get_logger
from hostelkit.models.base import SubscriptionInvoiceStatus
from hostelkit.models.core import HostelSubscriptionInvoice
from hostelkit.repositories.core import (
    HostelRepository,
    StudentRepository,
    SubscriptionInvoiceRepository,
)
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork

logger = get_logger(__name__)


class SubscriptionService:
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def generate_hostel_invoice(self, hostel_id: str, month: int, year: int) -> HostelSubscriptionInvoice:
        """
        Create or refresh the hostel's invoice for a month.

        A PENDING invoice is recalculated from current numbers; a COMPLETED
        one is returned untouched.
        """
        try:
            return self._upsert_invoice(hostel_id, month, year)
        except IntegrityError:
            # created concurrently; the second pass refreshes it
            return self._upsert_invoice(hostel_id, month, year)

    def _upsert_invoice(self, hostel_id: str, month: int, year: int) -> HostelSubscriptionInvoice:
        with UnitOfWork(self.session_factory) as uow:
            hostel = uow.get_repo(HostelRepository).get(hostel_id)
            if hostel is None:
                raise HostelNotFoundError(hostel_id)

            invoices = uow.get_repo(SubscriptionInvoiceRepository)
            invoice = invoices.get_for_period(hostel_id, month, year)
            if invoice is not None and invoice.status == SubscriptionInvoiceStatus.COMPLETED:
                return invoice

            student_count = uow.get_repo(StudentRepository).count_active(hostel_id)
            rate = hostel.subscription_rate
            if rate is None:
                rate = settings.DEFAULT_SUBSCRIPTION_RATE
            amount = Decimal(student_count) * Decimal(rate)

            values = {"student_count": student_count, "rate_per_student": rate, "amount": amount}
            if invoice is None:
                invoice = invoices.create(
                    {"hostel_id": hostel_id, "month": month, "year": year, **values}
                )
            else:
                invoices.update(invoice, values)

        logger.info(
            "Subscription invoice generated",
            extra={
                "invoice_id": invoice.id,
                "hostel_id": hostel_id,
                "student_count": student_count,
                "amount": str(amount),
            },
        )
        return invoice

    def mark_invoice_paid(self, invoice_id: str) -> HostelSubscriptionInvoice:
        """PENDING -> COMPLETED; repeating the call returns the paid invoice."""
        with UnitOfWork(self.session_factory) as uow:
            invoices = uow.get_repo(SubscriptionInvoiceRepository)
            invoice = invoices.get(invoice_id)
            if invoice is None:
                raise InvoiceNotFoundError(invoice_id)
            if invoice.status == SubscriptionInvoiceStatus.COMPLETED:
                return invoice
            invoices.update(
                invoice,
                {"status": SubscriptionInvoiceStatus.COMPLETED, "paid_at": datetime.now(timezone.utc)},
            )

        logger.info("Subscription invoice paid", extra={"invoice_id": invoice_id})
        return invoice

    def list_pending(self, hostel_id: Optional[str] = None) -> List[HostelSubscriptionInvoice]:
        with UnitOfWork(self.session_factory) as uow:
            return uow.get_repo(SubscriptionInvoiceRepository).list_pending(hostel_id)
