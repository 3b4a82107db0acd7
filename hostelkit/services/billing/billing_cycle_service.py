# hostelkit/services/billing/billing_cycle_service.py
"""
Billing cycle generator.

Creates one UNPAID rent invoice per active student for a month. Runs
only when triggered by an operator; there is no scheduler.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

from hostelkit.config.settings import settings
from hostelkit.core.exceptions import (
    AlreadyGeneratedError,
    InvalidTransitionError,
    ReceiptNumberConflictError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.base import PaymentStatus, PaymentType
from hostelkit.models.core import Payment, Student
from hostelkit.repositories.core import HostelRepository, PaymentRepository, StudentRepository
from hostelkit.schemas.billing import BillingError, BillingRunResult, OverdueResult
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork
from hostelkit.services.payment.payment_service import PaymentService
from hostelkit.services.payment.receipts import rent_receipt_number

logger = get_logger(__name__)

# Either invoice type covers a student's rent for the period
RENT_COVERING_TYPES = (PaymentType.RENT, PaymentType.ADMISSION)


def billing_cycle_id(month: int, year: int) -> str:
    return f"{year}-{month:02d}"


def resolve_period(month: Optional[int] = None, year: Optional[int] = None) -> Tuple[int, int]:
    today = datetime.now(timezone.utc)
    return month or today.month, year or today.year


def due_date_for(month: int, year: int) -> datetime:
    day = min(settings.BILLING_DUE_DAY, calendar.monthrange(year, month)[1])
    return datetime(year, month, day, 23, 59, 59, tzinfo=timezone.utc)


class BillingCycleService:
    """
    Monthly rent generation and overdue marking.

    Per (month, year) a cycle is either not generated or generated; once
    any RENT invoice carries the cycle id, further runs are refused.
    """

    def __init__(self, session_factory: SessionFactory, payment_service: PaymentService) -> None:
        self.session_factory = session_factory
        self.payments = payment_service

    def generate_monthly_dues(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> BillingRunResult:
        """
        Create the rent invoices for a month.

        Students that already have a RENT or ADMISSION invoice for the
        period, or no positive monthly fee, are skipped. A failure for one
        student is logged and reported without stopping the run.

        Raises:
            AlreadyGeneratedError: If rent invoices for the cycle exist
        """
        month, year = resolve_period(month, year)
        cycle_id = billing_cycle_id(month, year)
        result = BillingRunResult(billing_cycle_id=cycle_id)

        with UnitOfWork(self.session_factory) as uow:
            existing = uow.get_repo(PaymentRepository).count_for_cycle(cycle_id, PaymentType.RENT)
            if existing:
                logger.warning(
                    "Billing cycle already generated",
                    extra={"billing_cycle_id": cycle_id, "existing_count": existing},
                )
                raise AlreadyGeneratedError(cycle_id, existing)
            hostels = uow.get_repo(HostelRepository).list_active()

        logger.info(
            "Billing run started",
            extra={"billing_cycle_id": cycle_id, "hostel_count": len(hostels)},
        )

        due_date = due_date_for(month, year)
        description = f"Monthly Rent - {calendar.month_name[month]} {year}"

        for hostel in hostels:
            with UnitOfWork(self.session_factory) as uow:
                students = uow.get_repo(StudentRepository).list_active(hostel.id)

            for student in students:
                try:
                    created = self._bill_student(student, month, year, cycle_id, due_date, description)
                except ReceiptNumberConflictError:
                    result.skipped += 1
                    continue
                except Exception as exc:
                    logger.error(
                        "Billing failed for student",
                        exc_info=True,
                        extra={"billing_cycle_id": cycle_id, "student_id": student.id},
                    )
                    result.errors.append(BillingError(student_id=student.id, error=str(exc)))
                    continue

                if created:
                    result.created += 1
                else:
                    result.skipped += 1

        logger.info(
            "Billing run finished",
            extra={
                "billing_cycle_id": cycle_id,
                "invoices_created": result.created,
                "skipped": result.skipped,
                "errors": len(result.errors),
            },
        )
        return result

    def _bill_student(
        self,
        student: Student,
        month: int,
        year: int,
        cycle_id: str,
        due_date: datetime,
        description: str,
    ) -> Optional[Payment]:
        with UnitOfWork(self.session_factory) as uow:
            already_billed = uow.get_repo(PaymentRepository).has_invoice_for_period(
                student.id, month, year, RENT_COVERING_TYPES
            )
        if already_billed:
            return None
        if not student.monthly_fee or student.monthly_fee <= Decimal("0"):
            return None

        invoice = self.payments.create_invoice(
            student_id=student.id,
            hostel_id=student.hostel_id,
            amount=student.monthly_fee,
            payment_type=PaymentType.RENT,
            month=month,
            year=year,
            receipt_number=rent_receipt_number(student.id, month, year),
            billing_cycle_id=cycle_id,
            due_date=due_date,
            description=description,
        )
        self.payments.try_refresh_fee_status(student.id)
        return invoice

    def create_admission_invoice(self, student: Student, when: Optional[datetime] = None) -> Payment:
        """Initial invoice for a new student: first month's fee plus deposit."""
        when = when or datetime.now(timezone.utc)
        invoice = self.payments.create_invoice(
            student_id=student.id,
            hostel_id=student.hostel_id,
            amount=(student.monthly_fee or Decimal("0")) + (student.security_deposit or Decimal("0")),
            payment_type=PaymentType.ADMISSION,
            month=when.month,
            year=when.year,
            description=f"Admission - {calendar.month_name[when.month]} {when.year}",
        )
        self.payments.try_refresh_fee_status(student.id)
        return invoice

    def mark_overdue(self, as_of: Optional[datetime] = None) -> OverdueResult:
        """Move UNPAID rent invoices past their due date to OVERDUE."""
        as_of = as_of or datetime.now(timezone.utc)
        with UnitOfWork(self.session_factory) as uow:
            candidates = uow.get_repo(PaymentRepository).overdue_candidates(as_of)

        result = OverdueResult()
        students = set()
        for payment in candidates:
            if payment.status != PaymentStatus.UNPAID:
                continue
            try:
                self.payments.mark_overdue(payment.id)
            except InvalidTransitionError:
                # settled or submitted since the candidates were read
                continue
            result.marked += 1
            if payment.student_id:
                students.add(payment.student_id)

        for student_id in students:
            self.payments.try_refresh_fee_status(student_id)
            result.students_refreshed += 1

        logger.info(
            "Overdue invoices marked",
            extra={"marked": result.marked, "students_refreshed": result.students_refreshed},
        )
        return result
