# hostelkit/services/payment/payment_service.py
"""
Payment state machine.

    UNPAID  -> PENDING (proof submitted) -> COMPLETED (verified)
    UNPAID  -> COMPLETED (collected by a manager)
    UNPAID  -> OVERDUE -> PENDING | COMPLETED

COMPLETED is terminal. Status writes are conditional on the status that
was read, so two concurrent transitions cannot both win.

The student's ``fee_status`` is a projection over their invoices and is
written only by this service.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Mapping, NoReturn, Optional

from sqlalchemy.exc import IntegrityError

from hostelkit.core.exceptions import (
    AlreadyVerifiedError,
    InvalidTransitionError,
    PaymentNotFoundError,
    ReceiptNumberConflictError,
    StudentNotFoundError,
    TransactionError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.base import FeeStatus, PaymentMethod, PaymentStatus, PaymentType
from hostelkit.models.core import Payment
from hostelkit.repositories.core import PaymentRepository, StudentRepository
from hostelkit.schemas.common import PaginationMeta
from hostelkit.schemas.payment import PaymentList, PaymentResponse, RecordPaymentRequest
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork
from hostelkit.services.payment.receipts import next_receipt_number

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: Mapping[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.UNPAID: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED, PaymentStatus.OVERDUE}),
    PaymentStatus.OVERDUE: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED}),
    # resubmitting proof replaces the previous reference
    PaymentStatus.PENDING: frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED}),
    PaymentStatus.COMPLETED: frozenset(),
}

# one invoice per student and period; manual payments settle it
_PERIOD_INVOICE_TYPES = (PaymentType.RENT, PaymentType.ADMISSION)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _raise_for_integrity(exc: IntegrityError, receipt_number: str) -> NoReturn:
    if "receipt_number" in str(exc.orig):
        raise ReceiptNumberConflictError(receipt_number) from exc
    raise TransactionError("Payment could not be stored", exc) from exc


class PaymentService:
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_payment(self, payment_id: str) -> Payment:
        with UnitOfWork(self.session_factory) as uow:
            payment = uow.get_repo(PaymentRepository).get(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
            return payment

    def list_payments(
        self,
        *,
        hostel_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> PaymentList:
        with UnitOfWork(self.session_factory) as uow:
            items, total = uow.get_repo(PaymentRepository).search(
                hostel_id=hostel_id,
                student_id=student_id,
                status=status,
                payment_type=payment_type,
                month=month,
                year=year,
                skip=(page - 1) * page_size,
                limit=page_size,
            )
        return PaymentList(
            items=[PaymentResponse.model_validate(p) for p in items],
            pagination=PaginationMeta(page=page, page_size=page_size, total_items=total),
            generated_at=_utcnow(),
        )

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def submit_proof(self, payment_id: str, proof_ref: str) -> Payment:
        """Attach a proof reference and move the payment to PENDING."""
        payment = self._transition(payment_id, PaymentStatus.PENDING, {"payment_proof": proof_ref})
        logger.info("Payment proof submitted", extra={"payment_id": payment_id})
        return payment

    def verify(self, payment_id: str, verifier_id: str) -> Payment:
        """
        Mark a payment COMPLETED after checking its proof.

        Raises:
            AlreadyVerifiedError: If the payment is already COMPLETED
        """
        now = _utcnow()
        payment = self._transition(
            payment_id,
            PaymentStatus.COMPLETED,
            {"is_verified": True, "verified_by": verifier_id, "verified_at": now, "paid_at": now},
        )
        logger.info("Payment verified", extra={"payment_id": payment_id, "verifier_id": verifier_id})
        self.try_refresh_fee_status(payment.student_id)
        return payment

    def collect(
        self,
        payment_id: str,
        collector_id: str,
        payment_method: Optional[PaymentMethod] = None,
    ) -> Payment:
        """Manager-entered settlement of an open invoice, no proof step."""
        now = _utcnow()
        values: Dict[str, Any] = {
            "is_verified": True,
            "verified_by": collector_id,
            "verified_at": now,
            "paid_at": now,
            "collected_by": collector_id,
        }
        if payment_method is not None:
            values["payment_method"] = payment_method
        payment = self._transition(payment_id, PaymentStatus.COMPLETED, values)
        logger.info("Payment collected", extra={"payment_id": payment_id, "collector_id": collector_id})
        self.try_refresh_fee_status(payment.student_id)
        return payment

    def mark_overdue(self, payment_id: str) -> Payment:
        return self._transition(payment_id, PaymentStatus.OVERDUE, {})

    def record_payment(self, data: RecordPaymentRequest, collector_id: str) -> Payment:
        """
        Record money received by a manager.

        A RENT or ADMISSION payment for a period with an open invoice settles
        that invoice; otherwise a new COMPLETED payment is created with the
        next receipt number in the running sequence.
        """
        with UnitOfWork(self.session_factory) as uow:
            student = uow.get_repo(StudentRepository).get(data.student_id)
            if student is None:
                raise StudentNotFoundError(data.student_id)
            hostel_id = student.hostel_id
            existing = []
            if data.payment_type in _PERIOD_INVOICE_TYPES:
                existing = uow.get_repo(PaymentRepository).find_for_period(
                    data.student_id, data.month, data.year, [data.payment_type]
                )

        open_invoices = [p for p in existing if p.is_open]
        if open_invoices:
            return self.collect(open_invoices[0].id, collector_id, data.payment_method)
        if existing:
            raise AlreadyVerifiedError(existing[0].id, PaymentStatus.COMPLETED.value)

        now = _utcnow()
        try:
            with UnitOfWork(self.session_factory) as uow:
                repo = uow.get_repo(PaymentRepository)
                receipt_number = next_receipt_number(repo, now)
                payment = repo.create(
                    {
                        "student_id": data.student_id,
                        "hostel_id": hostel_id,
                        "amount": data.amount,
                        "payment_type": data.payment_type,
                        "payment_method": data.payment_method,
                        "status": PaymentStatus.COMPLETED,
                        "month": data.month,
                        "year": data.year,
                        "description": data.description,
                        "notes": data.notes,
                        "receipt_number": receipt_number,
                        "is_verified": True,
                        "verified_by": collector_id,
                        "verified_at": now,
                        "paid_at": now,
                        "collected_by": collector_id,
                    }
                )
        except IntegrityError as exc:
            _raise_for_integrity(exc, receipt_number)

        logger.info(
            "Payment recorded",
            extra={
                "payment_id": payment.id,
                "student_id": data.student_id,
                "receipt_number": receipt_number,
                "amount": str(data.amount),
            },
        )
        self.try_refresh_fee_status(data.student_id)
        return payment

    def create_invoice(
        self,
        *,
        student_id: str,
        hostel_id: str,
        amount: Decimal,
        payment_type: PaymentType,
        month: int,
        year: int,
        receipt_number: Optional[str] = None,
        billing_cycle_id: Optional[str] = None,
        due_date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Payment:
        """
        Create an UNPAID invoice. Without an explicit receipt number the
        next number of the running sequence is used.
        """
        try:
            with UnitOfWork(self.session_factory) as uow:
                repo = uow.get_repo(PaymentRepository)
                receipt_number = receipt_number or next_receipt_number(repo)
                payment = repo.create(
                    {
                        "student_id": student_id,
                        "hostel_id": hostel_id,
                        "amount": amount,
                        "payment_type": payment_type,
                        "status": PaymentStatus.UNPAID,
                        "month": month,
                        "year": year,
                        "billing_cycle_id": billing_cycle_id,
                        "due_date": due_date,
                        "description": description,
                        "receipt_number": receipt_number,
                    }
                )
        except IntegrityError as exc:
            _raise_for_integrity(exc, receipt_number)

        logger.info(
            "Invoice created",
            extra={
                "payment_id": payment.id,
                "student_id": student_id,
                "receipt_number": receipt_number,
                "payment_type": payment_type.value,
            },
        )
        return payment

    def delete_invoice(self, payment_id: str) -> None:
        with UnitOfWork(self.session_factory) as uow:
            repo = uow.get_repo(PaymentRepository)
            payment = repo.get(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
            repo.delete(payment)
        logger.info("Invoice deleted", extra={"payment_id": payment_id})

    # ------------------------------------------------------------------ #
    # Fee status projection
    # ------------------------------------------------------------------ #

    def refresh_fee_status(self, student_id: str) -> FeeStatus:
        """
        Recompute the student's fee status from their invoices:
        no open invoice is PAID, any OVERDUE one is OVERDUE, an open
        invoice for a period that also has a completed payment is
        PARTIAL, anything else is DUE.
        """
        with UnitOfWork(self.session_factory) as uow:
            student = uow.get_repo(StudentRepository).get(student_id)
            if student is None:
                raise StudentNotFoundError(student_id)
            repo = uow.get_repo(PaymentRepository)
            open_invoices = repo.open_for_student(student_id)

            if not open_invoices:
                fee_status = FeeStatus.PAID
            elif any(p.status == PaymentStatus.OVERDUE for p in open_invoices):
                fee_status = FeeStatus.OVERDUE
            else:
                completed = set(repo.completed_periods(student_id))
                if any((p.month, p.year) in completed for p in open_invoices):
                    fee_status = FeeStatus.PARTIAL
                else:
                    fee_status = FeeStatus.DUE

            if student.fee_status != fee_status:
                student.fee_status = fee_status
                logger.info(
                    "Fee status updated",
                    extra={"student_id": student_id, "fee_status": fee_status.value},
                )
        return fee_status

    def try_refresh_fee_status(self, student_id: Optional[str]) -> None:
        # the payment row is the source of truth; a stale display status is tolerated
        if student_id is None:
            return
        try:
            self.refresh_fee_status(student_id)
        except Exception:
            logger.exception("Fee status refresh failed", extra={"student_id": student_id})

    def _transition(
        self,
        payment_id: str,
        target: PaymentStatus,
        values: Dict[str, Any],
    ) -> Payment:
        with UnitOfWork(self.session_factory) as uow:
            repo = uow.get_repo(PaymentRepository)
            payment = repo.get(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)

            current = payment.status
            self._check_transition(payment_id, current, target)
            if not repo.mark_status_if_current(payment_id, current, {"status": target, **values}):
                # lost a race; report against the state that won
                uow.rollback()
                raise InvalidTransitionError(
                    payment_id,
                    current.value,
                    target.value,
                    message="Payment status changed concurrently",
                )

        logger.debug(
            "Payment transition",
            extra={"payment_id": payment_id, "from_status": current.value, "to_status": target.value},
        )
        return self.get_payment(payment_id)

    @staticmethod
    def _check_transition(payment_id: str, current: PaymentStatus, target: PaymentStatus) -> None:
        if current == PaymentStatus.COMPLETED:
            raise AlreadyVerifiedError(payment_id, target.value)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(payment_id, current.value, target.value)
