from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hostelkit.core.exceptions import (
    AlreadyVerifiedError,
    InvalidTransitionError,
    PaymentNotFoundError,
)
from hostelkit.models.base import FeeStatus, PaymentMethod, PaymentStatus, PaymentType
from hostelkit.models.core import Payment, Student
from hostelkit.schemas.payment import RecordPaymentRequest


@pytest.fixture
def student(make_student):
    return make_student(monthly_fee=Decimal("10000"))


@pytest.fixture
def invoice(payments, student):
    return payments.create_invoice(
        student_id=student.id,
        hostel_id=student.hostel_id,
        amount=Decimal("10000"),
        payment_type=PaymentType.RENT,
        month=3,
        year=2025,
        receipt_number="INV-202503-TEST01",
        billing_cycle_id="2025-03",
    )


class TestTransitions:
    def test_new_invoice_is_unpaid(self, invoice):
        assert invoice.status == PaymentStatus.UNPAID
        assert not invoice.is_verified

    def test_submit_then_verify(self, payments, invoice, student, fetch):
        pending = payments.submit_proof(invoice.id, "uploads/receipt-1.jpg")
        assert pending.status == PaymentStatus.PENDING
        assert pending.payment_proof == "uploads/receipt-1.jpg"

        verified = payments.verify(invoice.id, verifier_id="manager-1")

        assert verified.status == PaymentStatus.COMPLETED
        assert verified.is_verified
        assert verified.verified_by == "manager-1"
        assert verified.paid_at is not None
        assert fetch(Student, student.id).fee_status == FeeStatus.PAID

    def test_verify_twice_is_rejected(self, payments, invoice):
        payments.verify(invoice.id, verifier_id="manager-1")

        with pytest.raises(AlreadyVerifiedError):
            payments.verify(invoice.id, verifier_id="manager-2")

        assert payments.get_payment(invoice.id).verified_by == "manager-1"

    def test_completed_is_terminal(self, payments, invoice):
        payments.collect(invoice.id, collector_id="manager-1")

        with pytest.raises(AlreadyVerifiedError):
            payments.submit_proof(invoice.id, "late-proof.jpg")
        with pytest.raises(InvalidTransitionError):
            payments.mark_overdue(invoice.id)

    def test_resubmitting_proof_replaces_reference(self, payments, invoice):
        payments.submit_proof(invoice.id, "first.jpg")
        resubmitted = payments.submit_proof(invoice.id, "second.jpg")

        assert resubmitted.status == PaymentStatus.PENDING
        assert resubmitted.payment_proof == "second.jpg"

    def test_pending_cannot_become_overdue(self, payments, invoice):
        payments.submit_proof(invoice.id, "proof.jpg")
        with pytest.raises(InvalidTransitionError):
            payments.mark_overdue(invoice.id)

    def test_overdue_can_still_be_paid(self, payments, invoice):
        payments.mark_overdue(invoice.id)
        assert payments.submit_proof(invoice.id, "proof.jpg").status == PaymentStatus.PENDING
        assert payments.verify(invoice.id, "manager-1").status == PaymentStatus.COMPLETED

    def test_collect_records_collector_and_method(self, payments, invoice):
        collected = payments.collect(invoice.id, "manager-1", PaymentMethod.JAZZCASH)

        assert collected.status == PaymentStatus.COMPLETED
        assert collected.payment_method == PaymentMethod.JAZZCASH
        assert collected.verified_by == "manager-1"

    @pytest.mark.parametrize("settle", ["verify", "collect"])
    def test_fee_status_failure_keeps_settlement(self, payments, invoice, student, monkeypatch, fetch, settle):
        def broken_refresh(student_id):
            raise RuntimeError("status store unavailable")

        monkeypatch.setattr(payments, "refresh_fee_status", broken_refresh)

        settled = getattr(payments, settle)(invoice.id, "manager-1")

        assert settled.status == PaymentStatus.COMPLETED
        stored = fetch(Payment, invoice.id)
        assert stored.status == PaymentStatus.COMPLETED
        assert stored.is_verified
        assert fetch(Student, student.id).fee_status == FeeStatus.DUE

    def test_unknown_payment(self, payments):
        with pytest.raises(PaymentNotFoundError):
            payments.verify("missing-payment", "manager-1")


class TestRecordPayment:
    def test_settles_open_invoice_for_period(self, payments, invoice, student):
        recorded = payments.record_payment(
            RecordPaymentRequest(student_id=student.id, amount=Decimal("10000"), month=3, year=2025),
            collector_id="manager-1",
        )

        assert recorded.id == invoice.id
        assert recorded.status == PaymentStatus.COMPLETED
        assert recorded.receipt_number == "INV-202503-TEST01"

    def test_completed_period_is_rejected(self, payments, invoice, student):
        payments.verify(invoice.id, "manager-1")
        with pytest.raises(AlreadyVerifiedError):
            payments.record_payment(
                RecordPaymentRequest(student_id=student.id, amount=Decimal("10000"), month=3, year=2025),
                collector_id="manager-1",
            )

    def test_new_payments_use_running_receipt_sequence(self, payments, student):
        now = datetime.now(timezone.utc)
        prefix = f"RCP-{now.year}{now.month:02d}"

        first = payments.record_payment(
            RecordPaymentRequest(
                student_id=student.id,
                amount=Decimal("500"),
                payment_type=PaymentType.FINE,
                month=3,
                year=2025,
            ),
            collector_id="manager-1",
        )
        second = payments.record_payment(
            RecordPaymentRequest(
                student_id=student.id,
                amount=Decimal("250"),
                payment_type=PaymentType.OTHER,
                month=3,
                year=2025,
            ),
            collector_id="manager-1",
        )

        assert first.receipt_number == f"{prefix}-00001"
        assert second.receipt_number == f"{prefix}-00002"
        assert first.status == PaymentStatus.COMPLETED
        assert first.is_verified


class TestFeeStatus:
    def test_open_invoice_is_due(self, payments, invoice, student):
        assert payments.refresh_fee_status(student.id) == FeeStatus.DUE

    def test_no_open_invoice_is_paid(self, payments, student):
        assert payments.refresh_fee_status(student.id) == FeeStatus.PAID

    def test_overdue_invoice_wins(self, payments, invoice, student):
        payments.mark_overdue(invoice.id)
        assert payments.refresh_fee_status(student.id) == FeeStatus.OVERDUE

    def test_partially_settled_period(self, payments, invoice, student, fetch):
        payments.record_payment(
            RecordPaymentRequest(
                student_id=student.id,
                amount=Decimal("4000"),
                payment_type=PaymentType.OTHER,
                month=3,
                year=2025,
            ),
            collector_id="manager-1",
        )

        assert payments.refresh_fee_status(student.id) == FeeStatus.PARTIAL
        assert fetch(Student, student.id).fee_status == FeeStatus.PARTIAL


class TestListing:
    def test_pagination(self, payments, student):
        for month in (1, 2, 3):
            payments.create_invoice(
                student_id=student.id,
                hostel_id=student.hostel_id,
                amount=Decimal("10000"),
                payment_type=PaymentType.RENT,
                month=month,
                year=2025,
            )

        page = payments.list_payments(student_id=student.id, page=1, page_size=2)

        assert len(page.items) == 2
        assert page.pagination.total_items == 3
        assert page.pagination.total_pages == 2
        assert page.pagination.has_next
        # newest period first
        assert page.items[0].month == 3

    def test_filter_by_status(self, payments, invoice, student):
        payments.verify(invoice.id, "manager-1")

        assert payments.list_payments(status=PaymentStatus.UNPAID).pagination.total_items == 0
        assert payments.list_payments(status=PaymentStatus.COMPLETED).pagination.total_items == 1
