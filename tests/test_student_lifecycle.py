"""
Admission and departure, end to end through the service layer.
"""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from hostelkit.core.exceptions import (
    AuthorizationError,
    BedTakenError,
    HostelNotFoundError,
    PartialAdmissionFailure,
    ReceiptNumberConflictError,
    RoomFullError,
    StudentNotFoundError,
)
from hostelkit.models.base import FeeStatus, PaymentStatus, PaymentType, StudentStatus, UserRole
from hostelkit.models.core import Payment, Room, Student, User
from hostelkit.services.common.security import verify_password


@pytest.fixture
def count_rows(session_factory):
    def _count(model):
        with session_factory() as session:
            return session.execute(select(func.count()).select_from(model)).scalar()

    return _count


class TestAdmission:
    def test_admit_creates_account_student_bed_and_invoice(
        self, lifecycle, room, admission_payload, fetch, payments
    ):
        result = lifecycle.admit(
            admission_payload(room.id, "1", full_name="Ali Raza", cnic="35202-1234567-1"),
            room.hostel_id,
        )

        assert result.username == "ali5671"
        assert result.student.room_id == room.id
        assert result.student.bed_number == "1"
        assert result.student.status == StudentStatus.ACTIVE
        assert fetch(Room, room.id).occupied_beds == 1

        user = fetch(User, result.student.user_id)
        assert user.role == UserRole.STUDENT
        assert verify_password(result.password, user.hashed_password)

        invoices = payments.list_payments(student_id=result.student.id).items
        assert len(invoices) == 1
        assert invoices[0].payment_type == PaymentType.ADMISSION
        assert invoices[0].amount == Decimal("17000")
        assert invoices[0].status == PaymentStatus.UNPAID
        assert invoices[0].receipt_number == result.invoice_receipt_number
        assert fetch(Student, result.student.id).fee_status == FeeStatus.DUE

    def test_username_gets_numeric_suffix_when_taken(self, lifecycle, make_room, admission_payload):
        room = make_room(total_beds=3)
        first = lifecycle.admit(admission_payload(room.id, "1", cnic="35202-1111111-1"), room.hostel_id)
        second = lifecycle.admit(admission_payload(room.id, "2", cnic="61101-9991111-1"), room.hostel_id)

        assert first.username == "ali1111"
        assert second.username == "ali11111"

    def test_unknown_hostel(self, lifecycle, room, admission_payload, count_rows):
        with pytest.raises(HostelNotFoundError):
            lifecycle.admit(admission_payload(room.id), "missing-hostel")
        assert count_rows(User) == 0

    def test_occupancy_scenario(self, lifecycle, room, admission_payload, fetch, count_rows):
        student_a = lifecycle.admit(admission_payload(room.id, "1", full_name="Ahmed Khan"), room.hostel_id)

        with pytest.raises(BedTakenError):
            lifecycle.admit(admission_payload(room.id, "1", full_name="Bilal Shah"), room.hostel_id)
        lifecycle.admit(admission_payload(room.id, "2", full_name="Bilal Shah"), room.hostel_id)

        # full room with a taken bed reports the bed first
        with pytest.raises(BedTakenError):
            lifecycle.admit(admission_payload(room.id, "1", full_name="Chaudhry Asif"), room.hostel_id)
        with pytest.raises(RoomFullError):
            lifecycle.admit(admission_payload(room.id, "3", full_name="Chaudhry Asif"), room.hostel_id)

        assert fetch(Room, room.id).occupied_beds == 2
        assert count_rows(User) == 2
        assert count_rows(Student) == 2

        first = lifecycle.depart(student_a.student.id, UserRole.MANAGER)
        second = lifecycle.depart(student_a.student.id, UserRole.MANAGER)

        assert first.status == StudentStatus.LEFT
        assert second.status == StudentStatus.LEFT
        assert fetch(Room, room.id).occupied_beds == 1

    def test_failed_invoice_step_is_compensated(
        self, lifecycle, room, admission_payload, monkeypatch, fetch, count_rows
    ):
        def broken_invoice(student, when=None):
            raise RuntimeError("billing offline")

        monkeypatch.setattr(lifecycle.billing, "create_admission_invoice", broken_invoice)

        with pytest.raises(PartialAdmissionFailure) as exc_info:
            lifecycle.admit(admission_payload(room.id, "1"), room.hostel_id)

        assert exc_info.value.failed_step == "initial invoice"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert count_rows(User) == 0
        assert count_rows(Student) == 0
        assert count_rows(Payment) == 0
        assert fetch(Room, room.id).occupied_beds == 0

    def test_domain_error_surfaces_unchanged_after_compensation(
        self, lifecycle, room, admission_payload, monkeypatch, fetch, count_rows
    ):
        def conflicting_invoice(student, when=None):
            raise ReceiptNumberConflictError("RCP-202503-00001")

        monkeypatch.setattr(lifecycle.billing, "create_admission_invoice", conflicting_invoice)

        with pytest.raises(ReceiptNumberConflictError):
            lifecycle.admit(admission_payload(room.id, "1"), room.hostel_id)

        assert count_rows(Student) == 0
        assert fetch(Room, room.id).occupied_beds == 0

    def test_bed_freed_by_compensation_can_be_reused(
        self, lifecycle, room, admission_payload, monkeypatch
    ):
        original = lifecycle.billing.create_admission_invoice

        def fail_once(student, when=None):
            monkeypatch.setattr(lifecycle.billing, "create_admission_invoice", original)
            raise RuntimeError("transient")

        monkeypatch.setattr(lifecycle.billing, "create_admission_invoice", fail_once)

        with pytest.raises(PartialAdmissionFailure):
            lifecycle.admit(admission_payload(room.id, "1"), room.hostel_id)
        result = lifecycle.admit(admission_payload(room.id, "1"), room.hostel_id)

        assert result.student.bed_number == "1"


class TestDeparture:
    @pytest.fixture
    def admitted(self, lifecycle, room, admission_payload):
        return lifecycle.admit(admission_payload(room.id, "1"), room.hostel_id)

    def test_manager_soft_departure(self, lifecycle, admitted, fetch):
        result = lifecycle.depart(admitted.student.id, UserRole.MANAGER)

        assert not result.deleted
        student = fetch(Student, admitted.student.id)
        assert student.status == StudentStatus.LEFT
        assert student.leave_date == date.today()
        assert student.room_id is None and student.bed_number is None
        assert not fetch(User, student.user_id).is_active

    def test_departed_bed_can_be_taken(self, lifecycle, room, admitted, admission_payload):
        lifecycle.depart(admitted.student.id, UserRole.MANAGER)
        newcomer = lifecycle.admit(admission_payload(room.id, "1", full_name="Usman Ali"), room.hostel_id)
        assert newcomer.student.bed_number == "1"

    def test_admin_hard_delete(self, lifecycle, room, admitted, fetch, payments):
        result = lifecycle.depart(admitted.student.id, UserRole.ADMIN)

        assert result.deleted
        assert fetch(Student, admitted.student.id) is None
        assert fetch(User, admitted.student.user_id) is None
        assert fetch(Room, room.id).occupied_beds == 0
        # payment history survives without the student reference
        assert payments.list_payments(hostel_id=room.hostel_id).pagination.total_items == 1

        with pytest.raises(StudentNotFoundError):
            lifecycle.depart(admitted.student.id, UserRole.ADMIN)

    def test_students_cannot_remove_students(self, lifecycle, room, admitted, fetch):
        with pytest.raises(AuthorizationError):
            lifecycle.depart(admitted.student.id, UserRole.STUDENT)
        assert fetch(Room, room.id).occupied_beds == 1
