"""
Interleaved callers on one room and one billing period.

These run against a file-backed SQLite database so every session holds
its own connection and only sees what other sessions have committed.
"""
from decimal import Decimal

import pytest

from hostelkit.core.exceptions import AlreadyGeneratedError, RoomFullError
from hostelkit.db.init_db import drop_db, init_db
from hostelkit.db.session import build_engine
from hostelkit.models.base import PaymentType
from hostelkit.models.core import Room, Student
from hostelkit.services.billing import BillingCycleService
from hostelkit.services.occupancy import CapacityLedger, OccupancyService


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'hostelkit.db'}")
    init_db(bind=engine)
    yield engine
    drop_db(bind=engine)
    engine.dispose()


class ReconcilingLedger(CapacityLedger):
    """Runs a reconcile from another session just before the first counter change."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.seen = []

    def adjust_within(self, uow, room_id, delta):
        if not self.seen:
            self.seen.append(self.reconcile(room_id).occupied_beds)
        return super().adjust_within(uow, room_id, delta)


class InterleavedOccupancy(OccupancyService):
    """Lets a rival call run once its own availability check has passed."""

    def __init__(self, session_factory, rival):
        super().__init__(session_factory)
        self.rival = rival

    def check_availability(self, *args, **kwargs):
        room = super().check_availability(*args, **kwargs)
        rival, self.rival = self.rival, None
        if rival is not None:
            rival()
        return room


class TestConcurrentAssign:
    def test_reconcile_cannot_see_placement_before_its_increment(
        self, session_factory, occupancy, room, make_student, fetch
    ):
        ledger = ReconcilingLedger(session_factory)
        first, second = make_student(), make_student()

        OccupancyService(session_factory, ledger).assign(first.id, room.id, "1")
        occupancy.assign(second.id, room.id, "2")

        assert ledger.seen == [0]
        assert fetch(Room, room.id).occupied_beds == 2
        assert fetch(Student, first.id).room_id == room.id

    def test_two_assigns_sharing_a_room(self, session_factory, occupancy, room, make_student, fetch):
        first, second = make_student(), make_student()
        service = InterleavedOccupancy(
            session_factory, lambda: occupancy.assign(second.id, room.id, "2")
        )

        service.assign(first.id, room.id, "1")

        assert fetch(Room, room.id).occupied_beds == 2
        assert fetch(Student, first.id).bed_number == "1"
        assert fetch(Student, second.id).bed_number == "2"

    def test_last_free_bed_goes_to_one_caller(self, session_factory, occupancy, make_room, make_student, fetch):
        single = make_room(total_beds=1)
        loser, winner = make_student(), make_student()
        service = InterleavedOccupancy(
            session_factory, lambda: occupancy.assign(winner.id, single.id, "1")
        )

        with pytest.raises(RoomFullError):
            service.assign(loser.id, single.id, "2")

        assert fetch(Room, single.id).occupied_beds == 1
        assert fetch(Student, winner.id).room_id == single.id
        assert fetch(Student, loser.id).room_id is None


class InterleavedBilling(BillingCycleService):
    """Lets a rival run start right before this run bills its first student."""

    def __init__(self, session_factory, payment_service, rival):
        super().__init__(session_factory, payment_service)
        self.rival = rival
        self.rival_outcome = None

    def _bill_student(self, *args, **kwargs):
        rival, self.rival = self.rival, None
        if rival is not None:
            try:
                self.rival_outcome = rival()
            except AlreadyGeneratedError as exc:
                self.rival_outcome = exc
        return super()._bill_student(*args, **kwargs)


class TestConcurrentBillingRuns:
    def test_runs_started_together_bill_each_student_once(
        self, session_factory, billing, payments, make_student
    ):
        students = [make_student(monthly_fee=Decimal("9000")) for _ in range(3)]
        run = InterleavedBilling(
            session_factory, payments, lambda: billing.generate_monthly_dues(3, 2025)
        )

        result = run.generate_monthly_dues(3, 2025)

        assert result.created + run.rival_outcome.created == len(students)
        invoices = payments.list_payments(
            payment_type=PaymentType.RENT, month=3, year=2025, page_size=100
        ).items
        assert sorted(p.student_id for p in invoices) == sorted(s.id for s in students)

    def test_run_arriving_after_first_invoice_is_refused(
        self, session_factory, billing, payments, make_student
    ):
        make_student()
        make_student()
        run = BillingCycleService(session_factory, payments)
        original = run._bill_student
        outcomes = []

        def bill_then_race(*args, **kwargs):
            invoice = original(*args, **kwargs)
            if not outcomes:
                try:
                    outcomes.append(billing.generate_monthly_dues(3, 2025))
                except AlreadyGeneratedError as exc:
                    outcomes.append(exc)
            return invoice

        run._bill_student = bill_then_race

        result = run.generate_monthly_dues(3, 2025)

        assert result.created == 2
        assert isinstance(outcomes[0], AlreadyGeneratedError)
