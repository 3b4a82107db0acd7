"""
Shared fixtures: an in-memory SQLite database per test and the service
graph wired on top of it.
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from hostelkit.api.deps import ServiceContainer
from hostelkit.db.init_db import drop_db, init_db
from hostelkit.db.session import build_engine, build_session_factory
from hostelkit.main import create_app
from hostelkit.models.base import StudentStatus
from hostelkit.models.core import Hostel, Student
from hostelkit.schemas.room import RoomCreate
from hostelkit.schemas.student import AdmissionRequest

_cnic_sequence = count(1)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    drop_db(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def services(session_factory) -> ServiceContainer:
    return ServiceContainer.build(session_factory)


@pytest.fixture
def ledger(services):
    return services.ledger


@pytest.fixture
def occupancy(services):
    return services.occupancy


@pytest.fixture
def payments(services):
    return services.payments


@pytest.fixture
def billing(services):
    return services.billing


@pytest.fixture
def lifecycle(services):
    return services.students


@pytest.fixture
def rooms(services):
    return services.rooms


@pytest.fixture
def subscriptions(services):
    return services.subscriptions


# --- Data factories ------------------------------------------------------------

@pytest.fixture
def make_hostel(session_factory):
    codes = count(1)

    def _make(name="Green Residency", subscription_rate=Decimal("500"), is_active=True) -> Hostel:
        with session_factory() as session:
            hostel = Hostel(
                name=name,
                code=f"H{next(codes):03d}",
                city="Lahore",
                subscription_rate=subscription_rate,
                is_active=is_active,
            )
            session.add(hostel)
            session.commit()
            return hostel

    return _make


@pytest.fixture
def hostel(make_hostel) -> Hostel:
    return make_hostel()


@pytest.fixture
def make_room(rooms, hostel):
    numbers = count(101)

    def _make(total_beds=3, hostel_id=None, room_number=None, rent=Decimal("8000")):
        return rooms.create_room(
            RoomCreate(
                hostel_id=hostel_id or hostel.id,
                room_number=room_number or str(next(numbers)),
                total_beds=total_beds,
                rent=rent,
            )
        )

    return _make


@pytest.fixture
def room(make_room):
    return make_room(total_beds=2)


@pytest.fixture
def make_student(session_factory, hostel):
    """Insert a student record directly, without an account or a bed."""

    def _make(
        full_name="Test Student",
        monthly_fee=Decimal("10000"),
        hostel_id=None,
        status=StudentStatus.ACTIVE,
    ) -> Student:
        with session_factory() as session:
            student = Student(
                hostel_id=hostel_id or hostel.id,
                full_name=full_name,
                cnic=f"35202-{next(_cnic_sequence):07d}-1",
                monthly_fee=monthly_fee,
                security_deposit=Decimal("0"),
                status=status,
            )
            session.add(student)
            session.commit()
            return student

    return _make


@pytest.fixture
def admission_payload(hostel):
    def _payload(room_id, bed_number="1", full_name="Ali Raza", cnic=None, **overrides) -> AdmissionRequest:
        data = {
            "full_name": full_name,
            "cnic": cnic or f"35202-{next(_cnic_sequence):07d}-1",
            "email": "student@example.com",
            "phone": "03001234567",
            "hostel_id": hostel.id,
            "room_id": room_id,
            "bed_number": bed_number,
            "monthly_fee": Decimal("12000"),
            "security_deposit": Decimal("5000"),
        }
        data.update(overrides)
        return AdmissionRequest(**data)

    return _payload


# --- API -----------------------------------------------------------------------

@pytest.fixture
def client(session_factory):
    app = create_app(session_factory, create_schema=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def actor_headers():
    def _headers(role="ADMIN", actor_id="actor-1"):
        return {"X-Actor-Id": actor_id, "X-Actor-Role": role}

    return _headers


@pytest.fixture
def fetch(session_factory):
    """Load a fresh copy of a row, bypassing any service cache."""

    def _fetch(model, entity_id):
        with session_factory() as session:
            return session.get(model, entity_id)

    return _fetch
