# hostelkit/api/deps.py
"""
Request dependencies: service wiring and the acting principal.

Services are built once per application from a session factory and
stored on ``app.state.services``. Authentication happens upstream; the
authenticated principal arrives in the X-Actor-Id / X-Actor-Role headers.

Example usage in a router:
    @router.post("/{payment_id}/verify")
    def verify(
        payment_id: str,
        actor: Actor = Depends(deps.require_roles(UserRole.ADMIN, UserRole.MANAGER)),
        payments: PaymentService = Depends(deps.get_payment_service),
    ):
        ...
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, Request

from hostelkit.core.exceptions import AuthorizationError
from hostelkit.models.base import UserRole
from hostelkit.services.billing import BillingCycleService
from hostelkit.services.common import SessionFactory
from hostelkit.services.occupancy import CapacityLedger, OccupancyService
from hostelkit.services.payment import PaymentService
from hostelkit.services.room import RoomService
from hostelkit.services.student import StudentLifecycleService
from hostelkit.services.subscription import SubscriptionService


@dataclass
class ServiceContainer:
    ledger: CapacityLedger
    occupancy: OccupancyService
    payments: PaymentService
    billing: BillingCycleService
    students: StudentLifecycleService
    rooms: RoomService
    subscriptions: SubscriptionService

    @classmethod
    def build(cls, session_factory: SessionFactory) -> "ServiceContainer":
        ledger = CapacityLedger(session_factory)
        occupancy = OccupancyService(session_factory, ledger)
        payments = PaymentService(session_factory)
        billing = BillingCycleService(session_factory, payments)
        return cls(
            ledger=ledger,
            occupancy=occupancy,
            payments=payments,
            billing=billing,
            students=StudentLifecycleService(session_factory, occupancy, billing),
            rooms=RoomService(session_factory, ledger),
            subscriptions=SubscriptionService(session_factory),
        )


# --- Services ------------------------------------------------------------------

def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_room_service(services: ServiceContainer = Depends(get_services)) -> RoomService:
    return services.rooms


def get_occupancy_service(services: ServiceContainer = Depends(get_services)) -> OccupancyService:
    return services.occupancy


def get_student_service(services: ServiceContainer = Depends(get_services)) -> StudentLifecycleService:
    return services.students


def get_payment_service(services: ServiceContainer = Depends(get_services)) -> PaymentService:
    return services.payments


def get_billing_service(services: ServiceContainer = Depends(get_services)) -> BillingCycleService:
    return services.billing


def get_subscription_service(services: ServiceContainer = Depends(get_services)) -> SubscriptionService:
    return services.subscriptions


# --- Principal -----------------------------------------------------------------

@dataclass(frozen=True)
class Actor:
    id: str
    role: UserRole


def get_actor(
    x_actor_id: str = Header(..., alias="X-Actor-Id"),
    x_actor_role: str = Header(..., alias="X-Actor-Role"),
) -> Actor:
    try:
        role = UserRole(x_actor_role.upper())
    except ValueError as exc:
        raise AuthorizationError(f"Unknown role {x_actor_role!r}") from exc
    return Actor(id=x_actor_id, role=role)


def require_roles(*roles: UserRole) -> Callable[..., Actor]:
    """Dependency factory admitting only the given roles."""

    def _checker(actor: Actor = Depends(get_actor)) -> Actor:
        if actor.role not in roles:
            raise AuthorizationError(
                "Insufficient role for this operation",
                ", ".join(role.value for role in roles),
            )
        return actor

    return _checker


STAFF_ROLES = (UserRole.ADMIN, UserRole.OWNER, UserRole.MANAGER)
