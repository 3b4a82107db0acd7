"""
Base models package.

Provides the declarative base, abstract model classes and enums for all
database models.
"""

from hostelkit.models.base.base_model import Base, BaseModel, TimestampModel
from hostelkit.models.base.enums import (
    OPEN_PAYMENT_STATUSES,
    FeeStatus,
    Gender,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    RoomType,
    StudentStatus,
    SubscriptionInvoiceStatus,
    UserRole,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "FeeStatus",
    "Gender",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentType",
    "RoomType",
    "StudentStatus",
    "SubscriptionInvoiceStatus",
    "UserRole",
    "OPEN_PAYMENT_STATUSES",
]
