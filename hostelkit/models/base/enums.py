"""
Enumerations shared by the ORM models and API schemas.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    STUDENT = "STUDENT"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class RoomType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    DORMITORY = "DORMITORY"


class StudentStatus(str, Enum):
    """Residency status; only ACTIVE students hold a bed."""
    ACTIVE = "ACTIVE"
    LEFT = "LEFT"
    EXPELLED = "EXPELLED"


class FeeStatus(str, Enum):
    PAID = "PAID"
    DUE = "DUE"
    PARTIAL = "PARTIAL"
    OVERDUE = "OVERDUE"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class PaymentType(str, Enum):
    RENT = "RENT"
    ADMISSION = "ADMISSION"
    SECURITY = "SECURITY"
    FINE = "FINE"
    OTHER = "OTHER"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    JAZZCASH = "JAZZCASH"
    EASYPAISA = "EASYPAISA"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONE_BILL = "1BILL"


class SubscriptionInvoiceStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# Statuses that still expect money from the student
OPEN_PAYMENT_STATUSES = (
    PaymentStatus.UNPAID,
    PaymentStatus.PENDING,
    PaymentStatus.OVERDUE,
)
