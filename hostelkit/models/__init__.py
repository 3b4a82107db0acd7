"""
ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from hostelkit.models.base import Base
from hostelkit.models.core import (
    Hostel,
    HostelSubscriptionInvoice,
    Payment,
    Room,
    Student,
    User,
)

__all__ = [
    "Base",
    "Hostel",
    "HostelSubscriptionInvoice",
    "Payment",
    "Room",
    "Student",
    "User",
]
