from hostelkit.models.core.hostel import Hostel
from hostelkit.models.core.payment import Payment
from hostelkit.models.core.room import Room
from hostelkit.models.core.student import Student
from hostelkit.models.core.subscription_invoice import HostelSubscriptionInvoice
from hostelkit.models.core.user import User

__all__ = [
    "Hostel",
    "HostelSubscriptionInvoice",
    "Payment",
    "Room",
    "Student",
    "User",
]
