from hostelkit.repositories.core.hostel_repository import HostelRepository
from hostelkit.repositories.core.payment_repository import PaymentRepository
from hostelkit.repositories.core.room_repository import RoomRepository
from hostelkit.repositories.core.student_repository import StudentRepository
from hostelkit.repositories.core.subscription_invoice_repository import SubscriptionInvoiceRepository
from hostelkit.repositories.core.user_repository import UserRepository

__all__ = [
    "HostelRepository",
    "PaymentRepository",
    "RoomRepository",
    "StudentRepository",
    "SubscriptionInvoiceRepository",
    "UserRepository",
]
