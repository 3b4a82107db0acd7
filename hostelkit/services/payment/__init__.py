"""
Payment state machine, fee status projection and receipt numbers.
"""
from hostelkit.services.payment.payment_service import ALLOWED_TRANSITIONS, PaymentService

__all__ = ["ALLOWED_TRANSITIONS", "PaymentService"]
