from hostelkit.schemas.payment.payment import (
    PaymentList,
    PaymentResponse,
    ProofSubmission,
    RecordPaymentRequest,
)

__all__ = [
    "ProofSubmission",
    "RecordPaymentRequest",
    "PaymentResponse",
    "PaymentList",
]
