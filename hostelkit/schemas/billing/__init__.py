from hostelkit.schemas.billing.billing import (
    BillingError,
    BillingRunResult,
    GenerateDuesRequest,
    MarkOverdueRequest,
    OverdueResult,
    SubscriptionInvoiceRequest,
    SubscriptionInvoiceResponse,
)

__all__ = [
    "GenerateDuesRequest",
    "BillingError",
    "BillingRunResult",
    "MarkOverdueRequest",
    "OverdueResult",
    "SubscriptionInvoiceRequest",
    "SubscriptionInvoiceResponse",
]
