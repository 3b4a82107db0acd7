from hostelkit.services.billing.billing_cycle_service import (
    BillingCycleService,
    billing_cycle_id,
    due_date_for,
)

__all__ = ["BillingCycleService", "billing_cycle_id", "due_date_for"]
