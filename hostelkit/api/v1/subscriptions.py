# hostelkit/api/v1/subscriptions.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hostelkit.api import deps
from hostelkit.api.deps import Actor
from hostelkit.models.base import UserRole
from hostelkit.schemas.billing import SubscriptionInvoiceRequest, SubscriptionInvoiceResponse
from hostelkit.services.subscription import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["Platform Subscriptions"])


@router.post(
    "/invoices",
    response_model=SubscriptionInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_invoice(
    payload: SubscriptionInvoiceRequest,
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN)),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return subscriptions.generate_hostel_invoice(payload.hostel_id, payload.month, payload.year)


@router.get("/invoices/pending", response_model=List[SubscriptionInvoiceResponse])
def list_pending(
    hostel_id: Optional[str] = Query(None),
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN, UserRole.OWNER)),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return subscriptions.list_pending(hostel_id)


@router.post("/invoices/{invoice_id}/paid", response_model=SubscriptionInvoiceResponse)
def mark_paid(
    invoice_id: str,
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN)),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return subscriptions.mark_invoice_paid(invoice_id)
