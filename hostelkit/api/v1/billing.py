# hostelkit/api/v1/billing.py
from typing import Optional

from fastapi import APIRouter, Body, Depends

from hostelkit.api import deps
from hostelkit.api.deps import Actor
from hostelkit.models.base import UserRole
from hostelkit.schemas.billing import (
    BillingRunResult,
    GenerateDuesRequest,
    MarkOverdueRequest,
    OverdueResult,
)
from hostelkit.services.billing import BillingCycleService

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.post("/monthly-dues", response_model=BillingRunResult)
def generate_monthly_dues(
    payload: Optional[GenerateDuesRequest] = Body(None),
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN)),
    billing: BillingCycleService = Depends(deps.get_billing_service),
):
    payload = payload or GenerateDuesRequest()
    return billing.generate_monthly_dues(payload.month, payload.year)


@router.post("/mark-overdue", response_model=OverdueResult)
def mark_overdue(
    payload: Optional[MarkOverdueRequest] = Body(None),
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN, UserRole.OWNER)),
    billing: BillingCycleService = Depends(deps.get_billing_service),
):
    payload = payload or MarkOverdueRequest()
    return billing.mark_overdue(payload.as_of)
