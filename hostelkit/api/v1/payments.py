# hostelkit/api/v1/payments.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hostelkit.api import deps
from hostelkit.api.deps import STAFF_ROLES, Actor
from hostelkit.models.base import PaymentMethod, PaymentStatus, PaymentType
from hostelkit.schemas.payment import (
    PaymentList,
    PaymentResponse,
    ProofSubmission,
    RecordPaymentRequest,
)
from hostelkit.services.payment import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: RecordPaymentRequest,
    actor: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.record_payment(payload, collector_id=actor.id)


@router.get("", response_model=PaymentList)
def list_payments(
    hostel_id: Optional[str] = Query(None),
    student_id: Optional[str] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    payment_type: Optional[PaymentType] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    _: Actor = Depends(deps.get_actor),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.list_payments(
        hostel_id=hostel_id,
        student_id=student_id,
        status=payment_status,
        payment_type=payment_type,
        month=month,
        year=year,
        page=page,
        page_size=page_size,
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    _: Actor = Depends(deps.get_actor),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.get_payment(payment_id)


@router.post("/{payment_id}/proof", response_model=PaymentResponse)
def submit_proof(
    payment_id: str,
    payload: ProofSubmission,
    _: Actor = Depends(deps.get_actor),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.submit_proof(payment_id, payload.proof_ref)


@router.post("/{payment_id}/verify", response_model=PaymentResponse)
def verify_payment(
    payment_id: str,
    actor: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.verify(payment_id, verifier_id=actor.id)


@router.post("/{payment_id}/collect", response_model=PaymentResponse)
def collect_payment(
    payment_id: str,
    payment_method: Optional[PaymentMethod] = Query(None),
    actor: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return payments.collect(payment_id, collector_id=actor.id, payment_method=payment_method)
