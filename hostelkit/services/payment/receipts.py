# hostelkit/services/payment/receipts.py
"""
Receipt number minting.

Two formats exist:
    INV-202503-1A2B3C     deterministic rent invoice number per student/period
    RCP-202503-00042      running per-month sequence for everything else
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from hostelkit.config.settings import settings
from hostelkit.repositories.core import PaymentRepository


def rent_receipt_number(student_id: str, month: int, year: int) -> str:
    suffix = student_id.replace("-", "")[-settings.RECEIPT_SUFFIX_LENGTH:].upper()
    return f"{settings.RENT_RECEIPT_PREFIX}-{year}{month:02d}-{suffix}"


def next_receipt_number(repo: PaymentRepository, when: Optional[datetime] = None) -> str:
    """Next number in the running sequence for the month of `when` (default now)."""
    when = when or datetime.now(timezone.utc)
    prefix = f"{settings.RECEIPT_PREFIX}-{when.year}{when.month:02d}"
    return repo.next_receipt_number(prefix, settings.RECEIPT_SEQUENCE_WIDTH)
