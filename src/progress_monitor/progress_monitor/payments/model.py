from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class NewPayment:
    project_id: str
    bill_no: str
    bill_date: date
    amount: float
    created_by: str
    created_at: datetime
    package_id: Optional[str] = None


@dataclass(frozen=True)
class Payment:
    """Domain entity: a bill paid against a project, optionally tagged to a package."""

    payment_id: int
    project_id: str
    bill_no: str
    bill_date: date
    amount: float
    created_by: str
    created_at: datetime
    package_id: Optional[str] = None
