from __future__ import annotations

from typing import Optional, Protocol

from .model import NewPayment, Payment


class PaymentRepository(Protocol):
    def add(self, payment: NewPayment) -> Payment:
        raise NotImplementedError

    def total_paid(self, project_id: str, package_id: Optional[str] = None) -> float:
        """Sum for the whole project, or only payments tagged to `package_id`."""
        raise NotImplementedError
