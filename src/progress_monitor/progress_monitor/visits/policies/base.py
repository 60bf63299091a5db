from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import VisitEvent


class VisitPolicy(ABC):
    """Strategy Pattern: decide whether a visit qualifies an actor for a gated write."""

    name: str = "visit"

    @abstractmethod
    def qualifies(self, event: VisitEvent) -> bool:
        raise NotImplementedError
