from __future__ import annotations

from typing import Optional, Protocol

from .model import Officer


class OfficerRepository(Protocol):
    """Read-only view of the identity/org directory.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_by_code(self, officer_code: str) -> Optional[Officer]:
        raise NotImplementedError
