from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Officer:
    """Identity directory record for an authenticated principal.

    Owned by the hierarchy tooling; this core only reads it.
    """

    officer_code: str
    name: str
    role: Role
    org_unit_path: str
    master_face_url: Optional[str] = None
    is_active: bool = True

    @property
    def has_enrolled_face(self) -> bool:
        return bool(self.master_face_url)
