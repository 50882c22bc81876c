"""
capopt_platform.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from capopt_platform.db.models import UserRole

_ADMIN_ROLES = frozenset({UserRole.admin.value, UserRole.superadmin.value})


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, resolved from a token and the users table.
    """

    user_id: uuid.UUID
    email: str
    name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role in _ADMIN_ROLES

    @property
    def actor(self) -> str:
        # Stable string used in export/sharing records.
        return self.email


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API and service layers.
