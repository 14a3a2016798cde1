"""
Authentication-related models.

The caller identity is established upstream; these models carry it through
the request.
"""

from typing import NamedTuple

ADMIN_ROLE = "ADMIN"


class AuthUser(NamedTuple):
    """Authenticated caller forwarded by the upstream auth layer."""

    id: str
    role: str = "USER"

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == ADMIN_ROLE
