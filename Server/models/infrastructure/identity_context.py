"""
Todo RBAC Server - Identity Context Model

The resolved identity attached to a request once authentication succeeds.
Built from live registry data, never from token claims alone.
"""

from dataclasses import dataclass, field
from typing import FrozenSet


@dataclass(frozen=True)
class IdentityContext:
    """Authenticated user plus the permission snapshot taken for this request"""
    user_id: int
    username: str
    email: str
    role_id: int
    role_name: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def ToDict(self) -> dict:
        """Serialize for API responses (permissions sorted for stable output)"""
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role_name,
            "permissions": sorted(self.permissions),
        }
