"""
Todo RBAC Server - Authorization Guard Models

The closed set of guard predicates the authorization pipeline understands.
Protected operations declare guards instead of composing checks inline.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class CapabilityGuard:
    """Passes when the snapshot holds every required permission"""
    required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OwnershipGuard:
    """
    Passes when the snapshot holds any_capability, or holds own_capability
    and the resource's owner is the current user
    """
    own_capability: str
    any_capability: str
    owner_attribute: str = "user_id"


Guard = Union[CapabilityGuard, OwnershipGuard]
