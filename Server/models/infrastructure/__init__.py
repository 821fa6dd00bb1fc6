"""
Todo RBAC Server - Infrastructure Models Package

This package contains dataclass models used by the authorization pipeline:
resolved identities, guard predicates, token validation results and
pipeline outcomes.
"""

from models.infrastructure.identity_context import IdentityContext
from models.infrastructure.guards import CapabilityGuard, OwnershipGuard, Guard
from models.infrastructure.authorization_outcome import AuthorizationOutcome, Rejection
from models.infrastructure.token_validation import TokenFailure, TokenValidationResult

__all__ = [
    'IdentityContext',
    'CapabilityGuard',
    'OwnershipGuard',
    'Guard',
    'AuthorizationOutcome',
    'Rejection',
    'TokenFailure',
    'TokenValidationResult',
]
