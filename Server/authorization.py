"""
Todo RBAC Server - Authorization Pipeline

Per-request gate between an inbound bearer token and a protected operation:

    UNAUTHENTICATED -> IDENTIFIED -> AUTHORIZED | REJECTED

The token only proves who the caller is. Permissions are always re-read
from the registry, so role changes and user deletion apply on the next
request, not on token expiry.

Every method returns an AuthorizationOutcome; auth failures never raise.
"""

from typing import Iterable, Optional

from errors import ErrorKind
from managers.credential_manager import CredentialManager
from managers.role_registry import RoleRegistry
from models.infrastructure import (
    AuthorizationOutcome,
    CapabilityGuard,
    Guard,
    IdentityContext,
    OwnershipGuard,
)
from permissions import CanAccessOwned, HasAllCapabilities


class AuthorizationPipeline:
    """
    Resolves bearer tokens to live identities and evaluates guards
    """

    def __init__(self, credential_manager: CredentialManager, registry: RoleRegistry):
        self.credential_manager = credential_manager
        self.registry = registry

    @staticmethod
    def ExtractBearerToken(authorization_header: Optional[str]) -> Optional[str]:
        """
        Extract the token from an 'Authorization: Bearer <token>' header value

        Args:
            authorization_header: Raw header value

        Returns:
            str: Token, or None if the header is missing or not a bearer credential
        """
        if not authorization_header:
            return None

        parts = authorization_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None

        return parts[1]

    # ==================== Authentication ====================

    def Authenticate(self, session, authorization_header: Optional[str]) -> AuthorizationOutcome:
        """
        Resolve an Authorization header value to an identity

        Args:
            session: SQLAlchemy session
            authorization_header: Raw header value

        Returns:
            AuthorizationOutcome: Identity or rejection
        """
        return self.AuthenticateToken(session, self.ExtractBearerToken(authorization_header))

    def AuthenticateToken(self, session, token: Optional[str]) -> AuthorizationOutcome:
        """
        Resolve a bearer token to an identity with a live permission snapshot

        Args:
            session: SQLAlchemy session
            token: Bearer token, or None if none was presented

        Returns:
            AuthorizationOutcome: Identity or rejection
        """
        if not token:
            return AuthorizationOutcome.Reject(ErrorKind.NO_CREDENTIAL, "Authentication required")

        result = self.credential_manager.ValidateToken(token)
        if not result.IsValid:
            return AuthorizationOutcome.Reject(ErrorKind.INVALID_TOKEN, "Invalid token")

        # Only the subject is taken from the token
        identity = self.registry.ResolveIdentity(session, result.claims.user_id)
        if identity is None:
            return AuthorizationOutcome.Reject(ErrorKind.IDENTITY_GONE, "User no longer exists")

        return AuthorizationOutcome.Allow(identity)

    # ==================== Guards ====================

    def ApplyGuards(
        self,
        identity: IdentityContext,
        guards: Iterable[Guard] = (),
        resource: object = None
    ) -> AuthorizationOutcome:
        """
        Evaluate guards against an identity's permission snapshot

        When an ownership guard is present, a missing resource is reported as
        ResourceNotFound before any permission is checked.

        Args:
            identity: Authenticated identity
            guards: Guards to evaluate, in order
            resource: Fetched resource for ownership guards (None if not found)

        Returns:
            AuthorizationOutcome: Identity or rejection
        """
        guards = list(guards)

        if resource is None and any(isinstance(guard, OwnershipGuard) for guard in guards):
            return AuthorizationOutcome.Reject(ErrorKind.RESOURCE_NOT_FOUND, "Resource not found", identity)

        for guard in guards:
            if isinstance(guard, CapabilityGuard):
                if not HasAllCapabilities(identity.permissions, guard.required):
                    return AuthorizationOutcome.Reject(
                        ErrorKind.INSUFFICIENT_CAPABILITY, "Insufficient permissions", identity
                    )

            elif isinstance(guard, OwnershipGuard):
                owner_id = getattr(resource, guard.owner_attribute, None)
                if not CanAccessOwned(
                    identity.permissions,
                    owner_id,
                    identity.user_id,
                    guard.own_capability,
                    guard.any_capability
                ):
                    return AuthorizationOutcome.Reject(
                        ErrorKind.INSUFFICIENT_CAPABILITY, "Insufficient permissions for this resource", identity
                    )

            else:
                raise TypeError(f"Unsupported guard: {guard!r}")

        return AuthorizationOutcome.Allow(identity)

    def Authorize(
        self,
        session,
        authorization_header: Optional[str],
        guards: Iterable[Guard] = (),
        resource: object = None
    ) -> AuthorizationOutcome:
        """
        Run the full pipeline: authenticate, then apply guards

        Args:
            session: SQLAlchemy session
            authorization_header: Raw header value
            guards: Guards to evaluate
            resource: Fetched resource for ownership guards

        Returns:
            AuthorizationOutcome: Identity or rejection
        """
        outcome = self.Authenticate(session, authorization_header)
        if not outcome.IsAuthorized:
            return outcome

        return self.ApplyGuards(outcome.identity, guards, resource)
