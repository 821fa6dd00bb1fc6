"""
Todo RBAC Server - Authentication Dependencies

This module wires the authorization pipeline into FastAPI:
- The process-wide credential manager and role registry
- Identity dependency for protected routes
- Dependency factories for permission and ownership guards
- Credential check used by the login endpoint

Rejections are raised as ApiError and rendered by the handler in server.py.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from authorization import AuthorizationPipeline
from database import GetDbSession
from errors import ApiError, ErrorKind
from managers.credential_manager import CredentialManager
from managers.role_registry import RoleRegistry
from models.auth import TokenClaims
from models.database import Todo, User
from models.infrastructure import AuthorizationOutcome, CapabilityGuard, IdentityContext, OwnershipGuard

# Initialized in server.py lifespan handler from settings
credential_manager: CredentialManager = None

role_registry = RoleRegistry()


def GetAuthorizationPipeline() -> AuthorizationPipeline:
    """FastAPI dependency returning the pipeline bound to the configured managers"""
    if credential_manager is None:
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Authentication is not configured")
    return AuthorizationPipeline(credential_manager, role_registry)


def RaiseIfRejected(outcome: AuthorizationOutcome) -> IdentityContext:
    """
    Convert a pipeline rejection into an ApiError

    Args:
        outcome: Result from the authorization pipeline

    Returns:
        IdentityContext: The authorized identity

    Raises:
        ApiError: If the outcome is a rejection
    """
    if outcome.rejection is not None:
        raise ApiError(outcome.rejection.kind, outcome.rejection.message)
    return outcome.identity


# ==================== Authentication Dependencies ====================

def GetCurrentIdentity(
    request: Request,
    authorization: Optional[str] = Header(None),
    db_session: Session = Depends(GetDbSession),
    pipeline: AuthorizationPipeline = Depends(GetAuthorizationPipeline)
) -> IdentityContext:
    """
    FastAPI dependency to get the current authenticated identity
    Parses the Authorization header, validates the bearer token and
    resolves a live permission snapshot.
    FastAPI caches the result, so this runs once per request.

    Returns:
        IdentityContext: The authenticated identity

    Raises:
        ApiError: NoCredential, InvalidToken or IdentityGone
    """
    identity = RaiseIfRejected(pipeline.Authorize(db_session, authorization))

    request.state.identity = identity
    return identity


def RequirePermissions(*permission_names: str):
    """
    Dependency factory requiring every listed permission

    Args:
        permission_names: Required permission names

    Returns:
        Dependency function returning the IdentityContext

    Usage:
        @router.get("/api/users")
        async def list_users(identity: IdentityContext = Depends(RequirePermissions("user:manage"))):
            ...
    """
    guard = CapabilityGuard(required=tuple(permission_names))

    def permission_checker(
        identity: IdentityContext = Depends(GetCurrentIdentity),
        pipeline: AuthorizationPipeline = Depends(GetAuthorizationPipeline)
    ) -> IdentityContext:
        return RaiseIfRejected(pipeline.ApplyGuards(identity, [guard]))

    return permission_checker


def RequireOwnedTodo(own_capability: str, any_capability: str):
    """
    Dependency factory guarding a todo addressed by the todo_id path parameter

    The todo is loaded first: a missing todo is a 404 whatever the caller's
    permissions. The loaded todo is returned for the handler to use.

    Args:
        own_capability: Permission for acting on own todos
        any_capability: Permission for acting on any todo

    Returns:
        Dependency function returning the Todo
    """
    guard = OwnershipGuard(own_capability=own_capability, any_capability=any_capability)

    def ownership_checker(
        todo_id: int,
        identity: IdentityContext = Depends(GetCurrentIdentity),
        db_session: Session = Depends(GetDbSession),
        pipeline: AuthorizationPipeline = Depends(GetAuthorizationPipeline)
    ) -> Todo:
        todo = db_session.get(Todo, todo_id)
        outcome = pipeline.ApplyGuards(identity, [guard], resource=todo)
        if outcome.rejection is not None and outcome.rejection.kind == ErrorKind.RESOURCE_NOT_FOUND:
            raise ApiError(ErrorKind.RESOURCE_NOT_FOUND, "Todo not found")
        RaiseIfRejected(outcome)
        return todo

    return ownership_checker


# ==================== Authentication Helper Functions ====================

def AuthenticateUser(db_session: Session, email: str, password: str) -> Optional[IdentityContext]:
    """
    Authenticate a user with email and password

    Args:
        db_session: SQLAlchemy session
        email: Email address
        password: Plain text password

    Returns:
        IdentityContext: Identity with live permissions if successful, None otherwise
    """
    user = db_session.query(User).filter(User.email == email).first()
    if not user:
        return None

    if not credential_manager.VerifyPassword(password, user.password_hash):
        return None

    return role_registry.ResolveIdentity(db_session, user.user_id)


def BuildTokenClaims(identity: IdentityContext) -> TokenClaims:
    """Build token claims from a resolved identity"""
    return TokenClaims(
        user_id=identity.user_id,
        username=identity.username,
        email=identity.email,
        role_id=identity.role_id,
        role_name=identity.role_name,
        permissions=sorted(identity.permissions)
    )
