"""
Todo RBAC Server - Authorization Outcome Model

Typed result of running a request through the authorization pipeline.
"""

from dataclasses import dataclass
from typing import Optional

from errors import ErrorKind
from models.infrastructure.identity_context import IdentityContext


@dataclass(frozen=True)
class Rejection:
    """Why a request was refused"""
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class AuthorizationOutcome:
    """Either an authorized identity or a rejection, never both"""
    identity: Optional[IdentityContext] = None
    rejection: Optional[Rejection] = None

    @property
    def IsAuthorized(self) -> bool:
        return self.rejection is None and self.identity is not None

    @classmethod
    def Allow(cls, identity: IdentityContext) -> "AuthorizationOutcome":
        return cls(identity=identity)

    @classmethod
    def Reject(cls, kind: ErrorKind, message: str, identity: Optional[IdentityContext] = None) -> "AuthorizationOutcome":
        return cls(identity=identity, rejection=Rejection(kind=kind, message=message))
