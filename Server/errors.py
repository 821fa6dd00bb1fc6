"""
Todo RBAC Server - Error Taxonomy

Every rejection the server can produce has an ErrorKind. The HTTP boundary
maps kinds to status codes; nothing below the boundary knows about HTTP.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of rejection surfaced at the request boundary"""
    NO_CREDENTIAL = "NoCredential"
    INVALID_TOKEN = "InvalidToken"
    IDENTITY_GONE = "IdentityGone"
    INSUFFICIENT_CAPABILITY = "InsufficientCapability"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    VALIDATION_ERROR = "ValidationError"
    INTERNAL_ERROR = "InternalError"


STATUS_CODES = {
    ErrorKind.NO_CREDENTIAL: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.IDENTITY_GONE: 401,
    ErrorKind.INSUFFICIENT_CAPABILITY: 403,
    ErrorKind.RESOURCE_NOT_FOUND: 404,
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.INTERNAL_ERROR: 500,
}


def StatusCodeFor(kind: ErrorKind) -> int:
    """Get the HTTP status code for an error kind"""
    return STATUS_CODES.get(kind, 500)


class ApiError(Exception):
    """
    Rejection raised at the HTTP boundary and rendered by the exception handler

    Args:
        kind: ErrorKind of the rejection
        message: Human readable message returned to the client
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return StatusCodeFor(self.kind)


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or invalid"""


# ==================== Registry Errors ====================

class RegistryError(Exception):
    """Base class for role/permission registry failures"""


class UserNotFoundError(RegistryError):
    """The referenced user does not exist"""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class RoleNotFoundError(RegistryError):
    """The referenced role does not exist"""

    def __init__(self, role: object):
        self.role = role
        super().__init__(f"Role '{role}' not found")
