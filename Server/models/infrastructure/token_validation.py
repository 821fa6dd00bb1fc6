"""
Todo RBAC Server - Token Validation Result Model

Typed result of validating an identity token. Validation never raises;
callers inspect the failure instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.auth.token_claims import TokenClaims


class TokenFailure(str, Enum):
    """Reasons a token is refused"""
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    WRONG_ALGORITHM = "wrong_algorithm"


@dataclass(frozen=True)
class TokenValidationResult:
    """Either verified claims or a failure reason"""
    claims: Optional[TokenClaims] = None
    failure: Optional[TokenFailure] = None

    @property
    def IsValid(self) -> bool:
        return self.failure is None and self.claims is not None
