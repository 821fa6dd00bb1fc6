"""
Todo RBAC Server - Credential Manager

This module handles credentials:
- bcrypt password hashing and verification
- JWT identity token issuance and validation

The signing key is passed in at construction. There is no fallback key:
a manager cannot exist without one.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jws, jwt
from jose.exceptions import ExpiredSignatureError, JWSError
from pydantic import ValidationError

from errors import ConfigurationError
from models.auth import TokenClaims
from models.infrastructure import TokenFailure, TokenValidationResult


class CredentialManager:
    """
    Hashes and verifies passwords, issues and validates identity tokens
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expiration_hours: int = 24,
        bcrypt_rounds: int = 10
    ):
        """
        Initialize credential manager

        Args:
            secret_key: Key used to sign tokens (required)
            algorithm: JWT signing algorithm
            expiration_hours: Token lifetime in hours
            bcrypt_rounds: bcrypt cost factor

        Raises:
            ConfigurationError: If secret_key is empty
        """
        if not secret_key:
            raise ConfigurationError("A JWT secret key is required to issue identity tokens")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration_hours = expiration_hours
        self.bcrypt_rounds = bcrypt_rounds

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds"""
        return self.expiration_hours * 3600

    # ==================== Password Functions ====================

    def HashPassword(self, password: str) -> str:
        """
        Hash a password using bcrypt
        Truncates to 72 bytes to comply with bcrypt's maximum password length

        Args:
            password: Plain text password

        Returns:
            str: Hashed password (as string)
        """
        password_bytes = password.encode('utf-8')[:72]
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password_bytes, salt).decode('utf-8')

    @staticmethod
    def VerifyPassword(plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against a stored hash

        A malformed or empty hash is treated as a mismatch.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored password hash (as string)

        Returns:
            bool: True if password matches, False otherwise
        """
        if not hashed_password or plain_password is None:
            return False

        password_bytes = plain_password.encode('utf-8')[:72]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
        except ValueError:
            # Invalid salt / not a bcrypt hash
            return False

    # ==================== JWT Token Functions ====================

    def IssueToken(self, claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a signed JWT identity token

        Args:
            claims: Identity claims to embed
            expires_delta: Optional custom lifetime (defaults to expiration_hours)

        Returns:
            str: Encoded JWT token
        """
        to_encode = claims.model_dump()

        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(hours=self.expiration_hours)

        to_encode.update({"iat": now, "exp": now + expires_delta})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def ValidateToken(self, token: Optional[str]) -> TokenValidationResult:
        """
        Verify a token's algorithm, signature and expiry

        Never raises; every failure is reported through the result.

        Args:
            token: JWT token string

        Returns:
            TokenValidationResult: Claims if valid, failure reason otherwise
        """
        if not token or not isinstance(token, str):
            return TokenValidationResult(failure=TokenFailure.MALFORMED)

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return TokenValidationResult(failure=TokenFailure.MALFORMED)

        if header.get("alg") != self.algorithm:
            return TokenValidationResult(failure=TokenFailure.WRONG_ALGORITHM)

        # Token structure parsed above, so a JWS failure here is the signature
        try:
            jws.verify(token, self.secret_key, algorithms=[self.algorithm])
        except JWSError:
            return TokenValidationResult(failure=TokenFailure.BAD_SIGNATURE)

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return TokenValidationResult(failure=TokenFailure.EXPIRED)
        except JWTError:
            return TokenValidationResult(failure=TokenFailure.MALFORMED)

        if "exp" not in payload:
            return TokenValidationResult(failure=TokenFailure.MALFORMED)

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError:
            return TokenValidationResult(failure=TokenFailure.MALFORMED)

        return TokenValidationResult(claims=claims)
