"""
Todo RBAC Server - Configuration

Settings are loaded from environment variables prefixed with TODO_RBAC_
and from an optional .env file.
"""

import logging
import secrets
from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from errors import ConfigurationError
from permissions import STANDARD_USER_ROLE

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Configuration settings for the Todo RBAC server
    """

    model_config = SettingsConfigDict(
        env_prefix="TODO_RBAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- GENERAL APP SETTINGS ---
    PROJECT_NAME: str = "Todo RBAC Server"
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # --- DATABASE ---
    DATABASE_URL: str = "sqlite:///database/todo_rbac.db"

    # --- AUTH ---
    # Must be set in production; see ResolveJwtSecret
    JWT_SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = Field(24, ge=1)
    BCRYPT_ROUNDS: int = Field(10, ge=4, le=31)
    DEFAULT_ROLE: str = STANDARD_USER_ROLE
    ADMIN_EMAIL: str = "admin@example.com"

    # --- CORS ---
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    @field_validator("LOG_LEVEL")
    @classmethod
    def NormalizeLogLevel(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def IsProduction(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def ResolveJwtSecret(self) -> str:
        """
        Get the key used to sign identity tokens

        Outside production an unset key is replaced by a random per-process
        key, so tokens stop validating when the process restarts.

        Returns:
            str: Signing key

        Raises:
            ConfigurationError: If no key is configured in production
        """
        if self.JWT_SECRET_KEY:
            return self.JWT_SECRET_KEY

        if self.IsProduction:
            raise ConfigurationError(
                "TODO_RBAC_JWT_SECRET_KEY must be set when TODO_RBAC_ENVIRONMENT=production"
            )

        logger.warning("TODO_RBAC_JWT_SECRET_KEY is not set; using a random key for this process only")
        return secrets.token_urlsafe(32)


@lru_cache()
def GetSettings() -> Settings:
    """Get the process-wide settings instance"""
    return Settings()
