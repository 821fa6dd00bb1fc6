"""
Todo RBAC Server - Auth Models Package

This package contains Pydantic models for authentication endpoints
and the identity token claims.
"""

from models.auth.login_request import LoginRequest
from models.auth.register_request import RegisterRequest
from models.auth.login_response import LoginResponse, UserInfo
from models.auth.change_password_request import ChangePasswordRequest
from models.auth.token_claims import TokenClaims

__all__ = [
    'LoginRequest',
    'RegisterRequest',
    'LoginResponse',
    'UserInfo',
    'ChangePasswordRequest',
    'TokenClaims',
]
