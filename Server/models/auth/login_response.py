"""
Todo RBAC Server - Login Response Model

Pydantic model returned by the login and registration endpoints.
"""

from typing import List
from pydantic import BaseModel


class UserInfo(BaseModel):
    """Public view of an authenticated user"""
    id: int
    username: str
    email: str
    role: str
    permissions: List[str] = []


class LoginResponse(BaseModel):
    """Response model for login and registration endpoints"""
    token: str
    expires_in: int  # Seconds until token expiration
    user: UserInfo
