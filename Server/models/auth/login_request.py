"""
Todo RBAC Server - Login Request Model

Pydantic model for login endpoint request.
"""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Request model for login endpoint"""
    email: EmailStr
    password: str = Field(..., min_length=1)
