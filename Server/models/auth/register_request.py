"""
Todo RBAC Server - Register Request Model

Pydantic model for registration endpoint request.
"""

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request model for registration endpoint"""
    username: str = Field(..., min_length=3, max_length=50, pattern=r'^[a-zA-Z0-9_.\-]+$')
    email: EmailStr
    password: str = Field(..., min_length=6)
