"""
Todo RBAC Server - Token Claims Model

Pydantic model for the claims signed into identity tokens.
Only user_id is trusted after signature verification; the permission list is
a hint for clients and is never used for server-side decisions.
"""

from typing import List
from pydantic import BaseModel


class TokenClaims(BaseModel):
    """Claims stored in a JWT identity token"""
    user_id: int
    username: str
    email: str
    role_id: int
    role_name: str
    permissions: List[str] = []
