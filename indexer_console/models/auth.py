"""
Authentication models
"""

from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    """Login request"""
    username: str
    password: str


class UserInfo(BaseModel):
    """Logged-in user"""
    id: int
    username: str
    email: Optional[str] = None
    role: str = "user"


class TokenResponse(BaseModel):
    """Token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
