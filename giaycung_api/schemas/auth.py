"""
Pydantic schemas for admin login.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials posted by the admin dashboard."""
    email: str = Field(..., min_length=1, description="Admin email")
    password: str = Field(..., min_length=1, description="Admin password")


class LoginUser(BaseModel):
    """User block returned next to the issued token."""
    email: str
    role: str = "admin"
