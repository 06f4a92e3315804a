"""
User Schemas.
"""

from datetime import datetime
from typing import Optional
from pydantic import Field
from backend.app.models.enums import UserRole
from backend.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for creating a donor or staff user."""
    username: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    mobile: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    role: UserRole = UserRole.VIEWER


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    email: Optional[str]
    mobile: Optional[str]
    address: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime


class AdvanceBalanceResponse(CamelModel):
    user_id: int
    balance: int
