"""
User Pydantic schemas.
"""

from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from backend.parcelpro.db.identifiers import normalize_email
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.schemas.base import CamelModel


class UserCreate(CamelModel):
    """
    Schema for user signup.

    Used by POST /users. Default role is Sender.
    """
    email: EmailStr = Field(..., description="User email address")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    role: UserRole = Field(default=UserRole.SENDER, description="User role (defaults to Sender)")
    image: Optional[str] = Field(None, max_length=1024, description="Profile image URL")
    phone: Optional[str] = Field(None, max_length=50, description="Phone number")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Signup is idempotent on email regardless of case."""
        return normalize_email(v)


class UserResponse(CamelModel):
    """Schema for user information response."""
    id: str
    email: str
    name: str
    role: UserRole
    phone: Optional[str] = None
    image: Optional[str] = None
    verified: bool
    delivered_count: int
    created_at: datetime


class UserRoleInfo(CamelModel):
    """Returned by GET /users/role/{email}."""
    role: UserRole
    verified: bool
    id: str


class RoleUpdate(CamelModel):
    """Admin request to change a user's role."""
    id: str = Field(..., description="User ID")
    role: UserRole


class DeliveryProfileUpdate(CamelModel):
    """Delivery person profile completion."""
    id: str = Field(..., description="Delivery person user ID")
    phone: str = Field(..., min_length=5, max_length=50)
