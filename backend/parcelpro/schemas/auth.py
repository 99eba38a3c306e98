"""
Authentication Pydantic schemas.

Defines request and response schemas for token issuance.
"""

from pydantic import EmailStr, Field, field_validator
from backend.parcelpro.db.identifiers import normalize_email
from backend.parcelpro.schemas.base import CamelModel


class TokenRequest(CamelModel):
    """Schema for POST /jwt."""
    email: EmailStr = Field(..., description="Email address the token is issued for")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)


class TokenResponse(CamelModel):
    """Signed token valid for 24 hours."""
    token: str = Field(..., description="JWT access token")
