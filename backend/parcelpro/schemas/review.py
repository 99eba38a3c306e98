"""
Review Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from backend.parcelpro.schemas.base import CamelModel


class ReviewCreate(CamelModel):
    """Sender review of a delivered parcel."""
    parcel_id: str
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=2000)
    reviewer_name: Optional[str] = Field(None, max_length=255)
    reviewer_image: Optional[str] = Field(None, max_length=1024)


class ReviewResponse(CamelModel):
    id: str
    parcel_id: str
    delivery_man_id: str
    reviewer_email: str
    reviewer_name: Optional[str] = None
    reviewer_image: Optional[str] = None
    rating: int
    feedback: Optional[str] = None
    created_at: datetime
