"""
Parcel Pydantic schemas.

Defines request and response models for parcel booking and delivery.
"""

from pydantic import EmailStr, Field
from datetime import datetime, date
from typing import Optional
from backend.parcelpro.models.enums import BookingStatus
from backend.parcelpro.schemas.base import CamelModel


class ParcelCreate(CamelModel):
    """Schema for booking a new parcel."""
    sender_email: Optional[EmailStr] = Field(None, description="Must match the caller when given")
    sender_name: Optional[str] = Field(None, max_length=255)
    sender_phone: Optional[str] = Field(None, max_length=50)
    receiver_name: Optional[str] = Field(None, max_length=255)
    receiver_phone: Optional[str] = Field(None, max_length=50)
    delivery_address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    parcel_type: Optional[str] = Field(None, max_length=100)
    weight: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    price: float = Field(..., gt=0)
    requested_delivery_date: Optional[date] = None


class ParcelUpdate(CamelModel):
    """Schema for editing a pending parcel. Only supplied fields change."""
    sender_name: Optional[str] = Field(None, max_length=255)
    sender_phone: Optional[str] = Field(None, max_length=50)
    receiver_name: Optional[str] = Field(None, max_length=255)
    receiver_phone: Optional[str] = Field(None, max_length=50)
    delivery_address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    parcel_type: Optional[str] = Field(None, max_length=100)
    weight: Optional[float] = Field(None, gt=0)
    price: Optional[float] = Field(None, gt=0)
    requested_delivery_date: Optional[date] = None


class ParcelResponse(CamelModel):
    """Schema for parcel response."""
    id: str
    sender_email: str
    sender_name: Optional[str] = None
    sender_phone: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_phone: Optional[str] = None
    delivery_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    parcel_type: Optional[str] = None
    weight: Optional[float] = None
    price: float
    requested_delivery_date: Optional[date] = None
    approx_delivery_date: Optional[date] = None
    delivery_date: Optional[datetime] = None
    booking_status: BookingStatus
    delivery_man_id: Optional[str] = None
    is_paid: bool
    created_at: datetime


class ParcelAssign(CamelModel):
    """Admin assignment of a parcel to a delivery person."""
    parcel_id: str
    delivery_man_id: str
    approx_delivery_date: date


class DeliveryStatusUpdate(CamelModel):
    """Delivery person status change."""
    parcel_id: str
    status: BookingStatus
    delivery_men_id: Optional[str] = Field(None, description="Caller's user ID, checked against the assignment")
