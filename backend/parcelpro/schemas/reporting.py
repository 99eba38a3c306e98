"""
Reporting Schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import List, Optional
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.schemas.base import CamelModel


class UserSummary(CamelModel):
    """Per-user parcel totals for the admin user table."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime
    parcel_count: int
    total_spent: float


class DeliveryPersonProfile(CamelModel):
    """Delivery person with delivered count and average rating."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    image: Optional[str] = None
    delivered_count: int
    review_count: int
    average_rating: Optional[float] = Field(None, description="Null when there are no reviews")


class DailyBookings(CamelModel):
    date: str = Field(..., description="DD-MM-YYYY in +06:00")
    count: int


class DailyBookedDelivered(CamelModel):
    date: str = Field(..., description="DD-MM-YYYY in +06:00")
    booked: int
    delivered: int


class HomeStats(CamelModel):
    """Public landing-page counters."""
    total_parcels: int
    total_users: int
    total_delivered: int


class AdminStats(HomeStats):
    """Platform-wide stats for admins."""
    total_revenue: float
    bookings_by_date: List[DailyBookings]
    booked_vs_delivered: List[DailyBookedDelivered]
