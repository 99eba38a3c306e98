"""
Payment Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from backend.parcelpro.schemas.base import CamelModel


class PaymentIntentRequest(CamelModel):
    parcel_id: str


class PaymentIntentResponse(CamelModel):
    """Opaque secret the client uses to confirm the charge."""
    client_secret: str


class PaymentCreate(CamelModel):
    """Record of a charge the client confirmed with the gateway."""
    parcel_id: str
    transaction_id: Optional[str] = Field(None, max_length=255)


class PaymentResponse(CamelModel):
    id: str
    parcel_id: str
    email: str
    amount: float
    transaction_id: Optional[str] = None
    paid_at: datetime
