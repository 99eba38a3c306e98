"""
Payment API Endpoints.

Payment intents are created on the external gateway; confirmed payments
are recorded here and flip the parcel to paid.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from backend.parcelpro.core.config import settings
from backend.parcelpro.core.dependencies import get_current_identity
from backend.parcelpro.core.exceptions import BadRequestError
from backend.parcelpro.core.guards import AccessPolicy
from backend.parcelpro.domain.booking.workflow import BookingWorkflow, get_booking_workflow
from backend.parcelpro.schemas.payment import (
    PaymentCreate, PaymentIntentRequest, PaymentIntentResponse, PaymentResponse
)
from backend.parcelpro.services.payment_gateway import PaymentGateway, get_payment_gateway, to_minor_units

router = APIRouter(tags=["Payments"])


@router.post("/payment-Intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """Create a gateway payment intent for the parcel price and return its client secret."""
    parcel = await workflow.get_owned_parcel(identity["email"], payload.parcel_id)
    if parcel.is_paid:
        raise BadRequestError("Parcel is already paid", details={"parcelId": parcel.id})

    client_secret = await gateway.create_payment_intent(
        to_minor_units(parcel.price), settings.payment_currency
    )
    return PaymentIntentResponse(client_secret=client_secret)


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment_data: PaymentCreate,
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Record a confirmed payment and mark the parcel paid."""
    payment = await workflow.record_payment(identity["email"], payment_data)
    return PaymentResponse.model_validate(payment)


@router.get("/payments/{email}", response_model=List[PaymentResponse])
async def list_payments(
    email: str = Path(..., description="Payer email, must be the caller"),
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """The caller's payment history, newest first."""
    AccessPolicy.require_self(identity, email)
    payments = await workflow.list_payments(identity["email"])
    return [PaymentResponse.model_validate(p) for p in payments]
