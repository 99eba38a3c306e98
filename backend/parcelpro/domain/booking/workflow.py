"""
Booking Workflow (Domain Logic).

Moves a Parcel from booking through assignment, delivery, payment and
review. Every multi-record mutation (delivery + counter, payment + paid
flag) is staged on the store and committed once, guarded by a
compare-and-swap on the state it was computed from.
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backend.parcelpro.core.config import settings
from backend.parcelpro.core.exceptions import (
    BadRequestError,
    InsufficientPermissionsError,
    InvalidTransitionError,
    ResourceNotFoundError,
)
from backend.parcelpro.db.identifiers import parse_id
from backend.parcelpro.db.store import EntityStore, get_store
from backend.parcelpro.domain.booking.transitions import ensure_transition
from backend.parcelpro.models.enums import BookingStatus, UserRole
from backend.parcelpro.models.parcel import Parcel
from backend.parcelpro.models.payment import Payment
from backend.parcelpro.models.review import Review
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.parcel import ParcelCreate, ParcelUpdate
from backend.parcelpro.schemas.payment import PaymentCreate
from backend.parcelpro.schemas.review import ReviewCreate

logger = logging.getLogger("parcelpro.booking")


class BookingWorkflow:

    def __init__(self, store: EntityStore, strict: Optional[bool] = None):
        self.store = store
        self.strict = settings.strict_status_transitions if strict is None else strict

    # --- Lookups ---

    async def get_parcel(self, parcel_id) -> Parcel:
        parcel = await self.store.get_by_id(Parcel, parcel_id, field="parcelId")
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        return parcel

    async def get_owned_parcel(self, email: str, parcel_id) -> Parcel:
        """Fetch a parcel and require ``email`` to be its sender."""
        parcel = await self.get_parcel(parcel_id)
        if parcel.sender_email.lower() != email.lower():
            raise InsufficientPermissionsError("Forbidden access: parcel belongs to another sender")
        return parcel

    async def list_sender_parcels(self, email: str, status: Optional[BookingStatus] = None) -> List[Parcel]:
        criteria = [Parcel.sender_email == email]
        if status is not None:
            criteria.append(Parcel.booking_status == status)
        return await self.store.find(Parcel, *criteria, order_by=[Parcel.created_at.desc()])

    async def list_assigned_parcels(self, delivery_man_id, status: Optional[BookingStatus] = None) -> List[Parcel]:
        criteria = [Parcel.delivery_man_id == parse_id(delivery_man_id)]
        if status is not None:
            criteria.append(Parcel.booking_status == status)
        return await self.store.find(Parcel, *criteria, order_by=[Parcel.approx_delivery_date.asc()])

    async def list_parcels_between(self, from_date: Optional[date], to_date: Optional[date]) -> List[Parcel]:
        """All parcels, optionally narrowed to a requested delivery date range (inclusive)."""
        if from_date and to_date and from_date > to_date:
            raise BadRequestError("fromDate must not be after toDate")

        criteria = []
        if from_date is not None:
            criteria.append(Parcel.requested_delivery_date >= from_date)
        if to_date is not None:
            criteria.append(Parcel.requested_delivery_date <= to_date)
        return await self.store.find(Parcel, *criteria, order_by=[Parcel.created_at.desc()])

    # --- Sender operations ---

    async def book(self, email: str, data: ParcelCreate) -> Parcel:
        """Create a Pending, unpaid parcel for the sender ``email``."""
        sender = await self.store.find_one(User, User.email == email)
        if sender is None:
            raise ResourceNotFoundError("User", email)

        fields = data.model_dump(exclude={"sender_email"})
        parcel = Parcel(
            **fields,
            sender_email=sender.email,
            booking_status=BookingStatus.PENDING,
            is_paid=False,
        )
        await self.store.insert(parcel)

        logger.info("Parcel %s booked by %s (price=%s)", parcel.id, sender.email, parcel.price)
        return parcel

    async def edit(self, email: str, parcel_id, data: ParcelUpdate) -> Parcel:
        """Merge the supplied fields into a parcel its sender still controls."""
        parcel = await self.get_owned_parcel(email, parcel_id)
        self._require_pending(parcel, "edited")

        patch = data.model_dump(exclude_unset=True, exclude_none=True)
        if patch:
            rows = await self.store.update(
                Parcel,
                Parcel.id == parcel.id,
                Parcel.booking_status == BookingStatus.PENDING,
                values=patch,
            )
            if rows == 0:
                raise InvalidTransitionError(parcel.booking_status.value, BookingStatus.PENDING.value)
            await self.store.refresh(parcel)

        return parcel

    async def delete(self, email: str, parcel_id) -> int:
        parcel = await self.get_owned_parcel(email, parcel_id)
        self._require_pending(parcel, "deleted")
        if parcel.is_paid:
            raise BadRequestError("Paid parcels cannot be deleted")

        deleted = await self.store.delete(
            Parcel,
            Parcel.id == parcel.id,
            Parcel.booking_status == BookingStatus.PENDING,
            Parcel.is_paid.is_(False),
        )
        logger.info("Parcel %s deleted by %s", parcel.id, email)
        return deleted

    async def cancel(self, email: str, parcel_id) -> Parcel:
        parcel = await self.get_owned_parcel(email, parcel_id)
        return await self._move(parcel, BookingStatus.CANCELLED)

    # --- Admin operations ---

    async def assign(self, parcel_id, delivery_man_id, approx_delivery_date: date) -> Parcel:
        """
        Assign a parcel to a delivery person and put it on the way.

        Reassignment is allowed while the parcel is still on the way.
        """
        parcel = await self.get_parcel(parcel_id)

        delivery_man = await self.store.get_by_id(User, delivery_man_id, field="deliveryManId")
        if delivery_man is None:
            raise ResourceNotFoundError("Delivery person", delivery_man_id)
        if delivery_man.role != UserRole.DELIVERY_PERSON:
            raise BadRequestError(
                "Assigned user is not a delivery person",
                details={"deliveryManId": delivery_man_id, "role": delivery_man.role.value}
            )

        current = parcel.booking_status
        if current != BookingStatus.ON_THE_WAY:
            ensure_transition(current, BookingStatus.ON_THE_WAY, self.strict)

        rows = await self.store.update(
            Parcel,
            Parcel.id == parcel.id,
            Parcel.booking_status == current,
            values={
                "delivery_man_id": delivery_man.id,
                "approx_delivery_date": approx_delivery_date,
                "booking_status": BookingStatus.ON_THE_WAY,
            },
        )
        if rows == 0:
            raise InvalidTransitionError(current.value, BookingStatus.ON_THE_WAY.value)

        await self.store.refresh(parcel)
        logger.info("Parcel %s assigned to %s, due %s", parcel.id, delivery_man.id, approx_delivery_date)
        return parcel

    # --- Delivery person operations ---

    async def update_status(
        self,
        delivery_man: User,
        parcel_id,
        status: BookingStatus,
        claimed_delivery_man_id: Optional[str] = None
    ) -> Parcel:
        """
        Change the status of a parcel assigned to ``delivery_man``.

        Marking a parcel Delivered stamps the delivery date and increments
        the assignee's delivered count in the same transaction. Repeating a
        status the parcel already has changes nothing.
        """
        if claimed_delivery_man_id is not None and claimed_delivery_man_id != delivery_man.id:
            raise InsufficientPermissionsError("Forbidden access: deliveryMenId does not match caller")

        parcel = await self.get_parcel(parcel_id)
        if parcel.delivery_man_id != delivery_man.id:
            raise InsufficientPermissionsError("Forbidden access: parcel is not assigned to you")

        return await self._move(parcel, status)

    # --- Payments ---

    async def record_payment(self, email: str, data: PaymentCreate) -> Payment:
        """Store the payment and flip the parcel to paid in one transaction."""
        parcel = await self.get_owned_parcel(email, data.parcel_id)

        if parcel.booking_status == BookingStatus.CANCELLED:
            raise BadRequestError("Cancelled parcels cannot be paid")
        existing = await self.store.find_one(Payment, Payment.parcel_id == parcel.id)
        if parcel.is_paid or existing is not None:
            raise BadRequestError("Parcel is already paid", details={"parcelId": parcel.id})

        payment = Payment(
            parcel_id=parcel.id,
            email=parcel.sender_email,
            amount=parcel.price,
            transaction_id=data.transaction_id,
        )
        try:
            await self.store.insert(payment, commit=False)
            rows = await self.store.update(
                Parcel,
                Parcel.id == parcel.id,
                Parcel.is_paid.is_(False),
                values={"is_paid": True},
                commit=False,
            )
            if rows:
                await self.store.commit()
        except IntegrityError:
            # Lost the race against a concurrent payment for this parcel.
            rows = 0
        if rows == 0:
            await self.store.rollback()
            raise BadRequestError("Parcel is already paid", details={"parcelId": parcel.id})

        await self.store.refresh(payment)
        logger.info("Payment %s recorded for parcel %s (%s)", payment.id, parcel.id, payment.amount)
        return payment

    async def mark_paid(self, email: str, parcel_id) -> Parcel:
        """
        Set ``is_paid`` once a payment exists. Never reverses, repeat calls
        are no-ops.
        """
        parcel = await self.get_owned_parcel(email, parcel_id)
        if parcel.is_paid:
            return parcel

        payment = await self.store.find_one(Payment, Payment.parcel_id == parcel.id)
        if payment is None:
            raise BadRequestError("No payment recorded for this parcel", details={"parcelId": parcel.id})

        await self.store.update(
            Parcel,
            Parcel.id == parcel.id,
            Parcel.is_paid.is_(False),
            values={"is_paid": True},
        )
        await self.store.refresh(parcel)
        return parcel

    async def list_payments(self, email: str) -> List[Payment]:
        return await self.store.find(Payment, Payment.email == email, order_by=[Payment.paid_at.desc()])

    # --- Reviews ---

    async def review(self, reviewer: dict, data: ReviewCreate) -> Review:
        """Let the sender rate the delivery person of a delivered parcel, once."""
        parcel = await self.get_owned_parcel(reviewer["email"], data.parcel_id)

        if parcel.booking_status != BookingStatus.DELIVERED or parcel.delivery_man_id is None:
            raise BadRequestError("Only delivered parcels can be reviewed")

        existing = await self.store.find_one(Review, Review.parcel_id == parcel.id)
        if existing is not None:
            raise BadRequestError("Parcel has already been reviewed", details={"parcelId": parcel.id})

        review = Review(
            parcel_id=parcel.id,
            delivery_man_id=parcel.delivery_man_id,
            reviewer_email=parcel.sender_email,
            reviewer_name=data.reviewer_name,
            reviewer_image=data.reviewer_image,
            rating=data.rating,
            feedback=data.feedback,
        )
        try:
            await self.store.insert(review)
        except IntegrityError:
            await self.store.rollback()
            raise BadRequestError("Parcel has already been reviewed", details={"parcelId": parcel.id})
        return review

    async def list_reviews(self, delivery_man_id) -> List[Review]:
        return await self.store.find(
            Review,
            Review.delivery_man_id == parse_id(delivery_man_id),
            order_by=[Review.created_at.desc()],
        )

    # --- Internals ---

    def _require_pending(self, parcel: Parcel, action: str) -> None:
        if parcel.booking_status != BookingStatus.PENDING or parcel.delivery_man_id is not None:
            raise BadRequestError(
                f"Only pending, unassigned parcels can be {action}",
                details={"bookingStatus": parcel.booking_status.value}
            )

    async def _move(self, parcel: Parcel, target: BookingStatus) -> Parcel:
        current = parcel.booking_status
        if current == target:
            return parcel

        ensure_transition(current, target, self.strict)

        values = {"booking_status": target}
        if target == BookingStatus.DELIVERED:
            values["delivery_date"] = datetime.now(timezone.utc)

        rows = await self.store.update(
            Parcel,
            Parcel.id == parcel.id,
            Parcel.booking_status == current,
            values=values,
            commit=False,
        )
        if rows == 0:
            await self.store.rollback()
            raise InvalidTransitionError(current.value, target.value)

        if target == BookingStatus.DELIVERED and parcel.delivery_man_id is not None:
            await self.store.update(
                User,
                User.id == parcel.delivery_man_id,
                values={"delivered_count": User.delivered_count + 1},
                commit=False,
            )

        await self.store.commit()
        await self.store.refresh(parcel)
        logger.info("Parcel %s moved %s -> %s", parcel.id, current.value, target.value)
        return parcel


async def get_booking_workflow(store: EntityStore = Depends(get_store)) -> BookingWorkflow:
    return BookingWorkflow(store)
