"""
Reporting Service.

Read-only aggregations over the current store contents for the admin
dashboard and the public landing page.
"""

from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select, func

from backend.parcelpro.db.store import EntityStore, get_store
from backend.parcelpro.models.enums import BookingStatus, UserRole
from backend.parcelpro.models.parcel import Parcel
from backend.parcelpro.models.payment import Payment
from backend.parcelpro.models.review import Review
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.reporting import (
    AdminStats, DailyBookedDelivered, DailyBookings,
    DeliveryPersonProfile, HomeStats, UserSummary
)

# Daily buckets are cut in a fixed +06:00 zone.
REPORT_TIMEZONE = timezone(timedelta(hours=6))
BUCKET_FORMAT = "%d-%m-%Y"
TOP_DELIVERY_PEOPLE = 3


def report_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in the reporting zone. Naive values are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(REPORT_TIMEZONE).date()


class ReportingService:

    def __init__(self, store: EntityStore):
        self.store = store

    async def user_summaries(
        self,
        current_page: int = 1,
        limit: int = 10,
        role: Optional[UserRole] = None
    ) -> Tuple[List[UserSummary], int]:
        """
        Parcel count and total spent per user, newest users first.

        Returns:
            (page of summaries, total number of matching users)
        """
        criteria = [User.role == role] if role is not None else []
        total = await self.store.count(User, *criteria)

        stmt = (
            select(
                User,
                func.count(Parcel.id).label("parcel_count"),
                func.coalesce(func.sum(Parcel.price), 0).label("total_spent"),
            )
            .outerjoin(Parcel, Parcel.sender_email == User.email)
            .where(*criteria)
            .group_by(User.id)
            .order_by(User.created_at.desc(), User.id)
            .offset((current_page - 1) * limit)
            .limit(limit)
        )
        rows = await self.store.aggregate(stmt)

        summaries = [
            UserSummary(
                id=user.id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                role=user.role,
                created_at=user.created_at,
                parcel_count=parcel_count,
                total_spent=float(total_spent),
            )
            for user, parcel_count, total_spent in rows
        ]
        return summaries, total

    def _delivery_people_query(self):
        ratings = (
            select(
                Review.delivery_man_id.label("delivery_man_id"),
                func.avg(Review.rating).label("average_rating"),
                func.count(Review.id).label("review_count"),
            )
            .group_by(Review.delivery_man_id)
            .subquery()
        )
        stmt = (
            select(User, ratings.c.average_rating, ratings.c.review_count)
            .outerjoin(ratings, ratings.c.delivery_man_id == User.id)
            .where(User.role == UserRole.DELIVERY_PERSON)
        )
        return stmt, ratings

    @staticmethod
    def _profile(user: User, average_rating, review_count) -> DeliveryPersonProfile:
        return DeliveryPersonProfile(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            image=user.image,
            delivered_count=user.delivered_count,
            review_count=review_count or 0,
            average_rating=float(average_rating) if average_rating is not None else None,
        )

    async def delivery_people(self) -> List[DeliveryPersonProfile]:
        """Every delivery person with delivered count and mean rating (None without reviews)."""
        stmt, _ = self._delivery_people_query()
        rows = await self.store.aggregate(stmt.order_by(User.created_at.asc(), User.id))
        return [self._profile(*row) for row in rows]

    async def top_delivery_people(self, limit: int = TOP_DELIVERY_PEOPLE) -> List[DeliveryPersonProfile]:
        """
        Most productive delivery people: delivered count, then rating
        (unrated last), then earliest signup.
        """
        stmt, ratings = self._delivery_people_query()
        stmt = stmt.order_by(
            User.delivered_count.desc(),
            ratings.c.average_rating.desc().nulls_last(),
            User.created_at.asc(),
        ).limit(limit)
        rows = await self.store.aggregate(stmt)
        return [self._profile(*row) for row in rows]

    async def total_revenue(self) -> float:
        """Sum of all payments, 0 when nothing has been paid yet."""
        revenue = await self.store.scalar(select(func.coalesce(func.sum(Payment.amount), 0)))
        return float(revenue or 0)

    async def home_stats(self) -> HomeStats:
        return HomeStats(
            total_parcels=await self.store.count(Parcel),
            total_users=await self.store.count(User),
            total_delivered=await self.store.count(Parcel, Parcel.booking_status == BookingStatus.DELIVERED),
        )

    async def admin_stats(self) -> AdminStats:
        """Platform totals plus per-day booking charts."""
        home = await self.home_stats()

        booked = Counter()
        delivered = Counter()
        stmt = select(Parcel.created_at, Parcel.booking_status)
        async for created_at, status in self.store.stream(stmt):
            day = report_day(created_at)
            booked[day] += 1
            if status == BookingStatus.DELIVERED:
                delivered[day] += 1

        # Ordered by calendar day; the DD-MM-YYYY labels do not sort chronologically as text.
        days = sorted(booked)
        return AdminStats(
            total_parcels=home.total_parcels,
            total_users=home.total_users,
            total_delivered=home.total_delivered,
            total_revenue=await self.total_revenue(),
            bookings_by_date=[
                DailyBookings(date=day.strftime(BUCKET_FORMAT), count=booked[day])
                for day in days
            ],
            booked_vs_delivered=[
                DailyBookedDelivered(
                    date=day.strftime(BUCKET_FORMAT),
                    booked=booked[day],
                    delivered=delivered[day],
                )
                for day in days
            ],
        )


async def get_reporting_service(store: EntityStore = Depends(get_store)) -> ReportingService:
    return ReportingService(store)
