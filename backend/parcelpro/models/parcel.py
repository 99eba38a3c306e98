"""
Parcel database model.
"""

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, Date, Boolean
from backend.parcelpro.db.session import Base
from backend.parcelpro.db.identifiers import new_id, ID_LENGTH
from backend.parcelpro.models.enums import BookingStatus
from backend.parcelpro.models.user import utcnow


class Parcel(Base):
    """
    A parcel booked by a sender.

    ``delivery_man_id`` stays empty until an admin assigns the parcel, and
    ``is_paid`` only ever moves from False to True.
    """
    __tablename__ = "parcels"

    id = Column(String(ID_LENGTH), primary_key=True, default=new_id)

    # Ownership
    sender_email = Column(String(255), ForeignKey("users.email"), nullable=False, index=True)
    sender_name = Column(String(255), nullable=True)
    sender_phone = Column(String(50), nullable=True)

    # Receiver and destination
    receiver_name = Column(String(255), nullable=True)
    receiver_phone = Column(String(50), nullable=True)
    delivery_address = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Parcel details
    parcel_type = Column(String(100), nullable=True)
    weight = Column(Float, nullable=True)
    price = Column(Float, nullable=False)

    # Dates
    requested_delivery_date = Column(Date, nullable=True, index=True)
    approx_delivery_date = Column(Date, nullable=True)
    delivery_date = Column(DateTime(timezone=True), nullable=True)

    # Workflow
    booking_status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False, index=True)
    delivery_man_id = Column(String(ID_LENGTH), ForeignKey("users.id"), nullable=True, index=True)
    is_paid = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Parcel(id={self.id}, sender='{self.sender_email}', status='{self.booking_status.value}')>"
