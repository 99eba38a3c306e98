"""
User roles and booking status enumerations.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        SENDER: Books parcels (default role)
        ADMIN: Manages users, assigns parcels, views platform reports
        DELIVERY_PERSON: Fulfils deliveries, accumulates deliveries and ratings
    """
    SENDER = "Sender"
    ADMIN = "Admin"
    DELIVERY_PERSON = "DeliveryPerson"


class BookingStatus(str, enum.Enum):
    """
    Parcel booking status enumeration.

    Status flow:
        PENDING → ON_THE_WAY → DELIVERED
        PENDING → CANCELLED
        ON_THE_WAY → RETURNED
    """
    PENDING = "Pending"
    ON_THE_WAY = "On The Way"
    DELIVERED = "Delivered"
    RETURNED = "Returned"
    CANCELLED = "Cancelled"
