"""
User database model.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from backend.parcelpro.db.session import Base
from backend.parcelpro.db.identifiers import new_id, ID_LENGTH
from backend.parcelpro.models.enums import UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account.

    Email is the natural key: signup is idempotent on it and tokens carry it.
    ``delivered_count`` is only meaningful for delivery people and is bumped
    by the booking workflow whenever one of their parcels is delivered.
    """
    __tablename__ = "users"

    id = Column(String(ID_LENGTH), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.SENDER, nullable=False, index=True)

    # Profile
    phone = Column(String(50), nullable=True)
    image = Column(String(1024), nullable=True)
    verified = Column(Boolean, default=False, nullable=False)

    # Delivery person counter
    delivered_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
