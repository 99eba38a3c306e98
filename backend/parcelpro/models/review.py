"""
Review database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from backend.parcelpro.db.session import Base
from backend.parcelpro.db.identifiers import new_id, ID_LENGTH
from backend.parcelpro.models.user import utcnow


class Review(Base):
    """Sender feedback on a delivered parcel. Append-only, one per parcel."""
    __tablename__ = "reviews"

    id = Column(String(ID_LENGTH), primary_key=True, default=new_id)
    parcel_id = Column(String(ID_LENGTH), ForeignKey("parcels.id"), unique=True, nullable=False)
    delivery_man_id = Column(String(ID_LENGTH), ForeignKey("users.id"), nullable=False, index=True)

    reviewer_email = Column(String(255), nullable=False, index=True)
    reviewer_name = Column(String(255), nullable=True)
    reviewer_image = Column(String(1024), nullable=True)

    rating = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Review(id={self.id}, delivery_man_id={self.delivery_man_id}, rating={self.rating})>"
