"""
Payment database model.
"""

from sqlalchemy import Column, String, Float, DateTime, ForeignKey
from backend.parcelpro.db.session import Base
from backend.parcelpro.db.identifiers import new_id, ID_LENGTH
from backend.parcelpro.models.user import utcnow


class Payment(Base):
    """A settled charge for exactly one parcel. Append-only."""
    __tablename__ = "payments"

    id = Column(String(ID_LENGTH), primary_key=True, default=new_id)
    parcel_id = Column(String(ID_LENGTH), ForeignKey("parcels.id"), unique=True, nullable=False)
    email = Column(String(255), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, parcel_id={self.parcel_id}, amount={self.amount})>"
