# app/models/rental.py
"""
Booking between a user and a car for a date range.
agent_id is copied from the car at creation time.
total_price and guarantee_amount are fixed at creation and never recomputed.
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Numeric, ForeignKey
from app.database import Base

RENTAL_PENDING = "pending"
RENTAL_APPROVED = "approved"
RENTAL_REJECTED = "rejected"
RENTAL_CANCELLED = "cancelled"
RENTAL_COMPLETED = "completed"

# Statuses that hold a car for their date range
ACTIVE_RENTAL_STATUSES = (RENTAL_PENDING, RENTAL_APPROVED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_REFUNDED = "refunded"


class Rental(Base):
    __tablename__ = "rentals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    guarantee_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default=RENTAL_PENDING, nullable=False, index=True)
    payment_status = Column(String(20), default=PAYMENT_PENDING, nullable=False)
    request_date = Column(DateTime, nullable=False)
    approval_date = Column(DateTime)
    completion_date = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return (f"<Rental {self.id} car={self.car_id} user={self.user_id} "
                f"{self.start_date}→{self.end_date} status={self.status}>")
