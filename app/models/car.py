# app/models/car.py
"""
Catalog entry owned by one agent.
is_available is toggled by the booking engine on approve / cancel / complete.
average_rating is denormalised from approved reviews.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, JSON, ForeignKey
from app.database import Base


class Car(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False, index=True)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(50), nullable=False)
    license_plate = Column(String(50), unique=True, nullable=False, index=True)
    fuel_type = Column(String(30), nullable=False)        # Petrol | Diesel | Electric | Hybrid
    transmission = Column(String(30), nullable=False)     # Automatic | Manual
    seats = Column(Integer, nullable=False)
    price_per_day = Column(Numeric(10, 2), nullable=False)
    guarantee_price = Column(Numeric(10, 2), nullable=False, default=0)
    category = Column(String(50), nullable=False, index=True)
    images = Column(JSON, default=list)                   # ordered list of relative paths
    is_available = Column(Boolean, default=True, nullable=False)
    average_rating = Column(Numeric(3, 2), default=0, nullable=False)
    date_added = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Car {self.id} {self.brand} {self.model} plate={self.license_plate} available={self.is_available}>"
