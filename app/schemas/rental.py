# app/schemas/rental.py
from pydantic import BaseModel
from datetime import datetime, date
from typing import Optional


class RentalCreate(BaseModel):
    car_id: int
    start_date: date
    end_date: date


class PriceQuoteRequest(BaseModel):
    car_id: int
    start_date: date
    end_date: date


class DateRange(BaseModel):
    start_date: date
    end_date: date


class PriceQuoteOut(BaseModel):
    days: int
    price_per_day: float
    subtotal: float
    guarantee_amount: float
    total_price: float       # days × price_per_day
    total: float             # total_price + guarantee_amount, stored on the rental

    class Config:
        from_attributes = True


class RentalOut(BaseModel):
    id: int
    user_id: int
    car_id: int
    agent_id: int
    start_date: date
    end_date: date
    total_price: float
    guarantee_amount: float
    status: str
    payment_status: str
    request_date: datetime
    approval_date: Optional[datetime]
    completion_date: Optional[datetime]

    class Config:
        from_attributes = True


class UserOverlapOut(BaseModel):
    has_overlap: bool
    conflicting_rental: Optional[RentalOut] = None


class RentalStatsOut(BaseModel):
    total: int
    pending: int
    approved: int
    completed: int
    cancelled: int
    rejected: int
    total_revenue: float
