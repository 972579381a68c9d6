# app/schemas/car.py
from pydantic import BaseModel, Field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional


class CarCreate(BaseModel):
    brand: str
    model: str
    year: int = Field(ge=1950, le=2100)
    color: str
    license_plate: str = Field(min_length=1, max_length=50)
    fuel_type: str           # Petrol | Diesel | Electric | Hybrid
    transmission: str        # Automatic | Manual
    seats: int = Field(ge=1, le=60)
    price_per_day: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    guarantee_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    category: str            # Sedan | SUV | Sports | Luxury | Electric | Compact


class CarUpdate(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1950, le=2100)
    color: Optional[str] = None
    license_plate: Optional[str] = Field(default=None, min_length=1, max_length=50)
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    seats: Optional[int] = Field(default=None, ge=1, le=60)
    price_per_day: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    guarantee_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = None


class CarAvailabilityUpdate(BaseModel):
    is_available: bool


class CarOut(BaseModel):
    id: int
    agent_id: int
    brand: str
    model: str
    year: int
    color: str
    license_plate: str
    fuel_type: str
    transmission: str
    seats: int
    price_per_day: float
    guarantee_price: float
    category: str
    images: Optional[list[str]] = None
    is_available: bool
    average_rating: float
    date_added: Optional[datetime]

    class Config:
        from_attributes = True


class CarAvailabilityOut(BaseModel):
    car_id: int
    start_date: date
    end_date: date
    available: bool
    is_listed: bool
    conflicting_rental_id: Optional[int] = None
