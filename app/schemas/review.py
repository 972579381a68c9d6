# app/schemas/review.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ReviewCreate(BaseModel):
    car_id: int
    rental_id: int
    rating: int              # 1-5, checked by review_service
    comment: str


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    user_id: int
    car_id: int
    rental_id: int
    rating: int
    comment: str
    is_approved: bool
    review_date: datetime

    class Config:
        from_attributes = True


class RatingSummaryOut(BaseModel):
    average_rating: float
    total_reviews: int
