# app/models/review.py
from sqlalchemy import Column, Integer, DateTime, Text, Boolean, ForeignKey
from app.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id"), nullable=False, index=True)
    rental_id = Column(Integer, ForeignKey("rentals.id"), nullable=False)
    rating = Column(Integer, nullable=False)    # 1-5 stars
    comment = Column(Text, nullable=False)
    is_approved = Column(Boolean, default=True, nullable=False)
    review_date = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Review {self.id} car={self.car_id} rating={self.rating}>"
