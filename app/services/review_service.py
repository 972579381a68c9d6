# app/services/review_service.py
"""
Car reviews. A user may review a car once they hold an approved or completed
rental of it. Car.average_rating is refreshed after every write and only
counts approved reviews.

Moderation: new reviews are approved on creation unless REVIEW_AUTO_APPROVE
is off, in which case they wait in the superadmin's pending queue. A
superadmin can approve a review or hide it again.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from app.config import settings
from app.database import commit_or_rollback
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.car import Car
from app.models.rental import Rental, RENTAL_APPROVED, RENTAL_COMPLETED
from app.models.review import Review
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.utils.date_ranges import round_money
from app.utils.logger import get_logger

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating: int):
    if rating is None or not (MIN_RATING <= rating <= MAX_RATING):
        raise BadRequestError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


def car_rating_summary(db: Session, car_id: int) -> dict:
    ratings = [r.rating for r in db.query(Review).filter(Review.car_id == car_id, Review.is_approved == True).all()]  # noqa: E712
    if not ratings:
        return {"average_rating": 0.0, "total_reviews": 0}
    average = round_money(Decimal(sum(ratings)) / len(ratings))
    return {"average_rating": float(average), "total_reviews": len(ratings)}


def _refresh_car_rating(db: Session, car_id: int):
    car = db.query(Car).filter(Car.id == car_id).first()
    if car:
        car.average_rating = car_rating_summary(db, car_id)["average_rating"]


def create_review(db: Session, user_id: int, body: ReviewCreate) -> Review:
    _validate_rating(body.rating)
    if not db.query(Car).filter(Car.id == body.car_id).first():
        raise NotFoundError("Car not found")

    # Eligibility is checked per (user, car); the rental id itself is not cross-checked
    eligible = db.query(Rental).filter(
        Rental.user_id == user_id,
        Rental.car_id == body.car_id,
        Rental.status.in_((RENTAL_APPROVED, RENTAL_COMPLETED)),
    ).first()
    if not eligible:
        raise BadRequestError("You can only review cars you have rented")

    review = Review(
        user_id=user_id,
        car_id=body.car_id,
        rental_id=body.rental_id,
        rating=body.rating,
        comment=body.comment,
        is_approved=settings.REVIEW_AUTO_APPROVE,
        review_date=datetime.utcnow(),
    )
    db.add(review)
    db.flush()
    _refresh_car_rating(db, body.car_id)
    commit_or_rollback(db)
    db.refresh(review)
    logger.info(f"[REVIEWS] User {user_id} rated car {body.car_id}: {body.rating}/5")
    return review


def get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review not found")
    return review


def list_car_reviews(db: Session, car_id: int) -> list[Review]:
    return (
        db.query(Review)
        .filter(Review.car_id == car_id, Review.is_approved == True)  # noqa: E712
        .order_by(Review.review_date.desc())
        .all()
    )


def list_user_reviews(db: Session, user_id: int) -> list[Review]:
    return db.query(Review).filter(Review.user_id == user_id).order_by(Review.review_date.desc()).all()


def update_review(db: Session, review_id: int, user_id: int, body: ReviewUpdate) -> Review:
    review = get_review(db, review_id)
    if review.user_id != user_id:
        raise ForbiddenError("You can only update your own reviews")
    changes = body.model_dump(exclude_unset=True)
    if "rating" in changes:
        _validate_rating(changes["rating"])
    for key, value in changes.items():
        setattr(review, key, value)
    db.flush()
    _refresh_car_rating(db, review.car_id)
    commit_or_rollback(db)
    return review


def delete_review(db: Session, review_id: int, user_id: int):
    review = get_review(db, review_id)
    if review.user_id != user_id:
        raise ForbiddenError("You can only delete your own reviews")
    car_id = review.car_id
    db.delete(review)
    db.flush()
    _refresh_car_rating(db, car_id)
    commit_or_rollback(db)


def list_all_reviews(db: Session, limit: int = 100) -> list[Review]:
    return db.query(Review).order_by(Review.review_date.desc()).limit(limit).all()


def list_pending_reviews(db: Session) -> list[Review]:
    # Oldest first: the moderation queue is worked in arrival order
    return (
        db.query(Review)
        .filter(Review.is_approved == False)  # noqa: E712
        .order_by(Review.review_date.asc())
        .all()
    )


def set_review_approval(db: Session, review_id: int, approved: bool) -> Review:
    review = get_review(db, review_id)
    review.is_approved = approved
    db.flush()
    _refresh_car_rating(db, review.car_id)
    commit_or_rollback(db)
    logger.info(f"[REVIEWS] Review {review_id} {'approved' if approved else 'hidden'}")
    return review
