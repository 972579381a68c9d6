# app/services/availability_service.py
"""
Car availability vs. rentals.

Two views of the same fact:
  - Car.is_available: stored flag, flipped by the booking engine in the
    same transaction as the rental status change (hold_car / release_car).
  - is_car_free(): derived at read time from active overlapping rentals.
"""

from datetime import date
from sqlalchemy.orm import Session
from app.models.car import Car
from app.models.rental import Rental, ACTIVE_RENTAL_STATUSES, RENTAL_APPROVED
from app.utils.date_ranges import overlap_clause, today
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _active_overlapping(db: Session, start: date, end: date, exclude_rental_id: int = None):
    q = db.query(Rental).filter(
        Rental.status.in_(ACTIVE_RENTAL_STATUSES),
        overlap_clause(Rental.start_date, Rental.end_date, start, end),
    )
    if exclude_rental_id is not None:
        q = q.filter(Rental.id != exclude_rental_id)
    return q


def find_car_conflict(db: Session, car_id: int, start: date, end: date,
                      exclude_rental_id: int = None) -> Rental | None:
    """First pending/approved rental of this car overlapping [start, end], if any."""
    return (
        _active_overlapping(db, start, end, exclude_rental_id)
        .filter(Rental.car_id == car_id)
        .order_by(Rental.start_date)
        .first()
    )


def find_user_conflict(db: Session, user_id: int, start: date, end: date,
                       exclude_rental_id: int = None) -> Rental | None:
    """First pending/approved rental of this user (any car) overlapping [start, end], if any."""
    return (
        _active_overlapping(db, start, end, exclude_rental_id)
        .filter(Rental.user_id == user_id)
        .order_by(Rental.start_date)
        .first()
    )


def is_car_free(db: Session, car_id: int, start: date, end: date) -> bool:
    return find_car_conflict(db, car_id, start, end) is None


def hold_car(car: Car):
    """Mark the car as taken. Caller commits together with the rental change."""
    car.is_available = False


def release_car(db: Session, car: Car, rental_id: int) -> bool:
    """
    Make the car available again unless another approved, not-yet-finished
    rental still holds it. Caller commits together with the rental change.
    Returns the resulting availability.
    """
    still_held = db.query(Rental).filter(
        Rental.car_id == car.id,
        Rental.id != rental_id,
        Rental.status == RENTAL_APPROVED,
        Rental.end_date >= today(),
    ).first()
    if still_held:
        logger.info(f"[AVAILABILITY] Car {car.id} still held by rental {still_held.id}")
        return car.is_available
    car.is_available = True
    return True
