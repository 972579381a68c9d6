# app/services/car_service.py
"""
Catalog: cars listed by approved agents.
Write access is gated on Agent.account_status == approved; see create_car().
"""

from datetime import datetime
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.database import commit_or_rollback
from app.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.agent import Agent, AGENT_APPROVED
from app.models.car import Car
from app.models.rental import Rental
from app.schemas.car import CarCreate, CarUpdate
from app.services.availability_service import find_car_conflict
from app.services.storage_service import delete_upload
from app.utils.date_ranges import DateLike, to_date
from app.utils.logger import get_logger

logger = get_logger(__name__)

FEATURED_LIMIT = 6


def _plate_taken(db: Session, license_plate: str, exclude_car_id: int = None) -> bool:
    q = db.query(Car).filter(Car.license_plate == license_plate)
    if exclude_car_id is not None:
        q = q.filter(Car.id != exclude_car_id)
    return q.first() is not None


def create_car(db: Session, agent_id: int, body: CarCreate, images: list[str] = None) -> Car:
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        raise NotFoundError("Agent not found")
    if agent.account_status != AGENT_APPROVED:
        raise ForbiddenError(
            f"Only approved agents can add cars (current status: {agent.account_status})",
            "AGENT_NOT_APPROVED",
        )
    if _plate_taken(db, body.license_plate):
        raise ConflictError("License plate already exists", "DUPLICATE_LICENSE_PLATE")

    now = datetime.utcnow()
    car = Car(
        **body.model_dump(),
        agent_id=agent_id,
        images=list(images or []),
        is_available=True,
        average_rating=0,
        date_added=now,
        updated_at=now,
    )
    db.add(car)
    commit_or_rollback(db)
    db.refresh(car)
    logger.info(f"[CARS] Agent {agent_id} listed car #{car.id} ({car.brand} {car.model}, {car.license_plate})")
    return car


def get_car(db: Session, car_id: int) -> Car:
    car = db.query(Car).filter(Car.id == car_id).first()
    if not car:
        raise NotFoundError("Car not found")
    return car


def _get_owned_car(db: Session, car_id: int, agent_id: int, action: str) -> Car:
    car = get_car(db, car_id)
    if car.agent_id != agent_id:
        raise ForbiddenError(f"You can only {action} your own cars")
    return car


def list_cars(db: Session, category: str = None, min_price: float = None, max_price: float = None,
              transmission: str = None, fuel_type: str = None, search: str = None,
              include_unavailable: bool = False, limit: int = 100) -> list[Car]:
    q = db.query(Car)
    if not include_unavailable:
        q = q.filter(Car.is_available == True)  # noqa: E712
    if category:
        q = q.filter(Car.category == category)
    if min_price is not None:
        q = q.filter(Car.price_per_day >= min_price)
    if max_price is not None:
        q = q.filter(Car.price_per_day <= max_price)
    if transmission:
        q = q.filter(Car.transmission == transmission)
    if fuel_type:
        q = q.filter(Car.fuel_type == fuel_type)
    if search:
        pattern = f"%{search.lower()}%"
        q = q.filter(or_(func.lower(Car.brand).like(pattern), func.lower(Car.model).like(pattern)))
    return q.order_by(Car.date_added.desc()).limit(limit).all()


def list_agent_cars(db: Session, agent_id: int) -> list[Car]:
    return db.query(Car).filter(Car.agent_id == agent_id).order_by(Car.date_added.desc()).all()


def featured_cars(db: Session) -> list[Car]:
    return (
        db.query(Car)
        .filter(Car.is_available == True)  # noqa: E712
        .order_by(Car.average_rating.desc())
        .limit(FEATURED_LIMIT)
        .all()
    )


def update_car(db: Session, car_id: int, agent_id: int, body: CarUpdate) -> Car:
    car = _get_owned_car(db, car_id, agent_id, "update")
    changes = body.model_dump(exclude_unset=True)
    plate = changes.get("license_plate")
    if plate and plate != car.license_plate and _plate_taken(db, plate, exclude_car_id=car.id):
        raise ConflictError("License plate already exists", "DUPLICATE_LICENSE_PLATE")

    for key, value in changes.items():
        setattr(car, key, value)
    car.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    logger.info(f"[CARS] Car #{car_id} updated: {sorted(changes)}")
    return car


def add_images(db: Session, car_id: int, agent_id: int, paths: list[str]) -> Car:
    car = _get_owned_car(db, car_id, agent_id, "update")
    car.images = list(car.images or []) + list(paths)
    car.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    return car


def set_availability(db: Session, car_id: int, agent_id: int, is_available: bool) -> Car:
    car = _get_owned_car(db, car_id, agent_id, "update")
    car.is_available = is_available
    car.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    logger.info(f"[CARS] Car #{car_id} availability set to {is_available} by agent {agent_id}")
    return car


def _remove(db: Session, car: Car):
    if db.query(Rental).filter(Rental.car_id == car.id).first():
        raise ConflictError("Car has rental history; mark it unavailable instead", "CAR_HAS_RENTALS")
    images = list(car.images or [])
    db.delete(car)
    commit_or_rollback(db)
    for path in images:
        delete_upload(path)


def delete_car(db: Session, car_id: int, agent_id: int):
    car = _get_owned_car(db, car_id, agent_id, "delete")
    _remove(db, car)
    logger.info(f"[CARS] Car #{car_id} deleted by agent {agent_id}")


def delete_car_as_admin(db: Session, car_id: int):
    _remove(db, get_car(db, car_id))
    logger.info(f"[CARS] Car #{car_id} deleted by admin")


def check_availability(db: Session, car_id: int, start_date: DateLike, end_date: DateLike) -> dict:
    """Availability for a date range, derived from the car's active rentals."""
    car = get_car(db, car_id)
    start, end = to_date(start_date), to_date(end_date)
    conflict = find_car_conflict(db, car.id, start, end)
    return {
        "car_id": car.id,
        "start_date": start,
        "end_date": end,
        "available": car.is_available and conflict is None,
        "is_listed": car.is_available,
        "conflicting_rental_id": conflict.id if conflict else None,
    }
