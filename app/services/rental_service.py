# app/services/rental_service.py
"""
Booking engine: rental requests, conflict detection, pricing, and the
rental state machine.

    pending  ──approve──▶ approved ──complete──▶ completed
       │ ╲                   │
       │  reject             cancel
       │    ╲                ▼
       │     ▶ rejected   cancelled
       └──────cancel──────▶ cancelled

Approving holds the car (Car.is_available=False); cancelling an approved
rental or completing one releases it. The rental write and the car write
are committed together. Notifications are published after the commit and
can never undo it.

Conflict detection is check-then-insert without row locks: two concurrent
requests for the same car can both pass the check.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy.orm import Session
from app.database import commit_or_rollback
from app.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.car import Car
from app.models.rental import (
    Rental,
    RENTAL_PENDING,
    RENTAL_APPROVED,
    RENTAL_REJECTED,
    RENTAL_CANCELLED,
    RENTAL_COMPLETED,
    PAYMENT_PENDING,
    PAYMENT_PAID,
)
from app.services import domain_events as ev
from app.services.availability_service import find_car_conflict, find_user_conflict, hold_car, release_car
from app.services.event_dispatcher import publish
from app.utils.date_ranges import DateLike, rental_days, round_money, to_date, today
from app.utils.logger import get_logger

logger = get_logger(__name__)

_TRANSITIONS = {
    RENTAL_PENDING: {RENTAL_APPROVED, RENTAL_REJECTED, RENTAL_CANCELLED},
    RENTAL_APPROVED: {RENTAL_CANCELLED, RENTAL_COMPLETED},
}


@dataclass(frozen=True)
class PriceQuote:
    days: int
    price_per_day: Decimal
    subtotal: Decimal            # days × price_per_day
    guarantee_amount: Decimal
    total_price: Decimal         # rental charge only, equal to subtotal
    total: Decimal               # total_price + guarantee; stored as Rental.total_price


def can_transition(current: str, target: str) -> bool:
    return target in _TRANSITIONS.get(current, ())


def _transition(rental: Rental, target: str, error_message: str):
    if not can_transition(rental.status, target):
        raise BadRequestError(error_message, "INVALID_RENTAL_TRANSITION")
    rental.status = target
    rental.updated_at = datetime.utcnow()


def _validate_range(start: date, end: date):
    if end <= start:
        raise BadRequestError("End date must be after start date")


def quote(car: Car, start: date, end: date) -> PriceQuote:
    """Pure price computation for a car over [start, end]."""
    _validate_range(start, end)
    days = rental_days(start, end)
    price_per_day = round_money(car.price_per_day)
    guarantee = round_money(car.guarantee_price or 0)
    subtotal = round_money(price_per_day * days)
    total = round_money(subtotal + guarantee)
    return PriceQuote(days=days, price_per_day=price_per_day, subtotal=subtotal,
                      guarantee_amount=guarantee, total_price=subtotal, total=total)


def _get_car(db: Session, car_id: int) -> Car:
    car = db.query(Car).filter(Car.id == car_id).first()
    if not car:
        raise NotFoundError("Car not found")
    return car


def calculate_price(db: Session, car_id: int, start_date: DateLike, end_date: DateLike) -> PriceQuote:
    """Read-only price preview; same rules as create_rental()."""
    start, end = to_date(start_date), to_date(end_date)
    _validate_range(start, end)
    return quote(_get_car(db, car_id), start, end)


def check_user_overlap(db: Session, user_id: int, start_date: DateLike, end_date: DateLike) -> dict:
    start, end = to_date(start_date), to_date(end_date)
    _validate_range(start, end)
    conflict = find_user_conflict(db, user_id, start, end)
    return {"has_overlap": conflict is not None, "conflicting_rental": conflict}


async def create_rental(db: Session, user_id: int, car_id: int,
                        start_date: DateLike, end_date: DateLike) -> Rental:
    start, end = to_date(start_date), to_date(end_date)

    if start < today():
        raise BadRequestError("Start date cannot be in the past")
    _validate_range(start, end)

    car = _get_car(db, car_id)
    if not car.is_available:
        raise BadRequestError("Car is not available")

    if find_car_conflict(db, car.id, start, end):
        raise ConflictError("Car is already booked for these dates", "CAR_ALREADY_BOOKED")
    if find_user_conflict(db, user_id, start, end):
        raise ConflictError("You already have a rental during this period", "USER_OVERLAP")

    price = quote(car, start, end)
    now = datetime.utcnow()
    rental = Rental(
        user_id=user_id,
        car_id=car.id,
        agent_id=car.agent_id,
        start_date=start,
        end_date=end,
        total_price=price.total,
        guarantee_amount=price.guarantee_amount,
        status=RENTAL_PENDING,
        payment_status=PAYMENT_PENDING,
        request_date=now,
        updated_at=now,
    )
    db.add(rental)
    commit_or_rollback(db)
    db.refresh(rental)
    logger.info(f"[RENTAL] #{rental.id} requested: user={user_id} car={car.id} "
                f"{start}→{end} ({price.days}d) total={price.total}")

    await publish(ev.RentalRequested(rental_id=rental.id, user_id=user_id, car_id=car.id,
                                     agent_id=car.agent_id, start_date=start, end_date=end), db)
    return rental


def find_one(db: Session, rental_id: int) -> Rental:
    rental = db.query(Rental).filter(Rental.id == rental_id).first()
    if not rental:
        raise NotFoundError("Rental not found")
    return rental


def find_by_user(db: Session, user_id: int) -> list[Rental]:
    return db.query(Rental).filter(Rental.user_id == user_id).order_by(Rental.request_date.desc()).all()


def find_by_agent(db: Session, agent_id: int, status: str = None) -> list[Rental]:
    q = db.query(Rental).filter(Rental.agent_id == agent_id)
    if status:
        q = q.filter(Rental.status == status)
    return q.order_by(Rental.request_date.desc()).all()


def find_all(db: Session, status: str = None, limit: int = 100) -> list[Rental]:
    q = db.query(Rental)
    if status:
        q = q.filter(Rental.status == status)
    return q.order_by(Rental.request_date.desc()).limit(limit).all()


def pending_count_for_agent(db: Session, agent_id: int) -> int:
    return db.query(Rental).filter(Rental.agent_id == agent_id, Rental.status == RENTAL_PENDING).count()


def _event_kwargs(rental: Rental) -> dict:
    return {"rental_id": rental.id, "user_id": rental.user_id,
            "car_id": rental.car_id, "agent_id": rental.agent_id}


async def approve(db: Session, rental_id: int, agent_id: int) -> Rental:
    rental = find_one(db, rental_id)
    if rental.agent_id != agent_id:
        raise ForbiddenError("You can only approve your own rentals")
    if rental.status != RENTAL_PENDING:
        raise BadRequestError("Only pending rentals can be approved", "INVALID_RENTAL_TRANSITION")

    # Availability may have changed since the request was made
    car = db.query(Car).filter(Car.id == rental.car_id).first()
    if not car or not car.is_available:
        raise BadRequestError("Car is no longer available")

    _transition(rental, RENTAL_APPROVED, "Only pending rentals can be approved")
    rental.approval_date = datetime.utcnow()
    hold_car(car)
    commit_or_rollback(db)
    logger.info(f"[RENTAL] #{rental.id} approved by agent {agent_id} — car {car.id} held")

    await publish(ev.RentalApproved(**_event_kwargs(rental)), db)
    return rental


async def reject(db: Session, rental_id: int, agent_id: int) -> Rental:
    rental = find_one(db, rental_id)
    if rental.agent_id != agent_id:
        raise ForbiddenError("You can only reject your own rentals")
    if rental.status != RENTAL_PENDING:
        raise BadRequestError("Only pending rentals can be rejected", "INVALID_RENTAL_TRANSITION")

    _transition(rental, RENTAL_REJECTED, "Only pending rentals can be rejected")
    commit_or_rollback(db)
    logger.info(f"[RENTAL] #{rental.id} rejected by agent {agent_id}")

    await publish(ev.RentalRejected(**_event_kwargs(rental)), db)
    return rental


async def cancel(db: Session, rental_id: int, user_id: int) -> Rental:
    rental = find_one(db, rental_id)
    if rental.user_id != user_id:
        raise ForbiddenError("You can only cancel your own rentals")
    if not can_transition(rental.status, RENTAL_CANCELLED):
        raise BadRequestError("Only pending or approved rentals can be cancelled", "INVALID_RENTAL_TRANSITION")
    if to_date(rental.start_date) <= today():
        raise BadRequestError("Cannot cancel rental that has already started")

    was_approved = rental.status == RENTAL_APPROVED
    _transition(rental, RENTAL_CANCELLED, "Only pending or approved rentals can be cancelled")
    if was_approved:
        car = db.query(Car).filter(Car.id == rental.car_id).first()
        if car:
            release_car(db, car, rental.id)
    commit_or_rollback(db)
    logger.info(f"[RENTAL] #{rental.id} cancelled by user {user_id} (was_approved={was_approved})")

    await publish(ev.RentalCancelled(**_event_kwargs(rental), was_approved=was_approved), db)
    return rental


async def complete(db: Session, rental_id: int) -> Rental:
    # No ownership check: any authenticated caller (agent, admin, scheduled job) may complete.
    rental = find_one(db, rental_id)
    if rental.status != RENTAL_APPROVED:
        raise BadRequestError("Only approved rentals can be completed", "INVALID_RENTAL_TRANSITION")
    if today() < to_date(rental.end_date):
        raise BadRequestError("Rental period has not ended yet")

    _transition(rental, RENTAL_COMPLETED, "Only approved rentals can be completed")
    rental.completion_date = datetime.utcnow()
    rental.payment_status = PAYMENT_PAID
    car = db.query(Car).filter(Car.id == rental.car_id).first()
    if car:
        release_car(db, car, rental.id)
    commit_or_rollback(db)
    logger.info(f"[RENTAL] #{rental.id} completed — payment marked paid")

    await publish(ev.RentalCompleted(**_event_kwargs(rental)), db)
    return rental


def get_stats(db: Session, agent_id: int = None) -> dict:
    q = db.query(Rental)
    if agent_id:
        q = q.filter(Rental.agent_id == agent_id)
    rentals = q.all()

    by_status = {}
    for r in rentals:
        by_status[r.status] = by_status.get(r.status, 0) + 1
    revenue = sum((Decimal(str(r.total_price)) for r in rentals if r.status == RENTAL_COMPLETED), Decimal("0"))

    return {
        "total": len(rentals),
        "pending": by_status.get(RENTAL_PENDING, 0),
        "approved": by_status.get(RENTAL_APPROVED, 0),
        "completed": by_status.get(RENTAL_COMPLETED, 0),
        "cancelled": by_status.get(RENTAL_CANCELLED, 0),
        "rejected": by_status.get(RENTAL_REJECTED, 0),
        "total_revenue": round_money(revenue),
    }
