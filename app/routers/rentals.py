# app/routers/rentals.py
"""Booking engine endpoints. Thin wrappers over rental_service."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.dependencies import get_current_principal, require_agent, require_superadmin, require_user
from app.errors import ForbiddenError
from app.schemas.rental import (
    DateRange,
    PriceQuoteOut,
    PriceQuoteRequest,
    RentalCreate,
    RentalOut,
    RentalStatsOut,
    UserOverlapOut,
)
from app.services import rental_service
from app.services.auth_service import Principal

router = APIRouter()


@router.post("/rentals", response_model=RentalOut, summary="Request a booking")
async def create_rental(body: RentalCreate, principal: Principal = Depends(require_user),
                        db: Session = Depends(get_db)):
    return await rental_service.create_rental(db, principal.id, body.car_id, body.start_date, body.end_date)


@router.post("/rentals/calculate-price", response_model=PriceQuoteOut, summary="Price preview for a date range")
def calculate_price(body: PriceQuoteRequest, db: Session = Depends(get_db)):
    return rental_service.calculate_price(db, body.car_id, body.start_date, body.end_date)


@router.post("/rentals/check-overlap", response_model=UserOverlapOut,
             summary="Does the current user already hold a rental in this range?")
def check_overlap(body: DateRange, principal: Principal = Depends(require_user),
                  db: Session = Depends(get_db)):
    return rental_service.check_user_overlap(db, principal.id, body.start_date, body.end_date)


@router.get("/rentals/me", response_model=list[RentalOut], summary="Current user's rentals")
def my_rentals(principal: Principal = Depends(require_user), db: Session = Depends(get_db)):
    return rental_service.find_by_user(db, principal.id)


@router.get("/rentals/agent", response_model=list[RentalOut], summary="Rentals of the current agent's cars")
def agent_rentals(status: Optional[str] = None, principal: Principal = Depends(require_agent),
                  db: Session = Depends(get_db)):
    return rental_service.find_by_agent(db, principal.id, status)


@router.get("/rentals/agent/pending-count", summary="Pending requests awaiting the current agent")
def agent_pending_count(principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    return {"agent_id": principal.id, "pending": rental_service.pending_count_for_agent(db, principal.id)}


@router.get("/rentals/stats", response_model=RentalStatsOut, summary="Rental statistics")
def rental_stats(agent_id: Optional[int] = None, principal: Principal = Depends(get_current_principal),
                 db: Session = Depends(get_db)):
    """Agents always get their own numbers; superadmins may filter by agent_id."""
    if principal.role == "agent":
        agent_id = principal.id
    elif principal.role != "superadmin":
        raise ForbiddenError("Only agents and superadmins can view rental statistics")
    return rental_service.get_stats(db, agent_id)


@router.get("/rentals", response_model=list[RentalOut], summary="All rentals (superadmin)")
def list_rentals(status: Optional[str] = None, limit: int = 100,
                 principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return rental_service.find_all(db, status, limit)


@router.get("/rentals/{rental_id}", response_model=RentalOut)
def get_rental(rental_id: int, principal: Principal = Depends(get_current_principal),
               db: Session = Depends(get_db)):
    rental = rental_service.find_one(db, rental_id)
    allowed = (
        principal.role == "superadmin"
        or (principal.kind == "agent" and rental.agent_id == principal.id)
        or (principal.kind == "user" and rental.user_id == principal.id)
    )
    if not allowed:
        raise ForbiddenError("You can only view your own rentals")
    return rental


@router.put("/rentals/{rental_id}/approve", response_model=RentalOut)
async def approve_rental(rental_id: int, principal: Principal = Depends(require_agent),
                         db: Session = Depends(get_db)):
    return await rental_service.approve(db, rental_id, principal.id)


@router.put("/rentals/{rental_id}/reject", response_model=RentalOut)
async def reject_rental(rental_id: int, principal: Principal = Depends(require_agent),
                        db: Session = Depends(get_db)):
    return await rental_service.reject(db, rental_id, principal.id)


@router.put("/rentals/{rental_id}/cancel", response_model=RentalOut)
async def cancel_rental(rental_id: int, principal: Principal = Depends(require_user),
                        db: Session = Depends(get_db)):
    return await rental_service.cancel(db, rental_id, principal.id)


@router.put("/rentals/{rental_id}/complete", response_model=RentalOut)
async def complete_rental(rental_id: int, principal: Principal = Depends(get_current_principal),
                          db: Session = Depends(get_db)):
    """Any authenticated caller may complete a rental once its end date has passed."""
    return await rental_service.complete(db, rental_id)
