# app/services/admin_service.py
"""
Superadmin operations: agent governance, user management, platform statistics.
Statistics are plain aggregate queries over the account, catalog and rental tables.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.database import commit_or_rollback
from app.errors import BadRequestError, NotFoundError
from app.models.agent import (
    Agent,
    AGENT_PENDING,
    AGENT_IN_VERIFICATION,
    AGENT_APPROVED,
    AGENT_REJECTED,
    AGENT_SUSPENDED,
)
from app.models.car import Car
from app.models.rental import Rental, RENTAL_COMPLETED, RENTAL_PENDING, RENTAL_APPROVED
from app.models.user import User
from app.services import domain_events as ev
from app.services.event_dispatcher import publish
from app.utils.date_ranges import round_money
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Statuses from which an admin may approve or reject outright
_REVIEWABLE = {AGENT_PENDING, AGENT_IN_VERIFICATION}


def _get_agent(db: Session, agent_id: int) -> Agent:
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        raise NotFoundError("Agent not found")
    return agent


def _set_status(db: Session, agent: Agent, status: str):
    previous = agent.account_status
    agent.account_status = status
    agent.updated_at = datetime.utcnow()
    if status == AGENT_APPROVED:
        agent.approval_date = agent.updated_at
    commit_or_rollback(db)
    logger.info(f"[ADMIN] Agent {agent.id}: {previous} → {status}")


def list_agents(db: Session, status: str = None, city: str = None) -> list[Agent]:
    q = db.query(Agent)
    if status:
        q = q.filter(Agent.account_status == status)
    if city:
        q = q.filter(Agent.city == city)
    return q.order_by(Agent.date_registered.desc()).all()


async def approve_agent(db: Session, agent_id: int) -> Agent:
    agent = _get_agent(db, agent_id)
    if agent.account_status not in _REVIEWABLE:
        raise BadRequestError(f"Agent is {agent.account_status}; only pending agents can be approved")
    _set_status(db, agent, AGENT_APPROVED)
    await publish(ev.AgentApproved(agent_id=agent.id), db)
    return agent


def reject_agent(db: Session, agent_id: int) -> Agent:
    agent = _get_agent(db, agent_id)
    if agent.account_status not in _REVIEWABLE:
        raise BadRequestError(f"Agent is {agent.account_status}; only pending agents can be rejected")
    _set_status(db, agent, AGENT_REJECTED)
    return agent


def suspend_agent(db: Session, agent_id: int) -> Agent:
    agent = _get_agent(db, agent_id)
    _set_status(db, agent, AGENT_SUSPENDED)
    return agent


def activate_agent(db: Session, agent_id: int) -> Agent:
    agent = _get_agent(db, agent_id)
    if agent.account_status == AGENT_REJECTED:
        raise BadRequestError("Cannot activate a rejected agent")
    _set_status(db, agent, AGENT_APPROVED)
    return agent


async def request_documents(db: Session, agent_id: int, required_documents: list[str],
                            message: str = None) -> Agent:
    """Ask an agent for onboarding documents; moves them into verification."""
    agent = _get_agent(db, agent_id)
    if not required_documents:
        raise BadRequestError("At least one document type is required")
    if agent.account_status not in _REVIEWABLE:
        raise BadRequestError(f"Agent is {agent.account_status}; documents can only be requested during onboarding")
    if agent.account_status == AGENT_PENDING:
        _set_status(db, agent, AGENT_IN_VERIFICATION)
    await publish(ev.DocumentsRequested(agent_id=agent.id, required_documents=tuple(required_documents),
                                        message=message), db)
    return agent


def list_users(db: Session, role: str = None) -> list[User]:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.date_created.desc()).all()


def set_user_active(db: Session, user_id: int, is_active: bool) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    user.is_active = is_active
    user.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    logger.info(f"[ADMIN] User {user_id} is_active={is_active}")
    return user


def platform_stats(db: Session) -> dict:
    revenue = db.query(func.coalesce(func.sum(Rental.total_price), 0)).filter(
        Rental.status == RENTAL_COMPLETED
    ).scalar()
    return {
        "total_users": db.query(func.count(User.id)).filter(User.role == "user").scalar(),
        "total_agents": db.query(func.count(Agent.id)).scalar(),
        "pending_agents": db.query(func.count(Agent.id)).filter(
            Agent.account_status.in_(_REVIEWABLE)).scalar(),
        "total_cars": db.query(func.count(Car.id)).scalar(),
        "available_cars": db.query(func.count(Car.id)).filter(Car.is_available == True).scalar(),  # noqa: E712
        "total_rentals": db.query(func.count(Rental.id)).scalar(),
        "completed_rentals": db.query(func.count(Rental.id)).filter(
            Rental.status == RENTAL_COMPLETED).scalar(),
        "total_revenue": float(round_money(revenue or 0)),
    }


def agent_revenue(db: Session, agent_id: int) -> dict:
    _get_agent(db, agent_id)
    rentals = (
        db.query(Rental)
        .filter(Rental.agent_id == agent_id)
        .order_by(Rental.request_date.desc())
        .all()
    )
    completed = [r for r in rentals if r.status == RENTAL_COMPLETED]
    earnings = sum((Decimal(str(r.total_price)) for r in completed), Decimal("0"))
    return {
        "agent_id": agent_id,
        "total_earnings": float(round_money(earnings)),
        "completed_rentals": len(completed),
        "pending_rentals": sum(1 for r in rentals if r.status == RENTAL_PENDING),
        "approved_rentals": sum(1 for r in rentals if r.status == RENTAL_APPROVED),
        "revenue": [
            {
                "rental_id": r.id,
                "car_id": r.car_id,
                "earned_amount": float(r.total_price) if r.status == RENTAL_COMPLETED else 0.0,
                "status": r.status,
                "completion_date": r.completion_date,
            }
            for r in rentals
        ],
    }
