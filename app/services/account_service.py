# app/services/account_service.py
"""
Self-service account management (profile edits, password change, the agent
dashboard) and the superadmin's hard delete of a renter account.

Profile updates only touch contact and agency fields. Role, account status
and email are never changed here: the update schemas do not carry them and
anything extra in the request body is dropped by pydantic.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from app.database import commit_or_rollback
from app.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from app.models.agent import Agent
from app.models.car import Car
from app.models.notification import Notification, RECIPIENT_USER
from app.models.rental import Rental, RENTAL_COMPLETED, RENTAL_PENDING
from app.models.user import User
from app.schemas.auth import AgentProfileUpdate, UserProfileUpdate
from app.services.auth_service import KIND_AGENT, hash_password, verify_password
from app.utils.date_ranges import round_money
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def _get_agent(db: Session, agent_id: int) -> Agent:
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        raise NotFoundError("Agent not found")
    return agent


def _apply(account, changes: dict, nullable: tuple = ()):
    for key, value in changes.items():
        if value is None and key not in nullable:
            raise BadRequestError(f"{key} cannot be empty")
        setattr(account, key, value)
    account.updated_at = datetime.utcnow()


def update_user_profile(db: Session, user_id: int, body: UserProfileUpdate) -> User:
    user = _get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True)
    _apply(user, changes, nullable=("address",))
    commit_or_rollback(db)
    logger.info(f"[ACCOUNT] User #{user.id} updated {sorted(changes)}")
    return user


def update_agent_profile(db: Session, agent_id: int, body: AgentProfileUpdate) -> Agent:
    agent = _get_agent(db, agent_id)
    changes = body.model_dump(exclude_unset=True)
    _apply(agent, changes)
    commit_or_rollback(db)
    logger.info(f"[ACCOUNT] Agent #{agent.id} updated {sorted(changes)}")
    return agent


def change_password(db: Session, kind: str, account_id: int, current_password: str, new_password: str) -> dict:
    account = _get_agent(db, account_id) if kind == KIND_AGENT else _get_user(db, account_id)
    if not verify_password(current_password, account.password_hash):
        raise UnauthorizedError("Current password is incorrect", "WRONG_PASSWORD")
    if current_password == new_password:
        raise BadRequestError("New password must differ from the current one")

    account.password_hash = hash_password(new_password)
    account.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    logger.info(f"[ACCOUNT] {kind} #{account_id} changed their password")
    return {"success": True, "message": "Password changed successfully"}


def agent_dashboard(db: Session, agent_id: int) -> dict:
    agent = _get_agent(db, agent_id)
    rentals = db.query(Rental).filter(Rental.agent_id == agent_id).all()
    completed = [r for r in rentals if r.status == RENTAL_COMPLETED]
    earnings = sum((Decimal(str(r.total_price)) for r in completed), Decimal("0"))
    return {
        "agent": agent,
        "statistics": {
            "total_cars": db.query(Car).filter(Car.agent_id == agent_id).count(),
            "total_rentals": len(rentals),
            "completed_rentals": len(completed),
            "total_earnings": float(round_money(earnings)),
            "pending_approvals": sum(1 for r in rentals if r.status == RENTAL_PENDING),
        },
    }


def delete_user(db: Session, user_id: int):
    """
    Remove a renter account and its notifications. Accounts with rental
    history are kept for the agents' records: deactivate them instead.
    """
    user = _get_user(db, user_id)
    if user.role == "superadmin":
        raise BadRequestError("Superadmin accounts cannot be deleted")
    if db.query(Rental).filter(Rental.user_id == user_id).first():
        raise ConflictError("User has rental history; deactivate the account instead", "USER_HAS_RENTALS")

    db.query(Notification).filter(
        Notification.recipient_type == RECIPIENT_USER,
        Notification.recipient_id == user_id,
    ).delete(synchronize_session=False)
    db.delete(user)
    commit_or_rollback(db)
    logger.info(f"[ACCOUNT] User #{user_id} deleted")
