# app/routers/auth.py
"""Registration, login, email verification and self-service account management."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_principal, require_agent, require_user
from app.errors import NotFoundError
from app.models.agent import Agent
from app.models.user import User
from app.schemas.auth import (
    AgentDashboardOut,
    AgentOut,
    AgentProfileUpdate,
    AgentRegister,
    EmailVerification,
    LoginRequest,
    PasswordChange,
    TokenOut,
    UserOut,
    UserProfileUpdate,
    UserRegister,
)
from app.services import account_service, auth_service
from app.services.auth_service import KIND_AGENT, Principal

router = APIRouter()


@router.post("/auth/register/user", response_model=UserOut, summary="Register a renter account")
async def register_user(body: UserRegister, db: Session = Depends(get_db)):
    return await auth_service.register_user(db, body)


@router.post("/auth/register/agent", response_model=AgentOut, summary="Register an agency account")
def register_agent(body: AgentRegister, db: Session = Depends(get_db)):
    return auth_service.register_agent(db, body)


@router.post("/auth/login", response_model=TokenOut)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, body.email, body.password)


@router.post("/auth/verify-email", response_model=UserOut)
def verify_email(body: EmailVerification, db: Session = Depends(get_db)):
    return auth_service.verify_email(db, body.token)


@router.get("/auth/me", summary="Profile of the signed-in account")
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    if principal.kind == KIND_AGENT:
        agent = db.query(Agent).filter(Agent.id == principal.id).first()
        if not agent:
            raise NotFoundError("Agent not found")
        return AgentOut.model_validate(agent)
    user = db.query(User).filter(User.id == principal.id).first()
    if not user:
        raise NotFoundError("User not found")
    return UserOut.model_validate(user)


@router.put("/users/me", response_model=UserOut, summary="Update the renter's contact details")
def update_user_profile(body: UserProfileUpdate, principal: Principal = Depends(require_user),
                        db: Session = Depends(get_db)):
    return account_service.update_user_profile(db, principal.id, body)


@router.put("/agents/me", response_model=AgentOut, summary="Update the agency profile")
def update_agent_profile(body: AgentProfileUpdate, principal: Principal = Depends(require_agent),
                         db: Session = Depends(get_db)):
    return account_service.update_agent_profile(db, principal.id, body)


@router.get("/agents/me/dashboard", response_model=AgentDashboardOut)
def agent_dashboard(principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    return account_service.agent_dashboard(db, principal.id)


@router.put("/auth/password", summary="Change the signed-in account's password")
def change_password(body: PasswordChange, principal: Principal = Depends(get_current_principal),
                    db: Session = Depends(get_db)):
    return account_service.change_password(db, principal.kind, principal.id,
                                           body.current_password, body.new_password)
