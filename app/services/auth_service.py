# app/services/auth_service.py
"""
Registration, login and token handling for the two account tables.

Users and agents are stored separately; at the authentication boundary both
are viewed as an Account {kind, id, status} exposing validate_credentials()
and is_eligible_to_login(). Login eligibility:
  - user:  is_active and email verified
  - agent: account_status in {approved, in_verification}
    (in_verification agents need to sign in to upload their documents)
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from app.config import settings
from app.database import commit_or_rollback
from app.errors import BadRequestError, ConflictError, UnauthorizedError
from app.models.agent import Agent, AGENT_PENDING, AGENT_APPROVED, AGENT_IN_VERIFICATION
from app.models.user import User
from app.schemas.auth import UserRegister, AgentRegister
from app.services import domain_events as ev
from app.services.event_dispatcher import publish
from app.utils.logger import get_logger

logger = get_logger(__name__)

KIND_USER = "user"
KIND_AGENT = "agent"

AGENT_LOGIN_STATUSES = {AGENT_APPROVED, AGENT_IN_VERIFICATION}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


@dataclass
class Account:
    kind: str                 # user | agent
    id: int
    email: str
    role: str                 # user | superadmin | agent
    status: str               # user: active | inactive ; agent: account_status
    password_hash: str
    email_verified: bool = True

    @classmethod
    def from_user(cls, user: User) -> "Account":
        return cls(kind=KIND_USER, id=user.id, email=user.email, role=user.role,
                   status="active" if user.is_active else "inactive",
                   password_hash=user.password_hash, email_verified=bool(user.is_email_verified))

    @classmethod
    def from_agent(cls, agent: Agent) -> "Account":
        return cls(kind=KIND_AGENT, id=agent.id, email=agent.email, role=agent.role or KIND_AGENT,
                   status=agent.account_status, password_hash=agent.password_hash)

    def validate_credentials(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def is_eligible_to_login(self) -> bool:
        return self.ineligibility_reason() is None

    def ineligibility_reason(self) -> str | None:
        if self.kind == KIND_AGENT:
            if self.status not in AGENT_LOGIN_STATUSES:
                return "Agent account is not approved yet"
            return None
        if self.status != "active":
            return "Account is inactive"
        if not self.email_verified:
            return "Please verify your email before logging in"
        return None


@dataclass(frozen=True)
class Principal:
    """Identity carried by a bearer token."""
    kind: str
    id: int
    role: str


def find_account(db: Session, email: str) -> Account | None:
    user = db.query(User).filter(User.email == email).first()
    if user:
        return Account.from_user(user)
    agent = db.query(Agent).filter(Agent.email == email).first()
    if agent:
        return Account.from_agent(agent)
    return None


def load_account(db: Session, kind: str, account_id: int) -> Account | None:
    if kind == KIND_AGENT:
        agent = db.query(Agent).filter(Agent.id == account_id).first()
        return Account.from_agent(agent) if agent else None
    user = db.query(User).filter(User.id == account_id).first()
    return Account.from_user(user) if user else None


def _email_taken(db: Session, email: str) -> bool:
    return (db.query(User).filter(User.email == email).first() is not None
            or db.query(Agent).filter(Agent.email == email).first() is not None)


def create_access_token(account: Account, expires_delta: timedelta = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"sub": str(account.id), "kind": account.kind, "role": account.role, "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return Principal(kind=payload["kind"], id=int(payload["sub"]), role=payload["role"])
    except (JWTError, KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired token")


async def register_user(db: Session, body: UserRegister) -> User:
    email = body.email.strip().lower()
    if _email_taken(db, email):
        raise ConflictError("Email already registered", "EMAIL_ALREADY_EXISTS")

    now = datetime.utcnow()
    user = User(
        **body.model_dump(exclude={"email", "password"}),
        email=email,
        password_hash=hash_password(body.password),
        role="user",
        is_active=True,
        is_email_verified=False,
        email_verification_token=secrets.token_urlsafe(24),
        date_created=now,
        updated_at=now,
    )
    db.add(user)
    commit_or_rollback(db)
    db.refresh(user)
    logger.info(f"[AUTH] User #{user.id} registered ({email})")

    await publish(ev.EmailVerificationRequested(user_id=user.id, token=user.email_verification_token), db)
    return user


def register_agent(db: Session, body: AgentRegister) -> Agent:
    email = body.email.strip().lower()
    if _email_taken(db, email):
        raise ConflictError("Email already registered", "EMAIL_ALREADY_EXISTS")

    now = datetime.utcnow()
    agent = Agent(
        **body.model_dump(exclude={"email", "password"}),
        email=email,
        password_hash=hash_password(body.password),
        role="agent",
        account_status=AGENT_PENDING,
        date_registered=now,
        updated_at=now,
    )
    db.add(agent)
    commit_or_rollback(db)
    db.refresh(agent)
    logger.info(f"[AUTH] Agent #{agent.id} registered ({agent.agency_name}) — awaiting approval")
    return agent


def verify_email(db: Session, token: str) -> User:
    user = db.query(User).filter(User.email_verification_token == token).first() if token else None
    if not user:
        raise BadRequestError("Invalid or expired verification token")
    user.is_email_verified = True
    user.email_verification_token = None
    user.updated_at = datetime.utcnow()
    commit_or_rollback(db)
    logger.info(f"[AUTH] User #{user.id} verified their email")
    return user


def login(db: Session, email: str, password: str) -> dict:
    account = find_account(db, (email or "").strip().lower())
    if not account or not account.validate_credentials(password):
        raise UnauthorizedError("Invalid credentials")
    reason = account.ineligibility_reason()
    if reason:
        raise UnauthorizedError(reason, "LOGIN_NOT_ALLOWED")

    logger.info(f"[AUTH] {account.kind} #{account.id} signed in")
    return {
        "access_token": create_access_token(account),
        "token_type": "bearer",
        "account_id": account.id,
        "kind": account.kind,
        "role": account.role,
    }
