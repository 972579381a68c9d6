# app/dependencies.py
"""
FastAPI dependencies for bearer-token auth.
Every guarded route receives a Principal {kind, id, role}.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.database import get_db
from app.errors import ForbiddenError, UnauthorizedError
from app.services.auth_service import Principal, decode_access_token, load_account

_bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")
    principal = decode_access_token(credentials.credentials)

    # Status can change after the token was issued (suspension, deactivation)
    account = load_account(db, principal.kind, principal.id)
    if account is None or not account.is_eligible_to_login():
        raise UnauthorizedError("Account no longer allowed to sign in")
    return principal


def require_roles(*roles: str):
    """Dependency factory: the principal's role must be one of `roles`."""
    def _check(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise ForbiddenError(f"Requires role: {' or '.join(roles)}")
        return principal
    return _check


require_user = require_roles("user")
require_agent = require_roles("agent")
require_superadmin = require_roles("superadmin")
