# tests/test_auth_service.py
"""Unit tests for registration, login eligibility and tokens."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from unittest.mock import patch
from app.errors import BadRequestError, ConflictError, UnauthorizedError
from app.models.agent import AGENT_APPROVED, AGENT_IN_VERIFICATION, AGENT_PENDING, AGENT_REJECTED, AGENT_SUSPENDED
from app.schemas.auth import AgentRegister, UserRegister
from app.services import auth_service
from app.services.auth_service import Account

PASSWORD = "secret123"   # matches the conftest factories


def user_body(email="new.user@example.com") -> UserRegister:
    return UserRegister(email=email, password="longenough", first_name="Sara", last_name="B",
                        phone="0600000000", city="Fes")


def agent_body(email="agency@example.com") -> AgentRegister:
    return AgentRegister(email=email, password="longenough", first_name="Omar", last_name="K",
                         agency_name="Atlas Cars", agency_address="2 Rue X", city="Rabat", phone="0622222222")


class TestPasswords:
    def test_hash_roundtrip(self):
        hashed = auth_service.hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert auth_service.verify_password("s3cret-pass", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_malformed_hash_is_false(self):
        assert auth_service.verify_password("anything", "not-a-bcrypt-hash") is False


class TestEligibility:
    @pytest.mark.parametrize("status,eligible", [
        (AGENT_APPROVED, True),
        (AGENT_IN_VERIFICATION, True),
        (AGENT_PENDING, False),
        (AGENT_REJECTED, False),
        (AGENT_SUSPENDED, False),
    ])
    def test_agent_statuses(self, status, eligible):
        account = Account(kind="agent", id=1, email="a@x", role="agent", status=status, password_hash="")
        assert account.is_eligible_to_login() is eligible

    def test_inactive_user(self):
        account = Account(kind="user", id=1, email="u@x", role="user", status="inactive", password_hash="")
        assert account.ineligibility_reason() == "Account is inactive"

    def test_unverified_user(self):
        account = Account(kind="user", id=1, email="u@x", role="user", status="active", password_hash="",
                          email_verified=False)
        assert not account.is_eligible_to_login()


class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_user_requires_email_verification(self, db):
        with patch("app.services.event_handlers.queue_email") as mock_mail:
            user = await auth_service.register_user(db, user_body("New.User@Example.com"))
        assert user.email == "new.user@example.com"
        assert user.is_email_verified is False
        assert user.email_verification_token
        mock_mail.assert_called_once()
        assert mock_mail.call_args.args[0] == "new.user@example.com"

    @pytest.mark.asyncio
    async def test_email_unique_across_users_and_agents(self, db, make_agent):
        make_agent(email="taken@example.com")
        with pytest.raises(ConflictError):
            await auth_service.register_user(db, user_body("taken@example.com"))

    def test_register_agent_starts_pending(self, db):
        agent = auth_service.register_agent(db, agent_body())
        assert agent.account_status == AGENT_PENDING
        assert auth_service.verify_password("longenough", agent.password_hash)

    def test_verify_email(self, db, make_user):
        user = make_user(verified=False)
        user.email_verification_token = "tok-123"
        db.commit()

        verified = auth_service.verify_email(db, "tok-123")
        assert verified.is_email_verified is True
        assert verified.email_verification_token is None
        with pytest.raises(BadRequestError):
            auth_service.verify_email(db, "tok-123")


class TestLogin:
    def test_user_login_returns_token(self, db, make_user):
        user = make_user()
        result = auth_service.login(db, user.email, PASSWORD)
        principal = auth_service.decode_access_token(result["access_token"])
        assert principal.kind == "user"
        assert principal.id == user.id
        assert result["role"] == "user"

    def test_wrong_password(self, db, make_user):
        user = make_user()
        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            auth_service.login(db, user.email, "not-the-password")

    def test_unknown_email(self, db):
        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            auth_service.login(db, "ghost@example.com", PASSWORD)

    def test_unverified_user_blocked(self, db, make_user):
        user = make_user(verified=False)
        with pytest.raises(UnauthorizedError) as exc:
            auth_service.login(db, user.email, PASSWORD)
        assert exc.value.error_code == "LOGIN_NOT_ALLOWED"

    def test_agent_in_verification_can_login(self, db, make_agent):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        result = auth_service.login(db, agent.email, PASSWORD)
        assert result["kind"] == "agent"

    def test_pending_agent_blocked(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(UnauthorizedError, match="not approved"):
            auth_service.login(db, agent.email, PASSWORD)


class TestTokens:
    def test_expired_token_rejected(self):
        account = Account(kind="user", id=7, email="u@x", role="user", status="active", password_hash="")
        token = auth_service.create_access_token(account, expires_delta=timedelta(seconds=-1))
        with pytest.raises(UnauthorizedError):
            auth_service.decode_access_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(UnauthorizedError):
            auth_service.decode_access_token("not.a.jwt")
