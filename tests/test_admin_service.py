# tests/test_admin_service.py
"""Unit tests for superadmin agent governance and statistics."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, timedelta
from app.errors import BadRequestError, NotFoundError, UnauthorizedError
from app.models.agent import AGENT_APPROVED, AGENT_IN_VERIFICATION, AGENT_PENDING, AGENT_REJECTED, AGENT_SUSPENDED
from app.models.notification import Notification
from app.models.rental import RENTAL_COMPLETED, RENTAL_PENDING
from app.services import admin_service, auth_service

PASSWORD = "secret123"   # matches the conftest factories


class TestAgentGovernance:
    @pytest.mark.asyncio
    async def test_approve_pending_agent(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        approved = await admin_service.approve_agent(db, agent.id)
        assert approved.account_status == AGENT_APPROVED
        assert approved.approval_date is not None
        assert db.query(Notification).filter(Notification.type == "account_approved").count() == 1

    @pytest.mark.asyncio
    async def test_cannot_approve_rejected_agent(self, db, make_agent):
        agent = make_agent(status=AGENT_REJECTED)
        with pytest.raises(BadRequestError):
            await admin_service.approve_agent(db, agent.id)

    def test_reject_and_activate(self, db, make_agent):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        assert admin_service.reject_agent(db, agent.id).account_status == AGENT_REJECTED
        with pytest.raises(BadRequestError):
            admin_service.activate_agent(db, agent.id)

    def test_suspend_then_reactivate(self, db, make_agent):
        agent = make_agent(status=AGENT_APPROVED)
        assert admin_service.suspend_agent(db, agent.id).account_status == AGENT_SUSPENDED
        assert admin_service.activate_agent(db, agent.id).account_status == AGENT_APPROVED

    @pytest.mark.asyncio
    async def test_request_documents_moves_to_verification(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        result = await admin_service.request_documents(db, agent.id, ["business_license", "insurance"],
                                                       "Needed for onboarding")
        assert result.account_status == AGENT_IN_VERIFICATION
        note = db.query(Notification).filter(Notification.type == "documents_requested").one()
        assert note.recipient_id == agent.id
        assert "business_license" in note.message

    @pytest.mark.asyncio
    async def test_pending_agent_signs_in_only_after_documents_requested(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(UnauthorizedError):
            auth_service.login(db, agent.email, PASSWORD)

        await admin_service.request_documents(db, agent.id, ["business_license"])
        assert auth_service.login(db, agent.email, PASSWORD)["account_id"] == agent.id

    @pytest.mark.asyncio
    async def test_request_documents_needs_types(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(BadRequestError):
            await admin_service.request_documents(db, agent.id, [])

    def test_list_agents_by_status(self, db, make_agent):
        make_agent(status=AGENT_PENDING)
        approved = make_agent(status=AGENT_APPROVED)
        assert [a.id for a in admin_service.list_agents(db, status=AGENT_APPROVED)] == [approved.id]

    def test_unknown_agent(self, db):
        with pytest.raises(NotFoundError):
            admin_service.suspend_agent(db, 77)


class TestUsersAndStats:
    def test_deactivate_user(self, db, make_user):
        user = make_user()
        assert admin_service.set_user_active(db, user.id, False).is_active is False

    def test_platform_stats(self, db, make_agent, make_car, make_user, make_rental):
        agent = make_agent()
        make_agent(status=AGENT_PENDING)
        car = make_car(agent)
        user = make_user()
        make_user(role="superadmin")
        past = date.today() - timedelta(days=8)
        make_rental(user, car, past, past + timedelta(days=2), status=RENTAL_COMPLETED, total_price="300.00")
        make_rental(user, car, date.today() + timedelta(days=3), date.today() + timedelta(days=4))

        stats = admin_service.platform_stats(db)
        assert stats["total_users"] == 1
        assert stats["total_agents"] == 2
        assert stats["pending_agents"] == 1
        assert stats["total_cars"] == 1
        assert stats["total_rentals"] == 2
        assert stats["completed_rentals"] == 1
        assert stats["total_revenue"] == 300.0

    def test_agent_revenue(self, db, make_agent, make_car, make_user, make_rental):
        agent = make_agent()
        car = make_car(agent)
        user = make_user()
        past = date.today() - timedelta(days=8)
        make_rental(user, car, past, past + timedelta(days=2), status=RENTAL_COMPLETED, total_price="120.25")
        make_rental(user, car, date.today() + timedelta(days=3), date.today() + timedelta(days=4),
                    status=RENTAL_PENDING)

        revenue = admin_service.agent_revenue(db, agent.id)
        assert revenue["total_earnings"] == 120.25
        assert revenue["completed_rentals"] == 1
        assert revenue["pending_rentals"] == 1
        assert len(revenue["revenue"]) == 2
