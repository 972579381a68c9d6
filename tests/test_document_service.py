# tests/test_document_service.py
"""Unit tests for the agent document verification workflow."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.config import settings
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.agent import AGENT_APPROVED, AGENT_IN_VERIFICATION, AGENT_PENDING, AGENT_SUSPENDED
from app.models.agent_document import AgentDocument, DOC_PENDING, DOC_REJECTED, DOC_VERIFIED
from app.models.notification import Notification
from app.schemas.car import CarCreate
from app.services import car_service, document_service
from app.services.document_service import IncomingFile


def pdf(size: int = 2048, name: str = "license.pdf") -> IncomingFile:
    return IncomingFile(filename=name, content_type="application/pdf", content=b"%" * size)


def car_body(**overrides) -> CarCreate:
    fields = dict(brand="Dacia", model="Logan", year=2021, color="Grey", license_plate="AB-123-CD",
                  fuel_type="Diesel", transmission="Manual", seats=5, price_per_day="45.00",
                  guarantee_price="20.00", category="Compact")
    fields.update(overrides)
    return CarCreate(**fields)


class TestUpload:
    @pytest.mark.asyncio
    async def test_first_upload_moves_agent_to_verification(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        document = await document_service.upload_document(db, agent.id, pdf(), "business_license")

        db.refresh(agent)
        assert agent.account_status == AGENT_IN_VERIFICATION
        assert document.status == DOC_PENDING
        assert document.file_size == 2048
        assert os.path.exists(document.file_path)
        assert document.file_path.startswith(settings.UPLOAD_DIR.replace(os.sep, "/"))

    @pytest.mark.asyncio
    async def test_agent_in_verification_cannot_list_cars(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        await document_service.upload_document(db, agent.id, pdf(), "business_license")

        with pytest.raises(ForbiddenError) as exc:
            car_service.create_car(db, agent.id, car_body())
        assert exc.value.error_code == "AGENT_NOT_APPROVED"

    @pytest.mark.asyncio
    async def test_superadmins_are_notified(self, db, make_agent, make_user):
        admins = [make_user(role="superadmin"), make_user(role="superadmin")]
        make_user(role="superadmin", is_active=False)
        agent = make_agent(status=AGENT_PENDING)

        await document_service.upload_document(db, agent.id, pdf(), "insurance")
        notes = db.query(Notification).filter(Notification.type == "document_uploaded").all()
        assert sorted(n.recipient_id for n in notes) == sorted(a.id for a in admins)
        assert {n.recipient_type for n in notes} == {"superadmin"}

    @pytest.mark.asyncio
    async def test_rejects_unsupported_mime_type_without_status_change(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        bad = IncomingFile(filename="notes.txt", content_type="text/plain", content=b"hello")

        with pytest.raises(BadRequestError) as exc:
            await document_service.upload_document(db, agent.id, bad, "business_license")
        db.refresh(agent)
        assert exc.value.error_code == "INVALID_FILE_TYPE"
        assert agent.account_status == AGENT_PENDING
        assert db.query(AgentDocument).count() == 0

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, db, make_agent, monkeypatch):
        monkeypatch.setattr(settings, "DOCUMENT_MAX_BYTES", 100)
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(BadRequestError) as exc:
            await document_service.upload_document(db, agent.id, pdf(size=101), "business_license")
        assert exc.value.error_code == "FILE_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_file_at_size_limit_accepted(self, db, make_agent, monkeypatch):
        monkeypatch.setattr(settings, "DOCUMENT_MAX_BYTES", 100)
        agent = make_agent(status=AGENT_PENDING)
        document = await document_service.upload_document(db, agent.id, pdf(size=100), "business_license")
        assert document.id is not None

    @pytest.mark.asyncio
    async def test_missing_file(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(BadRequestError, match="No file"):
            await document_service.upload_document(db, agent.id, None, "business_license")

    @pytest.mark.asyncio
    async def test_approved_agent_cannot_upload(self, db, make_agent):
        agent = make_agent(status=AGENT_APPROVED)
        with pytest.raises(ForbiddenError):
            await document_service.upload_document(db, agent.id, pdf(), "business_license")

    @pytest.mark.asyncio
    async def test_unknown_agent(self, db):
        with pytest.raises(NotFoundError):
            await document_service.upload_document(db, 404, pdf(), "business_license")


class TestVerification:
    @pytest.mark.asyncio
    async def test_agent_approved_when_all_documents_verified(self, db, make_agent, make_user, make_document):
        admin = make_user(role="superadmin")
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        first = make_document(agent, "business_license")
        second = make_document(agent, "insurance")

        await document_service.verify_document(db, first.id, admin.id, approved=True)
        db.refresh(agent)
        assert agent.account_status == AGENT_IN_VERIFICATION

        await document_service.verify_document(db, second.id, admin.id, approved=True)
        db.refresh(agent)
        assert agent.account_status == AGENT_APPROVED
        assert agent.approval_date is not None
        assert db.query(Notification).filter(Notification.type == "account_approved").count() == 1

    @pytest.mark.asyncio
    async def test_verification_records_admin(self, db, make_agent, make_user, make_document):
        admin = make_user(role="superadmin")
        document = make_document(make_agent(status=AGENT_IN_VERIFICATION))

        verified = await document_service.verify_document(db, document.id, admin.id, approved=True)
        assert verified.status == DOC_VERIFIED
        assert verified.verified_by == admin.id
        assert verified.verified_at is not None

    @pytest.mark.asyncio
    async def test_rejection_keeps_agent_in_verification(self, db, make_agent, make_user, make_document):
        admin = make_user(role="superadmin")
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        document = make_document(agent)

        rejected = await document_service.verify_document(db, document.id, admin.id, approved=False,
                                                          rejection_reason="Blurry scan")
        db.refresh(agent)
        assert rejected.status == DOC_REJECTED
        assert rejected.rejection_reason == "Blurry scan"
        assert agent.account_status == AGENT_IN_VERIFICATION
        note = db.query(Notification).filter(Notification.recipient_type == "agent").one()
        assert note.type == "document_rejected"
        assert "Blurry scan" in note.message

    @pytest.mark.asyncio
    async def test_no_documents_means_no_approval(self, db, make_agent):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        result = await document_service.approve_agent_after_documents(db, agent.id)
        assert result.account_status == AGENT_IN_VERIFICATION
        assert document_service.all_documents_verified(db, agent.id) is False

    @pytest.mark.asyncio
    async def test_approval_is_one_directional(self, db, make_agent, make_document):
        agent = make_agent(status=AGENT_APPROVED)
        make_document(agent, "business_license", status=DOC_VERIFIED)
        make_document(agent, "insurance", status=DOC_PENDING)

        result = await document_service.approve_agent_after_documents(db, agent.id)
        assert result.account_status == AGENT_APPROVED

    @pytest.mark.asyncio
    async def test_suspended_agent_not_auto_approved(self, db, make_agent, make_document):
        agent = make_agent(status=AGENT_SUSPENDED)
        make_document(agent, status=DOC_VERIFIED)

        result = await document_service.approve_agent_after_documents(db, agent.id)
        assert result.account_status == AGENT_SUSPENDED

    @pytest.mark.asyncio
    async def test_verify_unknown_document(self, db):
        with pytest.raises(NotFoundError):
            await document_service.verify_document(db, 999, 1, approved=True)


class TestQueriesAndSubmission:
    def test_pending_queue_oldest_first(self, db, make_agent, make_document):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        first = make_document(agent, "business_license")
        make_document(agent, "insurance", status=DOC_VERIFIED)
        third = make_document(agent, "registration")

        queue = document_service.list_pending_documents(db)
        assert [d.id for d in queue] == [first.id, third.id]

    def test_list_agent_documents_filtered_by_type(self, db, make_agent, make_document):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        make_document(agent, "business_license")
        make_document(agent, "insurance")
        docs = document_service.list_agent_documents(db, agent.id, "insurance")
        assert [d.document_type for d in docs] == ["insurance"]

    @pytest.mark.asyncio
    async def test_submit_requires_documents(self, db, make_agent):
        agent = make_agent(status=AGENT_PENDING)
        with pytest.raises(BadRequestError):
            await document_service.submit_for_review(db, agent.id)

    @pytest.mark.asyncio
    async def test_submit_notifies_superadmins(self, db, make_agent, make_user, make_document):
        admin = make_user(role="superadmin")
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        make_document(agent, "business_license")
        make_document(agent, "insurance")

        result = await document_service.submit_for_review(db, agent.id)
        assert result == {"agent_id": agent.id, "document_count": 2}
        note = db.query(Notification).filter(Notification.type == "documents_submitted").one()
        assert note.recipient_id == admin.id

    def test_delete_only_own_document(self, db, make_agent, make_document):
        owner = make_agent(status=AGENT_IN_VERIFICATION)
        document = make_document(owner)
        with pytest.raises(NotFoundError):
            document_service.delete_document(db, document.id, make_agent().id)

        document_service.delete_document(db, document.id, owner.id)
        assert db.query(AgentDocument).count() == 0
