# app/services/document_service.py
"""
Agent document verification workflow.

Agent.account_status (relevant subset):
    pending ──first upload / admin request──▶ in_verification ──all docs verified──▶ approved

A single rejected document does not change the agent's status; the agent
re-uploads and the admin verifies again. Approval is one-directional: adding
another document after approval does not revert it.
"""

from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.orm import Session
from app.config import settings
from app.database import commit_or_rollback
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.agent import Agent, AGENT_PENDING, AGENT_IN_VERIFICATION, AGENT_APPROVED
from app.models.agent_document import AgentDocument, DOC_PENDING, DOC_VERIFIED, DOC_REJECTED
from app.services import domain_events as ev
from app.services.event_dispatcher import publish
from app.services.storage_service import save_upload, delete_upload
from app.utils.logger import get_logger

logger = get_logger(__name__)

UPLOAD_ALLOWED_STATUSES = {AGENT_PENDING, AGENT_IN_VERIFICATION}
AUTO_APPROVABLE_STATUSES = {AGENT_PENDING, AGENT_IN_VERIFICATION}


@dataclass
class IncomingFile:
    """Transport-neutral view of an uploaded file."""
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def _get_agent(db: Session, agent_id: int) -> Agent:
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    if not agent:
        raise NotFoundError("Agent not found")
    return agent


def validate_file(file: IncomingFile | None):
    if file is None or not file.content:
        raise BadRequestError("No file provided")
    if file.content_type not in settings.DOCUMENT_ALLOWED_MIME_TYPES:
        raise BadRequestError("Invalid file type. Only PDF, JPG, and PNG files are allowed", "INVALID_FILE_TYPE")
    if file.size > settings.DOCUMENT_MAX_BYTES:
        raise BadRequestError(
            f"File size exceeds {settings.DOCUMENT_MAX_BYTES // (1024 * 1024)}MB limit", "FILE_TOO_LARGE"
        )


async def upload_document(db: Session, agent_id: int, file: IncomingFile | None, document_type: str) -> AgentDocument:
    agent = _get_agent(db, agent_id)
    if agent.account_status not in UPLOAD_ALLOWED_STATUSES:
        raise ForbiddenError("Documents can only be uploaded by agents with pending or verification status")
    if not document_type:
        raise BadRequestError("Document type is required")
    validate_file(file)

    path = save_upload("documents", agent_id, file.filename, file.content)
    document = AgentDocument(
        agent_id=agent_id,
        document_type=document_type,
        file_path=path,
        file_name=file.filename,
        file_size=file.size,
        mime_type=file.content_type,
        status=DOC_PENDING,
        uploaded_at=datetime.utcnow(),
    )
    db.add(document)

    if agent.account_status == AGENT_PENDING:
        agent.account_status = AGENT_IN_VERIFICATION
        agent.updated_at = datetime.utcnow()
        logger.info(f"[DOCS] Agent {agent_id} moved pending → in_verification on first upload")

    try:
        commit_or_rollback(db)
    except Exception:
        delete_upload(path)
        raise
    db.refresh(document)
    logger.info(f"[DOCS] Agent {agent_id} uploaded {document_type} (doc #{document.id}, {file.size} bytes)")

    await publish(ev.DocumentUploaded(document_id=document.id, agent_id=agent_id,
                                      document_type=document_type), db)
    return document


def list_agent_documents(db: Session, agent_id: int, document_type: str = None) -> list[AgentDocument]:
    q = db.query(AgentDocument).filter(AgentDocument.agent_id == agent_id)
    if document_type:
        q = q.filter(AgentDocument.document_type == document_type)
    return q.order_by(AgentDocument.uploaded_at.desc()).all()


def list_pending_documents(db: Session) -> list[AgentDocument]:
    """Review queue, oldest first."""
    return (
        db.query(AgentDocument)
        .filter(AgentDocument.status == DOC_PENDING)
        .order_by(AgentDocument.uploaded_at.asc(), AgentDocument.id.asc())
        .all()
    )


def all_documents_verified(db: Session, agent_id: int) -> bool:
    """True iff the agent has at least one document and every one is verified."""
    statuses = [d.status for d in db.query(AgentDocument).filter(AgentDocument.agent_id == agent_id).all()]
    return bool(statuses) and all(s == DOC_VERIFIED for s in statuses)


async def approve_agent_after_documents(db: Session, agent_id: int) -> Agent:
    agent = _get_agent(db, agent_id)
    if agent.account_status == AGENT_APPROVED:
        return agent
    if agent.account_status not in AUTO_APPROVABLE_STATUSES:
        logger.info(f"[DOCS] Agent {agent_id} is {agent.account_status} — not auto-approving")
        return agent
    if not all_documents_verified(db, agent_id):
        return agent

    agent.account_status = AGENT_APPROVED
    agent.approval_date = datetime.utcnow()
    agent.updated_at = agent.approval_date
    commit_or_rollback(db)
    logger.info(f"[DOCS] Agent {agent_id} approved — all documents verified")

    await publish(ev.AgentApproved(agent_id=agent_id), db)
    return agent


async def verify_document(db: Session, document_id: int, admin_id: int, approved: bool,
                          rejection_reason: str = None) -> AgentDocument:
    document = db.query(AgentDocument).filter(AgentDocument.id == document_id).first()
    if not document:
        raise NotFoundError("Document not found")

    if approved:
        document.status = DOC_VERIFIED
        document.verified_at = datetime.utcnow()
        document.verified_by = admin_id
        document.rejection_reason = None
    else:
        document.status = DOC_REJECTED
        document.rejection_reason = rejection_reason or ""
    commit_or_rollback(db)

    agent_id = document.agent_id
    document_type = document.document_type
    logger.info(f"[DOCS] Document #{document_id} ({document_type}) of agent {agent_id} "
                f"{'verified' if approved else 'rejected'} by admin {admin_id}")

    await publish(ev.DocumentVerified(document_id=document_id, agent_id=agent_id, document_type=document_type,
                                      approved=approved, rejection_reason=rejection_reason), db)
    await approve_agent_after_documents(db, agent_id)
    return document


async def submit_for_review(db: Session, agent_id: int) -> dict:
    agent = _get_agent(db, agent_id)
    count = db.query(AgentDocument).filter(AgentDocument.agent_id == agent_id).count()
    if count == 0:
        raise BadRequestError("Please upload at least one document before submitting")

    logger.info(f"[DOCS] Agent {agent.id} submitted {count} document(s) for review")
    await publish(ev.DocumentsSubmitted(agent_id=agent_id, document_count=count), db)
    return {"agent_id": agent_id, "document_count": count}


def delete_document(db: Session, document_id: int, agent_id: int):
    document = db.query(AgentDocument).filter(
        AgentDocument.id == document_id, AgentDocument.agent_id == agent_id
    ).first()
    if not document:
        raise NotFoundError("Document not found")

    path = document.file_path
    db.delete(document)
    commit_or_rollback(db)
    delete_upload(path)
    logger.info(f"[DOCS] Agent {agent_id} deleted document #{document_id}")
