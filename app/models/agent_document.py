# app/models/agent_document.py
"""
Onboarding documents uploaded by an agent (license, insurance, registration...).
Reviewed one by one by a superadmin; see document_service.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from app.database import Base

DOC_PENDING = "pending"
DOC_VERIFIED = "verified"
DOC_REJECTED = "rejected"


class AgentDocument(Base):
    __tablename__ = "agent_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False, index=True)
    document_type = Column(String(100), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer)
    mime_type = Column(String(100))
    status = Column(String(20), default=DOC_PENDING, nullable=False, index=True)
    rejection_reason = Column(Text)
    uploaded_at = Column(DateTime, nullable=False)
    verified_at = Column(DateTime)
    verified_by = Column(Integer)             # superadmin users.id

    def __repr__(self):
        return f"<AgentDocument {self.id} agent={self.agent_id} type={self.document_type} status={self.status}>"
