# app/schemas/document.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class DocumentOut(BaseModel):
    id: int
    agent_id: int
    document_type: str
    file_path: str
    file_name: str
    file_size: Optional[int]
    mime_type: Optional[str]
    status: str
    rejection_reason: Optional[str]
    uploaded_at: datetime
    verified_at: Optional[datetime]
    verified_by: Optional[int]

    class Config:
        from_attributes = True


class DocumentVerify(BaseModel):
    approved: bool
    rejection_reason: Optional[str] = None


class DocumentRequest(BaseModel):
    required_documents: list[str]
    message: Optional[str] = None
