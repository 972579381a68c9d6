# app/routers/documents.py
"""Agent document upload (agent side) and verification (superadmin side)."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import Optional
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require_agent, require_superadmin
from app.schemas.document import DocumentOut, DocumentVerify
from app.services import document_service
from app.services.auth_service import Principal
from app.services.document_service import IncomingFile

router = APIRouter()


@router.post("/documents/upload", response_model=DocumentOut, summary="Upload an onboarding document")
async def upload_document(
    file: UploadFile = File(...),
    document_type: str = Form(...),
    principal: Principal = Depends(require_agent),
    db: Session = Depends(get_db),
):
    incoming = IncomingFile(filename=file.filename or "upload", content_type=file.content_type or "",
                            content=await file.read())
    return await document_service.upload_document(db, principal.id, incoming, document_type)


@router.get("/documents/me", response_model=list[DocumentOut], summary="Current agent's documents")
def my_documents(document_type: Optional[str] = None, principal: Principal = Depends(require_agent),
                 db: Session = Depends(get_db)):
    return document_service.list_agent_documents(db, principal.id, document_type)


@router.post("/documents/submit-for-review", summary="Tell the admins documents are ready")
async def submit_for_review(principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    return await document_service.submit_for_review(db, principal.id)


@router.delete("/documents/{document_id}", summary="Delete one of the current agent's documents")
def delete_document(document_id: int, principal: Principal = Depends(require_agent),
                    db: Session = Depends(get_db)):
    document_service.delete_document(db, document_id, principal.id)
    return {"id": document_id, "status": "deleted"}


@router.get("/documents/pending", response_model=list[DocumentOut], summary="Review queue (oldest first)")
def pending_documents(principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return document_service.list_pending_documents(db)


@router.get("/documents/agent/{agent_id}", response_model=list[DocumentOut])
def agent_documents(agent_id: int, principal: Principal = Depends(require_superadmin),
                    db: Session = Depends(get_db)):
    return document_service.list_agent_documents(db, agent_id)


@router.put("/documents/{document_id}/verify", response_model=DocumentOut, summary="Verify or reject a document")
async def verify_document(document_id: int, body: DocumentVerify,
                          principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return await document_service.verify_document(db, document_id, principal.id, body.approved,
                                                  body.rejection_reason)
