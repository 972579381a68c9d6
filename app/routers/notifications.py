# app/routers/notifications.py
"""In-app notification inbox for the signed-in account."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_principal
from app.models.notification import RECIPIENT_AGENT, RECIPIENT_SUPERADMIN, RECIPIENT_USER
from app.schemas.notification import NotificationOut
from app.services import notification_service
from app.services.auth_service import KIND_AGENT, Principal

router = APIRouter()


def _recipient_type(principal: Principal) -> str:
    if principal.kind == KIND_AGENT:
        return RECIPIENT_AGENT
    return RECIPIENT_SUPERADMIN if principal.role == "superadmin" else RECIPIENT_USER


@router.get("/notifications", response_model=list[NotificationOut])
def list_notifications(unread_only: bool = False, limit: int = 50,
                       principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return notification_service.list_for_recipient(db, principal.id, _recipient_type(principal),
                                                   unread_only, limit)


@router.get("/notifications/unread-count")
def unread_count(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return {"unread": notification_service.unread_count(db, principal.id, _recipient_type(principal))}


@router.put("/notifications/read-all")
def mark_all_read(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, principal.id, _recipient_type(principal))
    return {"updated": updated}


@router.put("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, principal: Principal = Depends(get_current_principal),
              db: Session = Depends(get_db)):
    return notification_service.mark_read(db, notification_id, principal.id, _recipient_type(principal))
