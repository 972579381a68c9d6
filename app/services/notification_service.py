# app/services/notification_service.py
"""
Shared notification creation + inbox queries.
Used by the event handlers (write side) and the notifications router (read side).
"""

from datetime import datetime
from sqlalchemy.orm import Session
from app.errors import NotFoundError, ForbiddenError
from app.models.notification import (
    Notification,
    RECIPIENT_SUPERADMIN,
    RECIPIENT_SUPERADMIN_BROADCAST,
)
from app.models.user import User
from app.utils.logger import get_logger

logger = get_logger(__name__)


def resolve_recipients(db: Session, recipient_type: str, recipient_id: int = None) -> list[tuple[int, str]]:
    """
    Expand a notification target into concrete (recipient_id, recipient_type) pairs.
    A superadmin broadcast resolves against the current, active superadmin roster.
    """
    if recipient_type == RECIPIENT_SUPERADMIN_BROADCAST:
        admins = db.query(User).filter(User.role == "superadmin", User.is_active == True).all()  # noqa: E712
        if not admins:
            logger.warning("[NOTIFY] Superadmin broadcast with no active superadmins — dropped")
        return [(admin.id, RECIPIENT_SUPERADMIN) for admin in admins]
    return [(recipient_id, recipient_type)]


async def notify(db: Session, recipient_type: str, recipient_id: int, type: str, title: str,
                 message: str, related_entity_type: str = None,
                 related_entity_id: int = None) -> list[Notification]:
    """Create and persist one notification per resolved recipient. Always commits immediately."""
    created = []
    for rid, rtype in resolve_recipients(db, recipient_type, recipient_id):
        notification = Notification(
            recipient_id=rid,
            recipient_type=rtype,
            type=type,
            title=title,
            message=message,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        db.add(notification)
        created.append(notification)
    db.commit()
    logger.info(f"[NOTIFY][{type}] → {recipient_type}:{recipient_id or '*'} ({len(created)} created)")
    return created


def list_for_recipient(db: Session, recipient_id: int, recipient_type: str,
                       unread_only: bool = False, limit: int = 50) -> list[Notification]:
    q = db.query(Notification).filter(
        Notification.recipient_id == recipient_id,
        Notification.recipient_type == recipient_type,
    )
    if unread_only:
        q = q.filter(Notification.is_read == False)  # noqa: E712
    return q.order_by(Notification.created_at.desc()).limit(limit).all()


def unread_count(db: Session, recipient_id: int, recipient_type: str) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == recipient_id,
        Notification.recipient_type == recipient_type,
        Notification.is_read == False,  # noqa: E712
    ).count()


def mark_read(db: Session, notification_id: int, recipient_id: int, recipient_type: str) -> Notification:
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.recipient_id != recipient_id or notification.recipient_type != recipient_type:
        raise ForbiddenError("You can only update your own notifications")
    notification.is_read = True
    db.commit()
    return notification


def mark_all_read(db: Session, recipient_id: int, recipient_type: str) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == recipient_id,
        Notification.recipient_type == recipient_type,
        Notification.is_read == False,  # noqa: E712
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return updated
