# app/models/notification.py
"""
In-app notifications for users, agents and superadmins.
Written by the event dispatcher; read/marked by the notifications router.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from app.database import Base

RECIPIENT_USER = "user"
RECIPIENT_AGENT = "agent"
RECIPIENT_SUPERADMIN = "superadmin"
# Role-addressed target, fanned out to every current superadmin by the dispatcher
RECIPIENT_SUPERADMIN_BROADCAST = "superadmin-broadcast"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id = Column(Integer, nullable=False, index=True)
    recipient_type = Column(String(20), nullable=False, index=True)    # user | agent | superadmin
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    related_entity_type = Column(String(50))   # rental | car | agent | document
    related_entity_id = Column(Integer)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Notification {self.id} to={self.recipient_type}:{self.recipient_id} type={self.type}>"
