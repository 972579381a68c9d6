# app/models/agent.py
"""
Rental agencies. account_status drives marketplace participation:
pending → in_verification → approved, plus rejected / suspended set by an admin.
Only approved agents may list cars.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base

AGENT_PENDING = "pending"
AGENT_IN_VERIFICATION = "in_verification"
AGENT_APPROVED = "approved"
AGENT_REJECTED = "rejected"
AGENT_SUSPENDED = "suspended"


class Agent(Base):
    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    agency_name = Column(String(200), nullable=False)
    agency_address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    role = Column(String(20), default="agent", nullable=False)
    account_status = Column(String(20), default=AGENT_PENDING, nullable=False, index=True)
    approval_date = Column(DateTime)
    date_registered = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Agent {self.id} agency={self.agency_name} status={self.account_status}>"
