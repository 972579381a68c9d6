# app/models/user.py
"""
Customers (and the superadmin roster, role='superadmin').
Agents live in their own table, see app/models/agent.py.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)
    address = Column(String(255))
    city = Column(String(100), nullable=False)
    role = Column(String(20), default="user", nullable=False, index=True)   # user | superadmin
    is_active = Column(Boolean, default=True, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(128), index=True)
    date_created = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<User {self.id} email={self.email} role={self.role}>"
