# app/schemas/auth.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class UserRegister(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    phone: str
    address: Optional[str] = None
    city: str


class AgentRegister(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    agency_name: str
    agency_address: str
    city: str
    phone: str


class LoginRequest(BaseModel):
    email: str
    password: str


class EmailVerification(BaseModel):
    token: str


class UserProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    city: Optional[str] = Field(default=None, min_length=1)


class AgentProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    agency_name: Optional[str] = Field(default=None, min_length=1)
    agency_address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: int
    kind: str                # user | agent
    role: str


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    address: Optional[str]
    city: str
    role: str
    is_active: bool
    is_email_verified: bool
    date_created: Optional[datetime]

    class Config:
        from_attributes = True


class AgentOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    agency_name: str
    agency_address: str
    city: str
    phone: str
    account_status: str
    approval_date: Optional[datetime]
    date_registered: Optional[datetime]

    class Config:
        from_attributes = True


class AgentDashboardStats(BaseModel):
    total_cars: int
    total_rentals: int
    completed_rentals: int
    total_earnings: float
    pending_approvals: int


class AgentDashboardOut(BaseModel):
    agent: AgentOut
    statistics: AgentDashboardStats
