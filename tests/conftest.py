# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite session per test plus small factories
for the account, catalog and booking tables.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import itertools
import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings
from app.database import Base
import app.models  # noqa: F401  registers every table on Base.metadata
from app.models.agent import Agent, AGENT_APPROVED
from app.models.agent_document import AgentDocument, DOC_PENDING
from app.models.car import Car
from app.models.rental import Rental, RENTAL_PENDING, PAYMENT_PENDING
from app.models.user import User
from app.services import email_service
from app.services.auth_service import hash_password

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "MAIL_RELAY_URL", None)
    monkeypatch.setattr(settings, "BOOKING_SAME_DAY_TURNOVER", False)
    # Queued emails belong to the event loop of the test that created them
    email_service._in_flight.clear()
    yield
    email_service._in_flight.clear()


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="user", is_active=True, verified=True, email=None):
        n = next(counter)
        now = datetime.utcnow()
        user = User(
            email=email or f"{role}{n}@example.com",
            password_hash=PASSWORD_HASH,
            first_name="Test",
            last_name=f"User{n}",
            phone="0600000000",
            city="Casablanca",
            role=role,
            is_active=is_active,
            is_email_verified=verified,
            date_created=now,
            updated_at=now,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_agent(db):
    counter = itertools.count(1)

    def _make(status=AGENT_APPROVED, email=None):
        n = next(counter)
        now = datetime.utcnow()
        agent = Agent(
            email=email or f"agency{n}@example.com",
            password_hash=PASSWORD_HASH,
            first_name="Agent",
            last_name=f"Smith{n}",
            agency_name=f"Agency {n}",
            agency_address="1 Main St",
            city="Rabat",
            phone="0611111111",
            role="agent",
            account_status=status,
            date_registered=now,
            updated_at=now,
        )
        db.add(agent)
        db.commit()
        db.refresh(agent)
        return agent
    return _make


@pytest.fixture
def make_car(db):
    counter = itertools.count(1)

    def _make(agent, price_per_day="100.00", guarantee_price="50.00", is_available=True, **overrides):
        n = next(counter)
        now = datetime.utcnow()
        fields = dict(
            agent_id=agent.id,
            brand="Toyota",
            model="Corolla",
            year=2022,
            color="White",
            license_plate=f"PLATE-{n}",
            fuel_type="Petrol",
            transmission="Automatic",
            seats=5,
            price_per_day=Decimal(price_per_day),
            guarantee_price=Decimal(guarantee_price),
            category="Sedan",
            images=[],
            is_available=is_available,
            average_rating=0,
            date_added=now,
            updated_at=now,
        )
        fields.update(overrides)
        car = Car(**fields)
        db.add(car)
        db.commit()
        db.refresh(car)
        return car
    return _make


@pytest.fixture
def make_rental(db):
    """Insert a rental directly, bypassing the booking rules (past dates, any status)."""
    def _make(user, car, start: date, end: date, status=RENTAL_PENDING, total_price="250.00"):
        now = datetime.utcnow()
        rental = Rental(
            user_id=user.id,
            car_id=car.id,
            agent_id=car.agent_id,
            start_date=start,
            end_date=end,
            total_price=Decimal(total_price),
            guarantee_amount=Decimal(car.guarantee_price),
            status=status,
            payment_status=PAYMENT_PENDING,
            request_date=now,
            updated_at=now,
        )
        db.add(rental)
        db.commit()
        db.refresh(rental)
        return rental
    return _make


@pytest.fixture
def make_document(db):
    def _make(agent, document_type="business_license", status=DOC_PENDING):
        document = AgentDocument(
            agent_id=agent.id,
            document_type=document_type,
            file_path=f"uploads/documents/{agent.id}/{document_type}.pdf",
            file_name=f"{document_type}.pdf",
            file_size=1024,
            mime_type="application/pdf",
            status=status,
            uploaded_at=datetime.utcnow(),
        )
        db.add(document)
        db.commit()
        db.refresh(document)
        return document
    return _make
