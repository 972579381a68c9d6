# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported here
so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    pool_size=10,
    max_overflow=20,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    # Account directory
    from app.models.user import User                        # noqa
    from app.models.agent import Agent                      # noqa
    from app.models.agent_document import AgentDocument     # noqa
    # Catalog + bookings
    from app.models.car import Car                          # noqa
    from app.models.rental import Rental                    # noqa
    from app.models.review import Review                    # noqa
    # Side channel
    from app.models.notification import Notification        # noqa

    Base.metadata.create_all(bind=engine)


def commit_or_rollback(db):
    """Commit the unit of work; on any failure roll every pending write back and re-raise."""
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
