# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + mail relay reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Mail relay reachability ("disabled" when MAIL_RELAY_URL is unset)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "mail_relay": "disabled",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Ping mail relay; email is best-effort, so a dead relay only degrades
    if settings.MAIL_RELAY_URL:
        try:
            resp = requests.head(settings.MAIL_RELAY_URL, timeout=3)
            result["mail_relay"] = "ok" if resp.status_code < 500 else f"http_{resp.status_code}"
        except requests.exceptions.ConnectionError:
            result["mail_relay"] = "unreachable"
            result["status"] = "degraded"
        except Exception as e:
            result["mail_relay"] = f"error: {str(e)}"

    return result
