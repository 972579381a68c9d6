# app/services/event_dispatcher.py
"""Routes domain events to their delivery handlers (notifications + email)."""

from sqlalchemy.orm import Session
from app.services import domain_events as ev
from app.services import event_handlers as handlers
from app.utils.logger import get_logger

logger = get_logger(__name__)

_ROUTES = {
    # Booking engine
    ev.RentalRequested: [handlers.on_rental_requested],
    ev.RentalApproved: [handlers.on_rental_approved],
    ev.RentalRejected: [handlers.on_rental_rejected],
    ev.RentalCancelled: [handlers.on_rental_cancelled],
    ev.RentalCompleted: [handlers.on_rental_completed],
    # Verification workflow
    ev.DocumentUploaded: [handlers.on_document_uploaded],
    ev.DocumentsSubmitted: [handlers.on_documents_submitted],
    ev.DocumentVerified: [handlers.on_document_verified],
    ev.DocumentsRequested: [handlers.on_documents_requested],
    ev.AgentApproved: [handlers.on_agent_approved],
    # Accounts
    ev.EmailVerificationRequested: [handlers.on_email_verification_requested],
}


async def dispatch_event(event: ev.DomainEvent, db: Session):
    routes = _ROUTES.get(type(event))
    if not routes:
        logger.warning(f"[EVENTS] No handler registered for {type(event).__name__}")
        return
    for handler in routes:
        await handler(event, db)


async def publish(event: ev.DomainEvent, db: Session) -> bool:
    """
    Deliver an event after the primary transaction has committed.
    Delivery failures are logged and discarded; the caller's state change stands.
    """
    try:
        await dispatch_event(event, db)
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"[EVENTS] Delivery of {type(event).__name__} failed: {e}", exc_info=True)
        return False
