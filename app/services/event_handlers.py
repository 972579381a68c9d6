# app/services/event_handlers.py
"""
Delivery side of the domain events: in-app notifications + email.
Each handler receives the event and a DB session; errors propagate to
event_dispatcher.publish(), which logs and swallows them.
Emails are queued, not awaited. Every user-supplied value is HTML-escaped
before it goes into an email body.
"""

from html import escape
from sqlalchemy.orm import Session
from app.models.agent import Agent
from app.models.car import Car
from app.models.user import User
from app.models.notification import (
    RECIPIENT_USER,
    RECIPIENT_AGENT,
    RECIPIENT_SUPERADMIN_BROADCAST,
)
from app.services import domain_events as ev
from app.services.email_service import queue_email
from app.services.notification_service import notify
from app.utils.logger import get_logger

logger = get_logger(__name__)

APP_NAME = "KarHub"


def _car_label(db: Session, car_id: int) -> str:
    car = db.query(Car).filter(Car.id == car_id).first()
    return f"{car.brand} {car.model}" if car else f"car #{car_id}"


def _email_body(greeting_name: str, paragraphs: list[str]) -> str:
    # paragraphs are markup; callers escape the values they interpolate
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (f"<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
            f"<p>Hello {escape(greeting_name)},</p>{body}"
            f"<p>Best regards,<br><strong>{APP_NAME} Team</strong></p></div>")


# ── Rentals ──────────────────────────────────────────────────────────────────
async def on_rental_requested(event: ev.RentalRequested, db: Session):
    car = _car_label(db, event.car_id)
    await notify(db, RECIPIENT_AGENT, event.agent_id, "rental_request", "New Rental Request",
                 f"New booking request for {car} from {event.start_date} to {event.end_date}.",
                 "rental", event.rental_id)
    agent = db.query(Agent).filter(Agent.id == event.agent_id).first()
    if agent:
        queue_email(agent.email, f"New rental request - {APP_NAME}", _email_body(
            agent.first_name or "Agent",
            [f"You received a booking request for <strong>{escape(car)}</strong> "
             f"from {event.start_date} to {event.end_date}.",
             "Log in to your dashboard to approve or reject it."],
        ))


async def _notify_user_of_decision(db: Session, event: ev.RentalEvent, type: str, title: str, message: str):
    await notify(db, RECIPIENT_USER, event.user_id, type, title, message, "rental", event.rental_id)
    user = db.query(User).filter(User.id == event.user_id).first()
    if user:
        queue_email(user.email, f"{title} - {APP_NAME}", _email_body(user.first_name, [escape(message)]))


async def on_rental_approved(event: ev.RentalApproved, db: Session):
    car = _car_label(db, event.car_id)
    await _notify_user_of_decision(db, event, "rental_approved", "Rental Approved",
                                   f"Your rental request for {car} has been approved.")


async def on_rental_rejected(event: ev.RentalRejected, db: Session):
    car = _car_label(db, event.car_id)
    await _notify_user_of_decision(db, event, "rental_rejected", "Rental Rejected",
                                   f"Your rental request for {car} has been rejected.")


async def on_rental_cancelled(event: ev.RentalCancelled, db: Session):
    car = _car_label(db, event.car_id)
    await notify(db, RECIPIENT_AGENT, event.agent_id, "rental_cancelled", "Rental Cancelled",
                 f"The customer cancelled rental #{event.rental_id} for {car}."
                 + (" The car is available again." if event.was_approved else ""),
                 "rental", event.rental_id)


async def on_rental_completed(event: ev.RentalCompleted, db: Session):
    car = _car_label(db, event.car_id)
    await notify(db, RECIPIENT_USER, event.user_id, "rental_completed", "Rental Completed",
                 f"Your rental of {car} is complete. You can now leave a review.",
                 "rental", event.rental_id)
    await notify(db, RECIPIENT_AGENT, event.agent_id, "car_available", "Car Available",
                 f"Rental #{event.rental_id} is complete and {car} is available again.",
                 "car", event.car_id)


# ── Documents / agent onboarding ─────────────────────────────────────────────
def _agency_name(db: Session, agent_id: int) -> str:
    agent = db.query(Agent).filter(Agent.id == agent_id).first()
    return agent.agency_name if agent else f"Agent #{agent_id}"


async def on_document_uploaded(event: ev.DocumentUploaded, db: Session):
    await notify(db, RECIPIENT_SUPERADMIN_BROADCAST, None, "document_uploaded", "New Document Uploaded",
                 f"{_agency_name(db, event.agent_id)} has uploaded a {event.document_type} "
                 f"document for verification.",
                 "agent", event.agent_id)


async def on_documents_submitted(event: ev.DocumentsSubmitted, db: Session):
    await notify(db, RECIPIENT_SUPERADMIN_BROADCAST, None, "documents_submitted", "New Document Submission",
                 f"{_agency_name(db, event.agent_id)} has submitted {event.document_count} "
                 f"document(s) for verification review.",
                 "agent", event.agent_id)


async def on_document_verified(event: ev.DocumentVerified, db: Session):
    if event.approved:
        type, title = "document_verified", "Document Verified"
        message = f"Your {event.document_type} document has been verified successfully."
    else:
        type, title = "document_rejected", "Document Rejected"
        message = (f"Your {event.document_type} document was rejected. "
                   f"Reason: {event.rejection_reason or 'Please contact support.'}")
    await notify(db, RECIPIENT_AGENT, event.agent_id, type, title, message, "agent", event.agent_id)

    agent = db.query(Agent).filter(Agent.id == event.agent_id).first()
    if not agent:
        return
    if event.approved:
        paragraphs = [escape(message), "If you still have pending documents, please make sure to submit them as well."]
    else:
        paragraphs = [escape(message), "Please upload a corrected document from your profile and submit it again."]
    queue_email(agent.email, f"{title} - {APP_NAME}", _email_body(agent.first_name or "Agent", paragraphs))


async def on_documents_requested(event: ev.DocumentsRequested, db: Session):
    agent = db.query(Agent).filter(Agent.id == event.agent_id).first()
    if not agent:
        return
    items = "".join(f"<li>{escape(doc)}</li>" for doc in event.required_documents)
    await notify(db, RECIPIENT_AGENT, agent.id, "documents_requested", "Documents Needed",
                 f"Please upload: {', '.join(event.required_documents)}.", "agent", agent.id)
    queue_email(agent.email, f"Document request for account verification - {APP_NAME}", _email_body(
        agent.first_name or "Agent",
        [f"To complete the verification of your account we need the following documents:<ul>{items}</ul>",
         escape(event.message) if event.message else "Please upload these documents through your agent dashboard."],
    ))


async def on_agent_approved(event: ev.AgentApproved, db: Session):
    await notify(db, RECIPIENT_AGENT, event.agent_id, "account_approved", "Account Approved",
                 "Your account has been approved! You can now add and manage cars.",
                 "agent", event.agent_id)


# ── Accounts ─────────────────────────────────────────────────────────────────
async def on_email_verification_requested(event: ev.EmailVerificationRequested, db: Session):
    user = db.query(User).filter(User.id == event.user_id).first()
    if not user:
        return
    queue_email(user.email, f"Verify your email - {APP_NAME}", _email_body(
        user.first_name,
        [f"Your verification code is <strong>{escape(event.token)}</strong>.",
         "Enter it in the app to activate your account."],
    ))
