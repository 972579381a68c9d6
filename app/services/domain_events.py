# app/services/domain_events.py
"""
Domain events emitted by the booking engine and the verification workflow.
They are published after the primary transaction commits; delivery
(notifications, email) is handled by event_dispatcher and never feeds back
into the state transition that produced the event.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class DomainEvent:
    pass


# ── Booking engine ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RentalEvent(DomainEvent):
    rental_id: int
    user_id: int
    car_id: int
    agent_id: int


@dataclass(frozen=True)
class RentalRequested(RentalEvent):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class RentalApproved(RentalEvent):
    pass


@dataclass(frozen=True)
class RentalRejected(RentalEvent):
    pass


@dataclass(frozen=True)
class RentalCancelled(RentalEvent):
    was_approved: bool = False


@dataclass(frozen=True)
class RentalCompleted(RentalEvent):
    pass


# ── Verification workflow ────────────────────────────────────────────────────
@dataclass(frozen=True)
class DocumentUploaded(DomainEvent):
    document_id: int
    agent_id: int
    document_type: str


@dataclass(frozen=True)
class DocumentVerified(DomainEvent):
    document_id: int
    agent_id: int
    document_type: str
    approved: bool
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class DocumentsSubmitted(DomainEvent):
    agent_id: int
    document_count: int


@dataclass(frozen=True)
class DocumentsRequested(DomainEvent):
    agent_id: int
    required_documents: tuple = field(default_factory=tuple)
    message: Optional[str] = None


@dataclass(frozen=True)
class AgentApproved(DomainEvent):
    agent_id: int


# ── Accounts ─────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class EmailVerificationRequested(DomainEvent):
    user_id: int
    token: str
