# tests/test_event_handlers.py
"""Notification + email side of the domain events."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date
from unittest.mock import patch
from app.models.agent import AGENT_IN_VERIFICATION
from app.models.notification import Notification
from app.services import domain_events as ev
from app.services import event_handlers


def sent_html(mock_queue) -> str:
    return mock_queue.call_args.args[2]


class TestEmailEscaping:
    @pytest.mark.asyncio
    async def test_rejection_reason_is_escaped(self, db, make_agent):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        event = ev.DocumentVerified(document_id=1, agent_id=agent.id, document_type="business_license",
                                    approved=False, rejection_reason="<script>alert(1)</script>")
        with patch("app.services.event_handlers.queue_email") as mock_queue:
            await event_handlers.on_document_verified(event, db)

        html = sent_html(mock_queue)
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html

        # In-app notifications are plain text and keep the original wording
        notification = db.query(Notification).filter(Notification.recipient_id == agent.id).one()
        assert "<script>alert(1)</script>" in notification.message

    @pytest.mark.asyncio
    async def test_greeting_and_requested_documents_are_escaped(self, db, make_agent):
        agent = make_agent(status=AGENT_IN_VERIFICATION)
        agent.first_name = "<b>Eve</b>"
        db.commit()
        event = ev.DocumentsRequested(agent_id=agent.id, required_documents=("tax<id>",),
                                      message="Upload <i>today</i>")
        with patch("app.services.event_handlers.queue_email") as mock_queue:
            await event_handlers.on_documents_requested(event, db)

        html = sent_html(mock_queue)
        assert "Hello &lt;b&gt;Eve&lt;/b&gt;," in html
        assert "<li>tax&lt;id&gt;</li>" in html
        assert "Upload &lt;i&gt;today&lt;/i&gt;" in html
        # Template markup itself is left intact
        assert "<ul>" in html

    @pytest.mark.asyncio
    async def test_car_label_is_escaped(self, db, make_user, make_agent, make_car, make_rental):
        agent = make_agent()
        car = make_car(agent, brand="Fiat", model="<img src=x onerror=alert(1)>")
        rental = make_rental(make_user(), car, date(2030, 1, 1), date(2030, 1, 3))
        event = ev.RentalRequested(rental_id=rental.id, user_id=rental.user_id, car_id=car.id,
                                   agent_id=agent.id, start_date=rental.start_date, end_date=rental.end_date)
        with patch("app.services.event_handlers.queue_email") as mock_queue:
            await event_handlers.on_rental_requested(event, db)

        html = sent_html(mock_queue)
        assert "<img" not in html
        assert "&lt;img src=x onerror=alert(1)&gt;" in html
        assert mock_queue.call_args.args[0] == agent.email
