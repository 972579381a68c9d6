# app/services/email_service.py
"""
Outbound email via an HTTP mail relay.

POST {MAIL_RELAY_URL} with JSON {from, to, subject, html, text}.
Best-effort: 5xx and network errors are retried with exponential backoff,
4xx is not retried. send_email() never raises; it returns False on failure
so callers can log and move on.

Request handlers never await the relay: queue_email() schedules the delivery
as a background task and returns at once. drain() is called on shutdown to
let queued messages finish.

With MAIL_RELAY_URL unset, messages are only logged (development mode).
"""

import asyncio
import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Retry delay in seconds (doubles on each failure, max 8s)
_MIN_BACKOFF = 1
_MAX_BACKOFF = 8


async def send_email(to: str, subject: str, html: str, text: str = None) -> bool:
    if not to:
        logger.warning(f"[MAIL] No recipient for '{subject}' — skipped")
        return False

    if not settings.MAIL_RELAY_URL:
        logger.info(f"[MAIL][DEV] to={to} subject={subject}")
        return True

    payload = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
        "text": text or "",
    }
    headers = {"Authorization": f"Bearer {settings.MAIL_API_KEY}"} if settings.MAIL_API_KEY else {}
    attempts = max(1, settings.MAIL_MAX_RETRIES)
    backoff = _MIN_BACKOFF

    for attempt in range(1, attempts + 1):
        try:
            async with httpx.AsyncClient(timeout=settings.MAIL_TIMEOUT_SECONDS) as client:
                response = await client.post(settings.MAIL_RELAY_URL, json=payload, headers=headers)
            if response.status_code < 300:
                logger.info(f"[MAIL] Sent '{subject}' to {to}")
                return True
            if response.status_code < 500:
                logger.warning(f"[MAIL] Relay rejected '{subject}' to {to}: HTTP {response.status_code}")
                return False
            logger.warning(f"[MAIL] Relay HTTP {response.status_code} (attempt {attempt}/{attempts})")
        except httpx.HTTPError as e:
            logger.warning(f"[MAIL] Relay unreachable (attempt {attempt}/{attempts}): {e}")

        if attempt < attempts:
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, _MAX_BACKOFF)

    logger.error(f"[MAIL] Giving up on '{subject}' to {to} after {attempts} attempts")
    return False


# Deliveries scheduled by queue_email() and not finished yet
_in_flight: set[asyncio.Task] = set()


def _on_delivery_done(task: asyncio.Task):
    _in_flight.discard(task)
    if task.cancelled():
        logger.warning(f"[MAIL] Delivery '{task.get_name()}' cancelled")
    elif task.exception() is not None:
        logger.error(f"[MAIL] Delivery '{task.get_name()}' failed: {task.exception()}")


def queue_email(to: str, subject: str, html: str, text: str = None) -> asyncio.Task:
    """Schedule send_email() without waiting for the relay. Needs a running event loop."""
    task = asyncio.create_task(send_email(to, subject, html, text), name=f"mail-{subject}")
    _in_flight.add(task)
    task.add_done_callback(_on_delivery_done)
    return task


def pending_deliveries() -> int:
    return len(_in_flight)


async def drain(timeout: float = 30.0):
    """Wait up to `timeout` seconds for queued deliveries, then cancel the rest."""
    if not _in_flight:
        return
    tasks = list(_in_flight)
    logger.info(f"[MAIL] Waiting for {len(tasks)} queued message(s)")
    _, pending = await asyncio.wait(tasks, timeout=timeout)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(f"[MAIL] Dropped {len(pending)} undelivered message(s) on shutdown")
