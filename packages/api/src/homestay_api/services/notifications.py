# This project was developed with assistance from AI tools.
"""Fire-and-forget notification dispatch.

``queue_notification`` returns immediately. Delivery runs as a background
task whose failure is logged and never reaches the caller: a transition that
has already been written stays written whether or not the SMS/email gateway
answered.
"""

import asyncio
import logging
from typing import Protocol

import httpx
from homestay_db.enums import NotificationEvent

from ..core.config import settings

logger = logging.getLogger(__name__)


class NotificationQueue(Protocol):
    def queue_notification(self, event_id: NotificationEvent, context: dict) -> None: ...


class WebhookNotifier:
    """Posts notification intents to the messaging gateway webhook.

    Background tasks are held in ``_tasks`` until they finish so they are not
    garbage-collected mid-flight.
    """

    def __init__(self, webhook_url: str | None, timeout: float = 5.0):
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._tasks: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    def queue_notification(self, event_id: NotificationEvent, context: dict) -> None:
        event = NotificationEvent(event_id)
        if not self.enabled:
            logger.info(
                "Notification %s for application %s not sent: no webhook configured",
                event.value,
                context.get("application_id"),
            )
            return
        try:
            task = asyncio.create_task(
                self._deliver(event, context),
                name=f"notify-{event.value}-{context.get('application_id')}",
            )
        except RuntimeError:
            logger.exception("Could not schedule notification %s", event.value)
            return
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    async def _deliver(self, event: NotificationEvent, context: dict) -> None:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._webhook_url,
                json={"event_id": event.value, "context": context},
            )
            response.raise_for_status()
        logger.info("Notification %s delivered for application %s", event.value, context.get("application_id"))

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Notification task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Notification task %s failed: %s", task.get_name(), exc)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


_notifier: WebhookNotifier | None = None


def init_notifier() -> WebhookNotifier:
    """Create the process-wide notifier from settings."""
    global _notifier  # noqa: PLW0603
    _notifier = WebhookNotifier(
        settings.NOTIFICATION_WEBHOOK_URL,
        timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
    )
    return _notifier


def get_notifier() -> WebhookNotifier:
    if _notifier is None:
        return init_notifier()
    return _notifier


def log_notification_status() -> None:
    """Log whether outbound notifications are enabled."""
    if settings.NOTIFICATION_WEBHOOK_URL:
        logger.info("Notifications ENABLED (webhook=%s)", settings.NOTIFICATION_WEBHOOK_URL)
    else:
        logger.info("Notifications DISABLED (NOTIFICATION_WEBHOOK_URL not set)")


def build_context(app, remarks: str | None = None) -> dict:
    """Notification context for an application: identity, owner, remarks."""
    return {
        "application_id": app.id,
        "application_number": app.application_number,
        "property_name": app.property_name,
        "owner_name": app.owner_name,
        "owner_mobile": app.owner_mobile,
        "owner_email": app.owner_email,
        "status": getattr(app.status, "value", app.status),
        "remarks": remarks,
    }
