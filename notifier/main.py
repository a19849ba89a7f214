import asyncio
import json
import logging

from pydantic import ValidationError

from helpdesk import models  # noqa: F401
from helpdesk.core.config import settings
from helpdesk.core.database import AsyncSessionLocal
from helpdesk.core.logging_config import configure_logging
from helpdesk.core.messaging import redis_client
from helpdesk.notifications.dispatcher import NotificationDispatcher, NotificationResult
from helpdesk.notifications.email import EmailClient
from helpdesk.notifications.queue import NotificationEvent

logger = logging.getLogger("notifier")


async def handle_message(raw: str, mailer: EmailClient, session_factory=AsyncSessionLocal) -> NotificationResult:
    """Dispatch one queued event. Bad payloads and send failures are logged and dropped."""
    try:
        event = NotificationEvent.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Discarding malformed notification event {raw!r}: {e}")
        return NotificationResult(success=False, error="malformed event")

    async with session_factory() as session:
        result = await NotificationDispatcher(session, mailer).dispatch(event)

    if result.success:
        logger.info(f"Sent {event.kind.value} notification for report {event.report_id} ({result.sent} emails)")
    else:
        logger.error(f"Failed {event.kind.value} notification for report {event.report_id}: {result.error}")
    return result


async def listen(client=redis_client, channel: str = None, mailer: EmailClient = None):
    channel = channel or settings.NOTIFICATION_CHANNEL
    mailer = mailer or EmailClient()

    pubsub = client.pubsub()
    await pubsub.subscribe(channel)
    logger.info(f"Notifier listening on '{channel}'")

    async for message in pubsub.listen():
        if message["type"] != "message":
            continue
        try:
            await handle_message(message["data"], mailer)
        except Exception:
            # at-most-once: a failed event is dropped, the listener keeps going
            logger.exception("Notification event could not be processed")


def main():
    configure_logging()
    asyncio.run(listen())


if __name__ == "__main__":
    main()
