"""Hand-off of notification events from the API to the notifier worker.

Events go out on a Redis pub/sub channel after the triggering mutation has
committed. Delivery is at-most-once: a publish that fails, or an event
nobody is subscribed for, is logged and dropped, never retried.
"""
import logging
from typing import Optional

from pydantic import BaseModel

from helpdesk.core.config import settings
from helpdesk.core.messaging import redis_client
from helpdesk.models.enums import ReportStatus
from helpdesk.schemas.notification import NotificationKind

logger = logging.getLogger(__name__)


class NotificationEvent(BaseModel):
    kind: NotificationKind
    report_id: int
    status: Optional[ReportStatus] = None


class NotificationQueue:
    def __init__(self, client, channel: str = None):
        self.client = client
        self.channel = channel or settings.NOTIFICATION_CHANNEL

    async def publish(self, event: NotificationEvent) -> bool:
        try:
            await self.client.publish(self.channel, event.model_dump_json())
        except Exception:
            logger.exception("Could not queue %s notification for report %s", event.kind.value, event.report_id)
            return False
        logger.info("Queued %s notification for report %s", event.kind.value, event.report_id)
        return True

    async def new_report(self, report_id: int) -> bool:
        return await self.publish(NotificationEvent(kind=NotificationKind.new_report, report_id=report_id))

    async def report_assigned(self, report_id: int) -> bool:
        return await self.publish(NotificationEvent(kind=NotificationKind.assigned, report_id=report_id))

    async def status_changed(self, report_id: int, status: ReportStatus) -> bool:
        return await self.publish(
            NotificationEvent(kind=NotificationKind.status_changed, report_id=report_id, status=status)
        )


notification_queue = NotificationQueue(redis_client)


def get_notification_queue() -> NotificationQueue:
    return notification_queue
