"""Admin endpoint that runs a notification immediately, bypassing the queue.

Useful to check mail configuration; regular traffic goes through the
notifier worker.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.database import get_db
from helpdesk.core.errors import AuthorizationError, InternalError, ValidationError
from helpdesk.core.policy import Capability, Identity
from helpdesk.notifications.dispatcher import NotificationDispatcher
from helpdesk.notifications.email import EmailClient
from helpdesk.notifications.queue import NotificationEvent
from helpdesk.routers.auth import get_identity
from helpdesk.schemas.notification import NotificationKind, NotificationRequest, NotificationSendResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_email_client() -> EmailClient:
    return EmailClient()


@router.post("/email", response_model=NotificationSendResponse)
async def send_notification(
    request: NotificationRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    mailer: EmailClient = Depends(get_email_client),
):
    if not identity.can(Capability.SEND_NOTIFICATIONS):
        raise AuthorizationError("Only administrators can send notifications")
    if request.type == NotificationKind.status_changed and request.status is None:
        raise ValidationError("Status is required for a status change notification")

    dispatcher = NotificationDispatcher(db, mailer)
    result = await dispatcher.dispatch(
        NotificationEvent(kind=request.type, report_id=request.report_id, status=request.status)
    )
    if not result.success:
        raise InternalError("Error sending notification", details=result.error)
    return NotificationSendResponse(message="Notification sent", result=result.to_dict())
