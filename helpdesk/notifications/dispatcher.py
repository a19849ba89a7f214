"""Composes and sends report lifecycle emails.

Delivery failures never propagate: every ``notify_*`` call returns a
``NotificationResult`` the caller may log.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.models.enums import ReportStatus
from helpdesk.notifications import templates
from helpdesk.notifications.email import EmailClient
from helpdesk.notifications.queue import NotificationEvent
from helpdesk.repositories import ReportRepository, UserRepository
from helpdesk.schemas.notification import NotificationKind

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    success: bool
    sent: int = 0
    simulated: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class NotificationDispatcher:
    def __init__(self, db: AsyncSession, mailer: EmailClient):
        self.reports = ReportRepository(db)
        self.users = UserRepository(db)
        self.mailer = mailer

    async def _send_all(self, recipients, subject: str, html: str) -> NotificationResult:
        result = NotificationResult(success=True)
        errors = []
        for email in recipients:
            outcome = await self.mailer.send_email(to=email, subject=subject, html=html)
            if outcome.get("success"):
                result.sent += 1
                result.simulated = result.simulated or bool(outcome.get("simulated"))
            else:
                errors.append(f"{email}: {outcome.get('error')}")
        if errors:
            result.success = False
            result.error = "; ".join(errors)
        return result

    async def notify_new_report(self, report_id: int) -> NotificationResult:
        """Tell every technician and admin about a newly filed report."""
        try:
            report = await self.reports.get(report_id)
            if report is None:
                return NotificationResult(success=False, error="Report not found")
            staff = await self.users.staff()
            subject, html = templates.new_report_email(report)
            return await self._send_all([user.email for user in staff], subject, html)
        except Exception as e:
            logger.exception("Error sending new report notification for report %s", report_id)
            return NotificationResult(success=False, error=str(e))

    async def notify_report_assigned(self, report_id: int) -> NotificationResult:
        try:
            report = await self.reports.get(report_id)
            if report is None:
                return NotificationResult(success=False, error="Report not found")
            if report.assigned_to is None:
                return NotificationResult(success=False, error="Report has no assignee")
            subject, html = templates.assigned_email(report)
            return await self._send_all([report.assigned_to.email], subject, html)
        except Exception as e:
            logger.exception("Error sending assignment notification for report %s", report_id)
            return NotificationResult(success=False, error=str(e))

    async def notify_status_changed(self, report_id: int, new_status: ReportStatus) -> NotificationResult:
        """Tell the reporter that their report moved to ``new_status``."""
        try:
            report = await self.reports.get(report_id)
            if report is None:
                return NotificationResult(success=False, error="Report not found")
            subject, html = templates.status_changed_email(report, new_status)
            return await self._send_all([report.reported_by.email], subject, html)
        except Exception as e:
            logger.exception("Error sending status change notification for report %s", report_id)
            return NotificationResult(success=False, error=str(e))

    async def dispatch(self, event: NotificationEvent) -> NotificationResult:
        if event.kind == NotificationKind.new_report:
            return await self.notify_new_report(event.report_id)
        if event.kind == NotificationKind.assigned:
            return await self.notify_report_assigned(event.report_id)
        if event.status is None:
            return NotificationResult(success=False, error="Status is required for status_changed")
        return await self.notify_status_changed(event.report_id, event.status)
