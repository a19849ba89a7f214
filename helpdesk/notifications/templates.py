"""Subjects and HTML bodies for report lifecycle emails."""
from html import escape
from typing import Tuple

from helpdesk.core.config import settings
from helpdesk.models.enums import INCIDENT_TYPE_LABELS, STATUS_LABELS, IncidentType, Priority, ReportStatus

PRIORITY_LABELS = {
    Priority.CRITICAL: "CRITICAL",
    Priority.HIGH: "HIGH",
    Priority.MEDIUM: "MEDIUM",
    Priority.LOW: "LOW",
}

_LAYOUT = """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #1f2937;">{heading}</h2>
  <div style="background: #f9fafb; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <h3 style="margin: 0 0 10px 0; color: #374151;">{title}</h3>
    {facts}
  </div>
  {body}
  <div style="margin: 30px 0; text-align: center;">
    <a href="{link}" style="background: #3b82f6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">{link_text}</a>
  </div>
  <p style="color: #6b7280; font-size: 12px; text-align: center;">Helpdesk - Incident management</p>
</div>"""


def _fact(label: str, value) -> str:
    if not value:
        return ""
    return f'<p style="margin: 5px 0;"><strong>{label}:</strong> {escape(str(value))}</p>'


def _render(heading, report, facts, link, link_text, body="") -> str:
    return _LAYOUT.format(
        heading=heading,
        title=escape(report.title),
        facts="\n    ".join(fact for fact in facts if fact),
        body=body,
        link=link,
        link_text=link_text,
    )


def report_link(report_id: int) -> str:
    return f"{settings.APP_URL.rstrip('/')}/report/{report_id}"


def new_report_email(report) -> Tuple[str, str]:
    subject = f"New report: {report.title}"
    body = (
        '<div style="background: white; padding: 15px; border-left: 4px solid #3b82f6;">'
        '<h4 style="margin: 0 0 10px 0; color: #1f2937;">Description:</h4>'
        f'<p style="margin: 0; color: #4b5563;">{escape(report.description)}</p>'
        "</div>"
    )
    facts = [
        _fact("Priority", PRIORITY_LABELS[Priority(report.priority)]),
        _fact("Type", INCIDENT_TYPE_LABELS[IncidentType(report.type)]),
        _fact("Reported by", report.reported_by.name),
        _fact("Location", report.location),
        _fact("Equipment", report.equipment),
    ]
    return subject, _render("New incident report", report, facts, report_link(report.id), "View report", body)


def assigned_email(report) -> Tuple[str, str]:
    subject = f"Report assigned: {report.title}"
    facts = [
        _fact("ID", f"#{report.id}"),
        _fact("Priority", PRIORITY_LABELS[Priority(report.priority)]),
        _fact("Status", STATUS_LABELS[ReportStatus(report.status)]),
        _fact("Reported by", report.reported_by.name),
    ]
    return subject, _render("A report was assigned to you", report, facts, report_link(report.id), "View report details")


def status_changed_email(report, new_status: ReportStatus) -> Tuple[str, str]:
    status_text = STATUS_LABELS[ReportStatus(new_status)]
    subject = f"Status updated: {report.title} - {status_text}"
    facts = [
        _fact("New status", status_text),
        _fact("Technician", report.assigned_to.name if report.assigned_to else None),
    ]
    return subject, _render("Report status updated", report, facts, report_link(report.id), "View report")
