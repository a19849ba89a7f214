"""Authorization and lifecycle rules for reports.

Roles map to closed capability sets. A request resolves its ``Identity``
once, and ``report_access`` turns ``(identity, report)`` into a frozen
``ReportAccess`` decision that the routers consult. Nothing in here touches
the database.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from helpdesk.models.enums import ActivityAction, ReportStatus, Role


class Capability(str, Enum):
    VIEW_ANY_REPORT = "view_any_report"
    EDIT_ANY_REPORT = "edit_any_report"
    TRIAGE = "triage"  # change status / assignee
    COMMENT_ANY_REPORT = "comment_any_report"
    DELETE_REPORT = "delete_report"
    BE_ASSIGNED = "be_assigned"
    LIST_USERS = "list_users"
    MANAGE_USERS = "manage_users"
    SEND_NOTIFICATIONS = "send_notifications"


_STAFF = frozenset({
    Capability.VIEW_ANY_REPORT,
    Capability.EDIT_ANY_REPORT,
    Capability.TRIAGE,
    Capability.COMMENT_ANY_REPORT,
    Capability.BE_ASSIGNED,
    Capability.LIST_USERS,
})

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.USER: frozenset(),
    Role.TECHNICIAN: _STAFF,
    Role.ADMIN: _STAFF | {
        Capability.DELETE_REPORT,
        Capability.MANAGE_USERS,
        Capability.SEND_NOTIFICATIONS,
    },
}

# fields a reporter without TRIAGE may not touch
TRIAGE_FIELDS = ("status", "assigned_to_id")


def role_can(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[Role(role)]


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, passed explicitly into every operation."""

    user_id: int
    role: Role
    name: str
    email: str

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(user_id=user.id, role=Role(user.role), name=user.name, email=user.email)

    def can(self, capability: Capability) -> bool:
        return role_can(self.role, capability)


@dataclass(frozen=True)
class ReportAccess:
    can_view: bool
    can_edit: bool
    can_triage: bool
    can_comment: bool
    can_assign: bool
    can_delete: bool


def report_access(identity: Identity, report) -> ReportAccess:
    is_reporter = report.reported_by_id == identity.user_id
    is_assignee = report.assigned_to_id is not None and report.assigned_to_id == identity.user_id
    triage = identity.can(Capability.TRIAGE)
    return ReportAccess(
        can_view=identity.can(Capability.VIEW_ANY_REPORT) or is_reporter,
        can_edit=identity.can(Capability.EDIT_ANY_REPORT) or is_reporter,
        can_triage=triage,
        can_comment=identity.can(Capability.COMMENT_ANY_REPORT) or is_reporter or is_assignee,
        can_assign=triage,
        can_delete=identity.can(Capability.DELETE_REPORT),
    )


def list_scope(identity: Identity) -> Optional[int]:
    """Reporter id the report list must be restricted to, or None for all."""
    if identity.can(Capability.VIEW_ANY_REPORT):
        return None
    return identity.user_id


def sanitize_update(access: ReportAccess, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Silently drop triage fields from an update the caller may not triage."""
    if access.can_triage:
        return dict(changes)
    return {key: value for key, value in changes.items() if key not in TRIAGE_FIELDS}


def can_be_assigned(user) -> bool:
    return user is not None and role_can(user.role, Capability.BE_ASSIGNED)


def status_after_assignment(current: ReportStatus) -> ReportStatus:
    # assignment only ever moves OPEN forward, everything else is kept
    if current == ReportStatus.OPEN:
        return ReportStatus.IN_PROGRESS
    return ReportStatus(current)


def status_change(report, changes: Dict[str, Any]) -> Optional[ReportStatus]:
    """The new status when ``changes`` explicitly moves the report, else None."""
    new_status = changes.get("status")
    if new_status is None or ReportStatus(new_status) == ReportStatus(report.status):
        return None
    return ReportStatus(new_status)


@dataclass(frozen=True)
class LogEntry:
    action: ActivityAction
    description: str


def created_entry(identity: Identity, report) -> LogEntry:
    return LogEntry(ActivityAction.CREATED, f'Report created by {identity.name}: "{report.title}"')


def updated_entry(identity: Identity, old_status: ReportStatus, new_status: Optional[ReportStatus]) -> LogEntry:
    if new_status is not None:
        return LogEntry(
            ActivityAction.STATUS_CHANGED,
            f"Status changed from {ReportStatus(old_status).value} to {new_status.value} by {identity.name}",
        )
    return LogEntry(ActivityAction.UPDATED, f"Report updated by {identity.name}")


def assigned_entry(identity: Identity, assignee) -> LogEntry:
    return LogEntry(ActivityAction.ASSIGNED, f"Report assigned to {assignee.name} by {identity.name}")


def commented_entry(identity: Identity) -> LogEntry:
    return LogEntry(ActivityAction.COMMENTED, f"{identity.name} added a comment")
