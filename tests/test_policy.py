from types import SimpleNamespace

import pytest

from helpdesk.core import policy
from helpdesk.core.policy import Capability, Identity
from helpdesk.models.enums import ActivityAction, ReportStatus, Role

ADMIN = Identity(user_id=1, role=Role.ADMIN, name="Ada", email="ada@example.com")
TECH = Identity(user_id=2, role=Role.TECHNICIAN, name="Tom", email="tom@example.com")
OWNER = Identity(user_id=3, role=Role.USER, name="Alice", email="alice@example.com")
STRANGER = Identity(user_id=4, role=Role.USER, name="Bob", email="bob@example.com")


def make_report(status=ReportStatus.OPEN, assigned_to_id=None):
    return SimpleNamespace(
        id=10,
        title="Printer jam",
        reported_by_id=OWNER.user_id,
        assigned_to_id=assigned_to_id,
        status=status,
    )


@pytest.mark.parametrize("identity", [ADMIN, TECH, OWNER])
def test_staff_and_reporter_can_view(identity):
    assert policy.report_access(identity, make_report()).can_view


def test_other_user_cannot_view_or_edit():
    access = policy.report_access(STRANGER, make_report())
    assert not access.can_view
    assert not access.can_edit
    assert not access.can_comment


def test_reporter_edits_without_triage():
    access = policy.report_access(OWNER, make_report())
    assert access.can_edit
    assert not access.can_triage
    assert not access.can_assign
    assert not access.can_delete


def test_only_admin_deletes():
    assert policy.report_access(ADMIN, make_report()).can_delete
    assert not policy.report_access(TECH, make_report()).can_delete
    assert not policy.report_access(OWNER, make_report()).can_delete


def test_assignee_may_comment_even_without_staff_capability():
    # a USER can only hold an assignment through stale data, the rule still applies
    assignee = Identity(user_id=7, role=Role.USER, name="Al", email="al@example.com")
    assert policy.report_access(assignee, make_report(assigned_to_id=7)).can_comment
    assert not policy.report_access(assignee, make_report()).can_comment


def test_list_scope():
    assert policy.list_scope(ADMIN) is None
    assert policy.list_scope(TECH) is None
    assert policy.list_scope(OWNER) == OWNER.user_id


def test_sanitize_update_strips_triage_fields_for_reporter():
    changes = {"title": "New title", "status": ReportStatus.CLOSED, "assigned_to_id": 2}
    owner_access = policy.report_access(OWNER, make_report())
    assert policy.sanitize_update(owner_access, changes) == {"title": "New title"}

    tech_access = policy.report_access(TECH, make_report())
    assert policy.sanitize_update(tech_access, changes) == changes


@pytest.mark.parametrize(
    "current, expected",
    [
        (ReportStatus.OPEN, ReportStatus.IN_PROGRESS),
        (ReportStatus.IN_PROGRESS, ReportStatus.IN_PROGRESS),
        (ReportStatus.RESOLVED, ReportStatus.RESOLVED),
        (ReportStatus.CLOSED, ReportStatus.CLOSED),
    ],
)
def test_status_after_assignment(current, expected):
    assert policy.status_after_assignment(current) == expected


def test_can_be_assigned():
    assert policy.can_be_assigned(SimpleNamespace(role=Role.TECHNICIAN))
    assert policy.can_be_assigned(SimpleNamespace(role=Role.ADMIN))
    assert not policy.can_be_assigned(SimpleNamespace(role=Role.USER))
    assert not policy.can_be_assigned(None)


def test_status_change_detects_only_real_moves():
    report = make_report(status=ReportStatus.IN_PROGRESS)
    assert policy.status_change(report, {}) is None
    assert policy.status_change(report, {"status": ReportStatus.IN_PROGRESS}) is None
    assert policy.status_change(report, {"status": ReportStatus.RESOLVED}) == ReportStatus.RESOLVED


def test_closed_report_can_be_reopened():
    report = make_report(status=ReportStatus.CLOSED)
    assert policy.status_change(report, {"status": ReportStatus.OPEN}) == ReportStatus.OPEN


def test_update_entry_action():
    moved = policy.updated_entry(TECH, ReportStatus.OPEN, ReportStatus.RESOLVED)
    assert moved.action == ActivityAction.STATUS_CHANGED
    assert "OPEN" in moved.description and "RESOLVED" in moved.description

    edited = policy.updated_entry(TECH, ReportStatus.OPEN, None)
    assert edited.action == ActivityAction.UPDATED
    assert "Tom" in edited.description


def test_capabilities_are_closed_per_role():
    assert not OWNER.can(Capability.LIST_USERS)
    assert TECH.can(Capability.LIST_USERS)
    assert not TECH.can(Capability.MANAGE_USERS)
    assert ADMIN.can(Capability.MANAGE_USERS)
    assert ADMIN.can(Capability.SEND_NOTIFICATIONS)
