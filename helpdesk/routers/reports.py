import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core import policy
from helpdesk.core.database import get_db
from helpdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from helpdesk.core.policy import Capability, Identity
from helpdesk.models.enums import IncidentType, Priority, ReportStatus
from helpdesk.models.report import Report
from helpdesk.notifications.queue import NotificationQueue, get_notification_queue
from helpdesk.repositories import ReportFilters, ReportRepository, UserRepository, total_pages
from helpdesk.routers.auth import get_identity
from helpdesk.schemas.common import MessageResponse, Pagination
from helpdesk.schemas.report import (
    AssignRequest,
    CommentCreate,
    CommentListResponse,
    CommentMutationResponse,
    CommentRead,
    ReportCreate,
    ReportDetail,
    ReportListItem,
    ReportListResponse,
    ReportMutationResponse,
    ReportRead,
    ReportResponse,
    ReportUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    responses={404: {"description": "Not found"}},
)

# columns an update may not null out
REQUIRED_FIELDS = ("title", "description", "type", "priority", "status")


async def load_report(repo: ReportRepository, report_id: int, with_thread: bool = False) -> Report:
    report = await repo.get(report_id, with_thread=with_thread)
    if report is None:
        raise NotFoundError("Report not found")
    return report


async def check_assignee(db: AsyncSession, user_id: int):
    assignee = await UserRepository(db).get(user_id)
    if not policy.can_be_assigned(assignee):
        raise ValidationError("Invalid technician")
    return assignee


@router.get("", response_model=ReportListResponse)
async def list_reports(
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    type_filter: Optional[IncidentType] = Query(None, alias="type"),
    priority: Optional[Priority] = None,
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """List reports, newest first. Plain users only ever see their own."""
    repo = ReportRepository(db)
    filters = ReportFilters(
        status=status_filter,
        type=type_filter,
        priority=priority,
        assigned_to_id=assigned_to,
        reported_by_id=policy.list_scope(identity),
    )
    reports, total = await repo.find_many(filters, page=page, limit=limit)
    counts = await repo.comment_counts([report.id for report in reports])

    items = []
    for report in reports:
        item = ReportListItem.model_validate(report)
        item.comment_count = counts.get(report.id, 0)
        items.append(item)

    return ReportListResponse(
        reports=items,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
    )


@router.post("", response_model=ReportMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_in: ReportCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    repo = ReportRepository(db)
    fields = report_in.model_dump(exclude={"image_url"})
    fields["priority"] = report_in.priority or Priority.MEDIUM
    fields["image_url"] = str(report_in.image_url) if report_in.image_url else None

    # the reporter is always the caller, whatever the payload says
    report = await repo.create(**fields, status=ReportStatus.OPEN, reported_by_id=identity.user_id)
    await repo.add_log(report, identity.user_id, policy.created_entry(identity, report))
    await db.commit()
    logger.info(f"Report {report.id} created by user {identity.user_id}")

    await queue.new_report(report.id)

    report = await load_report(repo, report.id)
    return ReportMutationResponse(message="Report created", report=ReportRead.model_validate(report))


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get a report with its comments and activity log"""
    report = await load_report(ReportRepository(db), report_id, with_thread=True)
    if not policy.report_access(identity, report).can_view:
        raise AuthorizationError("You do not have permission to view this report")
    return ReportResponse(report=ReportDetail.model_validate(report))


@router.put("/{report_id}", response_model=ReportMutationResponse)
async def update_report(
    report_id: int,
    report_update: ReportUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    repo = ReportRepository(db)
    report = await load_report(repo, report_id)

    access = policy.report_access(identity, report)
    if not access.can_edit:
        raise AuthorizationError("You do not have permission to edit this report")

    changes = policy.sanitize_update(access, report_update.model_dump(exclude_unset=True))
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]
    if changes.get("image_url") is not None:
        changes["image_url"] = str(changes["image_url"])

    newly_assigned = None
    if changes.get("assigned_to_id") is not None and changes["assigned_to_id"] != report.assigned_to_id:
        newly_assigned = await check_assignee(db, changes["assigned_to_id"])

    old_status = report.status
    new_status = policy.status_change(report, changes)

    await repo.update(report, changes)
    await repo.add_log(report, identity.user_id, policy.updated_entry(identity, old_status, new_status))
    await db.commit()
    logger.info(f"Report {report_id} updated by user {identity.user_id}")

    if new_status is not None:
        await queue.status_changed(report_id, new_status)
    if newly_assigned is not None:
        await queue.report_assigned(report_id)

    report = await load_report(repo, report_id)
    return ReportMutationResponse(message="Report updated", report=ReportRead.model_validate(report))


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(
    report_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete a report with its comments and logs (admins only)"""
    if not identity.can(Capability.DELETE_REPORT):
        raise AuthorizationError("Only administrators can delete reports")

    repo = ReportRepository(db)
    report = await load_report(repo, report_id)
    await repo.delete(report)
    await db.commit()
    logger.info(f"Report {report_id} deleted by user {identity.user_id}")
    return MessageResponse(message="Report deleted")


@router.put("/{report_id}/assign", response_model=ReportMutationResponse)
async def assign_report(
    report_id: int,
    assignment: AssignRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    queue: NotificationQueue = Depends(get_notification_queue),
):
    """Assign a technician; an OPEN report moves to IN_PROGRESS"""
    if not identity.can(Capability.TRIAGE):
        raise AuthorizationError("Only technicians and administrators can assign reports")

    assignee = await check_assignee(db, assignment.assigned_to_id)

    repo = ReportRepository(db)
    report = await load_report(repo, report_id)

    await repo.update(report, {
        "assigned_to_id": assignee.id,
        "status": policy.status_after_assignment(report.status),
    })
    await repo.add_log(report, identity.user_id, policy.assigned_entry(identity, assignee))
    await db.commit()
    logger.info(f"Report {report_id} assigned to user {assignee.id} by user {identity.user_id}")

    await queue.report_assigned(report_id)

    report = await load_report(repo, report_id)
    return ReportMutationResponse(message="Report assigned", report=ReportRead.model_validate(report))


@router.get("/{report_id}/comments", response_model=CommentListResponse)
async def list_comments(
    report_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    repo = ReportRepository(db)
    report = await load_report(repo, report_id)
    if not policy.report_access(identity, report).can_view:
        raise AuthorizationError("You do not have permission to view these comments")
    comments = await repo.comments(report_id)
    return CommentListResponse(comments=[CommentRead.model_validate(comment) for comment in comments])


@router.post("/{report_id}/comments", response_model=CommentMutationResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    report_id: int,
    comment_in: CommentCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    repo = ReportRepository(db)
    report = await load_report(repo, report_id)
    if not policy.report_access(identity, report).can_comment:
        raise AuthorizationError("You do not have permission to comment on this report")

    comment = await repo.add_comment(report, identity.user_id, comment_in.content)
    await repo.add_log(report, identity.user_id, policy.commented_entry(identity))
    await db.commit()

    comment = await repo.get_comment(comment.id)
    return CommentMutationResponse(message="Comment added", comment=CommentRead.model_validate(comment))
