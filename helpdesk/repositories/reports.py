import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from helpdesk.core.policy import LogEntry
from helpdesk.models.activity_log import ActivityLog
from helpdesk.models.comment import Comment
from helpdesk.models.enums import IncidentType, Priority, ReportStatus
from helpdesk.models.report import Report


@dataclass
class ReportFilters:
    status: Optional[ReportStatus] = None
    type: Optional[IncidentType] = None
    priority: Optional[Priority] = None
    assigned_to_id: Optional[int] = None
    # forced for callers that may only see their own reports
    reported_by_id: Optional[int] = None
    created_since: Optional[datetime] = None

    def clauses(self) -> list:
        where = []
        if self.status is not None:
            where.append(Report.status == self.status)
        if self.type is not None:
            where.append(Report.type == self.type)
        if self.priority is not None:
            where.append(Report.priority == self.priority)
        if self.assigned_to_id is not None:
            where.append(Report.assigned_to_id == self.assigned_to_id)
        if self.reported_by_id is not None:
            where.append(Report.reported_by_id == self.reported_by_id)
        if self.created_since is not None:
            where.append(Report.created_at >= self.created_since)
        return where


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class ReportRepository:
    """Storage for reports and their comment and activity threads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, report_id: int, with_thread: bool = False) -> Optional[Report]:
        options = [selectinload(Report.reported_by), selectinload(Report.assigned_to)]
        if with_thread:
            options.append(selectinload(Report.comments).selectinload(Comment.author))
            options.append(selectinload(Report.logs).selectinload(ActivityLog.user))
        result = await self.db.execute(
            select(Report)
            .options(*options)
            .where(Report.id == report_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_many(self, filters: ReportFilters, page: int = 1, limit: int = 10) -> Tuple[List[Report], int]:
        where = filters.clauses()
        query = (
            select(Report)
            .options(selectinload(Report.reported_by), selectinload(Report.assigned_to))
            .where(*where)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(query)
        reports = list(result.scalars().all())
        return reports, await self.count(filters)

    async def count(self, filters: ReportFilters, **extra) -> int:
        where = filters.clauses()
        for column, value in extra.items():
            where.append(getattr(Report, column) == value)
        result = await self.db.execute(select(func.count(Report.id)).where(*where))
        return result.scalar_one()

    async def count_grouped(self, filters: ReportFilters, column: str) -> Dict[str, int]:
        col = getattr(Report, column)
        result = await self.db.execute(
            select(col, func.count(Report.id)).where(*filters.clauses()).group_by(col)
        )
        return {value.value if hasattr(value, "value") else value: count for value, count in result.all()}

    async def recent(self, filters: ReportFilters, limit: int = 5) -> List[Report]:
        reports, _ = await self.find_many(filters, page=1, limit=limit)
        return reports

    async def comment_counts(self, report_ids: Sequence[int]) -> Dict[int, int]:
        if not report_ids:
            return {}
        result = await self.db.execute(
            select(Comment.report_id, func.count(Comment.id))
            .where(Comment.report_id.in_(report_ids))
            .group_by(Comment.report_id)
        )
        return dict(result.all())

    async def comments(self, report_id: int) -> List[Comment]:
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.report_id == report_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return list(result.scalars().all())

    async def get_comment(self, comment_id: int) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def logs(self, report_id: int) -> List[ActivityLog]:
        result = await self.db.execute(
            select(ActivityLog)
            .where(ActivityLog.report_id == report_id)
            .order_by(ActivityLog.created_at, ActivityLog.id)
        )
        return list(result.scalars().all())

    async def create(self, **fields) -> Report:
        report = Report(**fields)
        self.db.add(report)
        await self.db.flush()
        return report

    async def update(self, report: Report, changes: dict) -> Report:
        for key, value in changes.items():
            setattr(report, key, value)
        await self.db.flush()
        return report

    async def delete(self, report: Report) -> None:
        # explicit deletes so the cascade does not depend on backend FK support
        await self.db.execute(delete(ActivityLog).where(ActivityLog.report_id == report.id))
        await self.db.execute(delete(Comment).where(Comment.report_id == report.id))
        await self.db.execute(delete(Report).where(Report.id == report.id))

    async def add_comment(self, report: Report, author_id: int, content: str) -> Comment:
        comment = Comment(report_id=report.id, author_id=author_id, content=content)
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def add_log(self, report: Report, user_id: int, entry: LogEntry) -> ActivityLog:
        log = ActivityLog(
            report_id=report.id,
            user_id=user_id,
            action=entry.action.value,
            description=entry.description,
        )
        self.db.add(log)
        await self.db.flush()
        return log
