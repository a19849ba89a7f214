import calendar
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core import policy
from helpdesk.core.database import get_db
from helpdesk.core.policy import Identity
from helpdesk.models.enums import IncidentType, Priority, ReportStatus
from helpdesk.repositories import ReportFilters, ReportRepository
from helpdesk.routers.auth import get_identity
from helpdesk.schemas.dashboard import Charts, DashboardResponse, DashboardStats, Overview, Trends
from helpdesk.schemas.report import ReportRead

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def one_month_before(moment: datetime) -> datetime:
    """Same day and time one calendar month earlier, clamped to the end of a shorter month."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def percent_change(current: int, previous: int) -> str:
    if previous <= 0:
        return "0"
    return f"{(current - previous) / previous * 100:.1f}"


@router.get("/stats", response_model=DashboardResponse)
async def get_stats(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Aggregate report counts, scoped to the caller's own reports for plain users"""
    repo = ReportRepository(db)
    scope = ReportFilters(reported_by_id=policy.list_scope(identity))

    by_status = await repo.count_grouped(scope, "status")
    by_type = await repo.count_grouped(scope, "type")
    by_priority = await repo.count_grouped(scope, "priority")

    now = datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    this_month = await repo.count(ReportFilters(reported_by_id=scope.reported_by_id, created_since=month_start))
    last_month = await repo.count(ReportFilters(reported_by_id=scope.reported_by_id, created_since=one_month_before(now)))

    overview = Overview(
        total=sum(by_status.values()),
        open=by_status.get(ReportStatus.OPEN.value, 0),
        in_progress=by_status.get(ReportStatus.IN_PROGRESS.value, 0),
        resolved=by_status.get(ReportStatus.RESOLVED.value, 0),
        closed=by_status.get(ReportStatus.CLOSED.value, 0),
        critical=by_priority.get(Priority.CRITICAL.value, 0),
    )
    charts = Charts(
        status={s.value.lower(): by_status.get(s.value, 0) for s in ReportStatus},
        type={t.value.lower(): by_type.get(t.value, 0) for t in IncidentType},
        priority={p.value.lower(): by_priority.get(p.value, 0) for p in Priority},
    )
    recent = await repo.recent(scope, limit=5)

    return DashboardResponse(stats=DashboardStats(
        overview=overview,
        trends=Trends(this_month=this_month, last_month=last_month, change=percent_change(this_month, last_month)),
        charts=charts,
        recent=[ReportRead.model_validate(report) for report in recent],
    ))
