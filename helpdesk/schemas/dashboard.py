from typing import Dict, List

from helpdesk.schemas.common import ApiModel
from helpdesk.schemas.report import ReportRead


class Overview(ApiModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    closed: int
    critical: int


class Trends(ApiModel):
    this_month: int
    last_month: int
    change: str


class Charts(ApiModel):
    status: Dict[str, int]
    type: Dict[str, int]
    priority: Dict[str, int]


class DashboardStats(ApiModel):
    overview: Overview
    trends: Trends
    charts: Charts
    recent: List[ReportRead]


class DashboardResponse(ApiModel):
    stats: DashboardStats
