from datetime import datetime
from typing import List, Optional

from pydantic import Field, HttpUrl

from helpdesk.models.enums import IncidentType, Priority, ReportStatus
from helpdesk.schemas.common import ApiModel, Pagination
from helpdesk.schemas.user import UserSummary


class ReportCreate(ApiModel):
    title: str = Field(..., min_length=5)
    description: str = Field(..., min_length=10)
    type: IncidentType
    priority: Optional[Priority] = None
    location: Optional[str] = None
    equipment: Optional[str] = None
    image_url: Optional[HttpUrl] = None


class ReportUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=5)
    description: Optional[str] = Field(None, min_length=10)
    type: Optional[IncidentType] = None
    priority: Optional[Priority] = None
    status: Optional[ReportStatus] = None
    location: Optional[str] = None
    equipment: Optional[str] = None
    image_url: Optional[HttpUrl] = None
    assigned_to_id: Optional[int] = None


class AssignRequest(ApiModel):
    assigned_to_id: int


class CommentCreate(ApiModel):
    content: str = Field(..., min_length=1)


class CommentRead(ApiModel):
    id: int
    content: str
    report_id: int
    author_id: int
    created_at: datetime
    author: Optional[UserSummary] = None


class ActivityLogRead(ApiModel):
    id: int
    action: str
    description: str
    report_id: int
    user_id: int
    created_at: datetime
    user: Optional[UserSummary] = None


class ReportRead(ApiModel):
    id: int
    title: str
    description: str
    type: IncidentType
    priority: Priority
    status: ReportStatus
    location: Optional[str] = None
    equipment: Optional[str] = None
    image_url: Optional[str] = None
    reported_by_id: int
    assigned_to_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    reported_by: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None


class ReportListItem(ReportRead):
    comment_count: int = 0


class ReportDetail(ReportRead):
    comments: List[CommentRead] = []
    logs: List[ActivityLogRead] = []


class ReportListResponse(ApiModel):
    reports: List[ReportListItem]
    pagination: Pagination


class ReportResponse(ApiModel):
    report: ReportDetail


class ReportMutationResponse(ApiModel):
    message: str
    report: ReportRead


class CommentListResponse(ApiModel):
    comments: List[CommentRead]


class CommentMutationResponse(ApiModel):
    message: str
    comment: CommentRead
