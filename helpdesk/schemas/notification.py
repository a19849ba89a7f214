from enum import Enum
from typing import Any, Optional

from helpdesk.models.enums import ReportStatus
from helpdesk.schemas.common import ApiModel


class NotificationKind(str, Enum):
    new_report = "new_report"
    assigned = "assigned"
    status_changed = "status_changed"


class NotificationRequest(ApiModel):
    type: NotificationKind
    report_id: int
    status: Optional[ReportStatus] = None


class NotificationSendResponse(ApiModel):
    message: str
    result: Any
