from .user import User
from .report import Report
from .comment import Comment
from .activity_log import ActivityLog

__all__ = [
    "User",
    "Report",
    "Comment",
    "ActivityLog",
]
