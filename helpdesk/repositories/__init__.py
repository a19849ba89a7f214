from .reports import ReportFilters, ReportRepository, total_pages
from .users import UserRepository

__all__ = ["ReportFilters", "ReportRepository", "UserRepository", "total_pages"]
