from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from helpdesk.core.database import Base
from helpdesk.models.user import utcnow


class ActivityLog(Base):
    """Append-only audit row, one per mutation of a report."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False)  # created, assigned, updated, commented, status_changed
    description = Column(Text, nullable=False)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    report = relationship("Report", back_populates="logs")
    user = relationship("User")
