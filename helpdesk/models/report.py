from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from helpdesk.core.database import Base
from helpdesk.models.enums import IncidentType, Priority, ReportStatus
from helpdesk.models.user import utcnow


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Enum(IncidentType, name="incident_type"), nullable=False, index=True)
    priority = Column(Enum(Priority, name="priority"), nullable=False, default=Priority.MEDIUM)
    status = Column(Enum(ReportStatus, name="report_status"), nullable=False, default=ReportStatus.OPEN, index=True)
    location = Column(String, nullable=True)
    equipment = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    reported_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # must point at a TECHNICIAN or ADMIN, checked before every write
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    reported_by = relationship("User", back_populates="reported_reports", foreign_keys=[reported_by_id])
    assigned_to = relationship("User", back_populates="assigned_reports", foreign_keys=[assigned_to_id])
    comments = relationship(
        "Comment",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.id",
    )
    logs = relationship(
        "ActivityLog",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActivityLog.id",
    )
