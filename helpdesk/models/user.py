from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from helpdesk.core.database import Base
from helpdesk.models.enums import Role


def utcnow():
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    # the single form emails are stored and looked up in
    return email.strip().lower()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    reported_reports = relationship("Report", back_populates="reported_by", foreign_keys="Report.reported_by_id")
    assigned_reports = relationship("Report", back_populates="assigned_to", foreign_keys="Report.assigned_to_id")
