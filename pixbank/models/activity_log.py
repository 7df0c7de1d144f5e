from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from pixbank.core.timeutils import utcnow
from pixbank.database import Base


class ActivityLog(Base):
    """Write-only audit trail. user_id is NULL for system events."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    action = Column(String(64), nullable=False, index=True)
    details = Column(Text)
    ip_address = Column(String(64))
    user_agent = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
