"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from presence.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, nullable=False)  # employee who triggered the action
    action = Column(String, nullable=False)  # e.g., "ATTENDANCE_CHECK_IN", "SITE_CREATE"
    entity_type = Column(String, nullable=False)  # e.g., "attendance_records", "sites"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly; SQLite server defaults are unreliable for tz-aware columns
    created_at = Column(DateTime(timezone=True), nullable=False)
