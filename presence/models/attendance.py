"""
Attendance record model (one row per check-in, closed by check-out)
"""
import enum
from datetime import datetime
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from presence.db.base import Base

# open_slot is 1 while the record is open and NULL once closed. NULLs never
# collide in a unique index, so closed records do not block a new check-in.
OPEN_SLOT = 1


class AttendanceStatus(str, enum.Enum):
    FULL_DAY = "full-day"
    HALF_DAY = "half-day"


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    site_id = Column(Integer, ForeignKey("sites.id"), nullable=False, index=True)
    work_date = Column(Date, nullable=False, index=True)  # local business date of check-in
    checked_in_at = Column(DateTime(timezone=True), nullable=False)  # UTC
    checked_out_at = Column(DateTime(timezone=True), nullable=True)  # UTC
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=False)  # meters, as reported by the device
    status = Column(SQLEnum(AttendanceStatus), nullable=False)
    late_minutes = Column(Integer, nullable=False, default=0)
    overtime_minutes = Column(Integer, nullable=False, default=0)
    is_open = Column(Boolean, nullable=False, default=True)
    open_slot = Column(Integer, nullable=True, default=OPEN_SLOT)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", "open_slot", name="uq_attendance_open_per_day"),
    )

    site = relationship("Site")

    def close(self, checked_out_at: datetime, status: AttendanceStatus, overtime_minutes: int) -> None:
        self.checked_out_at = checked_out_at
        self.status = status
        self.overtime_minutes = overtime_minutes
        self.is_open = False
        self.open_slot = None
