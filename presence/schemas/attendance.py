"""
Attendance record schemas
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer

from presence.models.attendance import AttendanceStatus
from presence.utils.datetime_utils import iso_local


class AttendanceRecordOut(BaseModel):
    """Attendance record output. Datetimes are returned in the business timezone."""
    id: int
    employee_id: int
    site_id: int
    work_date: date
    checked_in_at: datetime
    checked_out_at: Optional[datetime] = None
    latitude: float
    longitude: float
    accuracy: float
    status: AttendanceStatus
    late_minutes: int
    overtime_minutes: int
    is_open: bool

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("checked_in_at", "checked_out_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class AttendanceListResponse(BaseModel):
    """Paginated attendance list, newest check-in first"""
    items: List[AttendanceRecordOut]
    pagination: Pagination
