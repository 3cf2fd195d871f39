"""
Attendance service - read access to attendance records
"""
from datetime import date
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from presence.models.attendance import AttendanceRecord


def list_records(
    db: Session,
    page: int = 1,
    limit: int = 10,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    employee_id: Optional[int] = None,
) -> Tuple[List[AttendanceRecord], int]:
    """
    List attendance records, newest check-in first

    Args:
        db: Database session
        page: 1-based page number
        limit: Page size
        start_date: Inclusive lower bound on work_date
        end_date: Inclusive upper bound on work_date
        employee_id: Restrict to one employee

    Returns:
        (records on the requested page, total matching records)
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be less than or equal to end_date",
        )

    query = db.query(AttendanceRecord)
    if start_date:
        query = query.filter(AttendanceRecord.work_date >= start_date)
    if end_date:
        query = query.filter(AttendanceRecord.work_date <= end_date)
    if employee_id is not None:
        query = query.filter(AttendanceRecord.employee_id == employee_id)

    total = query.count()
    items = (
        query.order_by(AttendanceRecord.checked_in_at.desc(), AttendanceRecord.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_record(db: Session, record_id: int) -> AttendanceRecord:
    record = db.query(AttendanceRecord).filter(AttendanceRecord.id == record_id).first()
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found",
        )
    return record
