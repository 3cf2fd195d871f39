"""
Dependencies for FastAPI endpoints
"""
from datetime import datetime
from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from presence.db.session import SessionLocal
from presence.services.attendance_store import AttendanceStore
from presence.services.decision_engine import AttendanceDecisionEngine
from presence.services.face_verifier import get_face_client
from presence.services.site_service import SiteRegistry
from presence.utils.datetime_utils import now_utc


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> Callable[[], datetime]:
    """Time source for attendance decisions; overridden in tests with a fixed clock."""
    return now_utc


def get_decision_engine(
    db: Session = Depends(get_db),
    verifier=Depends(get_face_client),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AttendanceDecisionEngine:
    return AttendanceDecisionEngine(
        store=AttendanceStore(db),
        sites=SiteRegistry(db),
        verifier=verifier,
        clock=clock,
    )
