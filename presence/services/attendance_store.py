"""
SQLAlchemy-backed attendance store used by the decision engine.

Writes are flushed, not committed: the engine commits once after the record
and its audit row are both in place, so a failure leaves nothing behind.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from presence.constants import SPOOF_HISTORY_LIMIT
from presence.core.exceptions import DuplicateOpenRecord, StoreUnavailable
from presence.models.attendance import AttendanceRecord
from presence.services.audit_service import log_audit

_log = logging.getLogger(__name__)


class AttendanceStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            _log.error("Attendance store %s failed: %s", operation, exc)
            self.db.rollback()
            raise StoreUnavailable(f"Attendance store unavailable during {operation}") from exc

    def find_open_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._guard("find_open_record"):
            return (
                self.db.query(AttendanceRecord)
                .filter(
                    AttendanceRecord.employee_id == employee_id,
                    AttendanceRecord.work_date == work_date,
                    AttendanceRecord.is_open.is_(True),
                )
                .first()
            )

    def recent_records(self, employee_id: int, limit: int = SPOOF_HISTORY_LIMIT) -> List[AttendanceRecord]:
        """Most recent records for the employee, newest check-in first."""
        with self._guard("recent_records"):
            return (
                self.db.query(AttendanceRecord)
                .filter(AttendanceRecord.employee_id == employee_id)
                .order_by(AttendanceRecord.checked_in_at.desc(), AttendanceRecord.id.desc())
                .limit(limit)
                .all()
            )

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """
        Stage a new open record.

        Raises:
            DuplicateOpenRecord: another open record for the same employee and day exists
        """
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateOpenRecord(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            _log.error("Attendance store create failed: %s", exc)
            self.db.rollback()
            raise StoreUnavailable("Attendance store unavailable during create") from exc
        return record

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._guard("update"):
            self.db.flush()
        return record

    def log_event(self, action: str, record: AttendanceRecord, meta: Dict[str, Any], at: Optional[datetime] = None) -> None:
        with self._guard("audit"):
            log_audit(
                db=self.db,
                actor_id=record.employee_id,
                action=action,
                entity_type="attendance_records",
                entity_id=record.id,
                meta=meta,
                commit=False,
                created_at=at,
            )

    def commit(self) -> None:
        with self._guard("commit"):
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
