"""
Pytest configuration and fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from presence.main import app
from presence.core.config import settings
from presence.core.deps import get_clock, get_db
from presence.db.base import Base
from presence.models import AttendanceRecord, AttendanceStatus, AuditLog, Site  # noqa: F401
from presence.schemas.decision import VerificationResult
from presence.services.face_verifier import get_face_client
from presence.utils.datetime_utils import UTC

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BUSINESS_TZ = ZoneInfo(settings.ATTENDANCE_TZ)
WORK_DAY = date(2026, 3, 2)

SITE_LAT = -6.2
SITE_LNG = 106.816666


def local_dt(hour: int, minute: int = 0, second: int = 0, day: date = WORK_DAY) -> datetime:
    """A business-timezone wall-clock moment, as an aware datetime"""
    return datetime.combine(day, time(hour, minute, second), tzinfo=BUSINESS_TZ)


class FixedClock:
    """Clock the tests move by hand; returns UTC like the real one"""

    def __init__(self, moment: datetime):
        self.moment = moment.astimezone(UTC)

    def __call__(self) -> datetime:
        return self.moment

    def set_local(self, hour: int, minute: int = 0, second: int = 0, day: date = WORK_DAY) -> None:
        self.moment = local_dt(hour, minute, second, day).astimezone(UTC)


class StubFaceVerifier:
    """Stand-in for the face service client"""

    def __init__(self, matched: bool = True, confidence: float = 0.93, error: Exception = None):
        self.matched = matched
        self.confidence = confidence
        self.error = error
        self.calls = []

    def verify(self, employee_id, image, filename="capture.jpg", content_type="image/jpeg"):
        self.calls.append(employee_id)
        if self.error is not None:
            raise self.error
        return VerificationResult(
            matched=self.matched,
            confidence=self.confidence,
            matched_id=str(employee_id) if self.matched else None,
        )


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FixedClock(local_dt(7, 45))


@pytest.fixture
def face_verifier():
    return StubFaceVerifier()


@pytest.fixture(scope="function")
def client(db, clock, face_verifier):
    """Test client with database, face service and clock overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_face_client] = lambda: face_verifier
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def test_site(db):
    """Create a registered site"""
    site = Site(name="Head Office", latitude=SITE_LAT, longitude=SITE_LNG, active=True)
    db.add(site)
    db.commit()
    db.refresh(site)
    return site


def make_record(
    db,
    site,
    employee_id: int = 1,
    checked_in_at: datetime = None,
    accuracy: float = 5.0,
    latitude: float = SITE_LAT,
    longitude: float = SITE_LNG,
    status: AttendanceStatus = AttendanceStatus.FULL_DAY,
    closed: bool = True,
) -> AttendanceRecord:
    """Insert an attendance record directly, closed by default"""
    checked_in_at = checked_in_at or local_dt(7, 50, day=WORK_DAY - timedelta(days=1))
    local = checked_in_at.astimezone(BUSINESS_TZ)
    record = AttendanceRecord(
        employee_id=employee_id,
        site_id=site.id,
        work_date=local.date(),
        checked_in_at=checked_in_at.astimezone(UTC),
        latitude=latitude,
        longitude=longitude,
        accuracy=accuracy,
        status=status,
        late_minutes=0,
        overtime_minutes=0,
        is_open=not closed,
        open_slot=None if closed else 1,
    )
    if closed:
        record.checked_out_at = (checked_in_at + timedelta(hours=9)).astimezone(UTC)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def attendance_form(employee_id: int = 1, site_id: int = 1, latitude: float = SITE_LAT,
                    longitude: float = SITE_LNG, accuracy: float = 5.0) -> dict:
    return {
        "employee_id": str(employee_id),
        "site_id": str(site_id),
        "latitude": str(latitude),
        "longitude": str(longitude),
        "accuracy": str(accuracy),
    }


def face_image(content_type: str = "image/jpeg") -> dict:
    return {"image": ("face.jpg", b"\xff\xd8\xff\xe0 fake jpeg bytes", content_type)}
