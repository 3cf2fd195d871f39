"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- Shift windows and work dates are evaluated in the business timezone (settings.ATTENDANCE_TZ).
"""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). The default clock for attendance decisions."""
    return datetime.now(UTC)


def business_zone(name: Optional[str] = None) -> ZoneInfo:
    """ZoneInfo for the configured business timezone."""
    if name is None:
        from presence.core.config import settings
        name = settings.ATTENDANCE_TZ
    return ZoneInfo(name)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_local(dt: Optional[datetime], tz: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """Convert to the business timezone. Naive datetimes are treated as UTC before converting."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(tz or business_zone())


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with the business timezone offset. Use for API response datetime fields."""
    if dt is None:
        return None
    return to_local(dt).isoformat()
