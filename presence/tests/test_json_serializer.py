"""
Tests for JSON-safe conversion of decision details
"""
from datetime import date, datetime, timezone
from decimal import Decimal

from presence.constants import RejectionReason
from presence.models.attendance import AttendanceStatus
from presence.utils.json_serializer import sanitize_for_json


def test_naive_datetimes_are_marked_utc():
    assert sanitize_for_json(datetime(2026, 3, 2, 0, 45)) == "2026-03-02T00:45:00+00:00"


def test_aware_datetimes_are_converted_to_utc():
    moment = datetime(2026, 3, 2, 7, 45, tzinfo=timezone.utc)
    assert sanitize_for_json({"at": moment}) == {"at": "2026-03-02T07:45:00+00:00"}


def test_enums_and_dates():
    meta = {
        "status": AttendanceStatus.HALF_DAY,
        "reason": RejectionReason.POOR_ACCURACY,
        "work_date": date(2026, 3, 2),
    }
    assert sanitize_for_json(meta) == {"status": "half-day", "reason": "POOR_ACCURACY", "work_date": "2026-03-02"}


def test_non_finite_floats_become_null():
    assert sanitize_for_json({"latitude": float("nan"), "speed": float("inf"), "accuracy": 4.5}) == {
        "latitude": None,
        "speed": None,
        "accuracy": 4.5,
    }


def test_nested_values():
    assert sanitize_for_json({"recent": (8.0, Decimal("8.5")), "ok": True}) == {"recent": [8.0, 8.5], "ok": True}
