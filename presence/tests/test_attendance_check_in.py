"""
Tests for the attendance check-in endpoint
"""
from datetime import timedelta

from fastapi import status

from presence.core.exceptions import IdentityServiceUnavailable
from presence.models import AttendanceRecord, AuditLog
from presence.services.attendance_store import AttendanceStore

from conftest import SITE_LAT, SITE_LNG, WORK_DAY, attendance_form, face_image, local_dt, make_record

CHECK_IN_URL = "/api/v1/attendance/check-in"


def _check_in(client, site, **form):
    return client.post(CHECK_IN_URL, data=attendance_form(site_id=site.id, **form), files=face_image())


def test_check_in_success(client, db, test_site, face_verifier):
    """On-time full-day check-in creates one open record"""
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["accepted"] is True
    assert data["kind"] == "CHECK_IN"
    assert data["reason_code"] is None
    assert data["status"] == "full-day"
    assert data["late_minutes"] == 0
    assert data["confidence"] == 0.93

    record = data["record"]
    assert record["employee_id"] == 1
    assert record["site_id"] == test_site.id
    assert record["work_date"] == WORK_DAY.isoformat()
    assert record["checked_in_at"] == "2026-03-02T07:45:00+07:00"
    assert record["checked_out_at"] is None
    assert record["is_open"] is True
    assert face_verifier.calls == [1]

    assert db.query(AttendanceRecord).count() == 1


def test_check_in_late_full_day(client, clock, test_site):
    clock.set_local(8, 4)
    data = _check_in(client, test_site).json()
    assert data["accepted"] is True
    assert data["status"] == "full-day"
    assert data["late_minutes"] == 4


def test_check_in_half_day(client, clock, test_site):
    clock.set_local(12, 34)
    data = _check_in(client, test_site).json()
    assert data["status"] == "half-day"
    assert data["late_minutes"] == 4


def test_check_in_writes_audit_log(client, db, test_site):
    response = _check_in(client, test_site)
    record_id = response.json()["record"]["id"]

    audit = db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_CHECK_IN").one()
    assert audit.actor_id == 1
    assert audit.entity_type == "attendance_records"
    assert audit.entity_id == record_id
    assert audit.meta_json["work_date"] == WORK_DAY.isoformat()
    assert audit.meta_json["status"] == "full-day"


def test_check_in_after_deadline_rejected(client, db, clock, test_site):
    clock.set_local(8, 6)
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["accepted"] is False
    assert data["reason_code"] == "CHECK_IN_EXPIRED"
    assert db.query(AttendanceRecord).count() == 0


def test_check_in_outside_window_rejected(client, db, clock, test_site):
    clock.set_local(8, 10)
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["reason_code"] == "OUTSIDE_CHECK_IN_WINDOW"
    assert db.query(AttendanceRecord).count() == 0


def test_check_in_face_not_matched(client, db, test_site, face_verifier):
    face_verifier.matched = False
    face_verifier.confidence = 0.2
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    data = response.json()
    assert data["reason_code"] == "IDENTITY_NOT_MATCHED"
    assert data["confidence"] == 0.2
    assert db.query(AttendanceRecord).count() == 0
    assert db.query(AuditLog).count() == 0


def test_check_in_face_service_down_is_retryable(client, db, test_site, face_verifier):
    face_verifier.error = IdentityServiceUnavailable("Face verification service timed out")
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    data = response.json()
    assert data["retryable"] is True
    assert data["error_type"] == "IdentityServiceUnavailable"
    assert db.query(AttendanceRecord).count() == 0


def test_check_in_unknown_site(client, db, test_site):
    response = client.post(CHECK_IN_URL, data=attendance_form(site_id=999), files=face_image())

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["reason_code"] == "SITE_NOT_FOUND"
    assert response.json()["message"] == "Location not found"


def test_check_in_outside_geofence(client, db, test_site):
    response = _check_in(client, test_site, latitude=SITE_LAT - 0.0001)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["reason_code"] == "OUTSIDE_GEOFENCE"
    assert data["details"]["distance_meters"] > 10.0
    assert db.query(AttendanceRecord).count() == 0


def test_check_in_poor_accuracy(client, test_site):
    response = _check_in(client, test_site, accuracy=45.0)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["reason_code"] == "POOR_ACCURACY"


def test_check_in_consistent_accuracy(client, db, test_site):
    for days_ago in (1, 2, 3):
        make_record(db, test_site, checked_in_at=local_dt(7, 50, day=WORK_DAY - timedelta(days=days_ago)), accuracy=8.0)

    response = _check_in(client, test_site, accuracy=9.0)

    assert response.json()["reason_code"] == "CONSISTENT_ACCURACY"
    assert db.query(AttendanceRecord).count() == 3


def test_check_in_sudden_accuracy_change(client, db, test_site):
    make_record(db, test_site, accuracy=4.0)
    response = _check_in(client, test_site, accuracy=28.0 + 30.0)

    assert response.json()["reason_code"] == "SUDDEN_ACCURACY_CHANGE"


def test_check_in_impossible_travel(client, db, test_site):
    # Checked in at another site 100+ km away 15 minutes ago
    make_record(db, test_site, checked_in_at=local_dt(7, 30), latitude=SITE_LAT + 1.0)
    response = _check_in(client, test_site)

    assert response.json()["reason_code"] == "IMPOSSIBLE_TRAVEL_SPEED"


def test_check_in_twice_same_day_rejected(client, db, clock, test_site):
    assert _check_in(client, test_site).status_code == status.HTTP_201_CREATED

    clock.set_local(7, 55)
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["reason_code"] == "ALREADY_CHECKED_IN"
    assert db.query(AttendanceRecord).count() == 1


def test_concurrent_check_in_loses_on_unique_constraint(client, db, clock, test_site, monkeypatch):
    """A check-in that misses the open-record lookup still cannot create a second open record"""
    assert _check_in(client, test_site).status_code == status.HTTP_201_CREATED

    monkeypatch.setattr(AttendanceStore, "find_open_record", lambda self, employee_id, work_date: None)
    clock.set_local(7, 55)
    response = _check_in(client, test_site)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["reason_code"] == "ALREADY_CHECKED_IN"
    assert db.query(AttendanceRecord).count() == 1
    assert db.query(AuditLog).count() == 1


def test_check_in_other_employee_same_day(client, db, test_site):
    assert _check_in(client, test_site, employee_id=1).status_code == status.HTTP_201_CREATED
    assert _check_in(client, test_site, employee_id=2).status_code == status.HTTP_201_CREATED
    assert db.query(AttendanceRecord).count() == 2


def test_check_in_invalid_latitude(client, db, test_site, face_verifier):
    response = _check_in(client, test_site, latitude=95.0)

    assert response.status_code == 422
    assert "Latitude" in response.json()["detail"]
    assert face_verifier.calls == []


def test_check_in_negative_accuracy(client, test_site, face_verifier):
    response = _check_in(client, test_site, accuracy=-1.0)

    assert response.status_code == 422
    assert face_verifier.calls == []


def test_check_in_rejects_non_image_upload(client, test_site, face_verifier):
    response = client.post(
        CHECK_IN_URL,
        data=attendance_form(site_id=test_site.id),
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Invalid image file type"
    assert face_verifier.calls == []


def test_check_in_missing_fields(client, test_site):
    response = client.post(CHECK_IN_URL, data={"employee_id": "1"}, files=face_image())
    assert response.status_code == 422
    assert response.json()["error"] is True


def test_check_in_at_site_edge(client, test_site):
    response = _check_in(client, test_site, latitude=SITE_LAT, longitude=SITE_LNG + 0.00008)
    assert response.status_code == status.HTTP_201_CREATED
