"""
Tests for the site geofence
"""
from datetime import datetime, timezone

import pytest

from presence.constants import GEOFENCE_RADIUS_METERS, RejectionReason
from presence.schemas.decision import LocationSample, RegisteredSite
from presence.services import geofence

SITE = RegisteredSite(id=7, name="Head Office", latitude=-6.2, longitude=106.816666)
NOW = datetime(2026, 3, 2, 0, 45, tzinfo=timezone.utc)


def _sample(lat, lng, accuracy=5.0):
    return LocationSample(latitude=lat, longitude=lng, accuracy=accuracy, captured_at=NOW)


def test_at_site_is_accepted():
    result = geofence.validate(_sample(-6.2, 106.816666), SITE)
    assert result.accepted
    assert result.distance_meters == 0.0
    assert result.radius_meters == GEOFENCE_RADIUS_METERS


def test_few_meters_away_is_accepted():
    # ~5.6 m north
    result = geofence.validate(_sample(-6.19995, 106.816666), SITE)
    assert result.accepted
    assert 5.0 < result.distance_meters < 6.0


def test_outside_radius_is_rejected():
    # ~11.1 m south
    result = geofence.validate(_sample(-6.2001, 106.816666), SITE)
    assert not result.accepted
    assert result.reason == RejectionReason.OUTSIDE_GEOFENCE
    assert result.message.startswith("You are too far from the check-in location. Distance: 11.1")
    assert result.details["site_id"] == 7
    assert result.details["radius_meters"] == 10.0


def test_boundary_is_inside(monkeypatch):
    monkeypatch.setattr(geofence, "distance_meters", lambda a, b: 10.0)
    assert geofence.validate(_sample(-6.2, 106.816666), SITE).accepted


def test_just_past_boundary_is_outside(monkeypatch):
    monkeypatch.setattr(geofence, "distance_meters", lambda a, b: 10.001)
    result = geofence.validate(_sample(-6.2, 106.816666), SITE)
    assert not result.accepted
    assert result.distance_meters == pytest.approx(10.001)


def test_radius_is_fixed_for_every_site():
    far_site = RegisteredSite(id=8, latitude=40.7128, longitude=-74.006)
    result = geofence.validate(_sample(40.7128, -74.00613), far_site)
    assert not result.accepted
    assert result.radius_meters == GEOFENCE_RADIUS_METERS
