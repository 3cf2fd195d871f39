"""
Geofence check: is the claimed position within the site radius?
"""
from presence.constants import GEOFENCE_RADIUS_METERS, RejectionReason
from presence.schemas.decision import GeofenceResult, LocationSample, RegisteredSite
from presence.services.geo import distance_meters


def validate(sample: LocationSample, site: RegisteredSite) -> GeofenceResult:
    """
    Accept when the sample is at most GEOFENCE_RADIUS_METERS from the site
    (the boundary itself is inside). The radius is a fixed policy constant.
    """
    distance = distance_meters(sample, site)
    if distance > GEOFENCE_RADIUS_METERS:
        return GeofenceResult(
            accepted=False,
            reason=RejectionReason.OUTSIDE_GEOFENCE,
            message=f"You are too far from the check-in location. Distance: {distance:.2f} meters",
            details={
                "distance_meters": round(distance, 2),
                "radius_meters": GEOFENCE_RADIUS_METERS,
                "site_id": site.id,
            },
            distance_meters=distance,
            radius_meters=GEOFENCE_RADIUS_METERS,
        )
    return GeofenceResult(distance_meters=distance, radius_meters=GEOFENCE_RADIUS_METERS)
