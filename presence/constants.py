"""
Fixed attendance policy values and rejection reason codes
"""
import enum

SERVICE_NAME = "presence-backend"

# Geofence
GEOFENCE_RADIUS_METERS = 10.0
EARTH_RADIUS_METERS = 6_371_000.0

# Spoof detection
SPOOF_HISTORY_LIMIT = 5
MAX_ACCURACY_JUMP_METERS = 50.0
FIXED_ACCURACY_SAMPLE_SIZE = 3
SPEED_CHECK_MIN_ELAPSED_SECONDS = 60.0
SPEED_CHECK_MAX_ELAPSED_SECONDS = 3600.0
MAX_TRAVEL_SPEED_MPS = 50.0  # 180 km/h
MAX_ACCEPTED_ACCURACY_METERS = 30.0


class TransitionKind(str, enum.Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class RejectionReason(str, enum.Enum):
    IDENTITY_NOT_MATCHED = "IDENTITY_NOT_MATCHED"
    SITE_NOT_FOUND = "SITE_NOT_FOUND"
    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    SUDDEN_ACCURACY_CHANGE = "SUDDEN_ACCURACY_CHANGE"
    CONSISTENT_ACCURACY = "CONSISTENT_ACCURACY"
    IMPOSSIBLE_TRAVEL_SPEED = "IMPOSSIBLE_TRAVEL_SPEED"
    POOR_ACCURACY = "POOR_ACCURACY"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NO_CHECK_IN_TODAY = "NO_CHECK_IN_TODAY"
    CHECK_IN_EXPIRED = "CHECK_IN_EXPIRED"
    OUTSIDE_CHECK_IN_WINDOW = "OUTSIDE_CHECK_IN_WINDOW"
    OUTSIDE_CHECK_OUT_WINDOW = "OUTSIDE_CHECK_OUT_WINDOW"
    CHECK_OUT_BEFORE_CHECK_IN = "CHECK_OUT_BEFORE_CHECK_IN"
