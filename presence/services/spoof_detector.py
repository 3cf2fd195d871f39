"""
Fake GPS detection.

Compares a new location sample against the employee's most recent attendance
records (newest first). Four independent checks run in a fixed order and the
first one that fires is reported; overlapping failures are not aggregated.
All checks are pure: same inputs, same verdict.
"""
from datetime import datetime
from typing import Optional, Sequence

from presence.constants import (
    FIXED_ACCURACY_SAMPLE_SIZE,
    MAX_ACCEPTED_ACCURACY_METERS,
    MAX_ACCURACY_JUMP_METERS,
    MAX_TRAVEL_SPEED_MPS,
    SPEED_CHECK_MAX_ELAPSED_SECONDS,
    SPEED_CHECK_MIN_ELAPSED_SECONDS,
    RejectionReason,
)
from presence.models.attendance import AttendanceRecord
from presence.schemas.decision import LocationSample, PolicyVerdict
from presence.services.geo import distance_meters
from presence.utils.datetime_utils import ensure_utc

ACCEPT = PolicyVerdict()


def check_accuracy_jump(sample: LocationSample, history: Sequence[AttendanceRecord]) -> Optional[PolicyVerdict]:
    if not history:
        return None
    last_accuracy = history[0].accuracy
    if abs(sample.accuracy - last_accuracy) > MAX_ACCURACY_JUMP_METERS:
        return PolicyVerdict(
            accepted=False,
            reason=RejectionReason.SUDDEN_ACCURACY_CHANGE,
            message=(
                "Suspicious GPS behavior detected: Accuracy suddenly changed "
                f"from {last_accuracy:.1f} to {sample.accuracy:.1f} meters"
            ),
            details={"previous_accuracy": last_accuracy, "accuracy": sample.accuracy},
        )
    return None


def check_fixed_accuracy(history: Sequence[AttendanceRecord]) -> Optional[PolicyVerdict]:
    """Replayed or mocked fixtures tend to report the exact same accuracy every time."""
    if len(history) < FIXED_ACCURACY_SAMPLE_SIZE:
        return None
    recent = [record.accuracy for record in history[:FIXED_ACCURACY_SAMPLE_SIZE]]
    # Exact equality on purpose; near-equal values do not trigger
    if len(set(recent)) == 1 and recent[0] > 0:
        return PolicyVerdict(
            accepted=False,
            reason=RejectionReason.CONSISTENT_ACCURACY,
            message="Suspicious GPS behavior detected: Accuracy values are suspiciously consistent",
            details={"recent_accuracies": recent},
        )
    return None


def check_travel_speed(
    sample: LocationSample,
    history: Sequence[AttendanceRecord],
    now: datetime,
) -> Optional[PolicyVerdict]:
    """
    Speed between the last check-in and this sample. Only evaluated when the
    last check-in is strictly between 60 s and 1 h old.
    """
    if not history:
        return None
    last = history[0]
    elapsed = (ensure_utc(now) - ensure_utc(last.checked_in_at)).total_seconds()
    if not SPEED_CHECK_MIN_ELAPSED_SECONDS < elapsed < SPEED_CHECK_MAX_ELAPSED_SECONDS:
        return None

    traveled = distance_meters(sample, last)
    speed = traveled / elapsed
    if speed > MAX_TRAVEL_SPEED_MPS:
        return PolicyVerdict(
            accepted=False,
            reason=RejectionReason.IMPOSSIBLE_TRAVEL_SPEED,
            message=f"Suspicious GPS behavior detected: Impossible travel speed ({speed * 3.6:.2f} km/h)",
            details={
                "speed_mps": round(speed, 2),
                "speed_kmh": round(speed * 3.6, 2),
                "distance_meters": round(traveled, 2),
                "elapsed_seconds": round(elapsed, 1),
            },
        )
    return None


def check_poor_accuracy(sample: LocationSample) -> Optional[PolicyVerdict]:
    if sample.accuracy > MAX_ACCEPTED_ACCURACY_METERS:
        return PolicyVerdict(
            accepted=False,
            reason=RejectionReason.POOR_ACCURACY,
            message=(
                f"GPS accuracy is too poor: {sample.accuracy:.1f} meters. "
                "Please ensure GPS is enabled and try again."
            ),
            details={"accuracy": sample.accuracy, "max_accuracy": MAX_ACCEPTED_ACCURACY_METERS},
        )
    return None


def detect(
    sample: LocationSample,
    history: Sequence[AttendanceRecord],
    now: Optional[datetime] = None,
) -> PolicyVerdict:
    """
    Run all spoofing checks against up to the last five records, newest first.

    Args:
        sample: The location being claimed now
        history: Prior records of the same employee, newest first (may be empty)
        now: Reference time for the speed check; defaults to the sample's capture time

    Returns:
        The first rejecting verdict, or an accepting one
    """
    now = now or sample.captured_at
    checks = (
        lambda: check_accuracy_jump(sample, history),
        lambda: check_fixed_accuracy(history),
        lambda: check_travel_speed(sample, history, now),
        lambda: check_poor_accuracy(sample),
    )
    for check in checks:
        verdict = check()
        if verdict is not None:
            return verdict
    return ACCEPT
