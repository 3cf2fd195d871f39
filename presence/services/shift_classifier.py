"""
Shift window classifier.

Maps a local wall-clock timestamp to a shift on check-in (status + lateness)
and to a checkout outcome (possible downgrade + overtime). A record has two
states, open and closed; which transition is allowed is decided purely by the
clock windows below. Nothing here reads the system clock: callers pass the
timestamp already converted to the business timezone.
"""
from datetime import datetime, time
from typing import Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from presence.constants import RejectionReason
from presence.models.attendance import AttendanceStatus
from presence.schemas.decision import CheckInClassification, CheckOutClassification


class ShiftWindow(BaseModel):
    """Check-in window of one shift. Both outer bounds are inclusive."""
    status: AttendanceStatus
    opens_at: time
    deadline: time
    closes_at: time
    work_start: time

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_order(self) -> "ShiftWindow":
        if not self.opens_at <= self.deadline <= self.closes_at:
            raise ValueError("shift window must satisfy opens_at <= deadline <= closes_at")
        if not self.opens_at <= self.work_start <= self.deadline:
            raise ValueError("work_start must fall between opens_at and deadline")
        return self

    def contains(self, clock: time) -> bool:
        return self.opens_at <= clock <= self.closes_at


class CheckoutWindows(BaseModel):
    """Early checkout slot (downgrades to half-day) and the open-ended regular slot."""
    early_opens_at: time = time(12, 29)
    early_closes_at: time = time(12, 36)
    regular_opens_at: time = time(16, 55)
    work_end: time = time(17, 0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_order(self) -> "CheckoutWindows":
        if not self.early_opens_at <= self.early_closes_at < self.regular_opens_at <= self.work_end:
            raise ValueError("checkout windows must be ordered early < regular <= work_end")
        return self


class ShiftPolicy(BaseModel):
    """Shifts are tried in order; the first window containing the timestamp wins."""
    shifts: Tuple[ShiftWindow, ...]
    checkout: CheckoutWindows = CheckoutWindows()

    model_config = ConfigDict(frozen=True)


FULL_DAY_SHIFT = ShiftWindow(
    status=AttendanceStatus.FULL_DAY,
    opens_at=time(6, 59),
    deadline=time(8, 5),
    closes_at=time(8, 6),
    work_start=time(8, 0),
)

HALF_DAY_SHIFT = ShiftWindow(
    status=AttendanceStatus.HALF_DAY,
    opens_at=time(11, 29),
    deadline=time(12, 35),
    closes_at=time(12, 36),
    work_start=time(12, 30),
)

DEFAULT_SHIFT_POLICY = ShiftPolicy(shifts=(FULL_DAY_SHIFT, HALF_DAY_SHIFT))


def _at(moment: datetime, clock: time) -> datetime:
    """The given clock time on the same local day (and tz) as moment."""
    return moment.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)


def _minutes_after(moment: datetime, clock: time) -> int:
    """Whole minutes moment is past clock on the same day, never negative."""
    boundary = _at(moment, clock)
    if moment <= boundary:
        return 0
    return int((moment - boundary).total_seconds() // 60)


def _hhmm(clock: time) -> str:
    return clock.strftime("%H:%M")


def classify_check_in(local_now: datetime, policy: ShiftPolicy = DEFAULT_SHIFT_POLICY) -> CheckInClassification:
    """
    Decide the shift for a check-in at local_now.

    Returns an accepting classification with status and late minutes, or a
    rejection when the deadline has passed or no window matches.
    """
    clock = local_now.time()
    for shift in policy.shifts:
        if not shift.contains(clock):
            continue
        if clock > shift.deadline:
            return CheckInClassification(
                accepted=False,
                reason=RejectionReason.CHECK_IN_EXPIRED,
                message=f"Check-in time has expired for {shift.status.value} shift. Deadline was {_hhmm(shift.deadline)}",
                details={"shift": shift.status.value, "deadline": _hhmm(shift.deadline)},
            )
        return CheckInClassification(
            status=shift.status,
            late_minutes=_minutes_after(local_now, shift.work_start),
        )

    windows = ", ".join(
        f"{shift.status.value}: {_hhmm(shift.opens_at)}-{_hhmm(shift.deadline)}" for shift in policy.shifts
    )
    return CheckInClassification(
        accepted=False,
        reason=RejectionReason.OUTSIDE_CHECK_IN_WINDOW,
        message=f"Not within valid check-in time. {windows}",
        details={
            "windows": [
                {"shift": shift.status.value, "opens_at": _hhmm(shift.opens_at), "deadline": _hhmm(shift.deadline)}
                for shift in policy.shifts
            ]
        },
    )


def classify_check_out(
    local_now: datetime,
    current_status: AttendanceStatus,
    policy: ShiftPolicy = DEFAULT_SHIFT_POLICY,
) -> CheckOutClassification:
    """
    Decide the outcome of a check-out at local_now for an open record.

    Early slot: always half-day with no overtime (a full-day record is downgraded).
    Regular slot: half-day keeps no overtime; full-day earns minutes past work_end.
    """
    windows = policy.checkout
    clock = local_now.time()

    if windows.early_opens_at <= clock <= windows.early_closes_at:
        return CheckOutClassification(
            status=AttendanceStatus.HALF_DAY,
            overtime_minutes=0,
            downgraded=current_status != AttendanceStatus.HALF_DAY,
        )

    if clock >= windows.regular_opens_at:
        if current_status == AttendanceStatus.HALF_DAY:
            return CheckOutClassification(status=AttendanceStatus.HALF_DAY, overtime_minutes=0)
        return CheckOutClassification(
            status=AttendanceStatus.FULL_DAY,
            overtime_minutes=_minutes_after(local_now, windows.work_end),
        )

    return CheckOutClassification(
        accepted=False,
        reason=RejectionReason.OUTSIDE_CHECK_OUT_WINDOW,
        message=(
            "Not within valid check-out time. "
            f"Early checkout: {_hhmm(windows.early_opens_at)}-{_hhmm(windows.early_closes_at)}, "
            f"Regular checkout: {_hhmm(windows.regular_opens_at)} onwards"
        ),
        details={
            "early_window": [_hhmm(windows.early_opens_at), _hhmm(windows.early_closes_at)],
            "regular_from": _hhmm(windows.regular_opens_at),
        },
    )
