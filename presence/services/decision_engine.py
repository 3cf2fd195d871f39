"""
Attendance decision engine.

One orchestrator for both transitions. Check-in and check-out share identity
verification, the geofence and the spoofing checks; they differ only in the
open-record rule, the shift classifier transition and the write.

Order of checks (first failure wins, nothing is written on failure):
    1. input validation            -> ValidationFailure (raised)
    2. identity verification       -> IDENTITY_NOT_MATCHED
    3. site lookup + geofence      -> SITE_NOT_FOUND / OUTSIDE_GEOFENCE
    4. spoof detection             -> SUDDEN_ACCURACY_CHANGE / CONSISTENT_ACCURACY /
                                      IMPOSSIBLE_TRAVEL_SPEED / POOR_ACCURACY
    5. open-record rule            -> ALREADY_CHECKED_IN / NO_CHECK_IN_TODAY
    6. shift classifier            -> CHECK_IN_EXPIRED / OUTSIDE_CHECK_IN_WINDOW /
                                      OUTSIDE_CHECK_OUT_WINDOW
    7. persist record + audit row, single commit
"""
import logging
import math
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from presence.constants import SPOOF_HISTORY_LIMIT, RejectionReason, TransitionKind
from presence.core.exceptions import DuplicateOpenRecord, PolicyRejection, ValidationFailure
from presence.models.attendance import OPEN_SLOT, AttendanceRecord
from presence.schemas.attendance import AttendanceRecordOut
from presence.schemas.decision import (
    AttendanceDecision,
    IdentityClaim,
    LocationSample,
    RegisteredSite,
    VerificationResult,
)
from presence.services import geofence, spoof_detector
from presence.services.attendance_store import AttendanceStore
from presence.services.geo import validate_coordinate
from presence.services.shift_classifier import (
    DEFAULT_SHIFT_POLICY,
    ShiftPolicy,
    classify_check_in,
    classify_check_out,
)
from presence.services.site_service import SiteRegistry
from presence.utils.datetime_utils import business_zone, ensure_utc, now_utc
from presence.utils.json_serializer import sanitize_for_json

_log = logging.getLogger(__name__)

AUDIT_ACTIONS = {
    TransitionKind.CHECK_IN: "ATTENDANCE_CHECK_IN",
    TransitionKind.CHECK_OUT: "ATTENDANCE_CHECK_OUT",
}


class AttendanceDecisionEngine:
    def __init__(
        self,
        store: AttendanceStore,
        sites: SiteRegistry,
        verifier,
        clock: Callable[[], datetime] = now_utc,
        shift_policy: ShiftPolicy = DEFAULT_SHIFT_POLICY,
        tz: Optional[ZoneInfo] = None,
    ):
        self.store = store
        self.sites = sites
        self.verifier = verifier
        self.clock = clock
        self.shift_policy = shift_policy
        self.tz = tz or business_zone()

    def check_in(self, claim: IdentityClaim, latitude: float, longitude: float, accuracy: float, site_id: int) -> AttendanceDecision:
        return self.decide(TransitionKind.CHECK_IN, claim, latitude, longitude, accuracy, site_id)

    def check_out(self, claim: IdentityClaim, latitude: float, longitude: float, accuracy: float, site_id: int) -> AttendanceDecision:
        return self.decide(TransitionKind.CHECK_OUT, claim, latitude, longitude, accuracy, site_id)

    def decide(
        self,
        kind: TransitionKind,
        claim: IdentityClaim,
        latitude: float,
        longitude: float,
        accuracy: float,
        site_id: int,
    ) -> AttendanceDecision:
        """
        Run the full verification pipeline for one attendance event.

        Returns:
            AttendanceDecision, accepted or carrying the first rejection

        Raises:
            ValidationFailure: malformed input, before any collaborator call
            InfrastructureFailure: face service or store unavailable (retryable)
        """
        now = ensure_utc(self.clock())
        self._validate_input(claim, latitude, longitude, accuracy)
        sample = LocationSample(latitude=latitude, longitude=longitude, accuracy=accuracy, captured_at=now)

        verification: Optional[VerificationResult] = None
        try:
            verification = self._verify_identity(claim)
            self._require_match(verification)
            site = self._require_site(site_id)
            geofence.validate(sample, site).raise_for_rejection()

            history = self.store.recent_records(claim.employee_id, limit=SPOOF_HISTORY_LIMIT)
            spoof_detector.detect(sample, history, now=now).raise_for_rejection()

            if kind == TransitionKind.CHECK_IN:
                record = self._check_in(claim.employee_id, site, sample, now)
            else:
                record = self._check_out(claim.employee_id, now)
        except PolicyRejection as rejection:
            self.store.rollback()
            _log.warning(
                "Attendance %s rejected: employee_id=%s site_id=%s reason=%s",
                kind.value, claim.employee_id, site_id, rejection.reason.value,
            )
            return AttendanceDecision(
                accepted=False,
                kind=kind,
                reason_code=rejection.reason,
                message=rejection.message,
                details=sanitize_for_json(rejection.details),
                confidence=verification.confidence if verification else None,
            )

        _log.info(
            "Attendance %s accepted: employee_id=%s record_id=%s status=%s late=%s overtime=%s",
            kind.value, claim.employee_id, record.id, record.status.value,
            record.late_minutes, record.overtime_minutes,
        )
        return AttendanceDecision(
            accepted=True,
            kind=kind,
            message="User checked in successfully" if kind == TransitionKind.CHECK_IN else "User checked out successfully",
            record=AttendanceRecordOut.model_validate(record),
            status=record.status,
            late_minutes=record.late_minutes if kind == TransitionKind.CHECK_IN else None,
            overtime_minutes=record.overtime_minutes if kind == TransitionKind.CHECK_OUT else None,
            confidence=verification.confidence,
        )

    @staticmethod
    def _validate_input(claim: IdentityClaim, latitude: float, longitude: float, accuracy: float) -> None:
        if not claim.image:
            raise ValidationFailure("Image file is required")
        if not claim.content_type.startswith("image/"):
            raise ValidationFailure("Invalid image file type", {"content_type": claim.content_type})
        validate_coordinate(latitude, longitude)
        if accuracy is None or not math.isfinite(accuracy) or accuracy < 0:
            raise ValidationFailure("Accuracy must be a non-negative number of meters", {"accuracy": accuracy})

    def _verify_identity(self, claim: IdentityClaim) -> VerificationResult:
        return self.verifier.verify(
            claim.employee_id,
            claim.image,
            filename=claim.filename,
            content_type=claim.content_type,
        )

    @staticmethod
    def _require_match(result: VerificationResult) -> None:
        if not result.matched:
            raise PolicyRejection(
                RejectionReason.IDENTITY_NOT_MATCHED,
                "Identity verification failed - face does not match",
                {"confidence": result.confidence, "matched_id": result.matched_id},
            )

    def _require_site(self, site_id: int) -> RegisteredSite:
        site = self.sites.get_site(site_id)
        if site is None:
            raise PolicyRejection(RejectionReason.SITE_NOT_FOUND, "Location not found", {"site_id": site_id})
        return site

    def _check_in(self, employee_id: int, site: RegisteredSite, sample: LocationSample, now: datetime) -> AttendanceRecord:
        local_now = now.astimezone(self.tz)
        work_date = local_now.date()

        if self.store.find_open_record(employee_id, work_date) is not None:
            raise PolicyRejection(
                RejectionReason.ALREADY_CHECKED_IN,
                "User already checked in today",
                {"work_date": work_date},
            )

        classification = classify_check_in(local_now, self.shift_policy)
        classification.raise_for_rejection()

        record = AttendanceRecord(
            employee_id=employee_id,
            site_id=site.id,
            work_date=work_date,
            checked_in_at=now,
            checked_out_at=None,
            latitude=sample.latitude,
            longitude=sample.longitude,
            accuracy=sample.accuracy,
            status=classification.status,
            late_minutes=classification.late_minutes,
            overtime_minutes=0,
            is_open=True,
            open_slot=OPEN_SLOT,
        )
        try:
            self.store.create(record)
        except DuplicateOpenRecord:
            # Lost a race with a concurrent check-in for the same day
            raise PolicyRejection(
                RejectionReason.ALREADY_CHECKED_IN,
                "User already checked in today",
                {"work_date": work_date},
            )

        self.store.log_event(
            AUDIT_ACTIONS[TransitionKind.CHECK_IN],
            record,
            {
                "work_date": work_date,
                "checked_in_at": now,
                "site_id": site.id,
                "status": record.status,
                "late_minutes": record.late_minutes,
                "accuracy": sample.accuracy,
            },
            at=now,
        )
        self.store.commit()
        return record

    def _check_out(self, employee_id: int, now: datetime) -> AttendanceRecord:
        local_now = now.astimezone(self.tz)
        work_date = local_now.date()

        record = self.store.find_open_record(employee_id, work_date)
        if record is None:
            raise PolicyRejection(
                RejectionReason.NO_CHECK_IN_TODAY,
                "Attendance record not found or user has not checked in today",
                {"work_date": work_date},
            )
        if now <= ensure_utc(record.checked_in_at):
            raise PolicyRejection(
                RejectionReason.CHECK_OUT_BEFORE_CHECK_IN,
                "Check-out time must be after check-in time",
                {"checked_in_at": record.checked_in_at},
            )

        previous_status = record.status
        classification = classify_check_out(local_now, previous_status, self.shift_policy)
        classification.raise_for_rejection()

        record.close(now, classification.status, classification.overtime_minutes)
        self.store.update(record)
        self.store.log_event(
            AUDIT_ACTIONS[TransitionKind.CHECK_OUT],
            record,
            {
                "work_date": work_date,
                "checked_out_at": now,
                "previous_status": previous_status,
                "status": record.status,
                "overtime_minutes": record.overtime_minutes,
                "downgraded": classification.downgraded,
            },
            at=now,
        )
        self.store.commit()
        return record
