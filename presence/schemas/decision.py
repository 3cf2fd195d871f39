"""
Value types passed between the attendance checks, and the decision returned
to the transport layer.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from presence.constants import RejectionReason, TransitionKind
from presence.core.exceptions import PolicyRejection
from presence.models.attendance import AttendanceStatus
from presence.schemas.attendance import AttendanceRecordOut


class IdentityClaim(BaseModel):
    """Who the caller says they are, plus the captured face image"""
    employee_id: int
    image: bytes
    filename: str = "capture.jpg"
    content_type: str = "image/jpeg"

    model_config = ConfigDict(frozen=True)


class LocationSample(BaseModel):
    latitude: float
    longitude: float
    accuracy: float
    captured_at: datetime

    model_config = ConfigDict(frozen=True)


class RegisteredSite(BaseModel):
    id: int
    name: Optional[str] = None
    latitude: float
    longitude: float

    model_config = ConfigDict(frozen=True, from_attributes=True)


class VerificationResult(BaseModel):
    """Face service answer. The service sends the matched id as `userId`."""
    matched: bool
    confidence: float = 0.0
    matched_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("matched_id", "userId", "user_id"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)


class PolicyVerdict(BaseModel):
    """Outcome of a single pure check"""
    accepted: bool = True
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def raise_for_rejection(self) -> None:
        if not self.accepted:
            raise PolicyRejection(self.reason, self.message, self.details)


class GeofenceResult(PolicyVerdict):
    distance_meters: float
    radius_meters: float


class CheckInClassification(PolicyVerdict):
    status: Optional[AttendanceStatus] = None
    late_minutes: int = 0


class CheckOutClassification(PolicyVerdict):
    status: Optional[AttendanceStatus] = None
    overtime_minutes: int = 0
    downgraded: bool = False


class AttendanceDecision(BaseModel):
    """What the engine decided for one check-in / check-out attempt"""
    accepted: bool
    kind: TransitionKind
    reason_code: Optional[RejectionReason] = None
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    record: Optional[AttendanceRecordOut] = None
    status: Optional[AttendanceStatus] = None
    late_minutes: Optional[int] = None
    overtime_minutes: Optional[int] = None
    confidence: Optional[float] = None
