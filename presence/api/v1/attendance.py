"""
Attendance endpoints: face-verified, geofenced check-in/check-out plus record listing.
Check-in/check-out take multipart form data: employee_id, site_id, latitude,
longitude, accuracy and the captured face image.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from presence.constants import RejectionReason
from presence.core.deps import get_db, get_decision_engine
from presence.core.exceptions import ValidationFailure
from presence.schemas.attendance import AttendanceListResponse, AttendanceRecordOut, Pagination
from presence.schemas.decision import AttendanceDecision, IdentityClaim, VerificationResult
from presence.services.attendance_service import get_record, list_records
from presence.services.decision_engine import AttendanceDecisionEngine
from presence.services.face_verifier import get_face_client

router = APIRouter()
_log = logging.getLogger(__name__)

REJECTION_STATUS = {
    RejectionReason.IDENTITY_NOT_MATCHED: status.HTTP_401_UNAUTHORIZED,
    RejectionReason.SITE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionReason.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    RejectionReason.NO_CHECK_IN_TODAY: status.HTTP_404_NOT_FOUND,
}


def _read_claim(employee_id: int, image: UploadFile) -> IdentityClaim:
    """Build an identity claim from the uploaded image; only image/* uploads are accepted."""
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationFailure("Invalid image file type", {"content_type": content_type})
    data = image.file.read()
    if not data:
        raise ValidationFailure("Image file is required")
    return IdentityClaim(
        employee_id=employee_id,
        image=data,
        filename=image.filename or "capture.jpg",
        content_type=content_type,
    )


def _decision_response(decision: AttendanceDecision, success_status: int) -> JSONResponse:
    if decision.accepted:
        code = success_status
    else:
        code = REJECTION_STATUS.get(decision.reason_code, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content=decision.model_dump(mode="json"))


@router.post("/face-verify", response_model=VerificationResult)
def face_verify_endpoint(
    employee_id: int = Form(..., description="Employee whose registered face is compared"),
    image: UploadFile = File(..., description="Face image to verify"),
    verifier=Depends(get_face_client),
):
    """
    Verify a face against the employee's registered face without recording attendance.
    Not matched => 401 with the service's answer in the body.
    """
    claim = _read_claim(employee_id, image)
    result = verifier.verify(
        claim.employee_id, claim.image, filename=claim.filename, content_type=claim.content_type
    )
    if not result.matched:
        _log.info("Face verify: no match for employee_id=%s (confidence=%.2f)", employee_id, result.confidence)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Face verification failed - face does not match", **result.model_dump(mode="json")},
        )
    return result


@router.post("/check-in", response_model=AttendanceDecision, status_code=201)
def check_in_endpoint(
    employee_id: int = Form(...),
    site_id: int = Form(..., description="Registered site for geofence verification"),
    latitude: float = Form(...),
    longitude: float = Form(...),
    accuracy: float = Form(..., description="GPS accuracy in meters"),
    image: UploadFile = File(..., description="Face image for verification"),
    engine: AttendanceDecisionEngine = Depends(get_decision_engine),
):
    """
    Check in with face verification and GPS proof of presence.
    Accepted => 201 with the new open record, status and late minutes.
    Rejected => 4xx with accepted=false and the reason code and figures.
    """
    claim = _read_claim(employee_id, image)
    decision = engine.check_in(claim, latitude, longitude, accuracy, site_id)
    return _decision_response(decision, status.HTTP_201_CREATED)


@router.put("/check-out", response_model=AttendanceDecision)
def check_out_endpoint(
    employee_id: int = Form(...),
    site_id: int = Form(..., description="Registered site for geofence verification"),
    latitude: float = Form(...),
    longitude: float = Form(...),
    accuracy: float = Form(..., description="GPS accuracy in meters"),
    image: UploadFile = File(..., description="Face image for verification"),
    engine: AttendanceDecisionEngine = Depends(get_decision_engine),
):
    """
    Check out with face verification and GPS proof of presence.
    Closes today's open record; early checkout downgrades to half-day.
    """
    claim = _read_claim(employee_id, image)
    decision = engine.check_out(claim, latitude, longitude, accuracy, site_id)
    return _decision_response(decision, status.HTTP_200_OK)


@router.get("", response_model=AttendanceListResponse)
def list_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    employee_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """List attendance records, newest first, with pagination and date filters."""
    items, total = list_records(
        db, page=page, limit=limit, start_date=start_date, end_date=end_date, employee_id=employee_id
    )
    return AttendanceListResponse(
        items=[AttendanceRecordOut.model_validate(r) for r in items],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.get("/{record_id}", response_model=AttendanceRecordOut)
def get_endpoint(record_id: int, db: Session = Depends(get_db)):
    """Get a single attendance record by id."""
    return AttendanceRecordOut.model_validate(get_record(db, record_id))
