"""
Audit logging service
"""
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from presence.models.audit_log import AuditLog
from presence.utils.datetime_utils import now_utc
from presence.utils.json_serializer import sanitize_for_json


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None,
    commit: bool = True,
    created_at: Optional[datetime] = None,
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the employee the action was performed for
        action: Action type (e.g., "ATTENDANCE_CHECK_IN", "ATTENDANCE_CHECK_OUT")
        entity_type: Type of entity (e.g., "attendance_records")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)
        commit: Commit immediately; pass False to join the caller's transaction
        created_at: When the audited action happened; defaults to now (UTC)

    Returns:
        Created AuditLog instance
    """
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_json=safe_meta,
        created_at=created_at or now_utc(),
    )
    db.add(audit_log)
    if commit:
        db.commit()
        db.refresh(audit_log)
    else:
        db.flush()
    return audit_log
