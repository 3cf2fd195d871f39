"""
Database models
"""
from presence.models.site import Site
from presence.models.attendance import AttendanceRecord, AttendanceStatus
from presence.models.audit_log import AuditLog

__all__ = [
    "Site",
    "AttendanceRecord",
    "AttendanceStatus",
    "AuditLog",
]
