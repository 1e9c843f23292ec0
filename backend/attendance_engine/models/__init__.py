"""Models package with all models."""
from .base import BaseModel
from .attendance_session import AttendanceSession, SessionStatus
from .attendance import AttendanceRecord, AttendanceStatus, RecordSource, MARKED_STATUSES
from .student import Student, Enrollment

__all__ = [
    'BaseModel', 'AttendanceSession', 'SessionStatus',
    'AttendanceRecord', 'AttendanceStatus', 'RecordSource', 'MARKED_STATUSES',
    'Student', 'Enrollment'
]
