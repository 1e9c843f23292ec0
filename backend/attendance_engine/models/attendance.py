# backend/attendance_engine/models/attendance.py
"""Attendance record model."""
import enum
from datetime import datetime
from attendance_engine import db
from attendance_engine.models.base import BaseModel, enum_column_type

class AttendanceStatus(enum.Enum):
    """Attendance states of one student in one session."""
    PRESENT = 'present'
    LATE = 'late'
    EXCUSED = 'excused'
    ABSENT = 'absent'

# Statuses that count towards progress on the live dashboard
MARKED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.EXCUSED)

class RecordSource(enum.Enum):
    """How a record was written."""
    QR = 'qr'
    AUTO = 'auto'      # auto-absent at completion
    MANUAL = 'manual'  # status override

class AttendanceRecord(BaseModel):
    """Attendance record, unique per (session, student)."""
    
    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    
    session_id = db.Column(
        db.Integer,
        db.ForeignKey('attendance_sessions.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    student_id = db.Column(db.String(50), nullable=False)
    status = db.Column(enum_column_type(AttendanceStatus, 'attendance_status'), nullable=False)
    marked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    note = db.Column(db.Text, nullable=True)
    source = db.Column(enum_column_type(RecordSource, 'record_source'), nullable=False, default=RecordSource.QR)
    
    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.student_id} {self.status.value}>'
