# backend/attendance_engine/models/attendance_session.py
"""Attendance session for one class meeting."""
import enum
from attendance_engine import db
from attendance_engine.models.base import BaseModel, enum_column_type

class SessionStatus(enum.Enum):
    """Session lifecycle states."""
    ACTIVE = 'active'
    COMPLETING = 'completing'  # only ever seen inside the completion transaction
    COMPLETED = 'completed'

# Allowed lifecycle transitions
SESSION_TRANSITIONS = {
    SessionStatus.ACTIVE: {SessionStatus.COMPLETING},
    SessionStatus.COMPLETING: {SessionStatus.COMPLETED},
    SessionStatus.COMPLETED: set()
}

class AttendanceSession(BaseModel):
    """Time-bounded attendance-taking window for one class meeting."""
    
    __tablename__ = 'attendance_sessions'
    __table_args__ = (
        # At most one active session per class
        db.Index(
            'uq_attendance_sessions_active_class',
            'class_id',
            unique=True,
            sqlite_where=db.text("status = 'active'"),
            postgresql_where=db.text("status = 'active'")
        ),
        # Ids of cleared sessions are never handed out again
        {'sqlite_autoincrement': True},
    )
    
    class_id = db.Column(db.String(50), nullable=False, index=True)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=True)
    status = db.Column(enum_column_type(SessionStatus, 'session_status'), nullable=False, default=SessionStatus.ACTIVE)
    started_by = db.Column(db.String(100), nullable=True)
    
    # Relationships
    records = db.relationship(
        'AttendanceRecord',
        backref='session',
        lazy='dynamic',
        cascade='all, delete-orphan',
        passive_deletes=True
    )
    
    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE
    
    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED
    
    def transition_to(self, status: SessionStatus) -> None:
        """Move to the next lifecycle state."""
        if status not in SESSION_TRANSITIONS[self.status]:
            raise ValueError(f"Illegal session transition {self.status.value} -> {status.value}")
        self.status = status
    
    def __repr__(self):
        return f'<AttendanceSession {self.id} {self.class_id} {self.status.value}>'
