# backend/attendance_engine/services/session_service.py
"""Session lifecycle: open, look up and close attendance sessions."""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from attendance_engine import db
from attendance_engine.exceptions import SessionAlreadyActive, StorageFailure
from attendance_engine.models.attendance_session import AttendanceSession, SessionStatus
from attendance_engine.utils.decorators import storage_guarded

logger = logging.getLogger(__name__)
audit_log = logging.getLogger('attendance_engine.audit')

class SessionManager:
    """Opens and closes sessions; one active session per class at most."""

    @staticmethod
    def lock_session(session_id: int, shared: bool = False) -> Optional[AttendanceSession]:
        """Load a session with a row lock for the rest of the transaction.

        ``shared=True`` lets concurrent marks proceed together while still
        excluding completion and clearing, which take the exclusive lock.
        Dialects without row locks (SQLite) serialize writers instead.
        """
        stmt = (
            db.select(AttendanceSession)
            .where(AttendanceSession.id == session_id)
            .with_for_update(read=shared)
            .execution_options(populate_existing=True)
        )
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def start_session(class_id: str, started_by: str = None) -> AttendanceSession:
        """StartSession: create an active session for the class."""
        session = AttendanceSession(
            class_id=class_id,
            start_time=datetime.utcnow(),
            status=SessionStatus.ACTIVE,
            started_by=started_by
        )
        db.session.add(session)

        try:
            db.session.commit()
        except IntegrityError:
            # Partial unique index on active sessions decided the race
            db.session.rollback()
            existing = SessionManager.get_active_session(class_id)
            raise SessionAlreadyActive(
                class_id=class_id,
                session_id=existing.id if existing else None
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to start session for %s: %s", class_id, e)
            raise StorageFailure()

        audit_log.info(
            "attendance_session_started session=%s class=%s by=%s",
            session.id, class_id, started_by
        )
        return session

    @staticmethod
    @storage_guarded
    def get_active_session(class_id: str) -> Optional[AttendanceSession]:
        """GetActiveSession: pure lookup."""
        return db.session.execute(
            db.select(AttendanceSession).where(
                AttendanceSession.class_id == class_id,
                AttendanceSession.status == SessionStatus.ACTIVE
            )
        ).scalar_one_or_none()

    @staticmethod
    def end_session(session_id: int, ended_by: str = None):
        """EndSession: delegates to the completion workflow."""
        from attendance_engine.services.completion_service import CompletionWorkflow
        return CompletionWorkflow.complete(session_id, ended_by=ended_by)
