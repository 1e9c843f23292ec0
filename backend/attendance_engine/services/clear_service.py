# backend/attendance_engine/services/clear_service.py
"""Credential-gated destructive reset of attendance data."""
import logging
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash
from attendance_engine import db
from attendance_engine.exceptions import InvalidCredential, SessionNotFound, StorageFailure
from attendance_engine.models.attendance import AttendanceRecord
from attendance_engine.services.session_service import SessionManager
from attendance_engine.services.stats_publisher import StatsPublisher

logger = logging.getLogger(__name__)
audit_log = logging.getLogger('attendance_engine.audit')

class ClearService:
    """Reset/Clear workflow. Recovery tooling, not part of normal flow."""

    @staticmethod
    def check_credential(credential: str, action: str, operator: str = None) -> None:
        """Verify the operator secret against the configured hash.

        No hash configured means every attempt fails.
        """
        stored_hash = current_app.config.get('CLEAR_CREDENTIAL_HASH')
        if not stored_hash or not isinstance(credential, str) or not credential:
            valid = False
        else:
            valid = check_password_hash(stored_hash, credential)

        if not valid:
            audit_log.warning("%s_rejected invalid credential by=%s", action, operator)
            raise InvalidCredential()

    @staticmethod
    def clear_session(session_id: int, credential: str, operator: str = None) -> int:
        """ClearSession: delete a session and all of its records.

        The session row goes too, so the class is free for a fresh
        StartSession and the cleared session can never become active again.
        Returns the number of deleted records.
        """
        ClearService.check_credential(credential, 'session_clear', operator)

        try:
            session = SessionManager.lock_session(session_id)
            if session is None:
                raise SessionNotFound(session_id=session_id)

            class_id = session.class_id
            deleted = db.session.execute(
                db.delete(AttendanceRecord).where(AttendanceRecord.session_id == session_id)
            ).rowcount
            db.session.delete(session)
            db.session.commit()
        except SessionNotFound:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Clearing session %s failed: %s", session_id, e)
            raise StorageFailure(session_id=session_id)

        audit_log.warning(
            "session_cleared session=%s class=%s records_deleted=%s by=%s",
            session_id, class_id, deleted, operator
        )
        StatsPublisher.publish(session_id, 'cleared', {'session_id': session_id, 'deleted_count': deleted})
        return deleted

    @staticmethod
    def clear_all(credential: str, operator: str = None) -> int:
        """ClearAll: delete every attendance record. Sessions are kept."""
        ClearService.check_credential(credential, 'clear_all', operator)

        try:
            deleted = db.session.execute(db.delete(AttendanceRecord)).rowcount
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Clearing all attendance failed: %s", e)
            raise StorageFailure()

        audit_log.warning("clear_all_attendance records_deleted=%s by=%s", deleted, operator)
        return deleted
