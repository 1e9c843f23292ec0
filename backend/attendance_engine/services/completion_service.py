# backend/attendance_engine/services/completion_service.py
"""Session completion: auto-absent marking and final roster."""
import logging
import time
from datetime import datetime
from typing import Dict, List
from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from attendance_engine import db
from attendance_engine.exceptions import (
    AttendanceError, SessionAlreadyCompleted, SessionNotFound, StorageFailure
)
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, RecordSource
from attendance_engine.models.attendance_session import AttendanceSession, SessionStatus
from attendance_engine.services.directory_service import EnrollmentDirectory
from attendance_engine.services.session_service import SessionManager
from attendance_engine.services.stats_publisher import StatsPublisher
from attendance_engine.services.stats_service import StatsAggregator
from attendance_engine.utils.decorators import storage_guarded

logger = logging.getLogger(__name__)
audit_log = logging.getLogger('attendance_engine.audit')

RETRY_BACKOFF_SECONDS = 0.1

class CompletionWorkflow:
    """
    Closes a session: active -> completing -> completed.

    The whole transition is one transaction. Either every auto-absent row
    and the completed status are committed together, or nothing is and the
    session is still active.
    """

    @staticmethod
    def _complete_once(session_id: int, ended_by: str = None) -> Dict:
        # Exclusive lock: waits for in-flight marks, later marks see "completed"
        session = SessionManager.lock_session(session_id)
        if session is None:
            raise SessionNotFound(session_id=session_id)
        if not session.is_active:
            raise SessionAlreadyCompleted(session_id=session_id)

        session.transition_to(SessionStatus.COMPLETING)
        db.session.flush()

        enrolled = EnrollmentDirectory.get_enrolled_students(session.class_id)
        marked = set(db.session.execute(
            db.select(AttendanceRecord.student_id).where(AttendanceRecord.session_id == session_id)
        ).scalars())

        now = datetime.utcnow()
        unmarked = sorted(enrolled - marked)
        db.session.add_all([
            AttendanceRecord(
                session_id=session_id,
                student_id=student_id,
                status=AttendanceStatus.ABSENT,
                marked_at=now,
                note=None,
                source=RecordSource.AUTO
            )
            for student_id in unmarked
        ])
        db.session.flush()

        session.transition_to(SessionStatus.COMPLETED)
        session.end_time = now
        db.session.commit()

        audit_log.info(
            "attendance_session_ended session=%s class=%s auto_absent=%s by=%s",
            session_id, session.class_id, len(unmarked), ended_by
        )
        return {'session': session, 'auto_absent_count': len(unmarked)}

    @staticmethod
    def complete(session_id: int, ended_by: str = None) -> Dict:
        """
        EndSession with bounded retries.

        Transient storage errors are retried until COMPLETION_MAX_ATTEMPTS or
        COMPLETION_TIMEOUT_SECONDS runs out; each failed attempt is rolled
        back in full before the next one.

        Returns the completed session, auto_absent_count, stats and roster.
        """
        max_attempts = current_app.config.get('COMPLETION_MAX_ATTEMPTS', 3)
        deadline = time.monotonic() + current_app.config.get('COMPLETION_TIMEOUT_SECONDS', 10)
        attempt = 0

        while True:
            attempt += 1
            try:
                result = CompletionWorkflow._complete_once(session_id, ended_by=ended_by)
                break
            except AttendanceError:
                db.session.rollback()
                raise
            except OperationalError as e:
                db.session.rollback()
                remaining = deadline - time.monotonic()
                if attempt >= max_attempts or remaining <= 0:
                    logger.error("Completion of session %s failed after %s attempts: %s", session_id, attempt, e)
                    raise StorageFailure(session_id=session_id)
                logger.warning("Completion of session %s attempt %s failed, retrying: %s", session_id, attempt, e)
                time.sleep(min(RETRY_BACKOFF_SECONDS * 2 ** (attempt - 1), remaining))
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error("Completion of session %s failed: %s", session_id, e)
                raise StorageFailure(session_id=session_id)

        session = result['session']
        stats = StatsAggregator.stats_for(session)
        StatsPublisher.publish(session_id, 'completed', stats)

        return {
            'session': session,
            'auto_absent_count': result['auto_absent_count'],
            'stats': stats,
            'roster': CompletionWorkflow.roster(session_id)
        }

    @staticmethod
    @storage_guarded
    def roster(session_id: int) -> List[Dict]:
        """All records of a session joined with student display info."""
        records = db.session.execute(
            db.select(AttendanceRecord).where(AttendanceRecord.session_id == session_id)
        ).scalars().all()
        info = EnrollmentDirectory.get_display_info_bulk(record.student_id for record in records)

        rows = []
        for record in records:
            row = record.to_dict(exclude=['created_at', 'updated_at'])
            row['name'] = info[record.student_id]['name']
            row['index_no'] = info[record.student_id]['index_no']
            rows.append(row)

        rows.sort(key=lambda row: (row['index_no'] is None, row['index_no'] or '', row['student_id']))
        return rows

    @staticmethod
    @storage_guarded
    def get_roster(session_id: int) -> List[Dict]:
        """Roster of an existing session."""
        if db.session.get(AttendanceSession, session_id) is None:
            raise SessionNotFound(session_id=session_id)
        return CompletionWorkflow.roster(session_id)
