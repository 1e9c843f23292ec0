# backend/attendance_engine/services/marking_service.py
"""Idempotent attendance marking from QR scans."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from attendance_engine import db
from attendance_engine.exceptions import AttendanceError, RecordNotFound, SessionNotActive, StorageFailure
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, RecordSource
from attendance_engine.models.attendance_session import AttendanceSession, SessionStatus
from attendance_engine.services.qr_service import QRPayloadResolver
from attendance_engine.services.session_service import SessionManager
from attendance_engine.services.stats_publisher import StatsPublisher
from attendance_engine.services.stats_service import StatsAggregator
from attendance_engine.utils.validators import Validator

logger = logging.getLogger(__name__)
audit_log = logging.getLogger('attendance_engine.audit')

STATUS_VALUES = [status.value for status in AttendanceStatus]

# Losing an insert race turns into a duplicate on the second pass
MAX_MARK_PASSES = 2

@dataclass
class MarkResult:
    """Outcome of one scan."""
    student_id: str
    record: AttendanceRecord
    marked_count: int
    newly_marked: bool

    def to_dict(self) -> Dict:
        return {
            'student_id': self.student_id,
            'attendance': self.record.to_dict(),
            'marked_count': self.marked_count,
            'newly_marked': self.newly_marked
        }

class MarkingService:
    """Turns scans into at most one record per (session, student).

    Repeated scans are collapsed on the storage key, not on the scan event:
    the unique constraint on (session_id, student_id) is what makes two
    simultaneous inserts impossible.
    """

    @staticmethod
    def _first_scan_status(session: AttendanceSession, now: datetime) -> AttendanceStatus:
        threshold = current_app.config.get('LATE_THRESHOLD_MINUTES')
        if threshold is not None and now - session.start_time > timedelta(minutes=threshold):
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT

    @staticmethod
    def _find_record(session_id: int, student_id: str) -> Optional[AttendanceRecord]:
        return db.session.execute(
            db.select(AttendanceRecord).where(
                AttendanceRecord.session_id == session_id,
                AttendanceRecord.student_id == student_id
            )
        ).scalar_one_or_none()

    @staticmethod
    def _session_still_active(session_id: int) -> bool:
        status = db.session.execute(
            db.select(AttendanceSession.status).where(AttendanceSession.id == session_id)
        ).scalar_one_or_none()
        return status == SessionStatus.ACTIVE

    @staticmethod
    def _mark_once(session_id: int, payload: str, now: datetime):
        session = SessionManager.lock_session(session_id, shared=True)
        if session is None or not session.is_active:
            raise SessionNotActive(session_id=session_id)

        student_id = QRPayloadResolver.resolve(payload, session.class_id)

        record = MarkingService._find_record(session_id, student_id)
        newly_marked = record is None
        if newly_marked:
            record = AttendanceRecord(
                session_id=session_id,
                student_id=student_id,
                status=MarkingService._first_scan_status(session, now),
                marked_at=now,
                source=RecordSource.QR
            )
            db.session.add(record)
        else:
            # Duplicate scan: status untouched, marked_at refreshed for "last seen"
            record.marked_at = now
        db.session.flush()

        # The write above holds the write lock, so a completion that committed
        # after the status check is visible here and cannot commit later
        if not MarkingService._session_still_active(session_id):
            raise SessionNotActive(session_id=session_id)

        db.session.commit()
        return student_id, record, newly_marked

    @staticmethod
    def mark(session_id: int, payload: str, now: datetime = None) -> MarkResult:
        """Mark: resolve a scanned payload and upsert its attendance record."""
        now = now or datetime.utcnow()

        for attempt in range(1, MAX_MARK_PASSES + 1):
            try:
                student_id, record, newly_marked = MarkingService._mark_once(session_id, payload, now)
                break
            except IntegrityError:
                # A concurrent scan of the same student committed first
                db.session.rollback()
                if attempt == MAX_MARK_PASSES:
                    raise StorageFailure(session_id=session_id)
                logger.debug("Insert race on session %s, retrying as duplicate", session_id)
            except AttendanceError:
                db.session.rollback()
                raise
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error("Mark failed for session %s: %s", session_id, e)
                raise StorageFailure(session_id=session_id)

        marked_count = StatsAggregator.count_records(session_id)

        if newly_marked:
            logger.info("Marked %s %s in session %s", student_id, record.status.value, session_id)
            StatsPublisher.publish(session_id, 'marked', StatsAggregator.get_stats(session_id))

        return MarkResult(
            student_id=student_id,
            record=record,
            marked_count=marked_count,
            newly_marked=newly_marked
        )

    @staticmethod
    def update_status(attendance_id: int, status: str, note: str = None, updated_by: str = None) -> AttendanceRecord:
        """UpdateStatus: manual override, allowed after completion too."""
        new_status = AttendanceStatus(Validator.validate_status(status, STATUS_VALUES))
        note = Validator.validate_note(note)

        record = db.session.get(AttendanceRecord, attendance_id)
        if record is None:
            raise RecordNotFound(attendance_id=attendance_id)

        old_status = record.status
        record.status = new_status
        if note is not None:
            # A blank note clears the existing one
            record.note = note or None
        record.source = RecordSource.MANUAL
        record.marked_at = datetime.utcnow()

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Status update failed for record %s: %s", attendance_id, e)
            raise StorageFailure(attendance_id=attendance_id)

        audit_log.info(
            "attendance_status_updated record=%s session=%s %s->%s by=%s",
            record.id, record.session_id, old_status.value, new_status.value, updated_by
        )
        StatsPublisher.publish(record.session_id, 'status_updated', StatsAggregator.get_stats(record.session_id))
        return record
