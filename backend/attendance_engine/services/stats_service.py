# backend/attendance_engine/services/stats_service.py
"""Session stats for live dashboards."""
from typing import Dict
from attendance_engine import db
from attendance_engine.exceptions import SessionNotFound
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, MARKED_STATUSES
from attendance_engine.models.attendance_session import AttendanceSession
from attendance_engine.services.directory_service import EnrollmentDirectory
from attendance_engine.utils.decorators import storage_guarded

class StatsAggregator:
    """Cheap, lock-free counts for 2-second polling."""

    @staticmethod
    @storage_guarded
    def count_records(session_id: int) -> int:
        """Distinct records of a session, any status."""
        return db.session.execute(
            db.select(db.func.count(AttendanceRecord.id))
            .where(AttendanceRecord.session_id == session_id)
        ).scalar_one()

    @staticmethod
    def status_counts(session_id: int) -> Dict[str, int]:
        """Per-status record counts in one aggregate query."""
        columns = [
            db.func.coalesce(
                db.func.sum(db.case((AttendanceRecord.status == status, 1), else_=0)), 0
            ).label(status.value)
            for status in AttendanceStatus
        ]
        row = db.session.execute(
            db.select(*columns).where(AttendanceRecord.session_id == session_id)
        ).one()
        return {status.value: int(row._mapping[status.value]) for status in AttendanceStatus}

    @staticmethod
    @storage_guarded
    def stats_for(session: AttendanceSession) -> Dict:
        """Stats for an already loaded session."""
        total_enrolled = EnrollmentDirectory.count_enrolled(session.class_id)
        counts = StatsAggregator.status_counts(session.id)

        total_marked = sum(counts[status.value] for status in MARKED_STATUSES)
        # Records of students dropped from the class must not push progress past 100%
        total_marked = min(total_marked, total_enrolled)

        return {
            'session_id': session.id,
            'class_id': session.class_id,
            'session_status': session.status.value,
            'total_enrolled': total_enrolled,
            'total_marked': total_marked,
            'remaining': max(total_enrolled - total_marked, 0),
            **counts
        }

    @staticmethod
    @storage_guarded
    def get_stats(session_id: int) -> Dict:
        """GetStats: enrollment, marked and per-status counts."""
        session = db.session.get(AttendanceSession, session_id)
        if session is None:
            raise SessionNotFound(session_id=session_id)
        return StatsAggregator.stats_for(session)
