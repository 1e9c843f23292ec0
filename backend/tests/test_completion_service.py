"""Completion workflow tests."""
import pytest
from sqlalchemy.exc import OperationalError
from attendance_engine import db
from attendance_engine.exceptions import SessionAlreadyCompleted, SessionNotActive, StorageFailure
from attendance_engine.models.attendance import AttendanceRecord, AttendanceStatus, RecordSource
from attendance_engine.models.attendance_session import AttendanceSession, SessionStatus
from attendance_engine.services.completion_service import CompletionWorkflow
from attendance_engine.services.marking_service import MarkingService
from attendance_engine.services.session_service import SessionManager

def _roster_statuses(roster):
    return {row['student_id']: row['status'] for row in roster}

def _storage_error():
    return OperationalError('UPDATE attendance_sessions', {}, Exception('database is locked'))

def test_three_student_scenario(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    
    assert MarkingService.mark(session.id, qr('A')).marked_count == 1
    assert MarkingService.mark(session.id, qr('A')).marked_count == 1
    assert MarkingService.mark(session.id, qr('B')).marked_count == 2
    
    result = SessionManager.end_session(session.id)
    
    assert result['auto_absent_count'] == 1
    assert _roster_statuses(result['roster']) == {'A': 'present', 'B': 'present', 'C': 'absent'}
    assert result['session'].status == SessionStatus.COMPLETED
    assert result['session'].end_time is not None
    assert result['stats']['total_marked'] == 2

def test_roster_covers_exactly_enrollment(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    MarkingService.mark(session.id, qr('C'))
    
    result = CompletionWorkflow.complete(session.id)
    
    assert {row['student_id'] for row in result['roster']} == {'A', 'B', 'C'}
    auto = AttendanceRecord.query.filter_by(session_id=session.id, source=RecordSource.AUTO).all()
    assert {record.student_id for record in auto} == {'A', 'B'}
    assert all(record.status == AttendanceStatus.ABSENT and record.note is None for record in auto)

def test_roster_joins_display_info_in_index_order(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    
    roster = SessionManager.end_session(session.id)['roster']
    
    assert [row['index_no'] for row in roster] == ['CS/001', 'CS/002', 'CS/003']
    assert roster[0]['name'] == 'Brian Kernighan'

def test_completing_empty_class(app):
    session = SessionManager.start_session('EMPTY1')
    
    result = SessionManager.end_session(session.id)
    
    assert result['auto_absent_count'] == 0
    assert result['roster'] == []

def test_reinvocation_changes_nothing(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    MarkingService.mark(session.id, qr('A'))
    first = SessionManager.end_session(session.id)
    end_time = first['session'].end_time
    
    with pytest.raises(SessionAlreadyCompleted):
        SessionManager.end_session(session.id)
    
    assert AttendanceRecord.query.filter_by(session_id=session.id).count() == 3
    assert db.session.get(AttendanceSession, session.id).end_time == end_time

def test_marks_after_completion_are_rejected(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    SessionManager.end_session(session.id)
    
    with pytest.raises(SessionNotActive):
        MarkingService.mark(session.id, qr('C'))
    
    record = AttendanceRecord.query.filter_by(session_id=session.id, student_id='C').one()
    assert record.status == AttendanceStatus.ABSENT

def test_failure_mid_completion_rolls_back(enrolled_class, qr, monkeypatch):
    session = SessionManager.start_session(enrolled_class)
    MarkingService.mark(session.id, qr('A'))
    
    original = AttendanceSession.transition_to
    
    def failing_transition(self, status):
        if status == SessionStatus.COMPLETED:
            # absents are already flushed at this point
            raise _storage_error()
        return original(self, status)
    
    monkeypatch.setattr(AttendanceSession, 'transition_to', failing_transition)
    
    with pytest.raises(StorageFailure):
        SessionManager.end_session(session.id)
    
    reloaded = db.session.get(AttendanceSession, session.id)
    assert reloaded.status == SessionStatus.ACTIVE
    assert reloaded.end_time is None
    assert AttendanceRecord.query.filter_by(session_id=session.id).count() == 1
    assert AttendanceRecord.query.filter_by(status=AttendanceStatus.ABSENT).count() == 0
    
    # Scanning still works against the untouched session
    assert MarkingService.mark(session.id, qr('B')).newly_marked is True

def test_transient_failure_is_retried(enrolled_class, qr, monkeypatch):
    session = SessionManager.start_session(enrolled_class)
    
    original = AttendanceSession.transition_to
    failures = {'left': 1}
    
    def flaky_transition(self, status):
        if status == SessionStatus.COMPLETED and failures['left']:
            failures['left'] -= 1
            raise _storage_error()
        return original(self, status)
    
    monkeypatch.setattr(AttendanceSession, 'transition_to', flaky_transition)
    
    result = SessionManager.end_session(session.id)
    
    assert failures['left'] == 0
    assert result['auto_absent_count'] == 3
    assert AttendanceRecord.query.filter_by(session_id=session.id).count() == 3

def test_get_roster_of_active_session(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    MarkingService.mark(session.id, qr('B'))
    
    roster = CompletionWorkflow.get_roster(session.id)
    
    assert _roster_statuses(roster) == {'B': 'present'}
