"""Reset/clear workflow tests."""
import pytest
from attendance_engine import db
from attendance_engine.exceptions import InvalidCredential, SessionNotActive, SessionNotFound
from attendance_engine.models.attendance import AttendanceRecord
from attendance_engine.models.attendance_session import AttendanceSession
from attendance_engine.services.clear_service import ClearService
from attendance_engine.services.marking_service import MarkingService
from attendance_engine.services.session_service import SessionManager
from config.testing import TEST_CLEAR_CREDENTIAL

@pytest.fixture
def marked_session(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    for student_id in ('A', 'B', 'C'):
        MarkingService.mark(session.id, qr(student_id))
    return session

def test_wrong_credential_changes_nothing(marked_session):
    with pytest.raises(InvalidCredential):
        ClearService.clear_session(marked_session.id, 'not-the-secret')
    
    assert AttendanceRecord.query.filter_by(session_id=marked_session.id).count() == 3
    assert db.session.get(AttendanceSession, marked_session.id) is not None

@pytest.mark.parametrize('credential', [None, '', 42])
def test_missing_credential_is_rejected(marked_session, credential):
    with pytest.raises(InvalidCredential):
        ClearService.clear_session(marked_session.id, credential)

def test_clear_session_removes_session_and_records(marked_session, enrolled_class, qr):
    session_id = marked_session.id
    
    deleted = ClearService.clear_session(session_id, TEST_CLEAR_CREDENTIAL, operator='lecturer-1')
    
    assert deleted == 3
    assert AttendanceRecord.query.filter_by(session_id=session_id).count() == 0
    assert db.session.get(AttendanceSession, session_id) is None
    assert SessionManager.get_active_session(enrolled_class) is None
    
    fresh = SessionManager.start_session(enrolled_class)
    assert fresh.id != session_id
    assert MarkingService.mark(fresh.id, qr('A')).marked_count == 1

def test_stale_session_id_stays_dead_after_clear(marked_session, enrolled_class, qr):
    stale_id = marked_session.id
    ClearService.clear_session(stale_id, TEST_CLEAR_CREDENTIAL)
    fresh = SessionManager.start_session(enrolled_class)

    assert fresh.id != stale_id
    with pytest.raises(SessionNotActive):
        MarkingService.mark(stale_id, qr('B'))
    assert AttendanceRecord.query.filter_by(session_id=fresh.id).count() == 0

def test_clear_completed_session(enrolled_class, qr):
    session = SessionManager.start_session(enrolled_class)
    MarkingService.mark(session.id, qr('A'))
    SessionManager.end_session(session.id)
    
    assert ClearService.clear_session(session.id, TEST_CLEAR_CREDENTIAL) == 3

def test_clear_unknown_session(app):
    with pytest.raises(SessionNotFound):
        ClearService.clear_session(999, TEST_CLEAR_CREDENTIAL)

def test_no_configured_hash_fails_closed(app, marked_session):
    app.config['CLEAR_CREDENTIAL_HASH'] = None
    
    with pytest.raises(InvalidCredential):
        ClearService.clear_session(marked_session.id, TEST_CLEAR_CREDENTIAL)
    
    assert AttendanceRecord.query.count() == 3

def test_clear_all_keeps_sessions(marked_session, enrolled_class):
    other = SessionManager.start_session('EMPTY1')
    
    deleted = ClearService.clear_all(TEST_CLEAR_CREDENTIAL, operator='admin-1')
    
    assert deleted == 3
    assert AttendanceRecord.query.count() == 0
    assert AttendanceSession.query.count() == 2
    assert SessionManager.get_active_session(enrolled_class).id == marked_session.id
    assert SessionManager.get_active_session('EMPTY1').id == other.id

def test_clear_all_wrong_credential(marked_session):
    with pytest.raises(InvalidCredential):
        ClearService.clear_all('guess')
    
    assert AttendanceRecord.query.count() == 3
