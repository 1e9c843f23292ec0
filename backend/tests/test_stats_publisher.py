"""Live stats push channel tests."""
import json
import redis
from attendance_engine.services.marking_service import MarkingService
from attendance_engine.services.session_service import SessionManager
from attendance_engine.services.stats_publisher import StatsPublisher

class FakeRedis:
    """Records published messages instead of talking to a server."""
    
    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []
    
    def publish(self, channel, message):
        if self.fail:
            raise redis.ConnectionError('connection refused')
        self.messages.append((channel, json.loads(message)))
        return 1

def _install(app, client):
    app.config['REDIS_URL'] = 'redis://localhost:6379/0'
    app.extensions['stats_redis'] = client

def test_publish_is_off_without_redis_url(app):
    assert StatsPublisher.publish(1, 'marked', {}) is False

def test_marks_publish_committed_stats(app, enrolled_class, qr):
    fake = FakeRedis()
    _install(app, fake)
    session = SessionManager.start_session(enrolled_class)
    
    MarkingService.mark(session.id, qr('A'))
    
    channel, message = fake.messages[-1]
    assert channel == f'attendance:session:{session.id}'
    assert message['session_id'] == session.id
    assert message['stats']['total_marked'] == 1

def test_completion_publishes_final_stats(app, enrolled_class, qr):
    fake = FakeRedis()
    _install(app, fake)
    session = SessionManager.start_session(enrolled_class)
    
    SessionManager.end_session(session.id)
    
    assert fake.messages[-1][1]['stats']['session_status'] == 'completed'

def test_redis_failure_does_not_break_marking(app, enrolled_class, qr):
    _install(app, FakeRedis(fail=True))
    session = SessionManager.start_session(enrolled_class)
    
    assert StatsPublisher.publish(session.id, 'marked', {}) is False
    assert MarkingService.mark(session.id, qr('A')).marked_count == 1
