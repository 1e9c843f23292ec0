"""Shared fixtures for engine tests."""
import pytest
from flask_jwt_extended import create_access_token
from attendance_engine import create_app, db
from attendance_engine.models.student import Student, Enrollment
from attendance_engine.services.qr_service import QRPayloadResolver

CLASS_ID = 'CS101'

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def enrolled_class(app):
    """Class CS101 with three enrolled students A, B and C."""
    students = [
        Student(student_id='A', first_name='Ada', last_name='Lovelace', index_no='CS/003'),
        Student(student_id='B', first_name='Brian', last_name='Kernighan', index_no='CS/001'),
        Student(student_id='C', first_name='Claude', last_name='Shannon', index_no='CS/002'),
        Student(student_id='X', first_name='Xavier', last_name='Outsider', index_no='EE/001'),
    ]
    db.session.add_all(students)
    db.session.add_all([Enrollment(class_id=CLASS_ID, student_id=sid) for sid in ('A', 'B', 'C')])
    db.session.add(Enrollment(class_id='EE200', student_id='X'))
    db.session.commit()
    return CLASS_ID

@pytest.fixture
def qr(app):
    """Build a fresh QR payload for a student."""
    def _qr(student_id, issued_at=None):
        return QRPayloadResolver.issue(student_id, issued_at=issued_at)
    return _qr

def _token(identity, role):
    return create_access_token(identity=identity, additional_claims={'role': role})

@pytest.fixture
def lecturer_headers(app):
    return {'Authorization': f"Bearer {_token('lecturer-1', 'lecturer')}"}

@pytest.fixture
def admin_headers(app):
    return {'Authorization': f"Bearer {_token('admin-1', 'admin')}"}

@pytest.fixture
def student_headers(app):
    return {'Authorization': f"Bearer {_token('A', 'student')}"}
