# File: backend/attendance_engine/api/sessions.py
"""Session lifecycle and dashboard endpoints."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from attendance_engine.services.clear_service import ClearService
from attendance_engine.services.completion_service import CompletionWorkflow
from attendance_engine.services.session_service import SessionManager
from attendance_engine.services.stats_service import StatsAggregator
from attendance_engine.utils.decorators import lecturer_required
from attendance_engine.utils.helpers import success_response
from attendance_engine.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

@sessions_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Session service is running')

@sessions_bp.route('/start', methods=['POST'])
@lecturer_required
def start_session():
    """Start an attendance session for a class."""
    data = Validator.validate_required_fields(request.get_json(silent=True), ['class_id'])
    class_id = Validator.validate_class_id(data['class_id'])
    
    session = SessionManager.start_session(class_id, started_by=get_jwt_identity())
    
    return success_response(
        data={'session': session.to_dict()},
        message='Attendance session started successfully',
        status_code=201
    )

@sessions_bp.route('/<int:session_id>/end', methods=['POST'])
@lecturer_required
def end_session(session_id):
    """Complete a session and auto-mark non-respondents absent."""
    result = SessionManager.end_session(session_id, ended_by=get_jwt_identity())
    
    return success_response(
        data={
            'session': result['session'].to_dict(),
            'auto_absent_count': result['auto_absent_count'],
            'stats': result['stats'],
            'roster': result['roster']
        },
        message='Attendance session completed successfully'
    )

@sessions_bp.route('/active', methods=['GET'])
@jwt_required()
def get_active_session():
    """Get the active session of a class, if any."""
    class_id = Validator.validate_class_id(request.args.get('class_id'))
    
    session = SessionManager.get_active_session(class_id)
    if session is None:
        return success_response(
            data={'session': None, 'marked_count': 0},
            message='No active session found'
        )
    
    return success_response(
        data={
            'session': session.to_dict(),
            'marked_count': StatsAggregator.count_records(session.id)
        }
    )

@sessions_bp.route('/<int:session_id>/stats', methods=['GET'])
@jwt_required()
def get_session_stats(session_id):
    """Live counts for dashboards polling every few seconds."""
    return success_response(data={'stats': StatsAggregator.get_stats(session_id)})

@sessions_bp.route('/<int:session_id>/roster', methods=['GET'])
@jwt_required()
def get_session_roster(session_id):
    """Full attendance list of a session."""
    return success_response(data={'roster': CompletionWorkflow.get_roster(session_id)})

@sessions_bp.route('/<int:session_id>/clear', methods=['POST'])
@lecturer_required
def clear_session(session_id):
    """Delete a session and its records (credential protected)."""
    data = request.get_json(silent=True) or {}
    
    deleted = ClearService.clear_session(
        session_id,
        data.get('credential'),
        operator=get_jwt_identity()
    )
    
    return success_response(
        data={'deleted_count': deleted},
        message='Session cleared. Start a new session to scan again.'
    )
