# File: backend/attendance_engine/api/attendance.py
"""Scanning and attendance record endpoints."""
from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity
from attendance_engine import limiter
from attendance_engine.services.clear_service import ClearService
from attendance_engine.services.marking_service import MarkingService
from attendance_engine.utils.decorators import admin_required, lecturer_required
from attendance_engine.utils.helpers import success_response
from attendance_engine.utils.validators import Validator, ValidationError

attendance_bp = Blueprint('attendance', __name__)

def _mark_rate_limit() -> str:
    return current_app.config['MARK_RATE_LIMIT']

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/mark', methods=['POST'])
@lecturer_required
@limiter.limit(_mark_rate_limit)
def mark_attendance():
    """Mark attendance from one decoded QR payload.

    Error responses carry ``halt_scanning``; the scanner keeps going on
    payload and enrollment errors and stops when the session is over.
    """
    data = Validator.validate_required_fields(request.get_json(silent=True), ['session_id', 'payload'])
    try:
        session_id = int(data['session_id'])
    except (TypeError, ValueError):
        raise ValidationError("Session ID must be an integer")
    
    result = MarkingService.mark(session_id, data['payload'])
    
    if result.newly_marked:
        message = f"Attendance marked as {result.record.status.value.upper()}"
    else:
        message = 'Student already marked in this session'
    
    payload = result.to_dict()
    payload['feedback'] = 'marked' if result.newly_marked else 'duplicate'
    return success_response(data=payload, message=message)

@attendance_bp.route('/<int:attendance_id>', methods=['PATCH'])
@lecturer_required
def update_attendance_status(attendance_id):
    """Manually change a record's status (e.g. absent to excused)."""
    data = Validator.validate_required_fields(request.get_json(silent=True), ['status'])
    
    record = MarkingService.update_status(
        attendance_id,
        data['status'],
        data.get('note'),
        updated_by=get_jwt_identity()
    )
    
    return success_response(
        data={'attendance': record.to_dict()},
        message='Attendance status updated successfully'
    )

@attendance_bp.route('/clear-all', methods=['POST'])
@admin_required
def clear_all_attendance():
    """Delete every attendance record (last-resort recovery)."""
    data = request.get_json(silent=True) or {}
    
    deleted = ClearService.clear_all(data.get('credential'), operator=get_jwt_identity())
    
    return success_response(
        data={'deleted_count': deleted},
        message='All attendance records have been cleared'
    )
