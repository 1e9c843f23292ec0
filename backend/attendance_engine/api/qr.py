# backend/attendance_engine/api/qr.py
"""QR Code API endpoints."""
from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from attendance_engine.services.directory_service import EnrollmentDirectory
from attendance_engine.services.qr_service import QRPayloadResolver
from attendance_engine.utils.decorators import ADMIN, LECTURER, current_role
from attendance_engine.utils.helpers import success_response, error_response

qr_bp = Blueprint('qr', __name__)

@qr_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='QR service is running')

@qr_bp.route('/students/<student_id>', methods=['GET'])
@jwt_required()
def student_qr(student_id):
    """Issue a fresh attendance QR code for a student.
    
    Students may only fetch their own code; clients refresh it before
    it expires.
    """
    if current_role() not in (LECTURER, ADMIN) and str(get_jwt_identity()) != student_id:
        return error_response("You can only view your own QR code", 403)
    
    if not EnrollmentDirectory.student_exists(student_id):
        return error_response("Student not found", 404)
    
    payload = QRPayloadResolver.issue(student_id)
    
    return success_response(
        data={
            'student_id': student_id,
            'payload': payload,
            'qr_image': QRPayloadResolver.render_png_data_uri(payload),
            'expires_in': current_app.config.get('QR_PAYLOAD_MAX_AGE_SECONDS')
        },
        message="QR code generated successfully"
    )
