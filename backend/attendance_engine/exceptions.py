"""Domain errors raised by the attendance session engine."""


class AttendanceError(Exception):
    """Base class for every engine error reported to callers."""

    status_code = 400
    halt_scanning = False
    default_message = 'Attendance error'

    def __init__(self, message: str = None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    @property
    def error_code(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        """Convert to the JSON error envelope."""
        payload = {
            'error': True,
            'message': self.message,
            'error_code': self.error_code,
            'halt_scanning': self.halt_scanning,
            'status_code': self.status_code
        }
        if self.details:
            payload['data'] = self.details
        return payload


class SessionAlreadyActive(AttendanceError):
    status_code = 409
    default_message = 'An active session already exists for this class'


class SessionNotFound(AttendanceError):
    status_code = 404
    default_message = 'Session not found'


class SessionNotActive(AttendanceError):
    """Scanning against this session must stop."""
    status_code = 409
    halt_scanning = True
    default_message = 'Session is not active. Stop scanning and start a new session.'


class SessionAlreadyCompleted(AttendanceError):
    status_code = 409
    default_message = 'Session is already completed'


class InvalidPayload(AttendanceError):
    status_code = 400
    default_message = 'Invalid QR code'


class StudentNotEnrolled(AttendanceError):
    status_code = 422
    default_message = 'Student is not enrolled in this class'


class RecordNotFound(AttendanceError):
    status_code = 404
    default_message = 'Attendance record not found'


class InvalidCredential(AttendanceError):
    status_code = 401
    default_message = 'Invalid credential'


class StorageFailure(AttendanceError):
    """Transient storage error, safe to retry."""
    status_code = 503
    default_message = 'Storage temporarily unavailable, please retry'
