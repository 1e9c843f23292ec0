# backend/attendance_engine/utils/decorators.py
"""Custom decorators for authorization and storage error handling."""
import logging
from functools import wraps
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from sqlalchemy.exc import SQLAlchemyError
from attendance_engine import db
from attendance_engine.exceptions import StorageFailure
from attendance_engine.utils.helpers import error_response

logger = logging.getLogger(__name__)

LECTURER = 'lecturer'
ADMIN = 'admin'

def current_role() -> str:
    """Role claim of the verified request token."""
    return get_jwt().get('role')

def roles_required(*roles):
    """Decorator to require one of the given role claims."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            
            if current_role() not in roles:
                return error_response(f"{' or '.join(role.title() for role in roles)} access required", 403)
            
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def lecturer_required(f):
    """Decorator to require lecturer role or higher."""
    return roles_required(LECTURER, ADMIN)(f)

def admin_required(f):
    """Decorator to require admin role."""
    return roles_required(ADMIN)(f)

def storage_guarded(f):
    """Decorator turning storage errors on read paths into StorageFailure."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("%s failed: %s", f.__qualname__, e)
            raise StorageFailure()
    return decorated_function
