"""Validation utilities for request payloads."""
import re
from typing import Dict, List, Any

from attendance_engine.exceptions import AttendanceError

CLASS_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.\-]{0,49}$')

class ValidationError(AttendanceError):
    """Custom validation error."""
    status_code = 400
    default_message = 'Validation failed'

class Validator:
    """Validation helper class."""
    
    @staticmethod
    def validate_class_id(class_id: str) -> str:
        """Validate and normalize a class code."""
        if not isinstance(class_id, str) or not CLASS_ID_PATTERN.match(class_id.strip()):
            raise ValidationError("Class ID is required and may only contain letters, digits, '.', '_' and '-'")
        return class_id.strip()
    
    @staticmethod
    def validate_status(status: Any, allowed: List[str]) -> str:
        """Validate an attendance status against the allowed values."""
        if not isinstance(status, str) or status.strip().lower() not in allowed:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(allowed)}")
        return status.strip().lower()
    
    @staticmethod
    def validate_note(note: Any, max_length: int = 500):
        """Validate an optional free-text note.

        None means "not given"; a blank string comes back as '' so callers
        can tell "clear the note" apart from "leave it alone".
        """
        if note is None:
            return None
        if not isinstance(note, str):
            raise ValidationError("Note must be text")
        if len(note) > max_length:
            raise ValidationError(f"Note is too long (max {max_length} characters)")
        return note.strip()
    
    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        
        missing = [field for field in required_fields if field not in data or data[field] in (None, '')]
        if missing:
            raise ValidationError(f"Missing required field: {', '.join(missing)}")
        
        return data
