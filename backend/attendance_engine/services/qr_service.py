# backend/attendance_engine/services/qr_service.py
"""QR payload issuance and resolution service."""
import base64
import io
import json
import logging
import time
from functools import lru_cache
from typing import Optional

import qrcode
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from flask import current_app

from attendance_engine.exceptions import InvalidPayload, StudentNotEnrolled
from attendance_engine.services.directory_service import EnrollmentDirectory

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = 'attendance'

@lru_cache(maxsize=8)
def _fernet_for(secret: str, salt: bytes) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=100000,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(secret.encode())))

class QRPayloadResolver:
    """Maps scanned QR strings to student identities.

    A payload is a Fernet token wrapping ``{"sid": ..., "typ": "attendance"}``.
    Fernet carries the issue time, which bounds how long a screenshot of a
    student's code stays usable.
    """

    @staticmethod
    def _fernet() -> Fernet:
        return _fernet_for(current_app.config['QR_SECRET_KEY'], current_app.config['QR_KEY_SALT'])

    @staticmethod
    def issue(student_id: str, issued_at: Optional[float] = None) -> str:
        """Create the payload string shown in a student's QR code."""
        body = json.dumps({'sid': str(student_id), 'typ': PAYLOAD_TYPE}, separators=(',', ':'))
        issued_at = int(issued_at if issued_at is not None else time.time())
        return QRPayloadResolver._fernet().encrypt_at_time(body.encode(), issued_at).decode()

    @staticmethod
    def decode(payload: str, now: Optional[float] = None) -> str:
        """Parse a payload into the claimed student ID.

        Raises InvalidPayload for anything that is not a fresh payload issued
        by this engine.
        """
        if not isinstance(payload, str) or not payload.strip():
            raise InvalidPayload("Empty QR payload")

        token = payload.strip().encode()
        fernet = QRPayloadResolver._fernet()
        try:
            body = json.loads(fernet.decrypt(token))
        except (InvalidToken, ValueError):
            raise InvalidPayload("Invalid QR code format")

        if not isinstance(body, dict) or body.get('typ') != PAYLOAD_TYPE or not body.get('sid'):
            raise InvalidPayload("Invalid QR code: missing required fields")

        max_age = current_app.config.get('QR_PAYLOAD_MAX_AGE_SECONDS')
        if max_age:
            age = (now if now is not None else time.time()) - fernet.extract_timestamp(token)
            if age > max_age:
                raise InvalidPayload(f"QR code expired: older than {max_age} seconds")

        return str(body['sid'])

    @staticmethod
    def resolve(payload: str, class_id: str, now: Optional[float] = None) -> str:
        """Resolve a payload to an enrolled student of the class."""
        student_id = QRPayloadResolver.decode(payload, now=now)

        if not EnrollmentDirectory.is_enrolled(class_id, student_id):
            logger.info("Scan rejected: student %s not enrolled in %s", student_id, class_id)
            raise StudentNotEnrolled(student_id=student_id, class_id=class_id)

        return student_id

    @staticmethod
    def render_png_data_uri(payload: str) -> str:
        """Render a payload as a base64 PNG data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
