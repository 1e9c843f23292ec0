"""Base configuration shared by every environment."""
import os
from datetime import timedelta

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration (tokens are issued by the student information system)
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_ALGORITHM = 'HS256'
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]
    
    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    MARK_RATE_LIMIT = os.environ.get('MARK_RATE_LIMIT') or '10 per second'
    
    # QR payloads
    QR_SECRET_KEY = os.environ.get('QR_SECRET_KEY') or 'qr-secret-key-change-in-production'
    QR_KEY_SALT = b'attendance-engine-qr'
    QR_PAYLOAD_MAX_AGE_SECONDS = int(os.environ.get('QR_PAYLOAD_MAX_AGE_SECONDS', 35))
    
    # Marking
    LATE_THRESHOLD_MINUTES = None  # None keeps every first scan as present
    
    # Completion
    COMPLETION_MAX_ATTEMPTS = 3
    COMPLETION_TIMEOUT_SECONDS = 10
    
    # Reset/Clear (Werkzeug password hash of the operator secret)
    CLEAR_CREDENTIAL_HASH = os.environ.get('CLEAR_CREDENTIAL_HASH')
    
    # Live stats push channel (optional)
    REDIS_URL = os.environ.get('REDIS_URL') or None
    STATS_CHANNEL_PREFIX = 'attendance:session:'
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
