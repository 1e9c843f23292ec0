"""Testing configuration."""
from datetime import timedelta

from werkzeug.security import generate_password_hash

from .base import Config

TEST_CLEAR_CREDENTIAL = 'test-clear-credential'

class TestingConfig(Config):
    """Testing configuration class."""
    
    # Basic Flask config
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    
    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    
    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    
    QR_SECRET_KEY = 'test-qr-secret'
    
    # Fast retries for completion tests
    COMPLETION_MAX_ATTEMPTS = 3
    COMPLETION_TIMEOUT_SECONDS = 2
    
    CLEAR_CREDENTIAL_HASH = generate_password_hash(TEST_CLEAR_CREDENTIAL)
    
    # Disable the push channel in testing
    REDIS_URL = None
    
    # Logging
    LOG_LEVEL = 'WARNING'
