"""Production configuration."""
import os

from .base import Config

class ProductionConfig(Config):
    """Production configuration class."""
    
    # Basic Flask config
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY')  # Must be set in production
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    
    # Secrets must come from the environment
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    QR_SECRET_KEY = os.getenv('QR_SECRET_KEY')
    CLEAR_CREDENTIAL_HASH = os.getenv('CLEAR_CREDENTIAL_HASH')
    
    # Redis
    REDIS_URL = os.getenv('REDIS_URL')
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = os.getenv('LOG_FILE', '/app/logs/app.log')
