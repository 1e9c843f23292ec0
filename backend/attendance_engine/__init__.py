# File: backend/attendance_engine/__init__.py
"""Attendance Session Engine - Application Factory."""
import logging
import os
import sqlite3
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy import event
from sqlalchemy.engine import Engine

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Attendance Session Engine',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendance_engine.api.sessions import sessions_bp
    from attendance_engine.api.attendance import attendance_bp
    from attendance_engine.api.qr import qr_bp

    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(qr_bp, url_prefix='/api/qr')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendance_engine.exceptions import AttendanceError
    from attendance_engine.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        if error.status_code >= 500:
            app.logger.error('%s: %s', error.error_code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error('Internal server error', 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'))
    logging.getLogger('attendance_engine').setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('attendance_engine').addHandler(file_handler)

        app.logger.setLevel(level)
        app.logger.info('Attendance Session Engine startup')

@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from attendance_engine.models import (
            AttendanceSession, AttendanceRecord, Student, Enrollment
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('import-enrollments')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--class-id', required=True, help='Class code the students are enrolled in')
    def import_enrollments(path, class_id):
        """Import students and enrollments from a CSV or Excel file."""
        from attendance_engine.exceptions import AttendanceError
        from attendance_engine.services.enrollment_import_service import EnrollmentImportService

        try:
            summary = EnrollmentImportService.import_file(path, class_id)
        except (ValueError, AttendanceError) as e:
            raise click.ClickException(str(e))

        click.echo(
            f"Imported {summary['rows']} rows into {class_id}: "
            f"{summary['students_created']} new students, "
            f"{summary['enrollments_created']} new enrollments, "
            f"{len(summary['errors'])} errors"
        )
        for error in summary['errors']:
            click.echo(f"  row {error['row']}: {error['error']}")

    @app.cli.command('hash-credential')
    def hash_credential():
        """Print a CLEAR_CREDENTIAL_HASH value for an operator secret."""
        from werkzeug.security import generate_password_hash

        secret = click.prompt('Operator secret', hide_input=True, confirmation_prompt=True)
        click.echo(generate_password_hash(secret))
