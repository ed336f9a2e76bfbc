"""Campus Check-in - Application Factory."""
import logging
import os
from datetime import timedelta
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

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

    # Check-in collaborators
    setup_services(app)

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
            'success': True,
            'status': 'healthy',
            'service': 'Campus Check-in',
            'version': '1.0.0'
        })

    return app

def setup_services(app: Flask) -> None:
    """Build the session registry and attendance recorder for this app."""
    from campus_checkin.services.session_registry import SessionRegistry, DemoSessionCache
    from campus_checkin.services.attendance_recorder import AttendanceRecorder

    demo_cache = DemoSessionCache(
        idle_grace=timedelta(seconds=app.config['DEMO_SESSION_IDLE_GRACE_SECONDS'])
    )
    registry = SessionRegistry(
        demo_cache=demo_cache,
        sweep_interval=timedelta(seconds=app.config['DEMO_SESSION_SWEEP_INTERVAL_SECONDS']),
        logger=app.logger
    )
    app.extensions['session_registry'] = registry
    app.extensions['attendance_recorder'] = AttendanceRecorder(registry, logger=app.logger)

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from campus_checkin.api.auth import auth_bp
    from campus_checkin.api.courses import courses_bp
    from campus_checkin.api.sessions import sessions_bp
    from campus_checkin.api.attendance import attendance_bp
    from campus_checkin.api.qr import qr_bp
    from campus_checkin.api.student import student_bp

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Professor Management
    app.register_blueprint(courses_bp, url_prefix='/api/courses')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')

    # Core Features
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(qr_bp, url_prefix='/api/qr')
    app.register_blueprint(student_bp, url_prefix='/api/student')

    # Swagger UI
    from campus_checkin.utils.swagger import (
        API_URL, SWAGGER_URL, generate_swagger_spec, get_swagger_blueprint
    )

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    app.register_blueprint(get_swagger_blueprint(), url_prefix=SWAGGER_URL)

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from campus_checkin.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(400)
    def bad_request(error):
        return handle_error(error, 400)

    @app.errorhandler(401)
    def unauthorized(error):
        return handle_error(error, 401)

    @app.errorhandler(403)
    def forbidden(error):
        return handle_error(error, 403)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(429)
    def rate_limited(error):
        return handle_error(error, 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error("Internal server error", 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    app.logger.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO')))

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.info('Campus Check-in startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from campus_checkin.models import (
            User, UserRole,
            Course, CourseEnrollment,
            ClassSession, AttendanceRecord, AttendanceStatus
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

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo data."""
        from campus_checkin.services.seed_service import SeedService

        try:
            session = SeedService.seed_all()
            click.echo(f'Database seeded successfully! Live session: {session.id}')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error seeding database: {str(e)}')

    @app.cli.command('create-professor')
    def create_professor():
        """Create professor user."""
        email = click.prompt('Professor email')
        name = click.prompt('Professor name')
        password = click.prompt('Password', hide_input=True)

        from campus_checkin.models.user import User, UserRole

        professor = User(
            email=email.lower().strip(),
            name=name,
            role=UserRole.PROFESSOR
        )
        professor.set_password(password)

        try:
            db.session.add(professor)
            db.session.commit()
            click.echo(f'Professor user created: {email}')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error creating professor: {str(e)}')

    @app.cli.command('sweep-demo-sessions')
    def sweep_demo_sessions():
        """Drop expired demo sessions from the in-memory cache."""
        registry = app.extensions['session_registry']
        removed = registry.sweep()
        click.echo(f'Removed {removed} expired demo sessions.')
