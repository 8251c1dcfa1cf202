"""
ResourceHub - University Resource Reservation System
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db, get_db

from utils.api_response import api_error
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_class = config.get(config_name, config['default'])
    if config_name == 'production':
        config_class.validate()

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    from blueprints.auth.routes import auth_bp
    from blueprints.api import api_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/')
    def index():
        """Service banner."""
        return {
            'app': app.config.get('APP_NAME', 'ResourceHub'),
            'version': app.config.get('APP_VERSION', '1.0.0'),
            'health': '/api/health'
        }


def register_error_handlers(app):
    """Register JSON error handlers."""

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 errors (including CSRF failures)."""
        description = getattr(error, 'description', None)
        return api_error(description or MESSAGES['data_required'], status=400)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        return api_error(MESSAGES['permission_denied'], status=403)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error('Não encontrado', status=404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error('Método não permitido', status=405)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()

        original = getattr(error, 'original_exception', None)
        if original is not None and not isinstance(original, HTTPException):
            logger.error(f"Unhandled error: {original}", exc_info=original)

        return api_error(MESSAGES['internal_error'], status=500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('email')
    @click.argument('name')
    @click.option('--role', type=click.Choice(['student', 'faculty', 'admin']),
                  default='student', show_default=True)
    @click.option('--department', default='')
    @click.password_option()
    def create_user_command(email, name, role, department, password):
        """Create a new user."""
        from models.user import create_user
        from utils.validators import validate_email, validate_password

        if not validate_email(email):
            raise click.BadParameter('Invalid email address', param_hint='email')

        is_valid, error = validate_password(password)
        if not is_valid:
            raise click.BadParameter(error, param_hint='password')

        with app.app_context():
            try:
                user_id = create_user(
                    email=email,
                    password=password,
                    name=name,
                    role=role,
                    department=department
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except Exception as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Insert demo resources, a demo package and a faculty user."""
        from database.seed import seed_demo_data

        with app.app_context():
            db = get_db()
            seed_demo_data(db)
            db.commit()
        click.echo('Demo data inserted.')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    root_logger = logging.getLogger()

    if not app.debug and not app.testing:
        # Production logging
        log_dir = app.config.get('LOG_DIR', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(os.path.join(log_dir, 'resourcehub.log'))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)

        # Module loggers (models, blueprints) propagate to the root logger
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.INFO)
        app.logger.setLevel(logging.INFO)
        app.logger.info('ResourceHub startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        if not root_logger.handlers:
            logging.basicConfig(
                level=logging.DEBUG,
                format='%(asctime)s %(levelname)s %(name)s: %(message)s'
            )


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
