"""
Amenity Scheduler - Reservation Scheduling & Availability Engine
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import database functions
from database import close_db, init_db, get_db, seed_items

from models.errors import SchedulerError
from models.policy import init_policy
from utils.api_response import api_error
from utils.messages import get_message


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

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate()

    # Build the scheduling policy from config
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
    """Attach app-wide services."""
    init_policy(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.api.routes import api_bp
    from blueprints.scheduler import scheduler_bp

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(scheduler_bp, url_prefix='/api')


def register_error_handlers(app):
    """Register JSON error handlers."""

    def _rollback():
        db = g.get('db')
        if db is not None and db.in_transaction:
            db.rollback()

    @app.errorhandler(SchedulerError)
    def scheduler_error(error):
        """Handle model-layer errors (validation, state, not found, store)."""
        data = error.to_dict()
        message = data.pop('error')
        return api_error(message, error.status_code, **data)

    @app.errorhandler(sqlite3.Error)
    def database_error(error):
        """Handle database errors raised outside a write transaction."""
        _rollback()
        app.logger.error('Database error: %s', error, exc_info=True)
        return api_error(get_message('store_unavailable'), 503, error_type='StoreUnavailable')

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(get_message('not_found'), 404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error(get_message('method_not_allowed'), 405)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        _rollback()
        original = getattr(error, 'original_exception', None)
        if original is not None and not isinstance(original, HTTPException):
            app.logger.error('Unhandled error: %s', original, exc_info=original)
        return api_error(get_message('internal_error'), 500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('seed-items')
    def seed_items_command():
        """Add the default catalog items that are missing."""
        with app.app_context():
            db = get_db()
            added = seed_items(db)
            db.commit()
        click.echo(f'{added} item(s) added to the catalog')

    @app.cli.command('add-staff')
    @click.argument('name')
    def add_staff_command(name):
        """Add a staff member."""
        from models.staff import create_staff

        with app.app_context():
            try:
                staff_id = create_staff(name)
                click.echo(f'Staff member added successfully! ID: {staff_id}')
            except SchedulerError as e:
                click.echo(f'Error adding staff member: {e.message}', err=True)


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/scheduler.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        # Model modules log through their own module loggers
        for name in ('models', 'database'):
            logging.getLogger(name).addHandler(file_handler)
            logging.getLogger(name).setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Amenity Scheduler startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger('models').setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
