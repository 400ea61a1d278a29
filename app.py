"""
HotelDesk - Hotel Back Office
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, render_template, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf, wants_json

# Import database functions
from database import close_db, init_db

from utils.api_response import api_error
from utils.errors import HotelError


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
    config_class = config[config_name]
    if config_name == 'production':
        config_class.validate()
    app.config.from_object(config_class)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register context processors
    register_context_processors(app)

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
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.admin.routes import admin_bp
    from blueprints.hotel import hotel_bp
    from blueprints.api.routes import api_bp

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(hotel_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    # Set default route
    @app.route('/')
    def index():
        """Redirect to the dashboard."""
        from flask import redirect, url_for
        from flask_login import current_user

        if current_user.is_authenticated:
            return redirect(url_for('hotel.dashboard'))
        return redirect(url_for('auth.login'))


def register_error_handlers(app):
    """Register error handlers."""

    @app.errorhandler(HotelError)
    def hotel_error(error):
        """Domain errors become the standard JSON error envelope."""
        if error.status_code >= 500:
            app.logger.error(f'Unhandled domain error: {error.message}', exc_info=True)
        if not wants_json():
            templates = {403: 'errors/403.html', 404: 'errors/404.html'}
            if error.status_code in templates:
                return render_template(templates[error.status_code]), error.status_code
        return api_error(error.message, error.status_code, **error.details)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        if wants_json():
            return api_error('Not found', 404)
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        if wants_json():
            return api_error('Internal server error', 500)
        return render_template('errors/500.html'), 500

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        if wants_json():
            return api_error('You do not have permission for this action', 403)
        return render_template('errors/403.html'), 403


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
    @click.argument('username')
    @click.argument('name')
    @click.option('--role', type=click.Choice(['admin', 'staff', 'manager']), default='staff',
                  show_default=True, help='Role of the new account')
    @click.password_option()
    def create_user_command(username, name, role, password):
        """Create a new staff account."""
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(username=username, password=password, name=name, role=role)
                click.echo(f'User created successfully! ID: {user_id}')
            except HotelError as e:
                click.echo(f'Error creating user: {e.message}', err=True)

    @app.cli.command('import-data')
    @click.option('--rooms', 'rooms_file', type=click.Path(exists=True, dir_okay=False),
                  help='CSV or XLSX file with name, price columns')
    @click.option('--customers', 'customers_file', type=click.Path(exists=True, dir_okay=False),
                  help='CSV or XLSX file with name, address, taxId columns')
    def import_data_command(rooms_file, customers_file):
        """Bulk import rooms and customers."""
        from blueprints.admin.services import import_rooms, import_customers
        from utils.messages import MESSAGES

        if not rooms_file and not customers_file:
            raise click.UsageError('Pass --rooms and/or --customers')

        with app.app_context():
            for label, path, importer in (
                ('Rooms', rooms_file, import_rooms),
                ('Customers', customers_file, import_customers),
            ):
                if not path:
                    continue
                try:
                    result = importer(path)
                except HotelError as e:
                    click.echo(f'{label}: {e.message}', err=True)
                    continue
                for error in result['errors']:
                    click.echo(f'  skipped {error}')
                click.echo(f'{label}: ' + MESSAGES['import_success'].format(
                    added=result['added'], skipped=result['skipped']
                ))


def register_context_processors(app):
    """Register template context processors."""

    @app.context_processor
    def utility_processor():
        """Inject utility functions into templates."""
        from utils.permissions import get_menu_items
        from datetime import datetime

        return {
            'get_menu_items': get_menu_items,
            'current_year': datetime.now().year,
            'app_name': app.config.get('APP_NAME', 'HotelDesk'),
            'app_version': app.config.get('APP_VERSION', '1.0.0'),
            'currency': app.config.get('CURRENCY', 'THB'),
        }

    # Add custom template filters
    from utils.helpers import format_date, format_money
    app.add_template_filter(format_date, 'format_date')
    app.add_template_filter(format_money, 'format_money')


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

        file_handler = logging.FileHandler('logs/hotel.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        # Module loggers (services, models) go to the same file
        logging.getLogger().addHandler(file_handler)
        logging.getLogger().setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('HotelDesk startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
