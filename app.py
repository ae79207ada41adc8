import logging
import os

from flask import Flask, redirect, url_for
from flask_login import current_user

from config import DevelopmentConfig, ProductionConfig, TestingConfig

# Import extensions to avoid circular imports
from extensions import csrf, db, login_manager, migrate


def _configure_logging(app):
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    app.logger.setLevel(level)


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig  # Default to production for security

    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    csrf.init_app(app)

    from models import User

    with app.app_context():
        db.create_all()

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, str(user_id))

    from authroutes import auth_blueprint
    from ticketroutes import ticket_blueprint
    from detentionroutes import detention_blueprint
    from adminroutes import admin_blueprint
    from api_routes import api_blueprint

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(ticket_blueprint, url_prefix='/dashboard/tickets')
    app.register_blueprint(detention_blueprint, url_prefix='/dashboard/detentions')
    app.register_blueprint(admin_blueprint, url_prefix='/admin')
    app.register_blueprint(api_blueprint, url_prefix='/api')
    # JSON-only endpoints; request bodies must be application/json
    csrf.exempt(api_blueprint)

    from error_handler import register_error_handlers
    register_error_handlers(app)

    @app.template_filter('status_label')
    def status_label_filter(value):
        """in_progress -> IN PROGRESS"""
        return (value or '').replace('_', ' ').upper()

    @app.template_filter('datetime')
    def datetime_filter(value):
        return value.strftime('%b %d, %Y %I:%M %p') if value else ''

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Cache-Control'] = 'no-store'
        return response

    @app.route('/')
    def home():
        if current_user.is_authenticated:
            return redirect(url_for('auth.dashboard'))
        return redirect(url_for('auth.login'))

    app.logger.info(f"Staff portal started with {config_class.__name__}")
    return app
