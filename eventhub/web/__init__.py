from flask import Flask, render_template
from .routes import auth_bp, events_bp
from . import context
from ..config import Config
import logging

# Module logger
logger = logging.getLogger(__name__)

def create_app(config_class=Config):
    """Create and configure the Flask application."""
    # Initialize Flask app
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Session restore on every request
    context.init_app(app)

    # Register blueprints
    app.register_blueprint(events_bp)
    app.register_blueprint(auth_bp)

    # Error handlers
    @app.errorhandler(404)
    def not_found_error(error):
        return render_template('errors/404.html'), 404

    @app.errorhandler(413)
    def too_large_error(error):
        return render_template('errors/413.html'), 413

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled error: {error}")
        return render_template('errors/500.html'), 500

    return app
