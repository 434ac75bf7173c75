# Initialize structured logging early
from filmmatch.logging_config import get_logger, configure_structlog
configure_structlog()

import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, Response

from filmmatch.errors import FilmMatchError
from filmmatch.identity import DEFAULT_IDENTITY_HEADER
from filmmatch.logging_middleware import init_logging_middleware
from filmmatch.metrics import get_metrics
from filmmatch.models import db
from filmmatch.routes.films import bp as films_bp
from filmmatch.routes.friends import bp as friends_bp
from filmmatch.routes.users import bp as users_bp

logger = get_logger(__name__)

# Project root directory (parent of filmmatch package)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _default_config() -> Dict[str, Any]:
    return {
        'SECRET_KEY': os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production'),
        # DATABASE_URL points at the production database (PostgreSQL);
        # local development falls back to a file-based SQLite database
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'filmmatch.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'IDENTITY_HEADER': os.getenv('IDENTITY_HEADER', DEFAULT_IDENTITY_HEADER),
    }


def register_error_handlers(app: Flask):
    """Map core errors onto HTTP responses."""

    @app.errorhandler(FilmMatchError)
    def handle_core_error(error: FilmMatchError):
        logger.info(
            "request_rejected",
            error_type=error.error_type.value,
            entity=error.entity,
            error=error.message,
        )
        return jsonify({"status": "error", "error": error.message}), error.status_code


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Build the FilmMatch Flask application.

    Args:
        config: Overrides applied on top of the environment-derived configuration

    Returns:
        Configured Flask app with database tables created
    """
    app = Flask(__name__)
    app.config.update(_default_config())
    if config:
        app.config.update(config)

    init_logging_middleware(app)
    register_error_handlers(app)

    db.init_app(app)

    app.register_blueprint(films_bp, url_prefix="/api/films")
    app.register_blueprint(friends_bp, url_prefix="/api/friends")
    app.register_blueprint(users_bp, url_prefix="/api/users")

    @app.route('/health')
    def health():
        """Health check endpoint for deployment monitoring."""
        return jsonify({"status": "healthy", "service": "filmmatch"}), 200

    @app.route('/metrics')
    def metrics():
        """Expose Prometheus metrics. No user data is included, only aggregates."""
        metrics_text, content_type = get_metrics()
        return Response(metrics_text, mimetype=content_type)

    with app.app_context():
        db.create_all()
    logger.info("app_initialized", database=app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0])

    return app
