import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_sqlalchemy import SQLAlchemy
from pydantic import ValidationError

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    cache.init_app(app)

    # Import and register blueprints
    from pickem.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from pickem.utils.logging_config import setup_logging

    setup_logging(app)

    # Show configuration warnings
    if not app.config.get("TESTING", False):
        show_config_warnings(app, config_name)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def show_config_warnings(app, config_name):
    """Display configuration warnings and status"""
    import warnings

    print(f"Spread Pick'em starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        warnings.warn("DEBUG mode is enabled in production!", UserWarning)

    if not os.environ.get("SECRET_KEY"):
        print(
            "WARNING: Using auto-generated SECRET_KEY (sessions will reset on restart)"
        )
        print("   Run: python3 generate_secrets.py")

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if "sqlite" in db_url:
        print("Using SQLite database (development mode)")
    elif "postgresql" in db_url:
        print("Using PostgreSQL database")
    else:
        print(
            f"Using database: {db_url.split('://')[0] if '://' in db_url else 'Unknown'}"
        )

    print(
        f"Slots read in {app.config.get('TIMEZONE')}, "
        f"final week {app.config.get('PICKEM_FINAL_WEEK')}"
    )


def register_error_handlers(app):
    """Register global error handlers"""
    from pickem.utils.errors import PickemError, PickRejected

    @app.after_request
    def after_request(response):
        # Add security headers to all responses
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        # Add Strict-Transport-Security in production
        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response

    @app.errorhandler(PickRejected)
    def handle_pick_rejected(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PickemError)
    def handle_pickem_error(error):
        if error.status_code >= 500:
            app.logger.error(f"{error.code}: {error} - Path: {request.path}")
        else:
            app.logger.warning(f"{error.code}: {error} - Path: {request.path}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        app.logger.warning(
            f"Malformed record - Path: {request.path} - {error.error_count()} error(s)"
        )
        return (
            jsonify(
                {
                    "error": "Malformed input",
                    "code": "MALFORMED_INPUT",
                    "details": error.errors(include_url=False, include_context=False),
                }
            ),
            400,
        )

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"error": "Bad request", "code": "MALFORMED_INPUT"}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Resource not found", "code": "NOT_FOUND"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return (
            jsonify({"error": "Method not allowed", "code": "METHOD_NOT_ALLOWED"}),
            405,
        )

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"error": "Internal server error", "code": "INTERNAL_ERROR"}), 500


from pickem import models  # noqa: F401, E402 - imported for model registration
