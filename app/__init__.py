"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
from flask import Flask, jsonify, request


def create_app():
    """Create and configure the Flask application."""
    from app import config
    from app.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    # Secret key for sessions
    app.secret_key = config.SECRET_KEY

    # Register blueprints
    from app.routes.analyze import bp as analyze_bp
    from app.routes.dashboard import bp as dashboard_bp
    from app.routes.feedback import bp as feedback_bp
    from app.routes.live_poll import bp as live_poll_bp
    from app.routes.networking import bp as networking_bp
    from app.routes.raffle import bp as raffle_bp

    app.register_blueprint(analyze_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(feedback_bp)
    app.register_blueprint(live_poll_bp)
    app.register_blueprint(networking_bp)
    app.register_blueprint(raffle_bp)

    # API clients always get JSON errors, never Flask's HTML pages.
    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith('/api/'):
            return jsonify({'error': 'Not found.'}), 404
        return e

    @app.errorhandler(405)
    def method_not_allowed(e):
        if request.path.startswith('/api/'):
            return jsonify({'error': 'Method not allowed.'}), 405
        return e

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic; no init_db() call.
    import importlib
    importlib.import_module('app.models.feedback')
    importlib.import_module('app.models.analytics_snapshot')
    importlib.import_module('app.models.live_poll')
    importlib.import_module('app.models.networking_profile')
    importlib.import_module('app.models.raffle')

    return app
