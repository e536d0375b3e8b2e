import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
socketio = SocketIO()
cache = Cache()
migrate = Migrate()
csrf = CSRFProtect()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    if request.headers.get("X-Forwarded-For"):
        # Leftmost entry is the original client
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Use Redis for shared rate limiting across workers when configured
limiter_storage_uri = "memory://"
redis_url = os.environ.get("REDIS_URL")
if redis_url:
    try:
        import redis

        redis_client = redis.Redis.from_url(redis_url)
        redis_client.ping()
        limiter_storage_uri = redis_url
        logger.info(f"Rate limiter using Redis storage at {redis_url}")
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis not available for rate limiter, using memory storage: {e}")

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
    storage_uri=limiter_storage_uri,
)


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SECURE"] = (
        False
        if app.config.get("DEBUG")
        else app.config.get("FLASK_ENV") == "production"
    )
    app.config["PERMANENT_SESSION_LIFETIME"] = app.config.get("SESSION_TIMEOUT", 3600)
    app.config["WTF_CSRF_TIME_LIMIT"] = None

    # Setup logging first so extension start-up is captured
    from league.utils.logging_config import setup_logging

    setup_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    allowed_origins = os.environ.get("ALLOWED_ORIGINS", "*")
    socketio.init_app(
        app,
        cors_allowed_origins=(
            allowed_origins if allowed_origins == "*" else allowed_origins.split(",")
        ),
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE"),
        ping_timeout=60,
        ping_interval=25,
    )

    # Login manager configuration
    login_manager.login_view = None
    login_manager.login_message = "Please log in to access this page."

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    # Import and register blueprints
    from league.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")

    from league.routes.main import bp as main_bp

    app.register_blueprint(main_bp)

    from league.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Register error handlers
    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        db.create_all()

    # In-memory ledgers and the background write dispatcher
    from league.services.ledger_service import ledger_service

    ledger_service.init_app(app)

    # Register SocketIO handlers
    from league import socketio_handlers  # noqa: F401 - imported for side effects

    logger.info(
        f"Betting league starting with '{config_name}' configuration "
        f"({len(app.config.get('LEAGUE_ROSTER', []))} participants)"
    )

    return app


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        # Add security headers to all responses
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response

    from flask_wtf.csrf import CSRFError

    from league.utils.errors import LeagueError

    @app.errorhandler(LeagueError)
    def handle_league_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        app.logger.warning(f"CSRF Error: {error.description} - Path: {request.path}")
        return jsonify({"error": "Security token expired or invalid"}), 400

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({"error": "Access forbidden"}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(503)
    def service_unavailable_error(error):
        return jsonify({"error": "Service unavailable"}), 503


from league import models  # noqa: F401, E402 - imported for model registration
