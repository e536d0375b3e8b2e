import os
import secrets
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


DEFAULT_ROSTER = "Vlado,Fika,Labud,Ilija,Dzoni"

# Display metadata per participant (colour class + avatar path)
DEFAULT_PLAYER_THEMES = {
    "Vlado": {"color": "blue", "avatar": "/Avatars/vlado.png"},
    "Fika": {"color": "red", "avatar": "/Avatars/fika.png"},
    "Labud": {"color": "green", "avatar": "/Avatars/labud.png"},
    "Ilija": {"color": "purple", "avatar": "/Avatars/ilija.png"},
    "Dzoni": {"color": "yellow", "avatar": "/Avatars/dzoni.png"},
}


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ["true", "on", "1"]


class Config:
    # Generate secure keys if not provided (with warnings)
    _secret_key = os.environ.get("SECRET_KEY")
    _csrf_key = os.environ.get("WTF_CSRF_SECRET_KEY")

    # Use provided keys or generate secure defaults
    if not _secret_key:
        _secret_key = secrets.token_urlsafe(32)
        warnings.warn(
            "SECRET_KEY not set! Using auto-generated key. "
            "This will cause sessions to reset on app restart. "
            "Run 'python3 generate_secrets.py' to generate secure keys.",
            UserWarning,
        )

    if not _csrf_key:
        _csrf_key = secrets.token_urlsafe(32)
        warnings.warn(
            "WTF_CSRF_SECRET_KEY not set! Using auto-generated key. "
            "Run 'python3 generate_secrets.py' to generate secure keys.",
            UserWarning,
        )

    SECRET_KEY = _secret_key
    WTF_CSRF_SECRET_KEY = _csrf_key

    # Database configuration - built from environment at initialization
    def __init__(self):
        """Initialize configuration with dynamic database URI"""
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """Build database URI from environment variables"""
        database_url = os.environ.get("DATABASE_URL")

        if database_url:
            return database_url

        db_type = os.environ.get("DB_TYPE", "sqlite")

        if db_type.lower() == "postgresql":
            db_host = os.environ.get("DB_HOST") or "localhost"
            db_port = os.environ.get("DB_PORT") or "5432"
            db_name = os.environ.get("DB_NAME") or "betting_league_db"
            db_user = os.environ.get("DB_USER") or "league_user"
            db_password = os.environ.get("DB_PASSWORD") or "league_password"

            return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        else:
            # Default to SQLite for development
            return "sqlite:///" + os.path.join(basedir, "league.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # League settings
    LEAGUE_ROSTER = [
        name.strip()
        for name in os.environ.get("LEAGUE_ROSTER", DEFAULT_ROSTER).split(",")
        if name.strip()
    ]
    LEAGUE_ADMIN_EMAIL = os.environ.get("LEAGUE_ADMIN_EMAIL", "")
    PLAYER_THEMES = DEFAULT_PLAYER_THEMES
    RECENT_FORM_SIZE = int(os.environ.get("RECENT_FORM_SIZE") or 5)

    # Durable ledger writes
    PERSISTENCE_ASYNC = _env_flag("PERSISTENCE_ASYNC", "True")
    PERSISTENCE_MAX_RETRIES = int(os.environ.get("PERSISTENCE_MAX_RETRIES") or 3)
    PERSISTENCE_RETRY_DELAY = float(os.environ.get("PERSISTENCE_RETRY_DELAY") or 1.0)
    PERSISTENCE_BACKOFF_FACTOR = float(
        os.environ.get("PERSISTENCE_BACKOFF_FACTOR") or 2.0
    )
    LEDGER_VERSION_CHECK = _env_flag("LEDGER_VERSION_CHECK", "False")

    # Application settings
    SESSION_TIMEOUT = int(os.environ.get("SESSION_TIMEOUT") or 3600)

    # Caching configuration
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "RedisCache")
    CACHE_DEFAULT_TIMEOUT = int(
        os.environ.get("CACHE_DEFAULT_TIMEOUT", 300)
    )  # 5 minutes
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX = "betting_league:"

    # Socket.IO
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")

    # Rate limiting
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "True")

    # Logging configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = _env_flag("LOG_TO_CONSOLE", "True")
    LOG_TO_FILE = _env_flag("LOG_TO_FILE", "True")
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    # Environment detection
    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get("SQLALCHEMY_ECHO", "False").lower() == "true"

    def __init__(self):
        super().__init__()
        # Fallback to SimpleCache if Redis isn't available in development
        try:
            import redis

            redis_client = redis.Redis.from_url(self.CACHE_REDIS_URL)
            redis_client.ping()
        except (ImportError, redis.exceptions.ConnectionError):
            self.CACHE_TYPE = "SimpleCache"
            warnings.warn(
                "Redis not available, falling back to SimpleCache for development.",
                UserWarning,
            )


class ProductionConfig(Config):
    """Production configuration with security focus"""

    DEBUG = False

    # In production, require explicit environment variables
    def __init__(self):
        super().__init__()  # Call parent __init__ to build database URI

        if not os.environ.get("SECRET_KEY"):
            warnings.warn(
                "PRODUCTION WARNING: SECRET_KEY not explicitly set! "
                "Using auto-generated key is not recommended for production.",
                UserWarning,
            )
        if not os.environ.get("LEAGUE_ADMIN_EMAIL"):
            warnings.warn(
                "PRODUCTION WARNING: LEAGUE_ADMIN_EMAIL not set, "
                "no identity can edit every ledger.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    CACHE_TYPE = "SimpleCache"
    SOCKETIO_ASYNC_MODE = "threading"
    LEAGUE_ROSTER = ["Vlado", "Fika", "Labud", "Ilija", "Dzoni"]
    LEAGUE_ADMIN_EMAIL = "admin@example.com"
    PERSISTENCE_ASYNC = False
    PERSISTENCE_MAX_RETRIES = 2
    PERSISTENCE_RETRY_DELAY = 0.0
    LEDGER_VERSION_CHECK = False
    LOG_TO_CONSOLE = False
    LOG_TO_FILE = False

    def __init__(self):
        # In-memory database is fixed for tests
        pass


# Configuration mapping
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
