"""Environment-aware configuration for the civic incident portal."""
import os
from datetime import timedelta
from urllib.parse import quote_plus


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _database_uri() -> str:
    db_url = os.getenv("DATABASE_URL")
    if db_url and "db_host" not in db_url:
        # Heroku-style URLs still use the legacy scheme name.
        if db_url.startswith("postgres://"):
            db_url = "postgresql://" + db_url[len("postgres://"):]
        return db_url

    host = os.getenv("DB_HOST")
    name = os.getenv("DB_NAME")
    if host and name:
        user = quote_plus(os.getenv("DB_USER", "postgres"))
        password = quote_plus(os.getenv("DB_PASSWORD", ""))
        port = os.getenv("DB_PORT", "5432")
        credentials = f"{user}:{password}@" if password else f"{user}@"
        return f"postgresql://{credentials}{host}:{port}/{name}"

    return os.getenv(
        "SQLITE_URL",
        f"sqlite:///{os.path.join(os.getcwd(), 'instance', 'portal.db')}",
    )


class BaseConfig:
    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
        self.SQLALCHEMY_DATABASE_URI = _database_uri()
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_size": int(os.getenv("DB_POOL_SIZE", 10)),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", 20)),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", 30)),
            "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", 1800)),
        }
        self.SESSION_COOKIE_HTTPONLY = True
        self.REMEMBER_COOKIE_HTTPONLY = True
        self.SESSION_COOKIE_SAMESITE = "Lax"
        self.PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
        self.PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")
        self.WTF_CSRF_TIME_LIMIT = 3600
        self.WTF_CSRF_ENABLED = True
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.getcwd(), "logs"))
        self.MEDIA_UPLOAD_FOLDER = os.getenv(
            "MEDIA_UPLOAD_FOLDER",
            os.path.join(os.getcwd(), "uploads"),
        )
        self.MAX_MEDIA_UPLOAD_BYTES = int(os.getenv("MAX_MEDIA_UPLOAD_BYTES", 25 * 1024 * 1024))
        self.MAX_CONTENT_LENGTH = int(os.getenv("MAX_REQUEST_BYTES", 32 * 1024 * 1024))
        self.OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", 300))
        # No SMS gateway is wired up, so the code goes back to the caller.
        self.OTP_ECHO_IN_RESPONSE = _env_flag("OTP_ECHO_IN_RESPONSE", "true")
        self.CASE_ID_MAX_ATTEMPTS = int(os.getenv("CASE_ID_MAX_ATTEMPTS", 3))
        self.ADMIN_SESSION_REQUIRED = _env_flag("ADMIN_SESSION_REQUIRED", "false")


class DevelopmentConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = True
        self.ENV = "development"
        self.SESSION_COOKIE_SECURE = False
        self.REMEMBER_COOKIE_SECURE = False


class ProductionConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False
        self.ENV = "production"
        self.SESSION_COOKIE_SECURE = True
        self.REMEMBER_COOKIE_SECURE = True
        self.SEND_FILE_MAX_AGE_DEFAULT = 31536000


class TestingConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.TESTING = True
        self.DEBUG = False
        self.ENV = "testing"
        self.SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite://")
        # In-memory SQLite runs on a StaticPool, which rejects pool sizing.
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.WTF_CSRF_ENABLED = False
        self.SESSION_COOKIE_SECURE = False
        self.PREFERRED_URL_SCHEME = "http"
        self.LOG_LEVEL = "WARNING"
