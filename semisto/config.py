"""
Semisto website backend
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name]())
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
datadir = os.path.join(os.path.abspath(os.path.dirname(__file__)), "data")

# Default SQLite path for local dev when PostgreSQL is not running
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'semisto_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


def _env_flag(name, default="false"):
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Redis (rate-limit storage in production)
    REDIS_URL = os.getenv("REDIS_URL", "memory://")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Remote catalog API (Terranova). Disabled unless CATALOG_USE_API=true.
    CATALOG_API_URL = os.getenv("CATALOG_API_URL", "http://localhost:3000/api/v1")
    CATALOG_USE_API = _env_flag("CATALOG_USE_API")
    CATALOG_API_TIMEOUT = float(os.getenv("CATALOG_API_TIMEOUT", "5"))

    # Static bundles used when the remote catalog is disabled or unreachable
    CATALOG_FALLBACK_PATH = os.getenv(
        "CATALOG_FALLBACK_PATH", os.path.join(datadir, "sample-data.json")
    )
    PORTAL_DATA_PATH = os.getenv(
        "PORTAL_DATA_PATH", os.path.join(datadir, "partner-portal-data.json")
    )

    # Shop
    FREE_PICKUP_THRESHOLD = float(os.getenv("FREE_PICKUP_THRESHOLD", "50"))
    SHOP_CURRENCY = "EUR"

    # Partner portal demo identity (single shared account)
    PORTAL_DEMO_EMAIL = os.getenv("PORTAL_DEMO_EMAIL", "demo@partner.com")
    PORTAL_DEMO_PASSWORD = os.getenv("PORTAL_DEMO_PASSWORD", "partner2026")
    PORTAL_TOKEN = os.getenv("PORTAL_TOKEN", "mock-partner-token-2026")
    PORTAL_COOKIE_SECURE = False

    # Contact forms
    CONTACT_RATE_LIMIT = os.getenv("CONTACT_RATE_LIMIT", "10/minute")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = (
        _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else _SQLITE_DEV
    )


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SECRET_KEY = "testing-secret-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    RATELIMIT_ENABLED = False
    CATALOG_USE_API = False
    CATALOG_API_URL = "http://catalog.test/api/v1"
    FREE_PICKUP_THRESHOLD = 50.0


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    # Railway/Heroku use postgres:// but SQLAlchemy 2.0 requires postgresql://
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else None
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production
    PORTAL_COOKIE_SECURE = True

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
