from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env if present
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


class Config:
    SECRET_KEY: str = os.getenv("SECRET_KEY", os.urandom(32).hex())

    # Database
    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL", "sqlite:///quillpress.db")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Sessions
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV", "production") == "production"
    SESSION_COOKIE_SAMESITE = "Strict"
    SESSION_COOKIE_PATH = "/"
    SESSION_LIFETIME_MINUTES = int(os.getenv("SESSION_LIFETIME_MINUTES", "30"))
    ABSOLUTE_SESSION_MAX_AGE_SECONDS = int(os.getenv("ABSOLUTE_SESSION_MAX_AGE_SECONDS", str(4 * 60 * 60)))

    # JSON bodies only, no uploads
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(1024 * 1024)))

    # CSRF token travels in the X-CSRFToken header for the JSON API
    WTF_CSRF_TIME_LIMIT = None

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Content
    DEFAULT_AVATAR = os.getenv("DEFAULT_AVATAR", "/default-avatar.jpg")
    EXCERPT_LENGTH = int(os.getenv("EXCERPT_LENGTH", "100"))

    # Security headers
    SECURITY_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
    SECURITY_HSTS_SECONDS = 31536000
    SECURITY_PERMISSIONS_POLICY = (
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=()"
    )

    # Flask env
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"


class ClientConfig:
    """Settings for the command line client."""

    API_URL: str = os.getenv("QUILLPRESS_API_URL", "http://localhost:8000")
    SESSION_FILE: Path = Path(
        os.getenv("QUILLPRESS_SESSION_FILE", str(Path.home() / ".quillpress" / "session.json"))
    ).expanduser()
    TIMEOUT: float = float(os.getenv("QUILLPRESS_TIMEOUT", "10"))
