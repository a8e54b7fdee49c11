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

    SITE_NAME = os.getenv("SITE_NAME", "VirtualMark")

    # Database
    # Read from environment and then unset for security
    SQLALCHEMY_DATABASE_URI: str | None = os.environ.pop("DATABASE_URL", "sqlite:///virtualmark.db")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Sessions - Production security settings
    SESSION_COOKIE_HTTPONLY = True   # Prevent XSS access to session cookies
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV", "production") == "production"  # HTTPS only in production
    SESSION_COOKIE_SAMESITE = "Strict"
    SESSION_COOKIE_PATH = "/"
    SESSION_LIFETIME_MINUTES = int(os.getenv("SESSION_LIFETIME_MINUTES", "30"))
    # "Remember me" logins survive browser restarts for this many days
    REMEMBER_COOKIE_DAYS = int(os.getenv("REMEMBER_COOKIE_DAYS", "14"))

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Public site listing
    POSTS_PER_PAGE = int(os.getenv("POSTS_PER_PAGE", "6"))
    RECENT_POSTS_LIMIT = int(os.getenv("RECENT_POSTS_LIMIT", "5"))
    RELATED_POSTS_LIMIT = int(os.getenv("RELATED_POSTS_LIMIT", "3"))

    # Content repositories reload from the database after this many seconds.
    # Each worker process keeps its own copy; 0 disables reloading.
    CONTENT_MAX_AGE_SECONDS = float(os.getenv("CONTENT_MAX_AGE_SECONDS", "30"))

    # Login lockout
    LOGIN_MAX_ATTEMPTS = int(os.getenv("LOGIN_MAX_ATTEMPTS", "3"))
    LOGIN_LOCKOUT_MINUTES = int(os.getenv("LOGIN_LOCKOUT_MINUTES", "15"))

    # Defaults offered by the admin "new post" form
    DEFAULT_POST_IMAGE = os.getenv("DEFAULT_POST_IMAGE", "/blog/default-post.jpg")
    DEFAULT_READ_TIME = os.getenv("DEFAULT_READ_TIME", "5 min")

    # Security headers
    SECURITY_CSP = (
        "default-src 'self'; "
        "img-src 'self' https:; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'"
    )
    SECURITY_HSTS_SECONDS = 31536000

    SECURITY_PERMISSIONS_POLICY = (
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=()"
    )

    # Flask env
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"
