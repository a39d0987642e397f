# config.py
import os
from datetime import timedelta


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/fitquest"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" (default) or "memory"
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")

    # 🔐 JWT config: session cookie for the web client, bearer header for tools
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ACCESS_COOKIE_NAME = "fitquest_session"
    JWT_COOKIE_SECURE = _env_bool("JWT_COOKIE_SECURE", False)
    JWT_COOKIE_CSRF_PROTECT = _env_bool("JWT_COOKIE_CSRF_PROTECT", True)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)  # one week, like the session cookie

    # Physical rewards collect shipping details through a $0 payment intent
    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
    PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "usd")

    # None -> fitquest.services.spin.DEFAULT_SPIN_OUTCOMES
    SPIN_OUTCOMES = None

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
