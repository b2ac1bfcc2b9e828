import os
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'greenpoll.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Public URL used in email links
    APP_URL = os.getenv("APP_URL", "http://localhost:5000")

    # Sessions
    MAX_USER_SESSIONS = int(os.getenv("MAX_USER_SESSIONS", "4"))
    SESSION_ID_COOKIE = os.getenv("SESSION_ID_COOKIE", "sessionID")
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", "false")

    # Passwords (werkzeug method string, e.g. "scrypt" or "pbkdf2:sha256:600000")
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Tokens
    VERIFY_TTL_SECONDS = int(os.getenv("VERIFY_TTL_SECONDS", "3600"))  # 1 hour
    PASSWORD_RESET_TTL_SECONDS = int(os.getenv("PASSWORD_RESET_TTL_SECONDS", "3600"))  # 1 hour

    # Pruning
    PRUNE_ON_STARTUP = _env_bool("PRUNE_ON_STARTUP", "true")
    PRUNE_INTERVAL_SECONDS = int(os.getenv("PRUNE_INTERVAL_SECONDS", "60"))

    # Mail (SMTP)
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _env_bool("MAIL_USE_SSL", "false")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME)
    MAIL_SUPPRESS_SEND = _env_bool("MAIL_SUPPRESS_SEND", "false")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SWAGGER = {"title": "GreenPoll API", "uiversion": 3}


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    PRUNE_ON_STARTUP = False
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "noreply@greenpoll.test"
