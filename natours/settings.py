"""
Django settings for the natours project.

Every deployment knob is read from the environment once, at import time.
Defaults are development-friendly: SQLite, verbose error payloads and a
throwaway secret key.
"""
import base64
import hashlib
import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name, default):
    try:
        return int(os.environ[name])
    except (KeyError, ValueError):
        return default


# ---------- core ----------

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-insecure-natours-secret-key-change-me")
DEBUG = _env_bool("DJANGO_DEBUG", default=False)
ALLOWED_HOSTS = [
    h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()
]

# "development" -> error payloads carry the original message and stack.
# "production"  -> unexpected errors collapse to a generic message.
APP_ENV = os.environ.get("APP_ENV", "development").strip().lower()

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "core",
    "customauth",
    "userprofile",
    "tours",
    "health",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "core.middleware.ErrorNormalizationMiddleware",
]

ROOT_URLCONF = "natours.urls"
ASGI_APPLICATION = "natours.asgi.application"

# ---------- database ----------

if os.environ.get("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["POSTGRES_DB"],
            "USER": os.environ.get("POSTGRES_USER", "postgres"),
            "PASSWORD": os.environ.get("POSTGRES_PASSWORD", ""),
            "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
            "PORT": os.environ.get("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

# ---------- passwords ----------

PASSWORD_HASHERS = [
    "customauth.hashers.BCryptSHA256Cost10PasswordHasher",
]

PASSWORD_RESET_TIMEOUT_MIN = _env_int("PASSWORD_RESET_TIMEOUT_MIN", 10)

# ---------- tokens ----------

JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_LIFETIME = timedelta(
    minutes=_env_int("JWT_ACCESS_TOKEN_LIFETIME_MIN", 90 * 24 * 60)
)

# Fernet wants a urlsafe base64-encoded 32-byte key.
JWT_ENCRYPTION_KEY = os.environ.get("JWT_ENCRYPTION_KEY") or base64.urlsafe_b64encode(
    hashlib.sha256(JWT_SECRET_KEY.encode("utf-8")).digest()
).decode("utf-8")

# ---------- listing ----------

# None keeps `?limit=` unbounded.
API_MAX_PAGE_LIMIT = _env_int("API_MAX_PAGE_LIMIT", None)

# ---------- email ----------

EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = _env_int("EMAIL_PORT", 25)
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "Natours <hello@natours.io>")

# ---------- logging ----------

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "core": {"level": os.environ.get("LOG_LEVEL", "INFO"), "propagate": True},
        "customauth": {"level": os.environ.get("LOG_LEVEL", "INFO"), "propagate": True},
        "tours": {"level": os.environ.get("LOG_LEVEL", "INFO"), "propagate": True},
    },
}
