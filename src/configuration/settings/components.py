# settings/components.py
"""
Settings components - reusable setting groups for different concerns.

Each function returns a dictionary of settings that the environment modules
(development, staging, production) apply to the Django settings module.

Usage:
    from .components import get_database_settings
    DATABASES = get_database_settings()
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Helper to get boolean environment variable."""
    return os.environ.get(key, str(default)).lower() in ("true", "1", "yes", "on")


def _get_env_int(key: str, default: int = 0) -> int:
    """Helper to get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except (ValueError, TypeError):
        return default


def _get_env_list(key: str, default: list | None = None) -> list:
    """Helper to get list from comma-separated environment variable."""
    if default is None:
        default = []
    value = os.environ.get(key, "")
    return [item.strip() for item in value.split(",") if item.strip()] or default


# =============================================================================
# DATABASE SETTINGS
# =============================================================================


def get_database_settings() -> dict:
    """
    Returns database configuration based on environment.

    PostgreSQL by default; SQLite when USE_SQLITE is set. Payment decisions
    rely on row locks and conditional updates, so production should run on
    PostgreSQL.

    Environment variables:
        DB_NAME: Database name
        DB_USER: Database user
        DB_PASSWORD: Database password
        DB_HOST: Database host
        DB_PORT_NUMBER: Database port
        DOCKER_ENV: Set to 'true' when running in Docker
    """
    is_docker = _get_env_bool("DOCKER_ENV")
    use_sqlite = _get_env_bool("USE_SQLITE", False)

    if use_sqlite:
        return {
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": BASE_DIR / "db.sqlite3",
            }
        }

    return {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DB_NAME", "coursepay"),
            "USER": os.environ.get("DB_USER", "postgres"),
            "PASSWORD": os.environ.get("DB_PASSWORD", "postgres"),
            "HOST": os.environ.get("DB_HOST", "db" if is_docker else "localhost"),
            "PORT": _get_env_int("DB_PORT_NUMBER", 5432),
            "OPTIONS": {
                "connect_timeout": 10,
                "sslmode": os.environ.get("DB_SSLMODE", "prefer"),
            },
            "CONN_MAX_AGE": 60,
            "CONN_HEALTH_CHECKS": True,
        }
    }


# =============================================================================
# REDIS SETTINGS
# =============================================================================


def get_redis_settings() -> dict:
    """
    Returns Redis connection settings.

    Environment variables:
        REDIS_HOST: Redis host (default: localhost or 'redis' in Docker)
        REDIS_PORT_NUMBER: Redis port (default: 6379)
        REDIS_PASSWORD: Redis password
        DOCKER_ENV: Set to 'true' when running in Docker

    Returns:
        dict with 'url' key holding the Redis URL without a database number
    """
    is_docker = _get_env_bool("DOCKER_ENV")

    redis_host = os.environ.get("REDIS_HOST", "redis" if is_docker else "localhost")
    redis_port = _get_env_int("REDIS_PORT_NUMBER", 6379)
    redis_password = os.environ.get("REDIS_PASSWORD", "")

    if redis_password:
        redis_url = f"redis://:{redis_password}@{redis_host}:{redis_port}"
    else:
        redis_url = f"redis://{redis_host}:{redis_port}"

    return {
        "url": redis_url,
        "host": redis_host,
        "port": redis_port,
        "password": redis_password,
    }


def get_cache_settings(redis_url: str) -> dict:
    """
    Returns Django cache configuration using Redis database 1.

    The cache holds the JWT blacklist, so it must be shared between
    processes.

    Environment variables:
        CACHE_DEFAULT_TIMEOUT: Default cache timeout in seconds (default: 300)
    """
    timeout = _get_env_int("CACHE_DEFAULT_TIMEOUT", 300)

    return {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": f"{redis_url}/1",
            "TIMEOUT": timeout,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "SOCKET_CONNECT_TIMEOUT": 5,
                "SOCKET_TIMEOUT": 5,
                "CONNECTION_POOL_KWARGS": {"max_connections": 50},
            },
            "KEY_PREFIX": "coursepay",
            "VERSION": 1,
        },
    }


# =============================================================================
# CELERY SETTINGS
# =============================================================================


def get_celery_settings(redis_url: str) -> dict:
    """
    Returns Celery configuration for the notification worker.

    Environment variables:
        CELERY_BROKER_URL: Message broker URL (default: Redis database 0)
        CELERY_WORKER_CONCURRENCY: Number of worker processes
        CELERY_TASK_TIME_LIMIT: Task time limit in seconds
    """
    return {
        "CELERY_BROKER_URL": os.environ.get("CELERY_BROKER_URL", f"{redis_url}/0"),
        "CELERY_RESULT_BACKEND": f"{redis_url}/2",
        "CELERY_IMPORTS": ("coursepay.tasks.tasks",),
        # Serialization
        "CELERY_ACCEPT_CONTENT": ["json"],
        "CELERY_TASK_SERIALIZER": "json",
        "CELERY_RESULT_SERIALIZER": "json",
        # Timezone
        "CELERY_TIMEZONE": "UTC",
        "CELERY_ENABLE_UTC": True,
        # Task settings
        "CELERY_TASK_TRACK_STARTED": True,
        "CELERY_TASK_TIME_LIMIT": _get_env_int("CELERY_TASK_TIME_LIMIT", 300),
        "CELERY_TASK_SOFT_TIME_LIMIT": _get_env_int("CELERY_TASK_SOFT_TIME_LIMIT", 240),
        "CELERY_TASK_IGNORE_RESULT": True,
        "CELERY_TASK_ACKS_LATE": True,
        # Worker settings
        "CELERY_WORKER_CONCURRENCY": _get_env_int("CELERY_WORKER_CONCURRENCY", 4),
        "CELERY_WORKER_MAX_TASKS_PER_CHILD": 1000,
        "CELERY_WORKER_PREFETCH_MULTIPLIER": 1,
        # Task routing
        "CELERY_TASK_ROUTES": {
            "coursepay.tasks.tasks.*": {"queue": "notifications"},
        },
    }


# =============================================================================
# CORS SETTINGS
# =============================================================================


def get_cors_settings(debug: bool = False) -> dict:
    """
    Returns CORS configuration based on debug mode.

    Environment variables:
        CORS_ALLOWED_ORIGINS: Comma-separated list of allowed origins
        CORS_ALLOW_ALL_ORIGINS: Allow all origins (not recommended for production)
    """
    env_origins = _get_env_list("CORS_ALLOWED_ORIGINS")

    development_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    if debug:
        origins = env_origins or development_origins
        allow_all = _get_env_bool("CORS_ALLOW_ALL_ORIGINS", True)
    else:
        origins = env_origins
        allow_all = _get_env_bool("CORS_ALLOW_ALL_ORIGINS", False)

    return {
        "CORS_ALLOW_ALL_ORIGINS": allow_all,
        "CORS_ALLOWED_ORIGINS": origins,
        "CORS_ALLOW_CREDENTIALS": True,
        "CSRF_TRUSTED_ORIGINS": origins,
    }


# =============================================================================
# SECURITY SETTINGS
# =============================================================================


def get_security_settings(debug: bool = False) -> dict:
    """
    Returns security settings based on debug mode.
    """
    if debug:
        return {
            "SECURE_SSL_REDIRECT": False,
            "SECURE_PROXY_SSL_HEADER": None,
            "SESSION_COOKIE_SECURE": False,
            "CSRF_COOKIE_SECURE": False,
            "SECURE_HSTS_SECONDS": 0,
            "SECURE_HSTS_INCLUDE_SUBDOMAINS": False,
            "SECURE_HSTS_PRELOAD": False,
            "SECURE_CONTENT_TYPE_NOSNIFF": False,
            "SECURE_REFERRER_POLICY": "same-origin",
            "X_FRAME_OPTIONS": "SAMEORIGIN",
        }

    return {
        "SECURE_SSL_REDIRECT": True,
        "SECURE_PROXY_SSL_HEADER": ("HTTP_X_FORWARDED_PROTO", "https"),
        "SECURE_HSTS_SECONDS": 31536000,  # 1 year
        "SECURE_HSTS_INCLUDE_SUBDOMAINS": True,
        "SECURE_HSTS_PRELOAD": True,
        "SESSION_COOKIE_SECURE": True,
        "CSRF_COOKIE_SECURE": True,
        "SECURE_CONTENT_TYPE_NOSNIFF": True,
        "SECURE_REFERRER_POLICY": "strict-origin-when-cross-origin",
        "X_FRAME_OPTIONS": "DENY",
    }


# =============================================================================
# ALLOWED HOSTS
# =============================================================================


def get_allowed_hosts(debug: bool = False) -> list:
    """
    Returns allowed hosts based on debug mode.

    Environment variables:
        ALLOWED_HOSTS: Comma-separated list of allowed hosts
    """
    env_hosts = _get_env_list("ALLOWED_HOSTS")

    if env_hosts:
        return env_hosts

    if debug:
        return ["*"]

    return ["localhost", "127.0.0.1"]


# =============================================================================
# EMAIL SETTINGS
# =============================================================================


def get_email_settings() -> dict:
    """
    Returns SMTP configuration from environment.

    Environment variables:
        EMAIL_HOST: SMTP host
        EMAIL_PORT: SMTP port
        EMAIL_HOST_USER: SMTP username
        EMAIL_HOST_PASSWORD: SMTP password
        EMAIL_USE_TLS: Use TLS (true/false)
        DEFAULT_FROM_EMAIL: Default from email address
        SENDGRID_API_KEY: Send payment notices through SendGrid instead of SMTP
    """
    return {
        "EMAIL_HOST": os.environ.get("EMAIL_HOST", "localhost"),
        "EMAIL_PORT": _get_env_int("EMAIL_PORT", 587),
        "EMAIL_HOST_USER": os.environ.get("EMAIL_HOST_USER", ""),
        "EMAIL_HOST_PASSWORD": os.environ.get("EMAIL_HOST_PASSWORD", ""),
        "EMAIL_USE_TLS": _get_env_bool("EMAIL_USE_TLS", True),
        "EMAIL_USE_SSL": _get_env_bool("EMAIL_USE_SSL", False),
        "EMAIL_TIMEOUT": _get_env_int("EMAIL_TIMEOUT", 30),
        "DEFAULT_FROM_EMAIL": os.environ.get(
            "DEFAULT_FROM_EMAIL", "payments@coursepay.local"
        ),
        "SERVER_EMAIL": os.environ.get("SERVER_EMAIL", "server@coursepay.local"),
        "SENDGRID_API_KEY": os.environ.get("SENDGRID_API_KEY", ""),
    }


# =============================================================================
# PAYMENT SETTINGS
# =============================================================================


def get_payment_settings() -> dict:
    """
    Returns ledger-wide payment settings.

    Environment variables:
        COURSEPAY_CURRENCY: Default currency for new courses and bundles
        COURSEPAY_RECEIPT_PREFIX: Prefix of receipt numbers issued on approval
        COURSEPAY_NOTIFY_ON_DECISION: Email learners when payments and
            refunds are decided (true/false)
    """
    return {
        "COURSEPAY_CURRENCY": os.environ.get("COURSEPAY_CURRENCY", "USD"),
        "COURSEPAY_RECEIPT_PREFIX": os.environ.get("COURSEPAY_RECEIPT_PREFIX", "RCP"),
        "COURSEPAY_NOTIFY_ON_DECISION": _get_env_bool(
            "COURSEPAY_NOTIFY_ON_DECISION", True
        ),
    }
