# settings/development.py
"""
Development settings - optimized for local development.

These settings are used when DJANGO_ENV=development or when not specified.
"""

from .base import *
from .components import (
    get_allowed_hosts,
    get_cache_settings,
    get_celery_settings,
    get_cors_settings,
    get_database_settings,
    get_email_settings,
    get_redis_settings,
    get_security_settings,
)

# =============================================================================
# ENVIRONMENT
# =============================================================================

ENVIRONMENT = "development"
DEBUG = True

# =============================================================================
# DATABASE
# =============================================================================

# Set USE_SQLITE=true in .env to run without PostgreSQL
DATABASES = get_database_settings()

# =============================================================================
# REDIS / CACHE
# =============================================================================

redis_config = get_redis_settings()
CACHES = get_cache_settings(redis_config["url"])

# =============================================================================
# CELERY
# =============================================================================

celery_settings = get_celery_settings(redis_config["url"])
for key, value in celery_settings.items():
    locals()[key] = value

# Run notification tasks inline unless a worker is explicitly in use
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "true").lower() == "true"

# =============================================================================
# CORS & SECURITY
# =============================================================================

cors_settings = get_cors_settings(debug=True)
for key, value in cors_settings.items():
    locals()[key] = value

security_settings = get_security_settings(debug=True)
for key, value in security_settings.items():
    locals()[key] = value

ALLOWED_HOSTS = get_allowed_hosts(debug=True)

# =============================================================================
# EMAIL
# =============================================================================

email_settings = get_email_settings()
for key, value in email_settings.items():
    locals()[key] = value

# Console backend for development - emails printed to console
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# =============================================================================
# DEVELOPMENT SPECIFIC SETTINGS
# =============================================================================

# Show full error pages
DEBUG_PROPAGATE_EXCEPTIONS = False

INTERNAL_IPS = ["127.0.0.1", "localhost"]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG").upper()

# Increase rate limits for development testing
REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # inherit base settings
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/day",
        "user": "100000/day",
    },
}
