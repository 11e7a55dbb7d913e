# settings/test.py
"""
Test settings - optimized for running tests.

These settings are used when DJANGO_ENV=test or DJANGO_ENV=testing.
Focus is on speed and isolation from external services.
"""

import os
import tempfile

from .base import *
from .components import get_cors_settings, get_security_settings

# =============================================================================
# ENVIRONMENT
# =============================================================================

ENVIRONMENT = "test"
DEBUG = True
TEST = True
USE_STRUCTURED_LOGGING = False
LOG_TO_FILE = False

# =============================================================================
# DATABASE - SQLite; the test database is a file so threads share it
# =============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        # BEGIN IMMEDIATE serialises concurrent writers instead of failing
        # them with "database is locked"
        "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
        "TEST": {
            "NAME": os.path.join(
                tempfile.gettempdir(), f"coursepay_test_{os.getpid()}.sqlite3"
            ),
        },
    }
}

# =============================================================================
# CACHE - Local memory cache
# =============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

# =============================================================================
# CELERY - Run tasks synchronously
# =============================================================================

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"

# =============================================================================
# EMAIL - In-memory backend
# =============================================================================

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
SENDGRID_API_KEY = ""

# =============================================================================
# CORS - Permissive
# =============================================================================

cors_settings = get_cors_settings(debug=True)
for key, value in cors_settings.items():
    locals()[key] = value

# =============================================================================
# SECURITY - Relaxed for tests
# =============================================================================

security_settings = get_security_settings(debug=True)
for key, value in security_settings.items():
    locals()[key] = value

ALLOWED_HOSTS = ["*"]

# =============================================================================
# PASSWORD VALIDATORS - Disabled for speed
# =============================================================================

AUTH_PASSWORD_VALIDATORS = []

# =============================================================================
# THROTTLING - Disabled
# =============================================================================

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": [],
}

# =============================================================================
# TEST OPTIMIZATIONS
# =============================================================================

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

INTERNAL_IPS = []
