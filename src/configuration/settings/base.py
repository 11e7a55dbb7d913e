# settings/base.py
"""
Base Django settings - shared across all environments.

This file contains core settings that are common to all environments.
Environment-specific settings are loaded from development.py, production.py, etc.
"""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

from .components import get_payment_settings

# Load environment variables from .env file
# This should be called before any settings that reference environment variables
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = BASE_DIR / "src"


# =============================================================================
# ENVIRONMENT DETECTION
# =============================================================================

DJANGO_ENV = os.environ.get("DJANGO_ENV", "development").lower()
IS_PRODUCTION = DJANGO_ENV in ("production", "prod")
IS_STAGING = DJANGO_ENV in ("staging",)
IS_TEST = DJANGO_ENV in ("test", "testing")
IS_DEVELOPMENT = not (IS_PRODUCTION or IS_STAGING or IS_TEST)


# =============================================================================
# REQUIRED SETTINGS VALIDATION
# =============================================================================


def _validate_required_settings():
    """
    Validate that required environment variables are set.
    Raises ImproperlyConfigured if any required setting is missing.
    """
    from django.core.exceptions import ImproperlyConfigured

    required_vars = []

    if IS_PRODUCTION and (
        not os.environ.get("SECRET_KEY") or os.environ.get("SECRET_KEY") == "change-me"
    ):
        required_vars.append("SECRET_KEY")

    if IS_PRODUCTION:
        for var in ["DB_NAME", "DB_USER", "DB_PASSWORD", "DB_HOST"]:
            if not os.environ.get(var):
                required_vars.append(var)

    if required_vars:
        raise ImproperlyConfigured(
            f"The following required environment variables are missing: {', '.join(required_vars)}"
        )


# =============================================================================
# CORE DJANGO SETTINGS
# =============================================================================

SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-dev-key-change-in-production"
)

# DEBUG mode - set in environment-specific files
DEBUG = False

# ALLOWED HOSTS - base set, extended in environment files
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Custom User Model
AUTH_USER_MODEL = "coursepay.User"

APPEND_SLASH = False


# =============================================================================
# APPLICATION DEFINITION
# =============================================================================

DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "rest_framework",
    "corsheaders",
    "django_extensions",
    "drf_yasg",
]

LOCAL_APPS = [
    "coursepay.apps.CoursepayConfig",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS


# =============================================================================
# MIDDLEWARE
# =============================================================================

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Resolve the JWT caller before the logging middleware binds context
    "coursepay.middleware.JWTAuthenticationMiddleware",
    "coursepayutils.logging.StructlogMiddleware",
    "coursepay.middleware.RequestLoggingMiddleware",
]


# =============================================================================
# URL CONFIGURATION
# =============================================================================

ROOT_URLCONF = "configuration.urls"

WSGI_APPLICATION = "configuration.wsgi.application"
ASGI_APPLICATION = "configuration.asgi.application"


# =============================================================================
# TEMPLATES
# =============================================================================

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]


# =============================================================================
# PASSWORD VALIDATION
# =============================================================================

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {
            "min_length": 8,
        },
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True


# =============================================================================
# STATIC AND MEDIA FILES
# =============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Logging is configured by coursepayutils.logging.configure_logging(),
# called from CoursepayConfig.ready()
USE_STRUCTURED_LOGGING = (
    os.environ.get("USE_STRUCTURED_LOGGING", "true").lower() == "true"
)

# Write coursepay.log and payments.log under BASE_DIR/logs
LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "true").lower() == "true"

LOGGING_CONFIG = None


# =============================================================================
# REST FRAMEWORK CONFIGURATION
# =============================================================================

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "coursepay.authentication.CustomJWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/day",
        "user": "1000/day",
    },
    "EXCEPTION_HANDLER": "coursepay.exceptions.custom_exception_handler",
}


# =============================================================================
# JWT SETTINGS
# =============================================================================

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=2),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "ROTATE_REFRESH_TOKENS": True,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "USER_ID_FIELD": "user_id",
    "USER_ID_CLAIM": "user_id",
}

# Swagger/OpenAPI settings
SWAGGER_SETTINGS = {
    "SECURITY_DEFINITIONS": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "USE_SESSION_AUTH": False,
    "JSON_EDITOR": True,
    "OPERATIONS_SORTER": "alpha",
    "TAGS_SORTER": "alpha",
}

REDOC_SETTINGS = {
    "LAZY_RENDERING": False,
}


# =============================================================================
# CORS / CSRF SETTINGS (BASE)
# =============================================================================

CORS_ALLOW_CREDENTIALS = True

CSRF_COOKIE_NAME = "csrftoken"
CSRF_HEADER_NAME = "HTTP_X_CSRFTOKEN"


# =============================================================================
# CELERY SETTINGS (DEFAULT)
# =============================================================================

CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_IMPORTS = ("coursepay.tasks.tasks",)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_ENABLE_UTC = True
CELERY_TASK_IGNORE_RESULT = True


# =============================================================================
# CACHE SETTINGS (DEFAULT)
# =============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "coursepay",
    }
}


# =============================================================================
# EMAIL SETTINGS (DEFAULT)
# =============================================================================

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "payments@coursepay.local")
SERVER_EMAIL = os.environ.get("SERVER_EMAIL", "server@coursepay.local")

# SendGrid replaces Django's mail backend for payment notices when set
SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY", "")


# =============================================================================
# SECURITY SETTINGS (BASE - OVERRIDDEN IN ENV FILES)
# =============================================================================

X_FRAME_OPTIONS = "SAMEORIGIN"

SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"

CSRF_COOKIE_HTTPONLY = True
CSRF_COOKIE_SAMESITE = "Lax"


# =============================================================================
# PAYMENT SETTINGS
# =============================================================================

# COURSEPAY_CURRENCY, COURSEPAY_RECEIPT_PREFIX, COURSEPAY_NOTIFY_ON_DECISION
for _key, _value in get_payment_settings().items():
    globals()[_key] = _value


# =============================================================================
# APPLICATION-SPECIFIC SETTINGS
# =============================================================================

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
SUPPORT_EMAIL = os.environ.get("SUPPORT_EMAIL", "support@coursepay.local")
