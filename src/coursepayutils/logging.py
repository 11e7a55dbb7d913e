# coursepayutils/logging.py
"""
Structured logging configuration using structlog.

This module provides:
- Structured JSON logging for production
- Colored console logging for development
- Masking of payment account details before they reach a log sink
- Django middleware binding request context to every log line
- Celery task logging support

Usage:
    from coursepayutils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("payment_submitted", transaction_id=345, user_id=12)
"""

import logging
import logging.config
import sys
import uuid
from datetime import UTC, datetime
from pathlib import Path

import structlog
from django.conf import settings
from structlog.types import Processor

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Keys whose values never reach a log sink in clear text
SENSITIVE_KEYS = frozenset(
    {
        "password",
        "account_number",
        "iban",
        "payment_proof_url",
        "access",
        "refresh",
        "token",
    }
)


def is_development() -> bool:
    """Check if running in development mode."""
    return getattr(settings, "DEBUG", False)


def get_log_level() -> int:
    """Get the configured log level."""
    level_name = getattr(settings, "LOG_LEVEL", "INFO").upper()
    return LOG_LEVELS.get(level_name, logging.INFO)


def get_logs_dir() -> Path:
    """Get the logs directory path."""
    logs_dir = Path(settings.BASE_DIR) / "logs"
    logs_dir.mkdir(exist_ok=True)
    return logs_dir


# =============================================================================
# PROCESSORS
# =============================================================================


def add_environment(logger: structlog.PrintLogger, name: str, event_dict: dict) -> dict:
    """Add environment information to the event dict."""
    event_dict["environment"] = getattr(settings, "ENVIRONMENT", "unknown")
    return event_dict


def add_app_name(logger: structlog.PrintLogger, name: str, event_dict: dict) -> dict:
    event_dict["app"] = "coursepay"
    return event_dict


def mask_sensitive_values(
    logger: structlog.PrintLogger, name: str, event_dict: dict
) -> dict:
    """Replace all but the last four characters of sensitive values."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        value = str(event_dict[key] or "")
        event_dict[key] = f"***{value[-4:]}" if len(value) > 4 else "***"
    return event_dict


def rename_message_field(
    logger: structlog.PrintLogger, name: str, event_dict: dict
) -> dict:
    """Rename 'event' field to 'message' for compatibility."""
    event_dict["message"] = event_dict.pop("event")
    return event_dict


class UTCFormatter:
    """Format timestamps in UTC."""

    def __call__(
        self, logger: structlog.PrintLogger, name: str, event_dict: dict
    ) -> dict:
        event_dict["timestamp"] = datetime.now(UTC).isoformat()
        return event_dict


def filter_exc_info(logger: structlog.PrintLogger, name: str, event_dict: dict) -> dict:
    """Filter exception info from regular logs (only show in error logs)."""
    if event_dict.get("level") not in ("error", "critical"):
        event_dict.pop("exc_info", None)
        event_dict.pop("exception", None)
    return event_dict


def order_keys(logger: structlog.PrintLogger, name: str, event_dict: dict) -> dict:
    """Order keys for better readability."""
    key_order = ["timestamp", "level", "logger", "message", "environment"]
    ordered = {k: event_dict.pop(k) for k in key_order if k in event_dict}
    ordered.update(event_dict)
    return ordered


# =============================================================================
# PROCESSOR CHAINS
# =============================================================================

SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    add_app_name,
    add_environment,
    mask_sensitive_values,
    UTCFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

DEV_PROCESSORS: list[Processor] = [
    *SHARED_PROCESSORS,
    rename_message_field,
    structlog.dev.ConsoleRenderer(
        colors=True, exception_formatter=structlog.dev.plain_traceback
    ),
]

PROD_PROCESSORS: list[Processor] = [
    *SHARED_PROCESSORS,
    rename_message_field,
    filter_exc_info,
    order_keys,
    structlog.processors.JSONRenderer(),
]


# =============================================================================
# DJANGO STANDARD LIBRARY LOGGING CONFIGURATION
# =============================================================================


def get_standard_logging_config() -> dict:
    """
    Get Django's standard logging configuration.

    File handlers are attached only when LOG_TO_FILE is enabled; test runs
    keep everything on the console.
    """
    log_level = get_log_level()
    use_files = getattr(settings, "LOG_TO_FILE", True)
    default_handlers = ["console", "file"] if use_files else ["console"]

    handlers: dict = {
        "console": {
            "level": log_level,
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
        },
        "console_json": {
            "level": log_level,
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "json",
        },
    }
    if use_files:
        logs_dir = get_logs_dir()
        handlers["file"] = {
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": logs_dir / "coursepay.log",
            "maxBytes": 1024 * 1024 * 10,  # 10 MB
            "backupCount": 5,
            "formatter": "json" if not is_development() else "verbose",
        }
        handlers["payments_file"] = {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": logs_dir / "payments.log",
            "maxBytes": 1024 * 1024 * 10,  # 10 MB
            "backupCount": 20,
            "formatter": "json",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
            "verbose": {
                "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
                "style": "{",
            },
        },
        "handlers": handlers,
        "loggers": {
            "django": {
                "handlers": default_handlers,
                "level": log_level,
                "propagate": False,
            },
            "celery": {
                "handlers": default_handlers,
                "level": "INFO",
                "propagate": False,
            },
            "coursepay": {
                "handlers": default_handlers,
                "level": "DEBUG" if is_development() else "INFO",
                "propagate": False,
            },
            "coursepay.services.payment": {
                "handlers": [*default_handlers, "payments_file"]
                if use_files
                else default_handlers,
                "level": "INFO",
                "propagate": False,
            },
        },
        "root": {
            "handlers": default_handlers,
            "level": log_level,
        },
    }


# =============================================================================
# STRUCTLOG CONFIGURATION
# =============================================================================


def configure_structlog() -> None:
    processors = DEV_PROCESSORS if is_development() else PROD_PROCESSORS

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """
    Configure both standard Django logging and structlog.

    Called once from CoursepayConfig.ready().
    """
    logging.config.dictConfig(get_standard_logging_config())
    configure_structlog()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("refund_decided", refund_id=7, status="approved")
    """
    return structlog.get_logger(name)


# =============================================================================
# DJANGO MIDDLEWARE FOR REQUEST CONTEXT
# =============================================================================


class StructlogMiddleware:
    """
    Adds request context to structured logs.

    Every log entry written while the request is handled carries
    request_id, method and path; user_id and role are added when the JWT
    middleware has resolved them.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        from structlog.contextvars import bind_contextvars, clear_contextvars

        clear_contextvars()

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_contextvars(
            request_id=request_id,
            request_method=request.method,
            request_path=request.path,
        )

        user_id = getattr(request, "user_id", None)
        if user_id:
            bind_contextvars(user_id=user_id, user_role=getattr(request, "role", None))

        request.request_id = request_id

        response = self.get_response(request)
        response["X-Request-ID"] = request_id
        return response


# =============================================================================
# CELERY INTEGRATION
# =============================================================================


class CeleryLogger:
    """
    Helper class for logging in Celery tasks with task context.

    Usage:
        @shared_task
        def send_payment_notification_task(transaction_id, event):
            logger = CeleryLogger.get_logger(__name__)
            logger.info("notification_started", transaction_id=transaction_id)
    """

    @staticmethod
    def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
        from celery import current_task
        from structlog.contextvars import bind_contextvars

        logger = get_logger(name)

        if current_task and current_task.request.id:
            bind_contextvars(
                task_name=current_task.name,
                task_id=current_task.request.id,
                task_retries=current_task.request.retries,
            )

        return logger


__all__ = [
    "CeleryLogger",
    "StructlogMiddleware",
    "configure_logging",
    "configure_structlog",
    "get_log_level",
    "get_logger",
    "get_logs_dir",
    "get_standard_logging_config",
    "is_development",
    "mask_sensitive_values",
]
