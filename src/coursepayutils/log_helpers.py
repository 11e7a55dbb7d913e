# coursepayutils/log_helpers.py
"""
Helper functions for common logging scenarios.

This module provides utility functions for logging API requests,
authentication events, payment ledger events and Celery tasks.

Usage:
    from coursepayutils.log_helpers import log_business_event

    log_business_event(
        "payment_approved",
        user_id=12,
        transaction_id=345,
        amount=Decimal("90.00"),
        currency="USD",
    )
"""

from decimal import Decimal
from typing import Any

from django.http import HttpRequest, HttpResponse

from .logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# API REQUEST LOGGING
# =============================================================================


def log_api_request(
    request: HttpRequest,
    response: HttpResponse | None = None,
    duration: float | None = None,
    error: Exception | None = None,
    **extra_context: Any,
) -> None:
    """
    Log an API request with context.

    Args:
        request: The Django HTTP request
        response: Optional HTTP response
        duration: Request duration in seconds
        error: Optional exception if request failed
        **extra_context: Additional context to log
    """
    context = {
        "request_method": request.method,
        "request_path": request.path,
        "request_user_agent": request.META.get("HTTP_USER_AGENT", ""),
        "request_ip": get_client_ip(request),
    }

    if response is not None:
        context["response_status"] = response.status_code

    if duration is not None:
        context["duration_seconds"] = round(duration, 4)

    if error:
        context["error_type"] = type(error).__name__
        context["error_message"] = str(error)

    context.update(extra_context)

    log_level = "error" if error else "info"
    getattr(logger, log_level)("api_request", **context)


def get_client_ip(request: HttpRequest) -> str:
    """Get the client IP address from request headers."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


# =============================================================================
# AUTHENTICATION LOGGING
# =============================================================================


def log_auth_event(
    event_type: str,
    user_id: int | None = None,
    email: str | None = None,
    success: bool = True,
    failure_reason: str | None = None,
    **extra_context: Any,
) -> None:
    """
    Log an authentication event.

    Example:
        log_auth_event('login', user_id=123, email='learner@example.com')
        log_auth_event('login', email='learner@example.com', success=False,
                       failure_reason='invalid_credentials')
    """
    context = {
        "auth_event": event_type,
        "auth_success": success,
    }

    if user_id:
        context["user_id"] = user_id

    if email:
        context["user_email"] = email

    if failure_reason:
        context["failure_reason"] = failure_reason

    context.update(extra_context)

    log_level = "warning" if not success else "info"
    getattr(logger, log_level)("auth_event", **context)


# =============================================================================
# BUSINESS EVENT LOGGING
# =============================================================================


def log_business_event(
    event_type: str,
    user_id: int | None = None,
    transaction_id: int | None = None,
    amount: Decimal | float | None = None,
    currency: str | None = None,
    status: str | None = None,
    **extra_context: Any,
) -> None:
    """
    Log a payment ledger event.

    Args:
        event_type: payment_submitted, payment_approved, payment_rejected,
            payment_cancelled, refund_requested or refund_decided
        user_id: Learner the event concerns
        transaction_id: Payment transaction ID
        amount: Monetary amount, logged as a string to keep cents exact
        currency: Currency code
        status: Resulting status
        **extra_context: Additional context
    """
    context: dict[str, Any] = {"business_event": event_type}

    if user_id:
        context["user_id"] = user_id

    if transaction_id:
        context["transaction_id"] = transaction_id

    if amount is not None:
        context["amount"] = str(amount)

    if currency:
        context["currency"] = currency

    if status:
        context["status"] = status

    context.update(extra_context)

    logger.info("business_event", **context)


# =============================================================================
# ERROR TRACKING
# =============================================================================


def log_exception(
    exception: Exception,
    context: dict[str, Any] | None = None,
    level: str = "error",
    logger_name: str | None = None,
) -> None:
    """Log an exception with full context."""
    exc_logger = get_logger(logger_name or __name__)

    log_context = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
    }

    if context:
        log_context.update(context)

    getattr(exc_logger, level)("exception", **log_context, exc_info=True)


def log_task(
    task_name: str,
    status: str,
    result: Any = None,
    error: Exception | None = None,
    duration: float | None = None,
    **extra_context: Any,
) -> None:
    """
    Log a Celery task execution.

    Example:
        log_task('send_payment_notification', status='success',
                 transaction_id=345, duration=0.42)
    """
    context = {
        "task_name": task_name,
        "task_status": status,
    }

    if result is not None:
        context["task_result"] = str(result)[:500]

    if error:
        context["exception_type"] = type(error).__name__
        context["exception_message"] = str(error)

    if duration is not None:
        context["duration_seconds"] = round(duration, 2)

    context.update(extra_context)

    log_level = "error" if status == "failure" else "info"
    getattr(logger, log_level)("celery_task", **context)


__all__ = [
    "get_client_ip",
    "log_api_request",
    "log_auth_event",
    "log_business_event",
    "log_exception",
    "log_task",
]
