# coursepay/apps.py
"""
Django app configuration for the course payment application.

This module initializes the application and configures structured logging.
"""

from django.apps import AppConfig


class CoursepayConfig(AppConfig):
    """Configuration for the coursepay Django application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "coursepay"
    verbose_name = "Course Payments"

    def ready(self) -> None:
        """
        Configure structured logging once Django has loaded settings.
        """
        from django.conf import settings

        if getattr(settings, "USE_STRUCTURED_LOGGING", True):
            from coursepayutils.logging import configure_logging

            configure_logging()
