# coursepay/services/notification/providers.py
"""
Email providers used to tell learners about payment decisions.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from django.core.mail import send_mail

logger = logging.getLogger(__name__)


class NotificationProvider(ABC):
    """Abstract base class for notification providers."""

    @abstractmethod
    def send(
        self, recipient: str, message: str, subject: str | None = None, **kwargs
    ) -> bool:
        """
        Send a notification.

        Returns:
            True if sent successfully, False otherwise.
        """

    @abstractmethod
    def validate_config(self) -> bool:
        """Check if the provider is properly configured."""


class DjangoEmailProvider(NotificationProvider):
    """Email through Django's configured EMAIL_BACKEND."""

    def __init__(self, default_from_email: str):
        self.default_from_email = default_from_email

    def validate_config(self) -> bool:
        return bool(self.default_from_email)

    def send(
        self, recipient: str, message: str, subject: str | None = None, **kwargs
    ) -> bool:
        sent = send_mail(
            subject or "Payment update",
            message,
            self.default_from_email,
            [recipient],
            html_message=kwargs.get("html_content"),
        )
        logger.info(f"Email sent to {recipient} via Django mail backend")
        return sent == 1


class SendGridProvider(NotificationProvider):
    """Email provider using SendGrid."""

    def __init__(self, api_key: str, default_from_email: str):
        self.api_key = api_key
        self.default_from_email = default_from_email

    def validate_config(self) -> bool:
        return bool(self.api_key and self.default_from_email)

    def send(
        self, recipient: str, message: str, subject: str | None = None, **kwargs
    ) -> bool:
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Content, Email, Mail, To

        sg = SendGridAPIClient(api_key=self.api_key)
        content = Content("text/plain", message)
        html_content = kwargs.get("html_content")
        if html_content:
            content = Content("text/html", html_content)

        mail = Mail(
            Email(self.default_from_email),
            To(recipient),
            subject or "Payment update",
            content,
        )
        response = sg.client.mail.send.post(request_body=mail.get())

        if response.status_code in (200, 201, 202):
            logger.info(
                f"Email sent to {recipient} via SendGrid (status: {response.status_code})"
            )
            return True
        logger.error(f"SendGrid API returned status {response.status_code}")
        return False


class NotificationProviderFactory:
    """Picks SendGrid when an API key is configured, Django mail otherwise."""

    @staticmethod
    def get_provider(config: dict[str, Any]) -> NotificationProvider:
        from_email = config.get("DEFAULT_FROM_EMAIL", "")
        if config.get("SENDGRID_API_KEY"):
            return SendGridProvider(
                api_key=config["SENDGRID_API_KEY"], default_from_email=from_email
            )
        return DjangoEmailProvider(default_from_email=from_email)
