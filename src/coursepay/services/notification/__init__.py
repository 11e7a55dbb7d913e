# coursepay/services/notification/__init__.py
"""
Notification services package.

Provides the email providers (Django mail, SendGrid) and the
NotificationService that renders payment decision messages.
"""

from .notification_service import NotificationService
from .providers import (
    DjangoEmailProvider,
    NotificationProvider,
    NotificationProviderFactory,
    SendGridProvider,
)

__all__ = [
    "DjangoEmailProvider",
    "NotificationProvider",
    "NotificationProviderFactory",
    "NotificationService",
    "SendGridProvider",
]
