# coursepay/services/notification/notification_service.py
"""
Payment notification service.

Tells learners about terminal transitions of their payments and refund
requests. Read-only towards the ledger: it loads records, renders a
message and hands it to an email provider.
"""

import logging
from typing import Any

from django.conf import settings

from coursepay.models import PaymentTransaction, RefundRequest

from .providers import NotificationProviderFactory

logger = logging.getLogger(__name__)

PAYMENT_EVENTS = {
    "payment_approved": (
        "Payment approved",
        "Your payment #{id} of {currency} {total} for {item} has been approved. "
        "Receipt: {receipt}. You now have access.",
    ),
    "payment_rejected": (
        "Payment rejected",
        "Your payment #{id} for {item} was rejected: {reason}",
    ),
    "payment_cancelled": (
        "Payment cancelled",
        "Your payment #{id} for {item} has been cancelled.",
    ),
}

REFUND_EVENTS = {
    "refund_approved": (
        "Refund approved",
        "Your refund request of {currency} {amount} for payment #{id} was approved.",
    ),
    "refund_rejected": (
        "Refund rejected",
        "Your refund request of {currency} {amount} for payment #{id} was rejected.",
    ),
}


class NotificationService:
    """Renders and sends payment decision notifications."""

    def __init__(self):
        self.config = {
            "SENDGRID_API_KEY": getattr(settings, "SENDGRID_API_KEY", ""),
            "DEFAULT_FROM_EMAIL": getattr(settings, "DEFAULT_FROM_EMAIL", ""),
        }

    def notify_payment(self, transaction_id: int, event: str) -> dict[str, Any]:
        if event not in PAYMENT_EVENTS:
            raise ValueError(f"Unknown payment event: {event}")

        payment = PaymentTransaction.objects.select_related(
            "user", "course", "bundle"
        ).get(pk=transaction_id)
        subject, template = PAYMENT_EVENTS[event]
        item = payment.course or payment.bundle
        message = template.format(
            id=payment.transaction_id,
            currency=payment.currency,
            total=payment.total_amount,
            item=item.title,
            receipt=payment.receipt_number or "-",
            reason=payment.rejection_reason or "",
        )
        return self._send(payment.user, subject, message)

    def notify_refund(self, refund_id: int, event: str) -> dict[str, Any]:
        if event not in REFUND_EVENTS:
            raise ValueError(f"Unknown refund event: {event}")

        refund = RefundRequest.objects.select_related(
            "requested_by", "transaction"
        ).get(pk=refund_id)
        subject, template = REFUND_EVENTS[event]
        message = template.format(
            id=refund.transaction_id,
            currency=refund.transaction.currency,
            amount=refund.refund_amount,
        )
        return self._send(refund.requested_by, subject, message)

    def _send(self, user, subject: str, message: str) -> dict[str, Any]:
        if not user.email:
            logger.warning(f"No email address for user {user.pk}; notification skipped")
            return {"email": False}

        provider = NotificationProviderFactory.get_provider(self.config)
        return {"email": provider.send(user.email, message, subject=subject)}
