import time

from celery import shared_task
from django.conf import settings
from django.db import transaction

from coursepayutils.log_helpers import log_task
from coursepayutils.logging import CeleryLogger


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_payment_notification_task(self, transaction_id: int, event: str):
    """
    Async task to tell a learner about a terminal payment transition.

    Args:
        transaction_id: Payment transaction ID
        event: payment_approved, payment_rejected or payment_cancelled
    """
    from coursepay.services.notification import NotificationService

    started = time.time()
    try:
        results = NotificationService().notify_payment(transaction_id, event)
    except Exception as exc:
        log_task(
            "send_payment_notification",
            status="retry",
            error=exc,
            transaction_id=transaction_id,
            notification_event=event,
        )
        raise self.retry(exc=exc) from exc

    log_task(
        "send_payment_notification",
        status="success",
        result=results,
        duration=time.time() - started,
        transaction_id=transaction_id,
        notification_event=event,
    )
    return results


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_refund_notification_task(self, refund_id: int, event: str):
    """Async task to tell a learner how their refund request was decided."""
    from coursepay.services.notification import NotificationService

    task_logger = CeleryLogger.get_logger(__name__)
    try:
        results = NotificationService().notify_refund(refund_id, event)
    except Exception as exc:
        task_logger.error(
            "refund_notification_failed", refund_id=refund_id, error=str(exc)
        )
        raise self.retry(exc=exc) from exc

    task_logger.info("refund_notification_sent", refund_id=refund_id, result=results)
    return results


def queue_payment_notification(transaction_id: int, event: str) -> None:
    """Enqueue a payment notification once the surrounding transaction commits."""
    if not getattr(settings, "COURSEPAY_NOTIFY_ON_DECISION", True):
        return
    transaction.on_commit(
        lambda: send_payment_notification_task.delay(transaction_id, event)
    )


def queue_refund_notification(refund_id: int, event: str) -> None:
    """Enqueue a refund notification once the surrounding transaction commits."""
    if not getattr(settings, "COURSEPAY_NOTIFY_ON_DECISION", True):
        return
    transaction.on_commit(lambda: send_refund_notification_task.delay(refund_id, event))
