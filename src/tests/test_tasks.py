"""
Unit tests for the notification tasks and email providers.
"""

from unittest.mock import MagicMock

import pytest


@pytest.mark.unit
class TestSendPaymentNotificationTask:
    """Tests for send_payment_notification_task."""

    def test_sends_approval_email(self, approved_payment, learner, mailoutbox):
        from coursepay.tasks.tasks import send_payment_notification_task

        result = send_payment_notification_task(
            approved_payment.transaction_id, "payment_approved"
        )

        assert result == {"email": True}
        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.subject == "Payment approved"
        assert message.to == [learner.email]
        assert approved_payment.receipt_number in message.body

    def test_rejection_email_carries_reason(self, pending_payment, admin_user, mailoutbox):
        from coursepay.services.payment.verification import PaymentVerificationWorkflow
        from coursepay.tasks.tasks import send_payment_notification_task

        PaymentVerificationWorkflow.reject(
            pending_payment.transaction_id, admin_user.user_id, "Amount does not match"
        )
        send_payment_notification_task(pending_payment.transaction_id, "payment_rejected")

        assert mailoutbox[0].subject == "Payment rejected"
        assert "Amount does not match" in mailoutbox[0].body

    def test_unknown_event_raises(self, pending_payment):
        from coursepay.tasks.tasks import send_payment_notification_task

        with pytest.raises(ValueError):
            send_payment_notification_task(pending_payment.transaction_id, "payment_lost")

    def test_delegates_to_service(self, pending_payment, monkeypatch):
        from coursepay.tasks.tasks import send_payment_notification_task

        mock_service = MagicMock()
        mock_service.notify_payment.return_value = {"email": True}
        monkeypatch.setattr(
            "coursepay.services.notification.NotificationService",
            lambda: mock_service,
        )

        send_payment_notification_task(pending_payment.transaction_id, "payment_cancelled")
        mock_service.notify_payment.assert_called_once_with(
            pending_payment.transaction_id, "payment_cancelled"
        )


@pytest.mark.unit
class TestSendRefundNotificationTask:
    def test_sends_refund_email(self, approved_payment, learner, admin_user, mailoutbox):
        from coursepay.services.payment.refund import RefundRequestManager
        from coursepay.tasks.tasks import send_refund_notification_task

        refund = RefundRequestManager.create(
            approved_payment.transaction_id, learner.user_id, "25.00", "Partial refund"
        )
        RefundRequestManager.decide(refund.refund_id, "approved", admin_user.user_id)

        send_refund_notification_task(refund.refund_id, "refund_approved")
        assert mailoutbox[0].subject == "Refund approved"
        assert "25.00" in mailoutbox[0].body


@pytest.mark.unit
class TestQueueingOnCommit:
    """Notifications go out only after the decision commits."""

    def test_approval_queues_notification(
        self, pending_payment, admin_user, mailoutbox, django_capture_on_commit_callbacks
    ):
        from coursepay.services.payment.verification import PaymentVerificationWorkflow

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            PaymentVerificationWorkflow.approve(
                pending_payment.transaction_id, admin_id=admin_user.user_id
            )

        assert len(callbacks) == 1
        assert [m.subject for m in mailoutbox] == ["Payment approved"]

    def test_failed_approval_queues_nothing(
        self, learner, course, admin_user, make_promo, submit_payment,
        django_capture_on_commit_callbacks,
    ):
        from coursepay.models import PromoCode
        from coursepay.services.payment import errors
        from coursepay.services.payment.verification import PaymentVerificationWorkflow

        promo = make_promo("ONCE", max_uses=1)
        promo_payment = submit_payment(learner, course, reference="EP-ONCE", promo_code="ONCE")
        # Another payment took the last use in the meantime
        PromoCode.objects.filter(pk=promo.pk).update(used_count=1)

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(errors.MaxUsesReached):
                PaymentVerificationWorkflow.approve(
                    promo_payment.transaction_id, admin_id=admin_user.user_id
                )

        assert callbacks == []

    def test_cancel_queues_notification(
        self, pending_payment, learner, mock_celery, django_capture_on_commit_callbacks
    ):
        from coursepay.services.payment.ledger import PaymentTransactionLedger

        with django_capture_on_commit_callbacks(execute=True):
            PaymentTransactionLedger.cancel(pending_payment.transaction_id, learner.user_id)

        mock_celery.assert_called_once_with(
            pending_payment.transaction_id, "payment_cancelled"
        )

    def test_notifications_can_be_switched_off(
        self, pending_payment, admin_user, settings, mailoutbox,
        django_capture_on_commit_callbacks,
    ):
        from coursepay.services.payment.verification import PaymentVerificationWorkflow

        settings.COURSEPAY_NOTIFY_ON_DECISION = False
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            PaymentVerificationWorkflow.approve(
                pending_payment.transaction_id, admin_id=admin_user.user_id
            )

        assert callbacks == []
        assert mailoutbox == []


@pytest.mark.unit
class TestNotificationProviderFactory:
    def test_django_mail_without_key(self):
        from coursepay.services.notification import (
            DjangoEmailProvider,
            NotificationProviderFactory,
        )

        provider = NotificationProviderFactory.get_provider(
            {"SENDGRID_API_KEY": "", "DEFAULT_FROM_EMAIL": "payments@example.com"}
        )
        assert isinstance(provider, DjangoEmailProvider)
        assert provider.validate_config()

    def test_sendgrid_with_key(self):
        from coursepay.services.notification import (
            NotificationProviderFactory,
            SendGridProvider,
        )

        provider = NotificationProviderFactory.get_provider(
            {"SENDGRID_API_KEY": "SG.test", "DEFAULT_FROM_EMAIL": "payments@example.com"}
        )
        assert isinstance(provider, SendGridProvider)
        assert provider.validate_config()

    def test_sendgrid_send(self, monkeypatch):
        from coursepay.services.notification import SendGridProvider

        client = MagicMock()
        client.client.mail.send.post.return_value.status_code = 202
        monkeypatch.setattr("sendgrid.SendGridAPIClient", lambda api_key: client)

        provider = SendGridProvider("SG.test", "payments@example.com")
        assert provider.send("learner@example.com", "Approved", subject="Payment approved")
        client.client.mail.send.post.assert_called_once()
