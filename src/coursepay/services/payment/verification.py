# coursepay/services/payment/verification.py
"""
Admin verification of manual payments.

approve() and reject() are the single entry points for deciding a pending
transaction, for human reviewers and automated gateway callbacks alike.
Each decision is a conditional UPDATE on (pending, pending); the caller
that loses a race gets Conflict, never a silent overwrite.
"""

import logging
from typing import Any

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from coursepay.models import (
    HistoryAction,
    PaymentTransaction,
    TransactionStatus,
    VerificationStatus,
)
from coursepay.services.enrollment_service import EnrollmentService
from coursepay.tasks.tasks import queue_payment_notification
from coursepayutils.log_helpers import log_business_event

from . import errors
from .ledger import PaymentTransactionLedger, state_label
from .promo import PromoCodeValidator

logger = logging.getLogger(__name__)

PENDING_LABEL = state_label(
    TransactionStatus.PENDING.value, VerificationStatus.PENDING.value
)


class PaymentVerificationWorkflow:
    """Admin-driven decisions on pending ledger records."""

    @staticmethod
    def _load_pending(transaction_id: int) -> PaymentTransaction:
        payment = PaymentTransactionLedger.get(transaction_id)
        if payment.is_terminal:
            raise errors.InvalidStateTransition(
                f"Payment #{transaction_id} is already {state_label(*payment.state)}.",
                details={
                    "status": payment.status,
                    "verification_status": payment.verification_status,
                },
            )
        return payment

    @staticmethod
    def _decide(
        payment: PaymentTransaction, admin_id: int, **changes: Any
    ) -> PaymentTransaction:
        """Conditional write from (pending, pending); Conflict if it matched nothing."""
        updated = PaymentTransaction.objects.filter(
            pk=payment.transaction_id,
            status=TransactionStatus.PENDING.value,
            verification_status=VerificationStatus.PENDING.value,
        ).update(
            verified_by_id=admin_id,
            verified_at=timezone.now(),
            updated_by=admin_id,
            updated_at=timezone.now(),
            **changes,
        )
        if not updated:
            logger.warning(
                f"Payment {payment.transaction_id} was decided concurrently; "
                f"admin {admin_id} lost the race"
            )
            raise errors.Conflict(
                f"Payment #{payment.transaction_id} was already decided by someone else."
            )
        payment.refresh_from_db()
        return payment

    @staticmethod
    def approve(
        transaction_id: int,
        admin_id: int,
        notes: str | None = None,
        enrollment=EnrollmentService,
    ) -> PaymentTransaction:
        """
        Approve a pending payment.

        In one database transaction: moves the record to (completed,
        approved), stamps verifier and receipt number, consumes one use of
        the promo code, grants enrollment and appends the history entry.
        If the promo code can no longer be redeemed, nothing is written and
        the payment stays pending.
        """
        payment = PaymentVerificationWorkflow._load_pending(transaction_id)

        with transaction.atomic():
            payment = PaymentVerificationWorkflow._decide(
                payment,
                admin_id,
                status=TransactionStatus.COMPLETED.value,
                verification_status=VerificationStatus.APPROVED.value,
                receipt_number=PaymentVerificationWorkflow.receipt_number(payment),
                notes=notes if notes else payment.notes,
            )
            if payment.promo_code_id:
                PromoCodeValidator.consume(payment.promo_code_id, payment.created_at)

            granted = enrollment.grant(payment)
            PaymentTransactionLedger.record_history(
                payment,
                HistoryAction.APPROVE.value,
                performed_by=admin_id,
                previous_status=PENDING_LABEL,
                new_status=state_label(*payment.state),
                notes=notes,
                metadata={
                    "receipt_number": payment.receipt_number,
                    "promo_code_id": payment.promo_code_id,
                    "enrollments": len(granted),
                },
            )
            queue_payment_notification(transaction_id, "payment_approved")

        log_business_event(
            "payment_approved",
            user_id=payment.user_id,
            transaction_id=transaction_id,
            amount=payment.total_amount,
            currency=payment.currency,
            status=state_label(*payment.state),
            verified_by=admin_id,
        )
        return payment

    @staticmethod
    def reject(
        transaction_id: int, admin_id: int, rejection_reason: str
    ) -> PaymentTransaction:
        """Reject a pending payment; a non-blank reason is mandatory."""
        rejection_reason = (rejection_reason or "").strip()
        if not rejection_reason:
            raise errors.ValidationError("A rejection reason is required.")

        payment = PaymentVerificationWorkflow._load_pending(transaction_id)

        with transaction.atomic():
            payment = PaymentVerificationWorkflow._decide(
                payment,
                admin_id,
                status=TransactionStatus.FAILED.value,
                verification_status=VerificationStatus.REJECTED.value,
                rejection_reason=rejection_reason,
            )
            PaymentTransactionLedger.record_history(
                payment,
                HistoryAction.REJECT.value,
                performed_by=admin_id,
                previous_status=PENDING_LABEL,
                new_status=state_label(*payment.state),
                notes=rejection_reason,
            )
            queue_payment_notification(transaction_id, "payment_rejected")

        log_business_event(
            "payment_rejected",
            user_id=payment.user_id,
            transaction_id=transaction_id,
            amount=payment.total_amount,
            currency=payment.currency,
            status=state_label(*payment.state),
            verified_by=admin_id,
        )
        return payment

    @staticmethod
    def receipt_number(payment: PaymentTransaction) -> str:
        prefix = getattr(settings, "COURSEPAY_RECEIPT_PREFIX", "RCP")
        return f"{prefix}-{timezone.now():%Y%m%d}-{payment.transaction_id:06d}"
