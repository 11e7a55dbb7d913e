# coursepay/services/payment/refund.py
"""
Refund requests against settled payments.

Deciding a refund is bookkeeping: approval neither revokes enrollment nor
moves money. Both happen outside this service; refund_reference records
the external money movement when an admin has one.
"""

import logging
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from coursepay.models import (
    HistoryAction,
    PaymentTransaction,
    RefundRequest,
    RefundStatus,
)
from coursepay.tasks.tasks import queue_refund_notification
from coursepayutils.log_helpers import log_business_event

from . import errors
from .ledger import PaymentTransactionLedger, state_label
from .pricing import ZERO, to_money

logger = logging.getLogger(__name__)

OPEN_REFUND_STATUSES = (RefundStatus.PENDING.value, RefundStatus.APPROVED.value)


class RefundRequestManager:
    """Creates and resolves refund requests."""

    @staticmethod
    def create(
        transaction_id: int,
        requester_id: int,
        amount: Any,
        reason: str,
    ) -> RefundRequest:
        """
        File a pending refund request for one of the requester's payments.

        Raises:
            ValidationError: Blank reason or unparseable amount
            NotFound: Payment does not exist or belongs to someone else
            Precondition: Payment is not (completed, approved)
            InvalidAmount: amount <= 0, above the paid amount, or above what
                is left after other pending/approved refunds
        """
        reason = (reason or "").strip()
        if not reason:
            raise errors.ValidationError("A refund reason is required.")
        refund_amount = to_money(amount)

        payment = PaymentTransactionLedger.get(transaction_id, user_id=requester_id)
        if not payment.is_settled:
            raise errors.Precondition(
                "Refunds can only be requested for approved payments.",
                details={"status": state_label(*payment.state)},
            )
        if refund_amount <= 0 or refund_amount > payment.amount:
            raise errors.InvalidAmount(
                f"Refund amount must be above 0 and at most {payment.amount}.",
                details={"amount": str(refund_amount), "paid": str(payment.amount)},
            )

        with transaction.atomic():
            # Serialise refund requests per payment so the running total holds
            PaymentTransaction.objects.select_for_update().filter(
                pk=payment.transaction_id
            ).first()
            already = RefundRequestManager.requested_total(payment.transaction_id)
            if already + refund_amount > payment.amount:
                raise errors.InvalidAmount(
                    "Refund requests would exceed the amount paid.",
                    details={
                        "amount": str(refund_amount),
                        "already_requested": str(already),
                        "paid": str(payment.amount),
                    },
                )

            refund = RefundRequest.objects.create(
                transaction=payment,
                requested_by_id=requester_id,
                refund_amount=refund_amount,
                reason=reason,
                created_by=requester_id,
                updated_by=requester_id,
            )
            PaymentTransactionLedger.record_history(
                payment,
                HistoryAction.REFUND_REQUEST.value,
                performed_by=requester_id,
                previous_status=state_label(*payment.state),
                new_status=state_label(*payment.state),
                notes=reason,
                metadata={
                    "refund_id": refund.refund_id,
                    "refund_amount": str(refund_amount),
                },
            )

        log_business_event(
            "refund_requested",
            user_id=requester_id,
            transaction_id=payment.transaction_id,
            amount=refund_amount,
            currency=payment.currency,
            status=refund.status,
            refund_id=refund.refund_id,
        )
        return refund

    @staticmethod
    def decide(
        refund_id: int,
        decision: str,
        admin_id: int,
        notes: str | None = None,
        refund_reference: str | None = None,
    ) -> RefundRequest:
        """Move a pending refund to approved or rejected; both are terminal."""
        if decision not in RefundStatus.decisions():
            raise errors.ValidationError(
                f"Decision must be one of {', '.join(RefundStatus.decisions())}.",
            )

        refund = RefundRequestManager.get(refund_id)
        if refund.is_terminal:
            raise errors.InvalidStateTransition(
                f"Refund #{refund_id} is already {refund.status}."
            )

        with transaction.atomic():
            updated = RefundRequest.objects.filter(
                pk=refund_id, status=RefundStatus.PENDING.value
            ).update(
                status=decision,
                processed_by_id=admin_id,
                processed_at=timezone.now(),
                notes=notes,
                refund_reference=refund_reference,
                updated_by=admin_id,
                updated_at=timezone.now(),
            )
            if not updated:
                raise errors.Conflict(
                    f"Refund #{refund_id} was already decided by someone else."
                )
            refund.refresh_from_db()

            action = (
                HistoryAction.REFUND_APPROVE.value
                if decision == RefundStatus.APPROVED.value
                else HistoryAction.REFUND_REJECT.value
            )
            payment = refund.transaction
            PaymentTransactionLedger.record_history(
                payment,
                action,
                performed_by=admin_id,
                previous_status=state_label(*payment.state),
                new_status=state_label(*payment.state),
                notes=notes,
                metadata={
                    "refund_id": refund_id,
                    "refund_amount": str(refund.refund_amount),
                    "refund_reference": refund_reference,
                },
            )
            queue_refund_notification(refund_id, f"refund_{decision}")

        log_business_event(
            "refund_decided",
            user_id=refund.requested_by_id,
            transaction_id=refund.transaction_id,
            amount=refund.refund_amount,
            currency=payment.currency,
            status=decision,
            refund_id=refund_id,
            processed_by=admin_id,
        )
        return refund

    @staticmethod
    def get(refund_id: int, user_id: int | None = None) -> RefundRequest:
        queryset = RefundRequest.objects.live().select_related("transaction")
        if user_id is not None:
            queryset = queryset.filter(requested_by_id=user_id)
        refund = queryset.filter(pk=refund_id).first()
        if not refund:
            raise errors.NotFound("Refund request not found.")
        return refund

    @staticmethod
    def list_refunds(status: str | None = None, user_id: int | None = None):
        queryset = RefundRequest.objects.live().select_related(
            "transaction", "requested_by", "processed_by"
        )
        if status:
            queryset = queryset.filter(status=status)
        if user_id is not None:
            queryset = queryset.filter(requested_by_id=user_id)
        return queryset

    @staticmethod
    def requested_total(transaction_id: int) -> Decimal:
        """Sum of pending and approved refunds against a payment."""
        total = RefundRequest.objects.live().filter(
            transaction_id=transaction_id, status__in=OPEN_REFUND_STATUSES
        ).aggregate(total=Sum("refund_amount"))["total"]
        return to_money(total or ZERO)
