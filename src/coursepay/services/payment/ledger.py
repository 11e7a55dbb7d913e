# coursepay/services/payment/ledger.py
"""
Payment transaction ledger.

The ledger is the only writer of PaymentTransaction rows at submission and
cancellation time, and the only writer of PaymentHistoryEntry rows. Every
state change is a conditional UPDATE guarded on the row's current state;
the history entry is written in the same database transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from coursepay.models import (
    Bundle,
    Course,
    HistoryAction,
    ItemType,
    PaymentHistoryEntry,
    PaymentMethodConfig,
    PaymentTransaction,
    RefundRequest,
    RefundStatus,
    TransactionStatus,
    VerificationStatus,
)
from coursepay.tasks.tasks import queue_payment_notification
from coursepayutils.log_helpers import log_business_event

from . import errors
from .bundles import BundleComposer
from .methods import PaymentMethodService
from .pricing import ZERO, PriceBreakdown, PricingCalculator, to_money
from .promo import PromoCodeValidator, PromoValidation

logger = logging.getLogger(__name__)


def state_label(status: str, verification_status: str) -> str:
    return f"{status}/{verification_status}"


@dataclass(frozen=True)
class PurchaseTarget:
    item_type: str
    course: Course | None
    bundle: Bundle | None
    base_price: Decimal
    currency: str

    @property
    def item_id(self) -> int:
        return self.course.course_id if self.course else self.bundle.bundle_id

    @property
    def title(self) -> str:
        return (self.course or self.bundle).title


@dataclass(frozen=True)
class PriceQuote:
    """
    Everything a learner is asked to pay for one item.

    processing_fee is charged on top of breakdown.final_amount.
    """

    target: PurchaseTarget
    breakdown: PriceBreakdown
    processing_fee: Decimal
    promo: PromoValidation | None = None
    payment_method: str | None = None

    @property
    def total_amount(self) -> Decimal:
        return self.breakdown.final_amount + self.processing_fee

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_type": self.target.item_type,
            "item_id": self.target.item_id,
            "title": self.target.title,
            "currency": self.target.currency,
            **self.breakdown.to_dict(),
            "processing_fee": str(self.processing_fee),
            "total_amount": str(self.total_amount),
            "promo_code": self.promo.code if self.promo else None,
            "payment_method": self.payment_method,
        }


class PaymentTransactionLedger:
    """
    Owns PaymentTransaction records and their lifecycle.

    State machine (status, verification_status):
        (pending, pending) -> (completed, approved)   approve
        (pending, pending) -> (failed, rejected)      reject
        (pending, pending) -> (cancelled, pending)    learner cancel
    Every other pair is terminal.
    """

    # =========================================================================
    # PRICING
    # =========================================================================

    @staticmethod
    def resolve_target(item_type: str, item_id: int) -> PurchaseTarget:
        """Load a purchasable course or bundle and its base price."""
        if item_type not in ItemType.values():
            raise errors.ValidationError(
                f"Unknown item type '{item_type}'.",
                details={"allowed": ItemType.values()},
            )
        default_currency = getattr(settings, "COURSEPAY_CURRENCY", "USD")

        if item_type == ItemType.COURSE.value:
            course = Course.objects.enabled().filter(pk=item_id).first()
            if not course or not course.is_published:
                raise errors.NotFound("Course not found.")
            if course.is_free:
                raise errors.ValidationError("This course is free and needs no payment.")
            return PurchaseTarget(
                item_type=item_type,
                course=course,
                bundle=None,
                base_price=to_money(course.price),
                currency=course.currency or default_currency,
            )

        bundle = Bundle.objects.enabled().filter(pk=item_id).first()
        if not bundle:
            raise errors.NotFound("Bundle not found.")
        composition = BundleComposer.for_bundle(bundle)
        if composition.course_count == 0:
            raise errors.ValidationError("This bundle has no courses.")
        return PurchaseTarget(
            item_type=item_type,
            course=None,
            bundle=bundle,
            base_price=composition.discounted_price,
            currency=bundle.currency or default_currency,
        )

    @staticmethod
    def quote(
        item_type: str,
        item_id: int,
        promo_code: str | None = None,
        payment_method: str | None = None,
        now: datetime | None = None,
    ) -> PriceQuote:
        """Price an item without persisting anything."""
        target = PaymentTransactionLedger.resolve_target(item_type, item_id)
        method = (
            PaymentMethodService.get_available(payment_method) if payment_method else None
        )
        return PaymentTransactionLedger._price(target, method, promo_code, now)

    @staticmethod
    def _price(
        target: PurchaseTarget,
        method: PaymentMethodConfig | None,
        promo_code: str | None,
        now: datetime | None,
    ) -> PriceQuote:
        promo = None
        if promo_code:
            promo = PromoCodeValidator.validate(
                promo_code, target.item_type, target.item_id, now=now
            )
            breakdown = PricingCalculator.compute(
                target.base_price, promo.discount_type, promo.discount_value
            )
        else:
            breakdown = PricingCalculator.compute(target.base_price)

        fee = (
            PricingCalculator.processing_fee(breakdown.final_amount, method.processing_fee)
            if method
            else ZERO
        )
        return PriceQuote(
            target=target,
            breakdown=breakdown,
            processing_fee=fee,
            promo=promo,
            payment_method=method.provider if method else None,
        )

    @staticmethod
    def _check_range(quote: PriceQuote, method: PaymentMethodConfig) -> None:
        total = quote.total_amount
        too_low = method.min_amount is not None and total < method.min_amount
        too_high = method.max_amount is not None and total > method.max_amount
        if too_low or too_high:
            raise errors.AmountOutOfRange(
                f"Amount {total} is outside the limits for {method.provider}.",
                details={
                    "amount": str(total),
                    "min_amount": (
                        str(method.min_amount) if method.min_amount is not None else None
                    ),
                    "max_amount": (
                        str(method.max_amount) if method.max_amount is not None else None
                    ),
                },
            )

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    @staticmethod
    def submit(
        user_id: int,
        item_type: str,
        item_id: int,
        payment_method: str,
        payment_reference: str,
        proof_ref: str,
        promo_code: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> PaymentTransaction:
        """
        Record a learner's manual payment for review.

        Raises:
            ValidationError: Missing reference or proof, unknown or disabled method
            NotFound / NotYetActive / Expired / MaxUsesReached / NotApplicable:
                promo code problems
            AmountOutOfRange: total (amount + fee) outside the method's limits
            Conflict: same (user, item, reference) is already pending
        """
        payment_reference = (payment_reference or "").strip()
        proof_ref = (proof_ref or "").strip()
        if not payment_reference:
            raise errors.ValidationError("Payment reference is required.")
        if not proof_ref:
            raise errors.ValidationError("Payment proof is required.")

        target = PaymentTransactionLedger.resolve_target(item_type, item_id)
        method = PaymentMethodService.get_available(payment_method)
        quote = PaymentTransactionLedger._price(target, method, promo_code, now)
        PaymentTransactionLedger._check_range(quote, method)

        item_filter = (
            {"course": target.course} if target.course else {"bundle": target.bundle}
        )
        duplicate = PaymentTransaction.objects.filter(
            user_id=user_id,
            payment_reference=payment_reference,
            status=TransactionStatus.PENDING.value,
            verification_status=VerificationStatus.PENDING.value,
            **item_filter,
        ).exists()
        if duplicate:
            raise errors.Conflict(
                "A payment with this reference is already awaiting verification.",
                details={"payment_reference": payment_reference},
            )

        try:
            with transaction.atomic():
                payment = PaymentTransaction.objects.create(
                    user_id=user_id,
                    course=target.course,
                    bundle=target.bundle,
                    payment_method=method.provider,
                    original_amount=quote.breakdown.original_amount,
                    discount_amount=quote.breakdown.discount_amount,
                    amount=quote.breakdown.final_amount,
                    processing_fee=quote.processing_fee,
                    currency=target.currency,
                    promo_code_id=quote.promo.promo_code_id if quote.promo else None,
                    payment_reference=payment_reference,
                    payment_proof_url=proof_ref,
                    notes=notes,
                    created_by=user_id,
                    updated_by=user_id,
                )
                PaymentTransactionLedger.record_history(
                    payment,
                    HistoryAction.SUBMIT.value,
                    performed_by=user_id,
                    previous_status=None,
                    new_status=state_label(*payment.state),
                    notes=notes,
                    metadata={
                        "item_type": target.item_type,
                        "item_id": target.item_id,
                        "payment_method": method.provider,
                        "promo_code": quote.promo.code if quote.promo else None,
                        "amount": str(payment.amount),
                        "processing_fee": str(payment.processing_fee),
                    },
                )
        except IntegrityError:
            raise errors.Conflict(
                "A payment with this reference is already awaiting verification.",
                details={"payment_reference": payment_reference},
            ) from None

        log_business_event(
            "payment_submitted",
            user_id=user_id,
            transaction_id=payment.transaction_id,
            amount=payment.total_amount,
            currency=payment.currency,
            status=state_label(*payment.state),
            payment_method=payment.payment_method,
        )
        return payment

    # =========================================================================
    # CANCELLATION
    # =========================================================================

    @staticmethod
    def cancel(transaction_id: int, user_id: int) -> PaymentTransaction:
        """
        Learner withdraws their own pending submission.

        Other learners' transactions are reported as NotFound.
        """
        payment = PaymentTransactionLedger.get(transaction_id, user_id=user_id)
        if payment.is_terminal:
            raise errors.InvalidStateTransition(
                f"Payment #{transaction_id} is already "
                f"{state_label(*payment.state)}.",
            )

        with transaction.atomic():
            updated = PaymentTransaction.objects.filter(
                pk=transaction_id,
                user_id=user_id,
                status=TransactionStatus.PENDING.value,
                verification_status=VerificationStatus.PENDING.value,
            ).update(
                status=TransactionStatus.CANCELLED.value,
                updated_by=user_id,
                updated_at=timezone.now(),
            )
            if not updated:
                raise errors.Conflict(
                    f"Payment #{transaction_id} was changed by someone else."
                )
            payment.refresh_from_db()
            PaymentTransactionLedger.record_history(
                payment,
                HistoryAction.CANCEL.value,
                performed_by=user_id,
                previous_status=state_label(
                    TransactionStatus.PENDING.value, VerificationStatus.PENDING.value
                ),
                new_status=state_label(*payment.state),
            )
            queue_payment_notification(transaction_id, "payment_cancelled")

        log_business_event(
            "payment_cancelled",
            user_id=user_id,
            transaction_id=transaction_id,
            amount=payment.total_amount,
            currency=payment.currency,
            status=state_label(*payment.state),
        )
        return payment

    # =========================================================================
    # AUDIT TRAIL
    # =========================================================================

    @staticmethod
    def record_history(
        payment: PaymentTransaction,
        action: str,
        performed_by: int | None,
        previous_status: str | None,
        new_status: str | None,
        notes: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentHistoryEntry:
        """Append one audit entry; must run inside the caller's transaction."""
        return PaymentHistoryEntry.objects.create(
            transaction=payment,
            action=action,
            performed_by_id=performed_by,
            previous_status=previous_status,
            new_status=new_status,
            notes=notes,
            metadata=metadata,
        )

    @staticmethod
    def history(transaction_id: int, user_id: int | None = None):
        payment = PaymentTransactionLedger.get(transaction_id, user_id=user_id)
        return PaymentHistoryEntry.objects.filter(transaction=payment).order_by(
            "created_at", "history_id"
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    @staticmethod
    def get(transaction_id: int, user_id: int | None = None) -> PaymentTransaction:
        queryset = PaymentTransaction.objects.live().select_related(
            "course", "bundle", "promo_code"
        )
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)
        payment = queryset.filter(pk=transaction_id).first()
        if not payment:
            raise errors.NotFound("Payment not found.")
        return payment

    @staticmethod
    def list_for_user(user_id: int):
        return (
            PaymentTransaction.objects.live()
            .filter(user_id=user_id)
            .select_related("course", "bundle", "promo_code")
        )

    @staticmethod
    def list_transactions(
        status: str | None = None,
        verification_status: str | None = None,
        payment_method: str | None = None,
        user_id: int | None = None,
    ):
        """Admin listing, newest first."""
        queryset = PaymentTransaction.objects.live().select_related(
            "user", "course", "bundle", "promo_code", "verified_by"
        )
        if status:
            queryset = queryset.filter(status=status)
        if verification_status:
            queryset = queryset.filter(verification_status=verification_status)
        if payment_method:
            queryset = queryset.filter(payment_method=payment_method)
        if user_id:
            queryset = queryset.filter(user_id=user_id)
        return queryset

    @staticmethod
    def analytics(
        start: datetime | None = None,
        end: datetime | None = None,
        payment_method: str | None = None,
    ) -> dict[str, Any]:
        """
        Payment totals for the admin dashboard.

        Revenue counts completed transactions only; refunded_total counts
        approved refunds against transactions in the window.
        """
        payments = PaymentTransaction.objects.live()
        if start:
            payments = payments.filter(created_at__gte=start)
        if end:
            payments = payments.filter(created_at__lte=end)
        if payment_method:
            payments = payments.filter(payment_method=payment_method)

        completed = Q(status=TransactionStatus.COMPLETED.value)
        totals = payments.aggregate(
            total=Count("transaction_id"),
            revenue=Sum("amount", filter=completed),
            fees=Sum("processing_fee", filter=completed),
            discounts=Sum("discount_amount", filter=completed),
        )
        by_status = {s: 0 for s in TransactionStatus.values()}
        for row in payments.values("status").annotate(count=Count("transaction_id")):
            by_status[row["status"]] = row["count"]

        by_method = [
            {
                "payment_method": row["payment_method"],
                "count": row["count"],
                "revenue": str(to_money(row["revenue"] or ZERO)),
            }
            for row in payments.values("payment_method")
            .annotate(
                count=Count("transaction_id"),
                revenue=Sum("amount", filter=completed),
            )
            .order_by("payment_method")
        ]

        refunded = RefundRequest.objects.live().filter(
            transaction__in=payments, status=RefundStatus.APPROVED.value
        ).aggregate(total=Sum("refund_amount"))["total"]

        return {
            "total_transactions": totals["total"],
            "by_status": by_status,
            "pending_verifications": payments.filter(
                status=TransactionStatus.PENDING.value,
                verification_status=VerificationStatus.PENDING.value,
            ).count(),
            "approved_revenue": str(to_money(totals["revenue"] or ZERO)),
            "processing_fees": str(to_money(totals["fees"] or ZERO)),
            "discounts_granted": str(to_money(totals["discounts"] or ZERO)),
            "refunded_total": str(to_money(refunded or ZERO)),
            "by_payment_method": by_method,
        }
