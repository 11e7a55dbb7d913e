# coursepay/models/payment.py
"""
Payment ledger models.

This module contains:
- PaymentMethodConfig: Admin-configured payment methods with amount limits and fees
- PaymentTransaction: A learner's payment submission and its verification state
- PaymentHistoryEntry: Append-only audit trail of transaction actions
- RefundRequest: Learner refund requests against settled transactions
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .base import AppendOnlyModel, BaseModel
from .choices import (
    HistoryAction,
    ItemType,
    PaymentProvider,
    RefundStatus,
    TransactionStatus,
    VerificationStatus,
)

# (status, verification_status) pairs a transaction may rest in
INITIAL_STATE = (TransactionStatus.PENDING.value, VerificationStatus.PENDING.value)
TERMINAL_STATES = {
    (TransactionStatus.COMPLETED.value, VerificationStatus.APPROVED.value),
    (TransactionStatus.FAILED.value, VerificationStatus.REJECTED.value),
    (TransactionStatus.CANCELLED.value, VerificationStatus.PENDING.value),
}


class PaymentMethodConfig(BaseModel):
    """
    Payment method settings, one row per provider.

    Holds the limits used by the ledger (min/max amount, processing fee) and
    the display details learners need to pay manually (account numbers,
    bank details, instructions). Disabled with is_enabled, never deleted.
    """

    payment_method_id = models.AutoField(
        db_column="PaymentMethodID",
        primary_key=True,
        help_text="Unique identifier for the payment method configuration",
    )
    provider = models.CharField(
        db_column="Provider",
        max_length=20,
        unique=True,
        choices=PaymentProvider.choices(),
        help_text="Payment provider key",
    )
    display_name = models.CharField(
        db_column="DisplayName",
        max_length=100,
        blank=True,
        default="",
        help_text="Name shown to learners at checkout",
    )
    is_enabled = models.BooleanField(
        db_column="IsEnabled",
        default=True,
        help_text="Whether learners can currently pay with this method",
    )
    min_amount = models.DecimalField(
        db_column="MinAmount",
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Smallest accepted total (after discount and fee)",
    )
    max_amount = models.DecimalField(
        db_column="MaxAmount",
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        help_text="Largest accepted total (NULL = no upper limit)",
    )
    processing_fee = models.DecimalField(
        db_column="ProcessingFeePercent",
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Processing fee as a percentage of the discounted amount",
    )
    account_name = models.CharField(
        db_column="AccountName",
        max_length=100,
        blank=True,
        null=True,
        help_text="Mobile wallet account holder name",
    )
    account_number = models.CharField(
        db_column="AccountNumber",
        max_length=20,
        blank=True,
        null=True,
        help_text="Mobile wallet account number",
    )
    bank_name = models.CharField(
        db_column="BankName",
        max_length=100,
        blank=True,
        null=True,
        help_text="Bank name for transfers",
    )
    account_title = models.CharField(
        db_column="AccountTitle",
        max_length=100,
        blank=True,
        null=True,
        help_text="Bank account title",
    )
    iban = models.CharField(
        db_column="IBAN",
        max_length=34,
        blank=True,
        null=True,
        help_text="International bank account number",
    )
    branch_code = models.CharField(
        db_column="BranchCode",
        max_length=10,
        blank=True,
        null=True,
        help_text="Bank branch code",
    )
    instructions = models.TextField(
        db_column="Instructions",
        blank=True,
        default="",
        help_text="Payment instructions shown to learners",
    )

    class Meta:
        managed = True
        db_table = "PaymentMethodConfigs"
        verbose_name = "Payment Method"
        verbose_name_plural = "Payment Methods"
        constraints = [
            models.CheckConstraint(
                condition=Q(processing_fee__gte=0) & Q(processing_fee__lte=100),
                name="payment_method_fee_percentage_range",
            ),
            models.CheckConstraint(
                condition=Q(max_amount__isnull=True)
                | Q(max_amount__gte=models.F("min_amount")),
                name="payment_method_min_not_above_max",
            ),
        ]
        ordering = ["provider"]
        app_label = "coursepay"

    def __str__(self):
        state = "enabled" if self.is_enabled else "disabled"
        return f"{self.display_name or self.provider} ({state})"

    def clean(self) -> None:
        if self.min_amount is not None and self.min_amount < 0:
            raise ValidationError({"min_amount": "Minimum amount cannot be negative."})
        if (
            self.max_amount is not None
            and self.min_amount is not None
            and self.max_amount < self.min_amount
        ):
            raise ValidationError(
                {"max_amount": "Maximum amount must not be below the minimum."}
            )
        if self.processing_fee is not None and not (
            Decimal("0") <= self.processing_fee <= Decimal("100")
        ):
            raise ValidationError(
                {"processing_fee": "Processing fee must be between 0 and 100 percent."}
            )

    @property
    def is_available(self) -> bool:
        return bool(self.is_enabled) and self.is_active == 1 and self.is_deleted == 0


class PaymentTransaction(BaseModel):
    """
    A learner's payment for one course or bundle.

    Created once at submission in (pending, pending). After that, only the
    verification workflow (approve / reject) or the owner's cancel may
    change it, each through a conditional UPDATE guarded on the current
    state.
    """

    transaction_id = models.AutoField(
        db_column="TransactionID",
        primary_key=True,
        help_text="Unique identifier for the transaction",
    )
    user = models.ForeignKey(
        "User",
        models.PROTECT,
        db_column="UserID",
        related_name="payment_transactions",
        help_text="Learner who submitted the payment",
    )
    course = models.ForeignKey(
        "Course",
        models.PROTECT,
        db_column="CourseID",
        blank=True,
        null=True,
        related_name="payment_transactions",
        help_text="Course being purchased (exclusive with bundle)",
    )
    bundle = models.ForeignKey(
        "Bundle",
        models.PROTECT,
        db_column="BundleID",
        blank=True,
        null=True,
        related_name="payment_transactions",
        help_text="Bundle being purchased (exclusive with course)",
    )
    payment_method = models.CharField(
        db_column="PaymentMethod",
        max_length=20,
        choices=PaymentProvider.choices(),
        help_text="Provider the learner paid through",
    )
    original_amount = models.DecimalField(
        db_column="OriginalAmount",
        max_digits=10,
        decimal_places=2,
        help_text="Item price before discount",
    )
    discount_amount = models.DecimalField(
        db_column="DiscountAmount",
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Discount granted by the promo code",
    )
    amount = models.DecimalField(
        db_column="Amount",
        max_digits=10,
        decimal_places=2,
        help_text="Original amount minus discount",
    )
    processing_fee = models.DecimalField(
        db_column="ProcessingFee",
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Payment method fee charged on top of the discounted amount",
    )
    currency = models.CharField(
        db_column="Currency",
        max_length=3,
        default="USD",
        help_text="ISO currency code",
    )
    promo_code = models.ForeignKey(
        "PromoCode",
        models.PROTECT,
        db_column="PromoCodeID",
        blank=True,
        null=True,
        related_name="payment_transactions",
        help_text="Promo code applied at submission",
    )
    payment_reference = models.CharField(
        db_column="PaymentReference",
        max_length=255,
        help_text="Reference the learner received from the payment provider",
    )
    payment_proof_url = models.CharField(
        db_column="PaymentProofURL",
        max_length=500,
        help_text="Stable reference to the uploaded proof of payment",
    )
    status = models.CharField(
        db_column="Status",
        max_length=12,
        choices=TransactionStatus.choices(),
        default=TransactionStatus.PENDING.value,
        help_text="Settlement status",
    )
    verification_status = models.CharField(
        db_column="VerificationStatus",
        max_length=12,
        choices=VerificationStatus.choices(),
        default=VerificationStatus.PENDING.value,
        help_text="Admin review status",
    )
    verified_by = models.ForeignKey(
        "User",
        models.PROTECT,
        db_column="VerifiedBy",
        blank=True,
        null=True,
        related_name="verified_transactions",
        help_text="Admin who approved or rejected the payment",
    )
    verified_at = models.DateTimeField(
        db_column="VerifiedAt",
        blank=True,
        null=True,
        help_text="When the payment was approved or rejected",
    )
    rejection_reason = models.TextField(
        db_column="RejectionReason",
        blank=True,
        null=True,
        help_text="Reason given when the payment was rejected",
    )
    notes = models.TextField(
        db_column="Notes",
        blank=True,
        null=True,
        help_text="Learner or admin notes",
    )
    receipt_number = models.CharField(
        db_column="ReceiptNumber",
        max_length=40,
        unique=True,
        blank=True,
        null=True,
        help_text="Receipt number issued on approval",
    )

    class Meta:
        managed = True
        db_table = "PaymentTransactions"
        verbose_name = "Payment Transaction"
        verbose_name_plural = "Payment Transactions"
        indexes = [
            models.Index(fields=["user", "status"], name="payment_user_status_idx"),
            models.Index(fields=["verification_status", "created_at"], name="payment_verif_created_idx"),
            models.Index(fields=["payment_method", "created_at"], name="payment_method_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(Q(course__isnull=False) & Q(bundle__isnull=True))
                | (Q(course__isnull=True) & Q(bundle__isnull=False)),
                name="payment_targets_exactly_one_item",
            ),
            models.CheckConstraint(
                condition=Q(amount__gte=0)
                & Q(discount_amount__gte=0)
                & Q(discount_amount__lte=models.F("original_amount")),
                name="payment_amounts_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(status="pending", verification_status="pending")
                | Q(status="completed", verification_status="approved")
                | Q(status="failed", verification_status="rejected")
                | Q(status="cancelled", verification_status="pending"),
                name="payment_status_pairs",
            ),
            models.UniqueConstraint(
                fields=["user", "course", "payment_reference"],
                condition=Q(
                    status="pending", verification_status="pending", course__isnull=False
                ),
                name="uniq_pending_course_payment_reference",
            ),
            models.UniqueConstraint(
                fields=["user", "bundle", "payment_reference"],
                condition=Q(
                    status="pending", verification_status="pending", bundle__isnull=False
                ),
                name="uniq_pending_bundle_payment_reference",
            ),
        ]
        ordering = ["-created_at", "-transaction_id"]
        app_label = "coursepay"

    def __str__(self):
        return (
            f"Payment #{self.transaction_id} {self.currency} {self.amount} "
            f"({self.status}/{self.verification_status})"
        )

    @property
    def state(self) -> tuple[str, str]:
        return (self.status, self.verification_status)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_settled(self) -> bool:
        return self.state == (
            TransactionStatus.COMPLETED.value,
            VerificationStatus.APPROVED.value,
        )

    @property
    def item_type(self) -> str:
        return ItemType.COURSE.value if self.course_id else ItemType.BUNDLE.value

    @property
    def item_id(self) -> int:
        return self.course_id or self.bundle_id

    @property
    def total_amount(self) -> Decimal:
        """Amount the learner was asked to pay, fee included."""
        return self.amount + self.processing_fee


class PaymentHistoryEntry(AppendOnlyModel):
    """
    One immutable line of a transaction's audit trail.

    Written in the same database transaction as the state change it
    records.
    """

    history_id = models.AutoField(
        db_column="HistoryID",
        primary_key=True,
        help_text="Unique identifier for the history entry",
    )
    transaction = models.ForeignKey(
        PaymentTransaction,
        models.PROTECT,
        db_column="TransactionID",
        related_name="history",
        help_text="Transaction the action was performed on",
    )
    action = models.CharField(
        db_column="Action",
        max_length=20,
        choices=HistoryAction.choices(),
        help_text="What happened",
    )
    performed_by = models.ForeignKey(
        "User",
        models.PROTECT,
        db_column="PerformedBy",
        blank=True,
        null=True,
        related_name="payment_actions",
        help_text="User who performed the action (NULL for automated callers)",
    )
    previous_status = models.CharField(
        db_column="PreviousStatus",
        max_length=30,
        blank=True,
        null=True,
        help_text="status/verification_status before the action",
    )
    new_status = models.CharField(
        db_column="NewStatus",
        max_length=30,
        blank=True,
        null=True,
        help_text="status/verification_status after the action",
    )
    notes = models.TextField(
        db_column="Notes",
        blank=True,
        null=True,
        help_text="Free-text notes or reasons",
    )
    metadata = models.JSONField(
        db_column="Metadata",
        blank=True,
        null=True,
        help_text="Structured details of the action",
    )

    class Meta:
        managed = True
        db_table = "PaymentHistory"
        verbose_name = "Payment History Entry"
        verbose_name_plural = "Payment History"
        indexes = [
            models.Index(fields=["transaction", "created_at"], name="history_txn_created_idx"),
        ]
        ordering = ["created_at", "history_id"]
        app_label = "coursepay"

    def __str__(self):
        return f"{self.action} on payment #{self.transaction_id}"


class RefundRequest(BaseModel):
    """
    A learner's request to get money back for a settled transaction.

    Approval is bookkeeping only; revoking access and moving money happen
    elsewhere.
    """

    refund_id = models.AutoField(
        db_column="RefundID",
        primary_key=True,
        help_text="Unique identifier for the refund request",
    )
    transaction = models.ForeignKey(
        PaymentTransaction,
        models.PROTECT,
        db_column="TransactionID",
        related_name="refunds",
        help_text="Settled transaction being refunded",
    )
    requested_by = models.ForeignKey(
        "User",
        models.PROTECT,
        db_column="RequestedBy",
        related_name="refund_requests",
        help_text="Learner who filed the request",
    )
    refund_amount = models.DecimalField(
        db_column="RefundAmount",
        max_digits=10,
        decimal_places=2,
        help_text="Amount requested back",
    )
    reason = models.TextField(
        db_column="Reason",
        help_text="Why the learner wants a refund",
    )
    status = models.CharField(
        db_column="Status",
        max_length=12,
        choices=RefundStatus.choices(),
        default=RefundStatus.PENDING.value,
        help_text="Refund request status",
    )
    processed_by = models.ForeignKey(
        "User",
        models.PROTECT,
        db_column="ProcessedBy",
        blank=True,
        null=True,
        related_name="processed_refunds",
        help_text="Admin who decided the request",
    )
    processed_at = models.DateTimeField(
        db_column="ProcessedAt",
        blank=True,
        null=True,
        help_text="When the request was decided",
    )
    refund_reference = models.CharField(
        db_column="RefundReference",
        max_length=255,
        blank=True,
        null=True,
        help_text="External reference of the money movement, if any",
    )
    notes = models.TextField(
        db_column="Notes",
        blank=True,
        null=True,
        help_text="Admin notes on the decision",
    )

    class Meta:
        managed = True
        db_table = "RefundRequests"
        verbose_name = "Refund Request"
        verbose_name_plural = "Refund Requests"
        indexes = [
            models.Index(fields=["transaction", "status"], name="refund_txn_status_idx"),
            models.Index(fields=["status", "created_at"], name="refund_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(refund_amount__gt=0),
                name="refund_amount_positive",
            ),
        ]
        ordering = ["-created_at", "-refund_id"]
        app_label = "coursepay"

    def __str__(self):
        return f"Refund {self.refund_amount} for payment #{self.transaction_id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status != RefundStatus.PENDING.value
