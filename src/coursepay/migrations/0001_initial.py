# Initial schema for the course payment ledger.
#
# Tables:
# 1. Users (learners and payment admins)
# 2. Courses, Bundles, BundleCourses
# 3. PromoCodes
# 4. PaymentMethodConfigs, PaymentTransactions, PaymentHistory, RefundRequests
# 5. Enrollments

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import coursepay.models.user


def _audit_fields():
    return [
        (
            "is_active",
            models.IntegerField(
                blank=True,
                db_column="IsActive",
                default=1,
                help_text="Flag indicating if the record is active (1=active, 0=inactive)",
                null=True,
            ),
        ),
        (
            "is_deleted",
            models.IntegerField(
                blank=True,
                db_column="IsDeleted",
                default=0,
                help_text="Flag indicating if the record is soft-deleted (1=deleted, 0=not deleted)",
                null=True,
            ),
        ),
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_column="CreatedAt",
                help_text="Timestamp when the record was created",
                null=True,
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                db_column="UpdatedAt",
                help_text="Timestamp when the record was last updated",
                null=True,
            ),
        ),
        (
            "created_by",
            models.IntegerField(
                blank=True,
                db_column="CreatedBy",
                help_text="ID of the user who created this record",
                null=True,
            ),
        ),
        (
            "updated_by",
            models.IntegerField(
                blank=True,
                db_column="UpdatedBy",
                help_text="ID of the user who last updated this record",
                null=True,
            ),
        ),
    ]


PROVIDER_CHOICES = [
    ("easypaisa", "Easypaisa"),
    ("jazzcash", "Jazzcash"),
    ("bank_transfer", "Bank Transfer"),
    ("stripe", "Stripe"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        # =====================================================================
        # 1. Users
        # =====================================================================
        migrations.CreateModel(
            name="User",
            fields=[
                *_audit_fields(),
                (
                    "user_id",
                    models.AutoField(
                        db_column="UserID",
                        help_text="Unique identifier for the user",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "full_name",
                    models.CharField(
                        db_column="FullName",
                        help_text="User's full name",
                        max_length=255,
                    ),
                ),
                (
                    "email",
                    models.CharField(
                        db_column="Email",
                        help_text="User's email address (used for login and payment notices)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "password",
                    models.CharField(
                        db_column="PasswordHash",
                        help_text="Hashed password",
                        max_length=255,
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[("Admin", "Administrator"), ("User", "Learner")],
                        db_column="Role",
                        help_text="User role determining permissions",
                        max_length=12,
                    ),
                ),
                (
                    "phone",
                    models.CharField(
                        blank=True,
                        db_column="Phone",
                        help_text="Contact number, used for mobile-wallet payment follow-ups",
                        max_length=20,
                        null=True,
                    ),
                ),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into the admin site.",
                    ),
                ),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions.",
                    ),
                ),
                (
                    "last_login",
                    models.DateTimeField(
                        blank=True,
                        db_column="LastLogin",
                        help_text="Last login timestamp",
                        null=True,
                    ),
                ),
            ],
            options={
                "verbose_name": "User",
                "verbose_name_plural": "Users",
                "db_table": "Users",
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["email", "is_active"], name="user_email_active_idx"
                    ),
                    models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
                ],
            },
            managers=[
                ("objects", coursepay.models.user.UserManager()),
            ],
        ),
        # =====================================================================
        # 2. Catalogue
        # =====================================================================
        migrations.CreateModel(
            name="Course",
            fields=[
                *_audit_fields(),
                (
                    "course_id",
                    models.AutoField(
                        db_column="CourseID",
                        help_text="Unique identifier for the course",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "title",
                    models.CharField(
                        db_column="Title",
                        help_text="Course title shown at checkout",
                        max_length=255,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        db_column="Price",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="List price of the course",
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        db_column="Currency",
                        default="USD",
                        help_text="ISO currency code of the price",
                        max_length=3,
                    ),
                ),
                (
                    "is_free",
                    models.BooleanField(
                        db_column="IsFree",
                        default=False,
                        help_text="Free courses never go through payment verification",
                    ),
                ),
                (
                    "duration_hours",
                    models.DecimalField(
                        db_column="DurationHours",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Total course duration in hours",
                        max_digits=7,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("published", "Published")],
                        db_column="Status",
                        default="draft",
                        help_text="Publication status; only published courses can be bundled",
                        max_length=12,
                    ),
                ),
            ],
            options={
                "verbose_name": "Course",
                "verbose_name_plural": "Courses",
                "db_table": "Courses",
                "ordering": ["title"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["status", "is_active"], name="course_status_active_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Bundle",
            fields=[
                *_audit_fields(),
                (
                    "bundle_id",
                    models.AutoField(
                        db_column="BundleID",
                        help_text="Unique identifier for the bundle",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "title",
                    models.CharField(
                        db_column="Title", help_text="Bundle title", max_length=255
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True,
                        db_column="Description",
                        default="",
                        help_text="Marketing description of the bundle",
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        db_column="Price",
                        decimal_places=2,
                        help_text="Price override for the whole bundle",
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00"))
                        ],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        db_column="Currency",
                        default="USD",
                        help_text="ISO currency code of the price",
                        max_length=3,
                    ),
                ),
                (
                    "discount_percentage",
                    models.DecimalField(
                        db_column="DiscountPercentage",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Discount (0-100) applied on top of the price override",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
            ],
            options={
                "verbose_name": "Bundle",
                "verbose_name_plural": "Bundles",
                "db_table": "Bundles",
                "ordering": ["-created_at"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["is_active", "is_deleted"], name="bundle_active_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BundleCourse",
            fields=[
                (
                    "bundle_course_id",
                    models.AutoField(
                        db_column="BundleCourseID",
                        help_text="Unique identifier for the membership row",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "order",
                    models.PositiveIntegerField(
                        db_column="SortOrder",
                        default=0,
                        help_text="Display order of the course inside the bundle",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_column="CreatedAt",
                        help_text="When the course was added to the bundle",
                    ),
                ),
                (
                    "bundle",
                    models.ForeignKey(
                        db_column="BundleID",
                        help_text="Bundle the course belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_links",
                        to="coursepay.bundle",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        db_column="CourseID",
                        help_text="Course included in the bundle",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bundle_links",
                        to="coursepay.course",
                    ),
                ),
            ],
            options={
                "verbose_name": "Bundle Course",
                "verbose_name_plural": "Bundle Courses",
                "db_table": "BundleCourses",
                "ordering": ["order", "bundle_course_id"],
                "managed": True,
                "constraints": [
                    models.UniqueConstraint(
                        fields=("bundle", "course"), name="uniq_bundle_course"
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="bundle",
            name="courses",
            field=models.ManyToManyField(
                help_text="Courses included in the bundle",
                related_name="bundles",
                through="coursepay.BundleCourse",
                to="coursepay.course",
            ),
        ),
        # =====================================================================
        # 3. Promo codes
        # =====================================================================
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                *_audit_fields(),
                (
                    "promo_code_id",
                    models.AutoField(
                        db_column="PromoCodeID",
                        help_text="Unique identifier for the promo code",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        db_column="Code",
                        help_text="Unique promo code, stored upper-case (e.g., SUMMER10)",
                        max_length=50,
                        unique=True,
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True,
                        db_column="Description",
                        default="",
                        help_text="Human-readable description of the promo code",
                    ),
                ),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed")],
                        db_column="DiscountType",
                        help_text="Type of discount: percentage or fixed amount",
                        max_length=12,
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        db_column="DiscountValue",
                        decimal_places=2,
                        help_text="Discount amount (percentage 0-100 or fixed currency amount)",
                        max_digits=10,
                    ),
                ),
                (
                    "applicable_type",
                    models.CharField(
                        choices=[("all", "All"), ("course", "Course"), ("bundle", "Bundle")],
                        db_column="ApplicableType",
                        default="all",
                        help_text="Which items the code can be redeemed against",
                        max_length=10,
                    ),
                ),
                (
                    "applicable_ids",
                    models.JSONField(
                        blank=True,
                        db_column="ApplicableIDs",
                        help_text="Course or bundle IDs the code is limited to (NULL when applicable to all)",
                        null=True,
                    ),
                ),
                (
                    "max_uses",
                    models.PositiveIntegerField(
                        blank=True,
                        db_column="MaxUses",
                        help_text="Maximum total redemptions (NULL = unlimited)",
                        null=True,
                    ),
                ),
                (
                    "used_count",
                    models.PositiveIntegerField(
                        db_column="UsedCount",
                        default=0,
                        help_text="Number of approved payments that redeemed this code",
                    ),
                ),
                (
                    "valid_from",
                    models.DateTimeField(
                        blank=True,
                        db_column="ValidFrom",
                        help_text="When the code becomes usable (NULL = immediately)",
                        null=True,
                    ),
                ),
                (
                    "valid_until",
                    models.DateTimeField(
                        blank=True,
                        db_column="ValidUntil",
                        help_text="When the code expires (NULL = never)",
                        null=True,
                    ),
                ),
            ],
            options={
                "verbose_name": "Promo Code",
                "verbose_name_plural": "Promo Codes",
                "db_table": "PromoCodes",
                "ordering": ["-created_at"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["code", "is_active"], name="promo_code_active_idx"
                    ),
                    models.Index(
                        fields=["valid_from", "valid_until"], name="promo_validity_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_uses__isnull", True))
                        | models.Q(("used_count__lte", models.F("max_uses"))),
                        name="promo_used_count_within_max_uses",
                    ),
                ],
            },
        ),
        # =====================================================================
        # 4. Payment ledger
        # =====================================================================
        migrations.CreateModel(
            name="PaymentMethodConfig",
            fields=[
                *_audit_fields(),
                (
                    "payment_method_id",
                    models.AutoField(
                        db_column="PaymentMethodID",
                        help_text="Unique identifier for the payment method configuration",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "provider",
                    models.CharField(
                        choices=PROVIDER_CHOICES,
                        db_column="Provider",
                        help_text="Payment provider key",
                        max_length=20,
                        unique=True,
                    ),
                ),
                (
                    "display_name",
                    models.CharField(
                        blank=True,
                        db_column="DisplayName",
                        default="",
                        help_text="Name shown to learners at checkout",
                        max_length=100,
                    ),
                ),
                (
                    "is_enabled",
                    models.BooleanField(
                        db_column="IsEnabled",
                        default=True,
                        help_text="Whether learners can currently pay with this method",
                    ),
                ),
                (
                    "min_amount",
                    models.DecimalField(
                        db_column="MinAmount",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Smallest accepted total (after discount and fee)",
                        max_digits=10,
                    ),
                ),
                (
                    "max_amount",
                    models.DecimalField(
                        blank=True,
                        db_column="MaxAmount",
                        decimal_places=2,
                        help_text="Largest accepted total (NULL = no upper limit)",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "processing_fee",
                    models.DecimalField(
                        db_column="ProcessingFeePercent",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Processing fee as a percentage of the discounted amount",
                        max_digits=5,
                    ),
                ),
                (
                    "account_name",
                    models.CharField(
                        blank=True,
                        db_column="AccountName",
                        help_text="Mobile wallet account holder name",
                        max_length=100,
                        null=True,
                    ),
                ),
                (
                    "account_number",
                    models.CharField(
                        blank=True,
                        db_column="AccountNumber",
                        help_text="Mobile wallet account number",
                        max_length=20,
                        null=True,
                    ),
                ),
                (
                    "bank_name",
                    models.CharField(
                        blank=True,
                        db_column="BankName",
                        help_text="Bank name for transfers",
                        max_length=100,
                        null=True,
                    ),
                ),
                (
                    "account_title",
                    models.CharField(
                        blank=True,
                        db_column="AccountTitle",
                        help_text="Bank account title",
                        max_length=100,
                        null=True,
                    ),
                ),
                (
                    "iban",
                    models.CharField(
                        blank=True,
                        db_column="IBAN",
                        help_text="International bank account number",
                        max_length=34,
                        null=True,
                    ),
                ),
                (
                    "branch_code",
                    models.CharField(
                        blank=True,
                        db_column="BranchCode",
                        help_text="Bank branch code",
                        max_length=10,
                        null=True,
                    ),
                ),
                (
                    "instructions",
                    models.TextField(
                        blank=True,
                        db_column="Instructions",
                        default="",
                        help_text="Payment instructions shown to learners",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Method",
                "verbose_name_plural": "Payment Methods",
                "db_table": "PaymentMethodConfigs",
                "ordering": ["provider"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("processing_fee__gte", 0), ("processing_fee__lte", 100)
                        ),
                        name="payment_method_fee_percentage_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("max_amount__isnull", True))
                        | models.Q(("max_amount__gte", models.F("min_amount"))),
                        name="payment_method_min_not_above_max",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                *_audit_fields(),
                (
                    "transaction_id",
                    models.AutoField(
                        db_column="TransactionID",
                        help_text="Unique identifier for the transaction",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=PROVIDER_CHOICES,
                        db_column="PaymentMethod",
                        help_text="Provider the learner paid through",
                        max_length=20,
                    ),
                ),
                (
                    "original_amount",
                    models.DecimalField(
                        db_column="OriginalAmount",
                        decimal_places=2,
                        help_text="Item price before discount",
                        max_digits=10,
                    ),
                ),
                (
                    "discount_amount",
                    models.DecimalField(
                        db_column="DiscountAmount",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Discount granted by the promo code",
                        max_digits=10,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        db_column="Amount",
                        decimal_places=2,
                        help_text="Original amount minus discount",
                        max_digits=10,
                    ),
                ),
                (
                    "processing_fee",
                    models.DecimalField(
                        db_column="ProcessingFee",
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Payment method fee charged on top of the discounted amount",
                        max_digits=10,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        db_column="Currency",
                        default="USD",
                        help_text="ISO currency code",
                        max_length=3,
                    ),
                ),
                (
                    "payment_reference",
                    models.CharField(
                        db_column="PaymentReference",
                        help_text="Reference the learner received from the payment provider",
                        max_length=255,
                    ),
                ),
                (
                    "payment_proof_url",
                    models.CharField(
                        db_column="PaymentProofURL",
                        help_text="Stable reference to the uploaded proof of payment",
                        max_length=500,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_column="Status",
                        default="pending",
                        help_text="Settlement status",
                        max_length=12,
                    ),
                ),
                (
                    "verification_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_column="VerificationStatus",
                        default="pending",
                        help_text="Admin review status",
                        max_length=12,
                    ),
                ),
                (
                    "verified_at",
                    models.DateTimeField(
                        blank=True,
                        db_column="VerifiedAt",
                        help_text="When the payment was approved or rejected",
                        null=True,
                    ),
                ),
                (
                    "rejection_reason",
                    models.TextField(
                        blank=True,
                        db_column="RejectionReason",
                        help_text="Reason given when the payment was rejected",
                        null=True,
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True,
                        db_column="Notes",
                        help_text="Learner or admin notes",
                        null=True,
                    ),
                ),
                (
                    "receipt_number",
                    models.CharField(
                        blank=True,
                        db_column="ReceiptNumber",
                        help_text="Receipt number issued on approval",
                        max_length=40,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        db_column="UserID",
                        help_text="Learner who submitted the payment",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_transactions",
                        to="coursepay.user",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        blank=True,
                        db_column="CourseID",
                        help_text="Course being purchased (exclusive with bundle)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_transactions",
                        to="coursepay.course",
                    ),
                ),
                (
                    "bundle",
                    models.ForeignKey(
                        blank=True,
                        db_column="BundleID",
                        help_text="Bundle being purchased (exclusive with course)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_transactions",
                        to="coursepay.bundle",
                    ),
                ),
                (
                    "promo_code",
                    models.ForeignKey(
                        blank=True,
                        db_column="PromoCodeID",
                        help_text="Promo code applied at submission",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_transactions",
                        to="coursepay.promocode",
                    ),
                ),
                (
                    "verified_by",
                    models.ForeignKey(
                        blank=True,
                        db_column="VerifiedBy",
                        help_text="Admin who approved or rejected the payment",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="verified_transactions",
                        to="coursepay.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment Transaction",
                "verbose_name_plural": "Payment Transactions",
                "db_table": "PaymentTransactions",
                "ordering": ["-created_at", "-transaction_id"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["user", "status"], name="payment_user_status_idx"
                    ),
                    models.Index(
                        fields=["verification_status", "created_at"],
                        name="payment_verif_created_idx",
                    ),
                    models.Index(
                        fields=["payment_method", "created_at"],
                        name="payment_method_created_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("bundle__isnull", True), ("course__isnull", False)),
                            models.Q(("bundle__isnull", False), ("course__isnull", True)),
                            _connector="OR",
                        ),
                        name="payment_targets_exactly_one_item",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("amount__gte", 0),
                            ("discount_amount__gte", 0),
                            ("discount_amount__lte", models.F("original_amount")),
                        ),
                        name="payment_amounts_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "pending"), ("verification_status", "pending")),
                            models.Q(("status", "completed"), ("verification_status", "approved")),
                            models.Q(("status", "failed"), ("verification_status", "rejected")),
                            models.Q(("status", "cancelled"), ("verification_status", "pending")),
                            _connector="OR",
                        ),
                        name="payment_status_pairs",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("course__isnull", False),
                            ("status", "pending"),
                            ("verification_status", "pending"),
                        ),
                        fields=("user", "course", "payment_reference"),
                        name="uniq_pending_course_payment_reference",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("bundle__isnull", False),
                            ("status", "pending"),
                            ("verification_status", "pending"),
                        ),
                        fields=("user", "bundle", "payment_reference"),
                        name="uniq_pending_bundle_payment_reference",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentHistoryEntry",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_column="CreatedAt",
                        help_text="Timestamp when the entry was recorded",
                    ),
                ),
                (
                    "history_id",
                    models.AutoField(
                        db_column="HistoryID",
                        help_text="Unique identifier for the history entry",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("submit", "Submit"),
                            ("approve", "Approve"),
                            ("reject", "Reject"),
                            ("cancel", "Cancel"),
                            ("refund_request", "Refund Request"),
                            ("refund_approve", "Refund Approve"),
                            ("refund_reject", "Refund Reject"),
                        ],
                        db_column="Action",
                        help_text="What happened",
                        max_length=20,
                    ),
                ),
                (
                    "previous_status",
                    models.CharField(
                        blank=True,
                        db_column="PreviousStatus",
                        help_text="status/verification_status before the action",
                        max_length=30,
                        null=True,
                    ),
                ),
                (
                    "new_status",
                    models.CharField(
                        blank=True,
                        db_column="NewStatus",
                        help_text="status/verification_status after the action",
                        max_length=30,
                        null=True,
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True,
                        db_column="Notes",
                        help_text="Free-text notes or reasons",
                        null=True,
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        db_column="Metadata",
                        help_text="Structured details of the action",
                        null=True,
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        db_column="TransactionID",
                        help_text="Transaction the action was performed on",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="coursepay.paymenttransaction",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        db_column="PerformedBy",
                        help_text="User who performed the action (NULL for automated callers)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_actions",
                        to="coursepay.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment History Entry",
                "verbose_name_plural": "Payment History",
                "db_table": "PaymentHistory",
                "ordering": ["created_at", "history_id"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["transaction", "created_at"],
                        name="history_txn_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RefundRequest",
            fields=[
                *_audit_fields(),
                (
                    "refund_id",
                    models.AutoField(
                        db_column="RefundID",
                        help_text="Unique identifier for the refund request",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "refund_amount",
                    models.DecimalField(
                        db_column="RefundAmount",
                        decimal_places=2,
                        help_text="Amount requested back",
                        max_digits=10,
                    ),
                ),
                (
                    "reason",
                    models.TextField(
                        db_column="Reason", help_text="Why the learner wants a refund"
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_column="Status",
                        default="pending",
                        help_text="Refund request status",
                        max_length=12,
                    ),
                ),
                (
                    "processed_at",
                    models.DateTimeField(
                        blank=True,
                        db_column="ProcessedAt",
                        help_text="When the request was decided",
                        null=True,
                    ),
                ),
                (
                    "refund_reference",
                    models.CharField(
                        blank=True,
                        db_column="RefundReference",
                        help_text="External reference of the money movement, if any",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True,
                        db_column="Notes",
                        help_text="Admin notes on the decision",
                        null=True,
                    ),
                ),
                (
                    "transaction",
                    models.ForeignKey(
                        db_column="TransactionID",
                        help_text="Settled transaction being refunded",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refunds",
                        to="coursepay.paymenttransaction",
                    ),
                ),
                (
                    "requested_by",
                    models.ForeignKey(
                        db_column="RequestedBy",
                        help_text="Learner who filed the request",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refund_requests",
                        to="coursepay.user",
                    ),
                ),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        db_column="ProcessedBy",
                        help_text="Admin who decided the request",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="processed_refunds",
                        to="coursepay.user",
                    ),
                ),
            ],
            options={
                "verbose_name": "Refund Request",
                "verbose_name_plural": "Refund Requests",
                "db_table": "RefundRequests",
                "ordering": ["-created_at", "-refund_id"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "indexes": [
                    models.Index(
                        fields=["transaction", "status"], name="refund_txn_status_idx"
                    ),
                    models.Index(
                        fields=["status", "created_at"], name="refund_status_created_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("refund_amount__gt", 0)),
                        name="refund_amount_positive",
                    ),
                ],
            },
        ),
        # =====================================================================
        # 5. Enrollments
        # =====================================================================
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                *_audit_fields(),
                (
                    "enrollment_id",
                    models.AutoField(
                        db_column="EnrollmentID",
                        help_text="Unique identifier for the enrollment",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        db_column="UserID",
                        help_text="Enrolled learner",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="coursepay.user",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        blank=True,
                        db_column="CourseID",
                        help_text="Course the learner can access",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="coursepay.course",
                    ),
                ),
                (
                    "bundle",
                    models.ForeignKey(
                        blank=True,
                        db_column="BundleID",
                        help_text="Bundle the learner bought (set on the bundle record and its courses)",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="coursepay.bundle",
                    ),
                ),
                (
                    "source_transaction",
                    models.ForeignKey(
                        blank=True,
                        db_column="SourceTransactionID",
                        help_text="Approved payment that granted the access",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="enrollments",
                        to="coursepay.paymenttransaction",
                    ),
                ),
            ],
            options={
                "verbose_name": "Enrollment",
                "verbose_name_plural": "Enrollments",
                "db_table": "Enrollments",
                "ordering": ["-created_at"],
                "get_latest_by": "created_at",
                "abstract": False,
                "managed": True,
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("course__isnull", False)),
                        fields=("user", "course"),
                        name="uniq_user_course_enrollment",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("bundle__isnull", False), ("course__isnull", True)
                        ),
                        fields=("user", "bundle"),
                        name="uniq_user_bundle_enrollment",
                    ),
                ],
            },
        ),
    ]
