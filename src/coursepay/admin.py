from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Bundle,
    BundleCourse,
    Course,
    Enrollment,
    PaymentHistoryEntry,
    PaymentMethodConfig,
    PaymentTransaction,
    PromoCode,
    RefundRequest,
    User,
)

SYSTEM_FIELDS = (
    "System Fields",
    {
        "fields": (
            "is_active",
            "is_deleted",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ),
        "classes": ("collapse",),
    },
)


class ActiveStatusMixin:
    def is_active_status(self, obj):
        if obj.is_active == 1:
            return format_html('<span style="color: green;">Active</span>')
        return format_html('<span style="color: red;">Inactive</span>')

    is_active_status.short_description = "Status"


# =============================================================================
# USER MANAGEMENT
# =============================================================================


@admin.register(User)
class UserAdmin(ActiveStatusMixin, admin.ModelAdmin):
    list_display = (
        "user_id",
        "full_name",
        "email",
        "role",
        "is_active_status",
        "created_at",
    )
    list_filter = ("role", "is_active", "is_deleted")
    search_fields = ("full_name", "email")
    readonly_fields = ("user_id", "created_at", "updated_at", "password")


# =============================================================================
# CATALOGUE
# =============================================================================


@admin.register(Course)
class CourseAdmin(ActiveStatusMixin, admin.ModelAdmin):
    list_display = ("course_id", "title", "price", "currency", "is_free", "status", "is_active_status")
    list_filter = ("status", "is_free", "currency")
    search_fields = ("title",)
    readonly_fields = ("course_id", "created_at", "updated_at")


class BundleCourseInline(admin.TabularInline):
    model = BundleCourse
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Bundle)
class BundleAdmin(ActiveStatusMixin, admin.ModelAdmin):
    list_display = ("bundle_id", "title", "price", "discount_percentage", "currency", "is_active_status")
    search_fields = ("title",)
    readonly_fields = ("bundle_id", "created_at", "updated_at")
    inlines = [BundleCourseInline]


# =============================================================================
# PROMO CODES
# =============================================================================


@admin.register(PromoCode)
class PromoCodeAdmin(ActiveStatusMixin, admin.ModelAdmin):
    list_display = (
        "code",
        "discount_type",
        "discount_value",
        "applicable_type",
        "used_count",
        "max_uses",
        "valid_until",
        "is_active_status",
    )
    list_filter = ("discount_type", "applicable_type", "is_active")
    search_fields = ("code", "description")
    # Usage only moves through verified approvals
    readonly_fields = ("promo_code_id", "used_count", "created_at", "updated_at")

    fieldsets = (
        ("Code", {"fields": ("code", "description")}),
        ("Discount", {"fields": ("discount_type", "discount_value")}),
        ("Applicability", {"fields": ("applicable_type", "applicable_ids")}),
        ("Limits", {"fields": ("max_uses", "used_count", "valid_from", "valid_until")}),
        SYSTEM_FIELDS,
    )


# =============================================================================
# PAYMENTS
# =============================================================================


@admin.register(PaymentMethodConfig)
class PaymentMethodConfigAdmin(admin.ModelAdmin):
    list_display = ("provider", "display_name", "is_enabled", "min_amount", "max_amount", "processing_fee")
    list_filter = ("is_enabled",)
    readonly_fields = ("payment_method_id", "created_at", "updated_at")


class PaymentHistoryInline(admin.TabularInline):
    model = PaymentHistoryEntry
    extra = 0
    can_delete = False
    readonly_fields = (
        "action",
        "performed_by",
        "previous_status",
        "new_status",
        "notes",
        "metadata",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """
    Read-only view of the ledger. Decisions go through the verification
    API so that history, promo usage and enrollment stay consistent.
    """

    list_display = (
        "transaction_id",
        "user",
        "course",
        "bundle",
        "payment_method",
        "amount",
        "processing_fee",
        "currency",
        "status",
        "verification_status",
        "created_at",
    )
    list_filter = ("status", "verification_status", "payment_method")
    search_fields = ("payment_reference", "receipt_number", "user__email")
    inlines = [PaymentHistoryInline]

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentHistoryEntry)
class PaymentHistoryEntryAdmin(admin.ModelAdmin):
    list_display = ("history_id", "transaction", "action", "previous_status", "new_status", "performed_by", "created_at")
    list_filter = ("action",)

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RefundRequest)
class RefundRequestAdmin(admin.ModelAdmin):
    list_display = ("refund_id", "transaction", "requested_by", "refund_amount", "status", "processed_by", "created_at")
    list_filter = ("status",)
    readonly_fields = ("refund_id", "created_at", "updated_at", "processed_at")


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("enrollment_id", "user", "course", "bundle", "source_transaction", "created_at")
    readonly_fields = ("enrollment_id", "created_at", "updated_at")
