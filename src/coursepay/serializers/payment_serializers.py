from rest_framework import serializers

from coursepay.models import (
    Bundle,
    Course,
    ItemType,
    PaymentHistoryEntry,
    PaymentMethodConfig,
    PaymentProvider,
    PaymentTransaction,
    RefundRequest,
)
from coursepay.services.payment.bundles import BundleComposer

# =============================================================================
# CATALOGUE
# =============================================================================


class CourseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = [
            "course_id",
            "title",
            "price",
            "currency",
            "is_free",
            "duration_hours",
            "status",
            "is_active",
        ]
        read_only_fields = fields


class BundleSerializer(serializers.ModelSerializer):
    courses = serializers.SerializerMethodField()
    composition = serializers.SerializerMethodField()

    class Meta:
        model = Bundle
        fields = [
            "bundle_id",
            "title",
            "description",
            "price",
            "currency",
            "discount_percentage",
            "is_active",
            "courses",
            "composition",
            "created_at",
        ]
        read_only_fields = fields

    def get_courses(self, obj):
        return CourseSerializer(obj.ordered_courses(), many=True).data

    def get_composition(self, obj):
        return BundleComposer.for_bundle(obj).to_dict()


class PaymentMethodPublicSerializer(serializers.ModelSerializer):
    """What a learner needs to pay manually; no audit columns."""

    class Meta:
        model = PaymentMethodConfig
        fields = [
            "provider",
            "display_name",
            "min_amount",
            "max_amount",
            "processing_fee",
            "account_name",
            "account_number",
            "bank_name",
            "account_title",
            "iban",
            "branch_code",
            "instructions",
        ]
        read_only_fields = fields


# =============================================================================
# CHECKOUT INPUT
# =============================================================================


class PromoValidationSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    item_type = serializers.ChoiceField(choices=ItemType.choices())
    item_id = serializers.IntegerField(min_value=1)


class PriceQuoteSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices())
    item_id = serializers.IntegerField(min_value=1)
    promo_code = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
    payment_method = serializers.ChoiceField(
        choices=PaymentProvider.choices(), required=False, allow_null=True
    )


class PaymentSubmissionSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices())
    item_id = serializers.IntegerField(min_value=1)
    payment_method = serializers.ChoiceField(choices=PaymentProvider.choices())
    payment_reference = serializers.CharField(max_length=255)
    payment_proof_url = serializers.CharField(max_length=500)
    promo_code = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RefundCreateSerializer(serializers.Serializer):
    transaction_id = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    reason = serializers.CharField()


# =============================================================================
# LEDGER OUTPUT
# =============================================================================


class PaymentTransactionSerializer(serializers.ModelSerializer):
    item_type = serializers.CharField(read_only=True)
    item_id = serializers.IntegerField(read_only=True)
    item_title = serializers.SerializerMethodField()
    total_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True
    )
    promo_code = serializers.SlugRelatedField(slug_field="code", read_only=True)

    class Meta:
        model = PaymentTransaction
        fields = [
            "transaction_id",
            "item_type",
            "item_id",
            "item_title",
            "payment_method",
            "original_amount",
            "discount_amount",
            "amount",
            "processing_fee",
            "total_amount",
            "currency",
            "promo_code",
            "payment_reference",
            "payment_proof_url",
            "status",
            "verification_status",
            "verified_at",
            "rejection_reason",
            "notes",
            "receipt_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_item_title(self, obj):
        item = obj.course or obj.bundle
        return item.title if item else None


class PaymentHistoryEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentHistoryEntry
        fields = [
            "history_id",
            "action",
            "performed_by",
            "previous_status",
            "new_status",
            "notes",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields


class RefundRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = RefundRequest
        fields = [
            "refund_id",
            "transaction",
            "requested_by",
            "refund_amount",
            "reason",
            "status",
            "processed_by",
            "processed_at",
            "refund_reference",
            "notes",
            "created_at",
        ]
        read_only_fields = fields
