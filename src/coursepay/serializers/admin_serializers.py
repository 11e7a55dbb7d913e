from decimal import Decimal

from rest_framework import serializers

from coursepay.models import (
    ApplicableType,
    CourseStatus,
    DiscountType,
    PaymentMethodConfig,
    PaymentProvider,
    PaymentTransaction,
    PromoCode,
    RefundStatus,
    TransactionStatus,
    VerificationStatus,
)
from coursepay.serializers.payment_serializers import PaymentTransactionSerializer


class PromoCodeSerializer(serializers.ModelSerializer):
    discount_type = serializers.ChoiceField(choices=DiscountType.choices())
    applicable_type = serializers.ChoiceField(
        choices=ApplicableType.choices(), required=False
    )
    applicable_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        allow_null=True,
        allow_empty=False,
    )

    class Meta:
        model = PromoCode
        fields = [
            "promo_code_id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "applicable_type",
            "applicable_ids",
            "max_uses",
            "used_count",
            "valid_from",
            "valid_until",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("promo_code_id", "used_count", "created_at", "updated_at")
        # Case-insensitive uniqueness is checked by PromoCodeService (409)
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Code cannot be empty.")
        return value

    def validate(self, data):
        """
        Validate promo code data
        - percentage discounts must lie in 0-100, fixed ones must be >= 0
        - applicable_ids is required unless the code applies to everything
        - valid_from must not be after valid_until
        """
        discount_type = data.get(
            "discount_type", getattr(self.instance, "discount_type", None)
        )
        discount_value = data.get(
            "discount_value", getattr(self.instance, "discount_value", None)
        )
        if discount_value is not None:
            if discount_value < 0:
                raise serializers.ValidationError(
                    {"discount_value": "Discount value cannot be negative."}
                )
            if (
                discount_type == DiscountType.PERCENTAGE.value
                and discount_value > Decimal("100")
            ):
                raise serializers.ValidationError(
                    {"discount_value": "Percentage discount cannot exceed 100."}
                )

        applicable_type = data.get(
            "applicable_type",
            getattr(self.instance, "applicable_type", ApplicableType.ALL.value),
        )
        if "applicable_type" in data or "applicable_ids" in data:
            ids = data.get("applicable_ids", getattr(self.instance, "applicable_ids", None))
            if applicable_type == ApplicableType.ALL.value:
                data["applicable_ids"] = None
            elif not ids:
                raise serializers.ValidationError(
                    {"applicable_ids": f"Select at least one {applicable_type}."}
                )

        valid_from = data.get("valid_from", getattr(self.instance, "valid_from", None))
        valid_until = data.get("valid_until", getattr(self.instance, "valid_until", None))
        if valid_from and valid_until and valid_from > valid_until:
            raise serializers.ValidationError(
                {"valid_until": "Expiry must be after the start date."}
            )

        if "max_uses" in data and data["max_uses"] is not None and data["max_uses"] < 1:
            raise serializers.ValidationError(
                {"max_uses": "Maximum uses must be at least 1."}
            )

        return data


class BundleWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00")
    )
    currency = serializers.CharField(max_length=3, required=False, default="USD")
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        required=False,
        default=Decimal("0.00"),
    )
    course_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )
    is_active = serializers.BooleanField(required=False)


class BundleCourseSerializer(serializers.Serializer):
    course_id = serializers.IntegerField(min_value=1)


class CoursePricingSerializer(serializers.Serializer):
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    currency = serializers.CharField(max_length=3, required=False)
    is_free = serializers.BooleanField(required=False)
    status = serializers.ChoiceField(choices=CourseStatus.choices(), required=False)

    def validate(self, data):
        if not data:
            raise serializers.ValidationError("Nothing to update.")
        return data


class PaymentMethodConfigSerializer(serializers.ModelSerializer):
    provider = serializers.ChoiceField(choices=PaymentProvider.choices())

    class Meta:
        model = PaymentMethodConfig
        fields = [
            "payment_method_id",
            "provider",
            "display_name",
            "is_enabled",
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
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("payment_method_id", "created_at", "updated_at")
        # Duplicate providers are reported by PaymentMethodService (409)
        extra_kwargs = {"provider": {"validators": []}}

    def validate(self, data):
        """Validate payment method limits"""
        min_amount = data.get("min_amount", getattr(self.instance, "min_amount", None))
        max_amount = data.get("max_amount", getattr(self.instance, "max_amount", None))
        if min_amount is not None and min_amount < 0:
            raise serializers.ValidationError(
                {"min_amount": "Minimum amount cannot be negative."}
            )
        if min_amount is not None and max_amount is not None and max_amount < min_amount:
            raise serializers.ValidationError(
                {"max_amount": "Maximum amount must not be below the minimum."}
            )

        fee = data.get("processing_fee")
        if fee is not None and not (Decimal("0") <= fee <= Decimal("100")):
            raise serializers.ValidationError(
                {"processing_fee": "Processing fee must be between 0 and 100 percent."}
            )
        return data


class VerificationDecisionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    rejection_reason = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )


class RefundDecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=RefundStatus.decisions())
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    refund_reference = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True
    )


class TransactionFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TransactionStatus.choices(), required=False)
    verification_status = serializers.ChoiceField(
        choices=VerificationStatus.choices(), required=False
    )
    payment_method = serializers.ChoiceField(
        choices=PaymentProvider.choices(), required=False
    )
    user_id = serializers.IntegerField(min_value=1, required=False)


class AnalyticsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(
        choices=PaymentProvider.choices(), required=False
    )

    def validate(self, data):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"end_date": "End date must be after the start date."}
            )
        return data


class AdminPaymentTransactionSerializer(PaymentTransactionSerializer):
    user_id = serializers.IntegerField(read_only=True)
    user_email = serializers.CharField(source="user.email", read_only=True)
    user_name = serializers.CharField(source="user.full_name", read_only=True)
    verified_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta(PaymentTransactionSerializer.Meta):
        model = PaymentTransaction
        fields = [
            *PaymentTransactionSerializer.Meta.fields,
            "user_id",
            "user_email",
            "user_name",
            "verified_by",
        ]
        read_only_fields = fields
