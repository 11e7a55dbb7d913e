# coursepay/models/promo.py
"""
Promo code model.

Provides:
- PromoCode: Admin-authored discount token scoped to all items, some
  courses, or some bundles
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from .base import BaseModel
from .choices import ApplicableType, DiscountType


class PromoCode(BaseModel):
    """
    Discount code redeemable at checkout.

    Supports:
    - Percentage (0-100) or fixed amount discounts
    - A global usage ceiling (max_uses, NULL = unlimited)
    - A validity window (valid_from / valid_until)
    - Restriction to a set of course or bundle IDs

    used_count only changes through an atomic conditional UPDATE at payment
    approval, never through save().
    """

    promo_code_id = models.AutoField(
        db_column="PromoCodeID",
        primary_key=True,
        help_text="Unique identifier for the promo code",
    )
    code = models.CharField(
        db_column="Code",
        max_length=50,
        unique=True,
        help_text="Unique promo code, stored upper-case (e.g., SUMMER10)",
    )
    description = models.TextField(
        db_column="Description",
        blank=True,
        default="",
        help_text="Human-readable description of the promo code",
    )
    discount_type = models.CharField(
        db_column="DiscountType",
        max_length=12,
        choices=DiscountType.choices(),
        help_text="Type of discount: percentage or fixed amount",
    )
    discount_value = models.DecimalField(
        db_column="DiscountValue",
        max_digits=10,
        decimal_places=2,
        help_text="Discount amount (percentage 0-100 or fixed currency amount)",
    )
    applicable_type = models.CharField(
        db_column="ApplicableType",
        max_length=10,
        choices=ApplicableType.choices(),
        default=ApplicableType.ALL.value,
        help_text="Which items the code can be redeemed against",
    )
    applicable_ids = models.JSONField(
        db_column="ApplicableIDs",
        blank=True,
        null=True,
        help_text="Course or bundle IDs the code is limited to (NULL when applicable to all)",
    )
    max_uses = models.PositiveIntegerField(
        db_column="MaxUses",
        blank=True,
        null=True,
        help_text="Maximum total redemptions (NULL = unlimited)",
    )
    used_count = models.PositiveIntegerField(
        db_column="UsedCount",
        default=0,
        help_text="Number of approved payments that redeemed this code",
    )
    valid_from = models.DateTimeField(
        db_column="ValidFrom",
        blank=True,
        null=True,
        help_text="When the code becomes usable (NULL = immediately)",
    )
    valid_until = models.DateTimeField(
        db_column="ValidUntil",
        blank=True,
        null=True,
        help_text="When the code expires (NULL = never)",
    )

    class Meta:
        managed = True
        db_table = "PromoCodes"
        verbose_name = "Promo Code"
        verbose_name_plural = "Promo Codes"
        indexes = [
            models.Index(fields=["code", "is_active"], name="promo_code_active_idx"),
            models.Index(fields=["valid_from", "valid_until"], name="promo_validity_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(used_count__lte=F("max_uses")),
                name="promo_used_count_within_max_uses",
            ),
        ]
        ordering = ["-created_at"]
        app_label = "coursepay"

    def __str__(self):
        if self.discount_type == DiscountType.PERCENTAGE.value:
            return f"{self.code}: {self.discount_value}% off"
        return f"{self.code}: {self.discount_value} off"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def clean(self) -> None:
        errors = {}
        value = self.discount_value
        if value is not None:
            if value < 0:
                errors["discount_value"] = "Discount value cannot be negative."
            elif self.discount_type == DiscountType.PERCENTAGE.value and value > Decimal(
                "100"
            ):
                errors["discount_value"] = "Percentage discounts must be between 0 and 100."

        if self.applicable_type == ApplicableType.ALL.value:
            if self.applicable_ids is not None:
                errors["applicable_ids"] = "Codes applicable to all items take no ID list."
        elif not self.applicable_ids:
            errors["applicable_ids"] = "Restricted codes need at least one item ID."

        if self.max_uses is not None and self.used_count > self.max_uses:
            errors["max_uses"] = "Max uses cannot be lower than the current usage."

        if self.valid_from and self.valid_until and self.valid_from > self.valid_until:
            errors["valid_until"] = "Expiry must be after the start date."

        if errors:
            raise ValidationError(errors)

    def applies_to(self, item_type: str, item_id: int) -> bool:
        """Whether the code's scope covers the given item."""
        if self.applicable_type == ApplicableType.ALL.value:
            return True
        if self.applicable_type != item_type:
            return False
        return int(item_id) in {int(i) for i in (self.applicable_ids or [])}

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.used_count >= self.max_uses
