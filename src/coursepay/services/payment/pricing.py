# coursepay/services/payment/pricing.py
"""
Money arithmetic for checkout.

All amounts are Decimal, rounded half-up to the currency minor unit.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from coursepay.models.choices import DiscountType

from . import errors

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Coerce a number or numeric string to a Decimal rounded to the cent."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise errors.ValidationError(f"'{value}' is not a valid amount.") from None
    if not amount.is_finite():
        raise errors.ValidationError(f"'{value}' is not a valid amount.")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percent: Decimal) -> Decimal:
    """round_half_up(amount * percent / 100) at cent precision."""
    return (amount * percent / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Result of pricing an item.

    Attributes:
        original_amount: Base price before discount
        discount_amount: Discount granted, never above original_amount
        final_amount: original_amount - discount_amount
    """

    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "original_amount": str(self.original_amount),
            "discount_amount": str(self.discount_amount),
            "final_amount": str(self.final_amount),
        }


class PricingCalculator:
    """
    Turns a base amount plus an optional discount into a final amount.
    """

    @staticmethod
    def compute(
        base_amount: Any,
        discount_type: str | None = None,
        discount_value: Any = None,
    ) -> PriceBreakdown:
        """
        Price an item.

        Args:
            base_amount: Item price (>= 0)
            discount_type: 'percentage', 'fixed' or None for no discount
            discount_value: Percent (0-100) or fixed currency amount (>= 0)

        Returns:
            PriceBreakdown with discount capped at the base amount
        """
        base = to_money(base_amount)
        if base < 0:
            raise errors.ValidationError("Base amount cannot be negative.")

        if discount_type is None:
            return PriceBreakdown(base, ZERO, base)

        if discount_value is None:
            raise errors.ValidationError("A discount type needs a discount value.")
        value = to_money(discount_value)
        if value < 0:
            raise errors.ValidationError("Discount value cannot be negative.")

        if discount_type == DiscountType.PERCENTAGE.value:
            discount = min(percentage_of(base, value), base)
        elif discount_type == DiscountType.FIXED.value:
            discount = min(value, base)
        else:
            raise errors.ValidationError(f"Unknown discount type '{discount_type}'.")

        return PriceBreakdown(base, discount, base - discount)

    @staticmethod
    def processing_fee(amount: Decimal, fee_percentage: Any) -> Decimal:
        """Fee charged by a payment method on an already-discounted amount."""
        fee_percentage = to_money(fee_percentage or 0)
        if fee_percentage <= 0:
            return ZERO
        return percentage_of(amount, fee_percentage)
