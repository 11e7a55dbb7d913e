"""
Unit tests for PricingCalculator and the money helpers.
"""

from decimal import Decimal

import pytest

from coursepay.services.payment import errors
from coursepay.services.payment.pricing import PricingCalculator, percentage_of, to_money


@pytest.mark.unit
class TestPricingCalculator:
    """Tests for PricingCalculator.compute()."""

    def test_no_discount(self):
        result = PricingCalculator.compute(Decimal("100.00"))
        assert result.original_amount == Decimal("100.00")
        assert result.discount_amount == Decimal("0.00")
        assert result.final_amount == Decimal("100.00")

    def test_percentage_discount(self):
        result = PricingCalculator.compute(Decimal("100.00"), "percentage", Decimal("10"))
        assert result.discount_amount == Decimal("10.00")
        assert result.final_amount == Decimal("90.00")

    def test_percentage_rounds_half_up_to_cent(self):
        """19.99 * 15% = 2.9985, rounded to 3.00."""
        result = PricingCalculator.compute("19.99", "percentage", "15")
        assert result.discount_amount == Decimal("3.00")
        assert result.final_amount == Decimal("16.99")

    def test_percentage_exact_half_cent_rounds_up(self):
        """0.25 * 50% = 0.125, rounded half-up to 0.13."""
        result = PricingCalculator.compute("0.25", "percentage", "50")
        assert result.discount_amount == Decimal("0.13")
        assert result.final_amount == Decimal("0.12")

    def test_full_percentage_discount_is_free(self):
        result = PricingCalculator.compute("49.99", "percentage", "100")
        assert result.discount_amount == Decimal("49.99")
        assert result.final_amount == Decimal("0.00")

    def test_percentage_above_hundred_is_capped_at_base(self):
        result = PricingCalculator.compute("40.00", "percentage", "150")
        assert result.discount_amount == Decimal("40.00")
        assert result.final_amount == Decimal("0.00")

    def test_fixed_discount(self):
        result = PricingCalculator.compute("100.00", "fixed", "15.50")
        assert result.discount_amount == Decimal("15.50")
        assert result.final_amount == Decimal("84.50")

    def test_fixed_discount_larger_than_base_is_capped(self):
        result = PricingCalculator.compute("30.00", "fixed", "45.00")
        assert result.discount_amount == Decimal("30.00")
        assert result.final_amount == Decimal("0.00")

    @pytest.mark.parametrize("value", ["0", "1", "12.5", "33.33", "50", "99.99", "100"])
    def test_percentage_final_amount_within_bounds(self, value):
        base = Decimal("123.45")
        result = PricingCalculator.compute(base, "percentage", value)
        assert result.final_amount == base - percentage_of(base, Decimal(value))
        assert Decimal("0") <= result.final_amount <= base
        assert result.original_amount - result.discount_amount == result.final_amount

    @pytest.mark.parametrize("value", ["0", "0.01", "50", "123.45", "500"])
    def test_fixed_final_amount_never_negative(self, value):
        base = Decimal("123.45")
        result = PricingCalculator.compute(base, "fixed", value)
        assert result.final_amount == max(Decimal("0.00"), base - Decimal(value))

    def test_negative_base_rejected(self):
        with pytest.raises(errors.ValidationError):
            PricingCalculator.compute("-1.00")

    def test_negative_discount_rejected(self):
        with pytest.raises(errors.ValidationError):
            PricingCalculator.compute("10.00", "fixed", "-5")

    def test_unknown_discount_type_rejected(self):
        with pytest.raises(errors.ValidationError):
            PricingCalculator.compute("10.00", "bogo", "5")

    def test_discount_type_without_value_rejected(self):
        with pytest.raises(errors.ValidationError):
            PricingCalculator.compute("10.00", "percentage", None)

    def test_breakdown_to_dict_uses_strings(self):
        data = PricingCalculator.compute("100", "percentage", "10").to_dict()
        assert data == {
            "original_amount": "100.00",
            "discount_amount": "10.00",
            "final_amount": "90.00",
        }


@pytest.mark.unit
class TestProcessingFee:
    def test_fee_on_discounted_amount(self):
        assert PricingCalculator.processing_fee(Decimal("80.00"), Decimal("2.00")) == Decimal(
            "1.60"
        )

    def test_zero_fee(self):
        assert PricingCalculator.processing_fee(Decimal("80.00"), 0) == Decimal("0.00")

    def test_fee_rounds_half_up(self):
        # 33.33 * 1.5% = 0.49995
        assert PricingCalculator.processing_fee(Decimal("33.33"), "1.5") == Decimal("0.50")


@pytest.mark.unit
class TestToMoney:
    def test_quantizes_to_cent(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(7) == Decimal("7.00")

    @pytest.mark.parametrize("value", ["abc", None, "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(errors.ValidationError):
            to_money(value)
