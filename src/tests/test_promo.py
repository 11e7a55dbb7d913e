"""
Unit tests for promo code validation, redemption and administration.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from coursepay.models import PromoCode
from coursepay.services.payment import errors
from coursepay.services.payment.promo import PromoCodeService, PromoCodeValidator


@pytest.mark.unit
class TestPromoCodeValidator:
    """Tests for PromoCodeValidator.validate()."""

    def test_valid_code(self, promo_code, course):
        result = PromoCodeValidator.validate("SAVE20", "course", course.course_id)
        assert result.ok is True
        assert result.promo_code_id == promo_code.promo_code_id
        assert result.discount_type == "percentage"
        assert result.discount_value == Decimal("20.00")

    def test_lookup_is_case_insensitive(self, promo_code, course):
        result = PromoCodeValidator.validate("  save20 ", "course", course.course_id)
        assert result.code == "SAVE20"

    def test_validation_never_consumes_usage(self, promo_code, course):
        for _ in range(3):
            PromoCodeValidator.validate("SAVE20", "course", course.course_id)
        promo_code.refresh_from_db()
        assert promo_code.used_count == 0

    def test_blank_code(self, course):
        with pytest.raises(errors.ValidationError):
            PromoCodeValidator.validate("   ", "course", course.course_id)

    def test_unknown_code(self, course):
        with pytest.raises(errors.NotFound):
            PromoCodeValidator.validate("NOPE", "course", course.course_id)

    def test_inactive_code_is_not_found(self, promo_code, course):
        promo_code.deactivate()
        with pytest.raises(errors.NotFound):
            PromoCodeValidator.validate("SAVE20", "course", course.course_id)

    def test_not_yet_active(self, make_promo, course):
        make_promo("LATER", valid_from=timezone.now() + timedelta(days=2))
        with pytest.raises(errors.NotYetActive):
            PromoCodeValidator.validate("LATER", "course", course.course_id)

    def test_expired(self, make_promo, course):
        make_promo("OLD", valid_until=timezone.now() - timedelta(minutes=1))
        with pytest.raises(errors.Expired):
            PromoCodeValidator.validate("OLD", "course", course.course_id)

    def test_no_expiry_never_expires(self, make_promo, course):
        make_promo("FOREVER", valid_until=None, valid_from=None)
        far_future = timezone.now() + timedelta(days=3650)
        result = PromoCodeValidator.validate(
            "FOREVER", "course", course.course_id, now=far_future
        )
        assert result.ok

    def test_max_uses_reached(self, make_promo, course):
        make_promo("USEDUP", max_uses=2, used_count=2)
        with pytest.raises(errors.MaxUsesReached):
            PromoCodeValidator.validate("USEDUP", "course", course.course_id)

    def test_expired_checked_before_usage(self, make_promo, course):
        make_promo(
            "BOTH",
            max_uses=1,
            used_count=1,
            valid_until=timezone.now() - timedelta(days=1),
        )
        with pytest.raises(errors.Expired):
            PromoCodeValidator.validate("BOTH", "course", course.course_id)

    def test_course_restricted_code(self, make_promo, course, second_course):
        make_promo("PYONLY", applicable_type="course", applicable_ids=[course.course_id])
        assert PromoCodeValidator.validate("PYONLY", "course", course.course_id).ok
        with pytest.raises(errors.NotApplicable):
            PromoCodeValidator.validate("PYONLY", "course", second_course.course_id)

    def test_course_code_not_applicable_to_bundle(self, make_promo, course, bundle):
        make_promo("PYONLY", applicable_type="course", applicable_ids=[course.course_id])
        with pytest.raises(errors.NotApplicable):
            PromoCodeValidator.validate("PYONLY", "bundle", bundle.bundle_id)

    def test_bundle_restricted_code(self, make_promo, bundle):
        make_promo("TRACK", applicable_type="bundle", applicable_ids=[bundle.bundle_id])
        assert PromoCodeValidator.validate("TRACK", "bundle", bundle.bundle_id).ok


@pytest.mark.unit
class TestPromoCodeConsume:
    """Tests for the atomic increment-with-ceiling."""

    def test_consume_increments_once(self, promo_code):
        PromoCodeValidator.consume(promo_code.promo_code_id, timezone.now())
        promo_code.refresh_from_db()
        assert promo_code.used_count == 1

    def test_consume_never_passes_ceiling(self, make_promo):
        promo = make_promo("LIMITED", max_uses=3)
        attempts = promo.max_uses + 5
        outcomes = []
        for _ in range(attempts):
            try:
                PromoCodeValidator.consume(promo.promo_code_id, timezone.now())
                outcomes.append("ok")
            except errors.MaxUsesReached:
                outcomes.append("full")

        promo.refresh_from_db()
        assert promo.used_count == 3
        assert outcomes.count("ok") == 3
        assert outcomes.count("full") == 5

    def test_consume_unlimited_code(self, make_promo):
        promo = make_promo("UNLIMITED", max_uses=None)
        for _ in range(25):
            PromoCodeValidator.consume(promo.promo_code_id, timezone.now())
        promo.refresh_from_db()
        assert promo.used_count == 25

    def test_consume_deactivated_code(self, promo_code):
        promo_code.deactivate()
        with pytest.raises(errors.NotFound):
            PromoCodeValidator.consume(promo_code.promo_code_id, timezone.now())

    def test_consume_judges_expiry_at_redemption_time(self, make_promo):
        promo = make_promo("GRACE", valid_until=timezone.now() - timedelta(hours=1))
        PromoCodeValidator.consume(promo.promo_code_id, timezone.now() - timedelta(days=1))
        promo.refresh_from_db()
        assert promo.used_count == 1

        with pytest.raises(errors.Expired):
            PromoCodeValidator.consume(promo.promo_code_id, timezone.now())


@pytest.mark.unit
class TestPromoCodeService:
    """Tests for promo code administration."""

    def test_create_stores_upper_case(self, admin_user):
        promo = PromoCodeService.create(
            admin_id=admin_user.user_id,
            code="summer10",
            discount_type="percentage",
            discount_value=Decimal("10"),
        )
        assert promo.code == "SUMMER10"
        assert promo.created_by == admin_user.user_id
        assert promo.used_count == 0

    def test_create_duplicate_ignores_case(self, promo_code):
        with pytest.raises(errors.Conflict):
            PromoCodeService.create(
                code="save20", discount_type="fixed", discount_value=Decimal("5")
            )

    def test_percentage_over_hundred_rejected(self):
        with pytest.raises(errors.ValidationError):
            PromoCodeService.create(
                code="TOOMUCH", discount_type="percentage", discount_value=Decimal("120")
            )

    def test_restricted_code_needs_ids(self):
        with pytest.raises(errors.ValidationError):
            PromoCodeService.create(
                code="NOIDS",
                discount_type="fixed",
                discount_value=Decimal("5"),
                applicable_type="course",
            )

    def test_used_count_not_writable(self, promo_code):
        with pytest.raises(errors.ValidationError):
            PromoCodeService.update(promo_code.promo_code_id, used_count=0)

    def test_max_uses_cannot_drop_below_usage(self, make_promo):
        promo = make_promo("BUSY", max_uses=10, used_count=5)
        with pytest.raises(errors.ValidationError):
            PromoCodeService.update(promo.promo_code_id, max_uses=4)

    def test_update_keeps_used_count(self, make_promo, admin_user):
        promo = make_promo("BUSY", max_uses=10, used_count=5)
        updated = PromoCodeService.update(
            promo.promo_code_id,
            admin_id=admin_user.user_id,
            discount_value=Decimal("15"),
            max_uses=20,
        )
        assert updated.discount_value == Decimal("15")
        promo.refresh_from_db()
        assert promo.used_count == 5
        assert promo.max_uses == 20

    def test_deactivate_is_soft(self, promo_code):
        PromoCodeService.deactivate(promo_code.promo_code_id)
        promo = PromoCode.objects.get(pk=promo_code.promo_code_id)
        assert promo.is_active == 0
        assert promo.is_deleted == 0

    def test_list_active_only(self, promo_code, make_promo):
        other = make_promo("OFF")
        other.deactivate()
        assert set(PromoCodeService.list_codes()) == {promo_code, other}
        assert list(PromoCodeService.list_codes(active_only=True)) == [promo_code]

    def test_stats(self, promo_code, make_promo):
        make_promo("OLD", valid_until=timezone.now() - timedelta(days=1), used_count=4)
        make_promo("OFF", is_active=0, used_count=1)

        stats = PromoCodeService.stats()
        assert stats == {
            "total_promo_codes": 3,
            "active_promo_codes": 2,
            "expired_promo_codes": 1,
            "total_usage": 5,
        }
