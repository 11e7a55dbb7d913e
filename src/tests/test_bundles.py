"""
Unit tests for bundle composition and administration.
"""

from decimal import Decimal

import pytest

from coursepay.models import BundleCourse, Course
from coursepay.services.payment import errors
from coursepay.services.payment.bundles import BundleComposer, BundleService


def _course(title, price, hours):
    return Course.objects.create(
        title=title,
        price=Decimal(price),
        duration_hours=Decimal(hours),
        status="published",
    )


@pytest.mark.unit
class TestBundleComposer:
    """Tests for BundleComposer.compose()."""

    def test_price_comes_from_override_not_components(self):
        courses = [
            _course("A", "80.00", "10"),
            _course("B", "70.00", "6.5"),
            _course("C", "50.00", "3.5"),
        ]
        result = BundleComposer.compose(Decimal("150.00"), Decimal("20"), courses)

        assert result.discounted_price == Decimal("120.00")
        assert result.course_count == 3
        assert result.total_duration == Decimal("20.0")
        assert result.component_total == Decimal("200.00")
        assert result.savings == Decimal("80.00")

    def test_zero_discount_keeps_override(self, course):
        result = BundleComposer.compose("99.00", 0, [course])
        assert result.discounted_price == Decimal("99.00")

    def test_uses_half_up_rounding(self, course):
        # 99.99 * 33% = 32.9967 -> 33.00
        result = BundleComposer.compose("99.99", "33", [course])
        assert result.discounted_price == Decimal("66.99")

    def test_savings_never_negative(self, course):
        result = BundleComposer.compose("500.00", 0, [course])
        assert result.savings == Decimal("0.00")

    @pytest.mark.parametrize("discount", ["-1", "100.01", "250"])
    def test_discount_outside_range_rejected(self, course, discount):
        with pytest.raises(errors.ValidationError):
            BundleComposer.compose("100.00", discount, [course])

    def test_for_bundle(self, bundle):
        result = BundleComposer.for_bundle(bundle)
        assert result.discounted_price == Decimal("135.00")
        assert result.course_count == 2
        assert result.total_duration == Decimal("20.50")
        assert result.to_dict()["savings"] == "45.00"


@pytest.mark.unit
class TestBundleService:
    """Tests for bundle administration."""

    def test_create_keeps_course_order(self, course, second_course, admin_user):
        bundle = BundleService.create(
            title="  Reverse Order  ",
            price="120.00",
            course_ids=[second_course.course_id, course.course_id],
            admin_id=admin_user.user_id,
        )
        assert bundle.title == "Reverse Order"
        assert list(bundle.ordered_courses()) == [second_course, course]
        assert bundle.created_by == admin_user.user_id

    def test_create_requires_a_course(self):
        with pytest.raises(errors.ValidationError):
            BundleService.create(title="Empty", price="10.00", course_ids=[])

    def test_create_rejects_draft_courses(self, course, draft_course):
        with pytest.raises(errors.ValidationError) as exc:
            BundleService.create(
                title="Mixed",
                price="100.00",
                course_ids=[course.course_id, draft_course.course_id],
            )
        assert exc.value.details["course_ids"] == [draft_course.course_id]

    def test_create_rejects_bad_discount(self, course):
        with pytest.raises(errors.ValidationError):
            BundleService.create(
                title="Generous",
                price="100.00",
                course_ids=[course.course_id],
                discount_percentage="101",
            )

    def test_unpublished_course_stays_in_existing_bundle(self, bundle, course):
        course.status = "draft"
        course.save()

        assert course in bundle.ordered_courses()
        assert BundleComposer.for_bundle(bundle).course_count == 2

    def test_unpublished_course_not_eligible_for_new_bundle(self, bundle, course):
        course.status = "draft"
        course.save()

        with pytest.raises(errors.ValidationError):
            BundleService.create(title="New", price="50.00", course_ids=[course.course_id])

    def test_add_course_appends(self, bundle):
        extra = _course("Extra", "40.00", "2")
        link = BundleService.add_course(bundle.bundle_id, extra.course_id)
        assert link.order == 2
        assert list(bundle.ordered_courses())[-1] == extra

    def test_add_course_twice(self, bundle, course):
        with pytest.raises(errors.Conflict):
            BundleService.add_course(bundle.bundle_id, course.course_id)

    def test_add_draft_course(self, bundle, draft_course):
        with pytest.raises(errors.ValidationError):
            BundleService.add_course(bundle.bundle_id, draft_course.course_id)

    def test_remove_course(self, bundle, course):
        BundleService.remove_course(bundle.bundle_id, course.course_id)
        assert course not in bundle.ordered_courses()

    def test_cannot_remove_last_course(self, bundle, course, second_course):
        BundleService.remove_course(bundle.bundle_id, course.course_id)
        with pytest.raises(errors.ValidationError):
            BundleService.remove_course(bundle.bundle_id, second_course.course_id)
        assert BundleCourse.objects.filter(bundle=bundle).count() == 1

    def test_remove_course_not_in_bundle(self, bundle, draft_course):
        with pytest.raises(errors.NotFound):
            BundleService.remove_course(bundle.bundle_id, draft_course.course_id)

    def test_update_pricing(self, bundle, admin_user):
        updated = BundleService.update(
            bundle.bundle_id,
            admin_id=admin_user.user_id,
            price="200.00",
            discount_percentage="25",
        )
        assert updated.price == Decimal("200.00")
        assert BundleComposer.for_bundle(updated).discounted_price == Decimal("150.00")

    def test_deactivated_bundle_hidden_from_listing(self, bundle):
        BundleService.deactivate(bundle.bundle_id)
        assert list(BundleService.list_bundles()) == []
        assert list(BundleService.list_bundles(active_only=False)) == [bundle]

    def test_get_missing_bundle(self):
        with pytest.raises(errors.NotFound):
            BundleService.get(9999)
