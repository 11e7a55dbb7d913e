# coursepay/services/payment/bundles.py
"""
Bundle pricing and administration.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.db.models import Max

from coursepay.models import Bundle, BundleCourse, Course, CourseStatus
from coursepay.models.choices import DiscountType

from . import errors
from .pricing import PricingCalculator, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundleComposition:
    """
    Derived figures for a bundle.

    Attributes:
        discounted_price: price override minus discount_percentage
        course_count: Number of component courses
        total_duration: Sum of component durations (hours)
        component_total: Sum of component list prices, for display only
    """

    discounted_price: Decimal
    course_count: int
    total_duration: Decimal
    component_total: Decimal

    @property
    def savings(self) -> Decimal:
        return max(self.component_total - self.discounted_price, Decimal("0.00"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "discounted_price": str(self.discounted_price),
            "course_count": self.course_count,
            "total_duration": str(self.total_duration),
            "component_total": str(self.component_total),
            "savings": str(self.savings),
        }


class BundleComposer:
    """Derives a bundle's price and stats from its override and courses."""

    @staticmethod
    def compose(
        price_override: Any,
        discount_percentage: Any,
        courses: Iterable[Course],
    ) -> BundleComposition:
        """
        The discounted price comes from price_override, never from the sum
        of component prices; rounding matches PricingCalculator.
        """
        percentage = to_money(discount_percentage or 0)
        if not Decimal("0") <= percentage <= Decimal("100"):
            raise errors.ValidationError("Bundle discount must be between 0 and 100.")

        breakdown = PricingCalculator.compute(
            price_override, DiscountType.PERCENTAGE.value, percentage
        )
        courses = list(courses)
        return BundleComposition(
            discounted_price=breakdown.final_amount,
            course_count=len(courses),
            total_duration=sum(
                (Decimal(str(c.duration_hours or 0)) for c in courses), Decimal("0")
            ),
            component_total=sum((to_money(c.price) for c in courses), Decimal("0.00")),
        )

    @staticmethod
    def for_bundle(bundle: Bundle) -> BundleComposition:
        return BundleComposer.compose(
            bundle.price, bundle.discount_percentage, bundle.ordered_courses()
        )


class BundleService:
    """
    Admin operations on bundles.

    Only published, active courses are eligible for new composition. A
    course unpublished later stays in the bundles that already hold it.
    """

    @staticmethod
    def get(bundle_id: int, active_only: bool = False) -> Bundle:
        queryset = Bundle.objects.enabled() if active_only else Bundle.objects.live()
        bundle = queryset.filter(pk=bundle_id).first()
        if not bundle:
            raise errors.NotFound("Bundle not found.")
        return bundle

    @staticmethod
    def list_bundles(active_only: bool = True):
        queryset = Bundle.objects.enabled() if active_only else Bundle.objects.live()
        return queryset.prefetch_related("courses").order_by("-created_at")

    @staticmethod
    @transaction.atomic
    def create(
        title: str,
        price: Any,
        course_ids: list[int],
        discount_percentage: Any = 0,
        description: str = "",
        currency: str = "USD",
        admin_id: int | None = None,
    ) -> Bundle:
        if not title or not title.strip():
            raise errors.ValidationError("Bundle title is required.")
        if not course_ids:
            raise errors.ValidationError("A bundle needs at least one course.")

        courses = BundleService._eligible_courses(course_ids)
        BundleService._check_pricing(price, discount_percentage)

        bundle = Bundle.objects.create(
            title=title.strip(),
            description=description or "",
            price=to_money(price),
            currency=currency,
            discount_percentage=to_money(discount_percentage or 0),
            created_by=admin_id,
            updated_by=admin_id,
        )
        BundleCourse.objects.bulk_create(
            BundleCourse(bundle=bundle, course=course, order=index)
            for index, course in enumerate(courses)
        )
        logger.info(
            f"Bundle {bundle.bundle_id} created by admin {admin_id} "
            f"with {len(courses)} courses"
        )
        return bundle

    @staticmethod
    @transaction.atomic
    def update(bundle_id: int, admin_id: int | None = None, **data: Any) -> Bundle:
        bundle = BundleService.get(bundle_id)
        price = data.get("price", bundle.price)
        discount = data.get("discount_percentage", bundle.discount_percentage)
        BundleService._check_pricing(price, discount)

        for field in ("title", "description", "currency"):
            if field in data:
                setattr(bundle, field, data[field])
        if "is_active" in data:
            bundle.is_active = 1 if data["is_active"] else 0
        bundle.price = to_money(price)
        bundle.discount_percentage = to_money(discount or 0)
        bundle.updated_by = admin_id
        bundle.save()
        logger.info(f"Bundle {bundle_id} updated by admin {admin_id}")
        return bundle

    @staticmethod
    def deactivate(bundle_id: int, admin_id: int | None = None) -> Bundle:
        bundle = BundleService.get(bundle_id)
        bundle.deactivate(user_id=admin_id)
        logger.info(f"Bundle {bundle_id} deactivated by admin {admin_id}")
        return bundle

    @staticmethod
    @transaction.atomic
    def add_course(bundle_id: int, course_id: int) -> BundleCourse:
        bundle = BundleService.get(bundle_id)
        (course,) = BundleService._eligible_courses([course_id])
        if BundleCourse.objects.filter(bundle=bundle, course=course).exists():
            raise errors.Conflict("Course is already part of this bundle.")
        next_order = (
            BundleCourse.objects.filter(bundle=bundle).aggregate(m=Max("order"))["m"]
        )
        link = BundleCourse.objects.create(
            bundle=bundle,
            course=course,
            order=0 if next_order is None else next_order + 1,
        )
        logger.info(f"Course {course_id} added to bundle {bundle_id}")
        return link

    @staticmethod
    @transaction.atomic
    def remove_course(bundle_id: int, course_id: int) -> None:
        bundle = BundleService.get(bundle_id)
        links = BundleCourse.objects.select_for_update().filter(bundle=bundle)
        link = links.filter(course_id=course_id).first()
        if not link:
            raise errors.NotFound("Course is not part of this bundle.")
        if links.count() <= 1:
            raise errors.ValidationError("A bundle must keep at least one course.")
        link.delete()
        logger.info(f"Course {course_id} removed from bundle {bundle_id}")

    @staticmethod
    def _eligible_courses(course_ids: list[int]) -> list[Course]:
        ids = list(dict.fromkeys(int(i) for i in course_ids))
        courses = {
            c.course_id: c
            for c in Course.objects.enabled().filter(
                course_id__in=ids, status=CourseStatus.PUBLISHED.value
            )
        }
        missing = [i for i in ids if i not in courses]
        if missing:
            raise errors.ValidationError(
                "Only published courses can be added to a bundle.",
                details={"course_ids": missing},
            )
        return [courses[i] for i in ids]

    @staticmethod
    def _check_pricing(price: Any, discount_percentage: Any) -> None:
        if to_money(price) < 0:
            raise errors.ValidationError("Bundle price cannot be negative.")
        discount = to_money(discount_percentage or 0)
        if not Decimal("0") <= discount <= Decimal("100"):
            raise errors.ValidationError("Bundle discount must be between 0 and 100.")
