# coursepay/services/course_service.py
"""
Course catalogue lookups and admin pricing updates.
"""

import logging
from typing import Any

from coursepay.models import Course, CourseStatus
from coursepay.services.payment import errors
from coursepay.services.payment.pricing import to_money

logger = logging.getLogger(__name__)

PRICING_FIELDS = ("price", "currency", "is_free", "status")


class CourseService:
    @staticmethod
    def list_courses(published_only: bool = True):
        queryset = Course.objects.enabled()
        if published_only:
            queryset = queryset.filter(status=CourseStatus.PUBLISHED.value)
        return queryset

    @staticmethod
    def get(course_id: int) -> Course:
        course = Course.objects.live().filter(pk=course_id).first()
        if not course:
            raise errors.NotFound("Course not found.")
        return course

    @staticmethod
    def update_pricing(course_id: int, admin_id: int | None = None, **data: Any) -> Course:
        """
        Change a course's price, currency, free flag or publication status.

        Existing transactions keep the amounts they were submitted with, and
        bundles keep the course even if it is unpublished.
        """
        course = CourseService.get(course_id)
        unknown = set(data) - set(PRICING_FIELDS)
        if unknown:
            raise errors.ValidationError(
                "These course fields cannot be set.", details={"fields": sorted(unknown)}
            )
        if "price" in data:
            data["price"] = to_money(data["price"])
            if data["price"] < 0:
                raise errors.ValidationError("Course price cannot be negative.")

        for field, value in data.items():
            setattr(course, field, value)
        course.updated_by = admin_id
        course.save(update_fields=[*data, "updated_by", "updated_at"])
        logger.info(f"Course {course_id} pricing updated by admin {admin_id}: {sorted(data)}")
        return course
