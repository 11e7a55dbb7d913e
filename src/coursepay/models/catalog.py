# coursepay/models/catalog.py
"""
Priced catalogue items.

Provides:
- Course: A single purchasable course
- Bundle: An admin-curated set of published courses sold at an override price
- BundleCourse: Ordered junction between bundles and courses
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .base import BaseModel
from .choices import CourseStatus


class Course(BaseModel):
    """
    A purchasable course.

    Only the pricing-relevant attributes live here; content and delivery
    belong to other services.
    """

    course_id = models.AutoField(
        db_column="CourseID",
        primary_key=True,
        help_text="Unique identifier for the course",
    )
    title = models.CharField(
        db_column="Title",
        max_length=255,
        help_text="Course title shown at checkout",
    )
    price = models.DecimalField(
        db_column="Price",
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="List price of the course",
    )
    currency = models.CharField(
        db_column="Currency",
        max_length=3,
        default="USD",
        help_text="ISO currency code of the price",
    )
    is_free = models.BooleanField(
        db_column="IsFree",
        default=False,
        help_text="Free courses never go through payment verification",
    )
    duration_hours = models.DecimalField(
        db_column="DurationHours",
        max_digits=7,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total course duration in hours",
    )
    status = models.CharField(
        db_column="Status",
        max_length=12,
        choices=CourseStatus.choices(),
        default=CourseStatus.DRAFT.value,
        help_text="Publication status; only published courses can be bundled",
    )

    class Meta:
        managed = True
        db_table = "Courses"
        verbose_name = "Course"
        verbose_name_plural = "Courses"
        indexes = [
            models.Index(fields=["status", "is_active"], name="course_status_active_idx"),
        ]
        ordering = ["title"]
        app_label = "coursepay"

    def __str__(self):
        return f"{self.title} ({self.currency} {self.price})"

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED.value


class Bundle(BaseModel):
    """
    A priced collection of published courses.

    The bundle's price is an explicit override, not the sum of its courses;
    discount_percentage is applied on top of that override.
    """

    bundle_id = models.AutoField(
        db_column="BundleID",
        primary_key=True,
        help_text="Unique identifier for the bundle",
    )
    title = models.CharField(
        db_column="Title",
        max_length=255,
        help_text="Bundle title",
    )
    description = models.TextField(
        db_column="Description",
        blank=True,
        default="",
        help_text="Marketing description of the bundle",
    )
    price = models.DecimalField(
        db_column="Price",
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Price override for the whole bundle",
    )
    currency = models.CharField(
        db_column="Currency",
        max_length=3,
        default="USD",
        help_text="ISO currency code of the price",
    )
    discount_percentage = models.DecimalField(
        db_column="DiscountPercentage",
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[
            MinValueValidator(Decimal("0")),
            MaxValueValidator(Decimal("100")),
        ],
        help_text="Discount (0-100) applied on top of the price override",
    )
    courses = models.ManyToManyField(
        Course,
        through="BundleCourse",
        related_name="bundles",
        help_text="Courses included in the bundle",
    )

    class Meta:
        managed = True
        db_table = "Bundles"
        verbose_name = "Bundle"
        verbose_name_plural = "Bundles"
        indexes = [
            models.Index(fields=["is_active", "is_deleted"], name="bundle_active_idx"),
        ]
        ordering = ["-created_at"]
        app_label = "coursepay"

    def __str__(self):
        return f"{self.title}: {self.currency} {self.price} (-{self.discount_percentage}%)"

    def ordered_courses(self):
        return Course.objects.filter(bundle_links__bundle=self).order_by(
            "bundle_links__order", "course_id"
        )


class BundleCourse(models.Model):
    """Ordered membership of a course in a bundle."""

    bundle_course_id = models.AutoField(
        db_column="BundleCourseID",
        primary_key=True,
        help_text="Unique identifier for the membership row",
    )
    bundle = models.ForeignKey(
        Bundle,
        models.CASCADE,
        db_column="BundleID",
        related_name="course_links",
        help_text="Bundle the course belongs to",
    )
    course = models.ForeignKey(
        Course,
        models.PROTECT,
        db_column="CourseID",
        related_name="bundle_links",
        help_text="Course included in the bundle",
    )
    order = models.PositiveIntegerField(
        db_column="SortOrder",
        default=0,
        help_text="Display order of the course inside the bundle",
    )
    created_at = models.DateTimeField(
        db_column="CreatedAt",
        auto_now_add=True,
        help_text="When the course was added to the bundle",
    )

    class Meta:
        managed = True
        db_table = "BundleCourses"
        verbose_name = "Bundle Course"
        verbose_name_plural = "Bundle Courses"
        constraints = [
            models.UniqueConstraint(
                fields=["bundle", "course"], name="uniq_bundle_course"
            ),
        ]
        ordering = ["order", "bundle_course_id"]
        app_label = "coursepay"

    def __str__(self):
        return f"Bundle #{self.bundle_id} / Course #{self.course_id}"
