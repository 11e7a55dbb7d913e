# coursepay/models/enrollment.py
"""
Enrollment records granted by approved payments.

Provides:
- Enrollment: A learner's access to a course, optionally via a bundle
"""

from django.db import models
from django.db.models import Q

from .base import BaseModel


class Enrollment(BaseModel):
    """
    Access grant for one learner and one course or bundle.

    Unique per (user, course) and per (user, bundle) so repeated grants for
    the same purchase are no-ops.
    """

    enrollment_id = models.AutoField(
        db_column="EnrollmentID",
        primary_key=True,
        help_text="Unique identifier for the enrollment",
    )
    user = models.ForeignKey(
        "User",
        models.CASCADE,
        db_column="UserID",
        related_name="enrollments",
        help_text="Enrolled learner",
    )
    course = models.ForeignKey(
        "Course",
        models.CASCADE,
        db_column="CourseID",
        blank=True,
        null=True,
        related_name="enrollments",
        help_text="Course the learner can access",
    )
    bundle = models.ForeignKey(
        "Bundle",
        models.CASCADE,
        db_column="BundleID",
        blank=True,
        null=True,
        related_name="enrollments",
        help_text="Bundle the learner bought (set on the bundle record and its courses)",
    )
    source_transaction = models.ForeignKey(
        "PaymentTransaction",
        models.SET_NULL,
        db_column="SourceTransactionID",
        blank=True,
        null=True,
        related_name="enrollments",
        help_text="Approved payment that granted the access",
    )

    class Meta:
        managed = True
        db_table = "Enrollments"
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"],
                condition=Q(course__isnull=False),
                name="uniq_user_course_enrollment",
            ),
            models.UniqueConstraint(
                fields=["user", "bundle"],
                condition=Q(course__isnull=True, bundle__isnull=False),
                name="uniq_user_bundle_enrollment",
            ),
        ]
        ordering = ["-created_at"]
        app_label = "coursepay"

    def __str__(self):
        target = f"course #{self.course_id}" if self.course_id else f"bundle #{self.bundle_id}"
        return f"User #{self.user_id} -> {target}"
