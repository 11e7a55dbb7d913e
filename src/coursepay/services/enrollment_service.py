# coursepay/services/enrollment_service.py
"""
Enrollment collaborator invoked when a payment is approved.
"""

import logging

from django.db import IntegrityError, transaction

from coursepay.models import Enrollment, PaymentTransaction

logger = logging.getLogger(__name__)


class EnrollmentService:
    """
    Grants course access for approved payments.

    grant() is idempotent: calling it again for the same purchase returns
    the existing enrollments without creating new rows.
    """

    @staticmethod
    def grant(payment: PaymentTransaction) -> list[Enrollment]:
        """
        Enroll the payment's learner in the purchased item.

        A bundle purchase yields one bundle-level record plus one record per
        course in the bundle.
        """
        user_id = payment.user_id
        granted: list[Enrollment] = []

        if payment.course_id:
            granted.append(
                EnrollmentService._get_or_create(
                    user_id, payment, course_id=payment.course_id
                )
            )
        else:
            granted.append(
                EnrollmentService._get_or_create(
                    user_id, payment, course_id=None, bundle_id=payment.bundle_id
                )
            )
            for course in payment.bundle.ordered_courses():
                granted.append(
                    EnrollmentService._get_or_create(
                        user_id,
                        payment,
                        course_id=course.course_id,
                        bundle_id=payment.bundle_id,
                    )
                )

        logger.info(
            f"Enrollment granted for payment {payment.transaction_id}: "
            f"{len(granted)} record(s) for user {user_id}"
        )
        return granted

    @staticmethod
    def is_enrolled(user_id: int, course_id: int) -> bool:
        return Enrollment.objects.enabled().filter(
            user_id=user_id, course_id=course_id
        ).exists()

    @staticmethod
    def _get_or_create(
        user_id: int,
        payment: PaymentTransaction,
        course_id: int | None,
        bundle_id: int | None = None,
    ) -> Enrollment:
        lookup = {"user_id": user_id, "course_id": course_id}
        if course_id is None:
            lookup["bundle_id"] = bundle_id
        defaults = {"bundle_id": bundle_id, "source_transaction": payment}
        try:
            with transaction.atomic():
                enrollment, created = Enrollment.objects.get_or_create(
                    **lookup, defaults=defaults
                )
        except IntegrityError:
            # Lost a race with a concurrent grant for the same access
            enrollment, created = Enrollment.objects.get(**lookup), False
        if not created:
            logger.debug(
                f"User {user_id} already enrolled "
                f"(course={course_id}, bundle={bundle_id})"
            )
        return enrollment
