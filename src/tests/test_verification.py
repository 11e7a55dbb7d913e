"""
Unit tests for PaymentVerificationWorkflow and enrollment on approval.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from coursepay.models import Enrollment, PaymentHistoryEntry, PaymentTransaction
from coursepay.services.enrollment_service import EnrollmentService
from coursepay.services.payment import errors
from coursepay.services.payment.verification import PaymentVerificationWorkflow


@pytest.mark.unit
class TestApprove:
    """Tests for PaymentVerificationWorkflow.approve()."""

    def test_approve_pending_payment(self, learner, course, admin_user, promo_code, submit_payment):
        payment = submit_payment(learner, course, promo_code="SAVE20")

        approved = PaymentVerificationWorkflow.approve(
            payment.transaction_id, admin_id=admin_user.user_id, notes="Proof matches"
        )

        assert approved.state == ("completed", "approved")
        assert approved.is_settled
        assert approved.verified_by_id == admin_user.user_id
        assert approved.verified_at is not None
        assert approved.receipt_number.startswith("RCP-")
        assert approved.receipt_number.endswith(f"{payment.transaction_id:06d}")
        assert approved.notes == "Proof matches"

        promo_code.refresh_from_db()
        assert promo_code.used_count == 1
        assert EnrollmentService.is_enrolled(learner.user_id, course.course_id)

        entries = PaymentHistoryEntry.objects.filter(
            transaction_id=payment.transaction_id, action="approve"
        )
        assert entries.count() == 1
        entry = entries.get()
        assert entry.performed_by_id == admin_user.user_id
        assert entry.previous_status == "pending/pending"
        assert entry.new_status == "completed/approved"
        assert entry.metadata["receipt_number"] == approved.receipt_number

    def test_approve_bundle_enrolls_every_course(self, learner, bundle, course, second_course, admin_user, submit_payment):
        payment = submit_payment(learner, bundle, reference="EP-BUNDLE")
        PaymentVerificationWorkflow.approve(payment.transaction_id, admin_id=admin_user.user_id)

        enrollments = Enrollment.objects.filter(user=learner)
        assert enrollments.count() == 3
        assert enrollments.filter(course__isnull=True, bundle=bundle).exists()
        assert EnrollmentService.is_enrolled(learner.user_id, course.course_id)
        assert EnrollmentService.is_enrolled(learner.user_id, second_course.course_id)

    def test_approve_twice(self, approved_payment, admin_user):
        receipt = approved_payment.receipt_number

        with pytest.raises(errors.InvalidStateTransition):
            PaymentVerificationWorkflow.approve(
                approved_payment.transaction_id, admin_id=admin_user.user_id
            )

        approved_payment.refresh_from_db()
        assert approved_payment.state == ("completed", "approved")
        assert approved_payment.receipt_number == receipt
        assert (
            PaymentHistoryEntry.objects.filter(
                transaction_id=approved_payment.transaction_id, action="approve"
            ).count()
            == 1
        )

    def test_approve_missing_payment(self, admin_user):
        with pytest.raises(errors.NotFound):
            PaymentVerificationWorkflow.approve(9999, admin_id=admin_user.user_id)

    def test_losing_a_concurrent_decision(self, pending_payment, admin_user, monkeypatch):
        # Another reviewer decides the payment after this one loaded it
        stale = PaymentTransaction.objects.get(pk=pending_payment.transaction_id)
        PaymentVerificationWorkflow.reject(
            pending_payment.transaction_id,
            admin_id=admin_user.user_id,
            rejection_reason="Reference not found in statement",
        )
        monkeypatch.setattr(
            PaymentVerificationWorkflow, "_load_pending", staticmethod(lambda tid: stale)
        )

        with pytest.raises(errors.Conflict):
            PaymentVerificationWorkflow.approve(
                pending_payment.transaction_id, admin_id=admin_user.user_id
            )

        pending_payment.refresh_from_db()
        assert pending_payment.state == ("failed", "rejected")
        assert not Enrollment.objects.exists()

    def test_last_promo_use_goes_to_first_approval(self, learner, other_learner, course, admin_user, make_promo, submit_payment):
        promo = make_promo("SUMMER10", discount_value=Decimal("10"), max_uses=1)
        first = submit_payment(learner, course, reference="EP-S1", promo_code="SUMMER10")
        second = submit_payment(other_learner, course, reference="EP-S2", promo_code="SUMMER10")
        assert first.amount == Decimal("90.00")
        assert second.amount == Decimal("90.00")

        PaymentVerificationWorkflow.approve(first.transaction_id, admin_id=admin_user.user_id)
        with pytest.raises(errors.MaxUsesReached):
            PaymentVerificationWorkflow.approve(
                second.transaction_id, admin_id=admin_user.user_id
            )

        promo.refresh_from_db()
        assert promo.used_count == 1
        second.refresh_from_db()
        assert second.state == ("pending", "pending")
        assert second.receipt_number is None
        assert not EnrollmentService.is_enrolled(other_learner.user_id, course.course_id)

    def test_promo_expired_after_submission_still_redeems(self, learner, course, admin_user, make_promo, submit_payment):
        promo = make_promo("LASTCALL")
        payment = submit_payment(learner, course, reference="EP-LATE", promo_code="LASTCALL")

        # Submitted two days ago; the code lapsed yesterday
        PaymentTransaction.objects.filter(pk=payment.transaction_id).update(
            created_at=timezone.now() - timedelta(days=2)
        )
        type(promo).objects.filter(pk=promo.pk).update(
            valid_until=timezone.now() - timedelta(days=1)
        )

        approved = PaymentVerificationWorkflow.approve(
            payment.transaction_id, admin_id=admin_user.user_id
        )
        assert approved.state == ("completed", "approved")
        promo.refresh_from_db()
        assert promo.used_count == 1


@pytest.mark.unit
class TestReject:
    """Tests for PaymentVerificationWorkflow.reject()."""

    def test_reject_with_reason(self, pending_payment, admin_user, learner, course):
        rejected = PaymentVerificationWorkflow.reject(
            pending_payment.transaction_id,
            admin_id=admin_user.user_id,
            rejection_reason="  Screenshot is unreadable ",
        )
        assert rejected.state == ("failed", "rejected")
        assert rejected.rejection_reason == "Screenshot is unreadable"
        assert rejected.verified_by_id == admin_user.user_id
        assert rejected.receipt_number is None
        assert not EnrollmentService.is_enrolled(learner.user_id, course.course_id)

        entry = PaymentHistoryEntry.objects.get(
            transaction_id=pending_payment.transaction_id, action="reject"
        )
        assert entry.notes == "Screenshot is unreadable"
        assert entry.new_status == "failed/rejected"

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reason_required(self, pending_payment, admin_user, reason):
        with pytest.raises(errors.ValidationError):
            PaymentVerificationWorkflow.reject(
                pending_payment.transaction_id,
                admin_id=admin_user.user_id,
                rejection_reason=reason,
            )
        pending_payment.refresh_from_db()
        assert pending_payment.state == ("pending", "pending")
        assert not PaymentHistoryEntry.objects.filter(action="reject").exists()

    def test_reject_after_approve(self, approved_payment, admin_user):
        with pytest.raises(errors.InvalidStateTransition):
            PaymentVerificationWorkflow.reject(
                approved_payment.transaction_id,
                admin_id=admin_user.user_id,
                rejection_reason="Changed my mind",
            )
        approved_payment.refresh_from_db()
        assert approved_payment.state == ("completed", "approved")

    def test_rejection_leaves_promo_untouched(self, learner, course, admin_user, promo_code, submit_payment):
        payment = submit_payment(learner, course, promo_code="SAVE20")
        PaymentVerificationWorkflow.reject(
            payment.transaction_id, admin_id=admin_user.user_id, rejection_reason="Duplicate"
        )
        promo_code.refresh_from_db()
        assert promo_code.used_count == 0


@pytest.mark.unit
class TestEnrollmentService:
    def test_grant_is_idempotent(self, approved_payment, learner):
        again = EnrollmentService.grant(approved_payment)
        assert len(again) == 1
        assert Enrollment.objects.filter(user=learner).count() == 1

    def test_grant_bundle_twice(self, learner, bundle, admin_user, submit_payment):
        payment = submit_payment(learner, bundle, reference="EP-BUNDLE")
        approved = PaymentVerificationWorkflow.approve(
            payment.transaction_id, admin_id=admin_user.user_id
        )
        EnrollmentService.grant(approved)
        assert Enrollment.objects.filter(user=learner).count() == 3

    def test_course_already_owned_through_bundle(self, learner, bundle, course, admin_user, submit_payment):
        payment = submit_payment(learner, bundle, reference="EP-BUNDLE")
        PaymentVerificationWorkflow.approve(payment.transaction_id, admin_id=admin_user.user_id)

        single = submit_payment(learner, course, reference="EP-SINGLE")
        PaymentVerificationWorkflow.approve(single.transaction_id, admin_id=admin_user.user_id)

        assert Enrollment.objects.filter(user=learner, course=course).count() == 1
