"""
Unit tests for RefundRequestManager.
"""

from decimal import Decimal

import pytest

from coursepay.models import PaymentHistoryEntry, RefundRequest
from coursepay.services.enrollment_service import EnrollmentService
from coursepay.services.payment import errors
from coursepay.services.payment.ledger import PaymentTransactionLedger
from coursepay.services.payment.refund import RefundRequestManager


@pytest.fixture
def refund(approved_payment, learner):
    return RefundRequestManager.create(
        approved_payment.transaction_id,
        requester_id=learner.user_id,
        amount="40.00",
        reason="Course content did not match the syllabus",
    )


@pytest.mark.unit
class TestCreateRefund:
    """Tests for RefundRequestManager.create()."""

    def test_create_pending_refund(self, refund, approved_payment, learner):
        assert refund.status == "pending"
        assert refund.refund_amount == Decimal("40.00")
        assert refund.requested_by_id == learner.user_id
        assert refund.transaction_id == approved_payment.transaction_id

        entry = PaymentHistoryEntry.objects.get(
            transaction_id=approved_payment.transaction_id, action="refund_request"
        )
        assert entry.metadata["refund_id"] == refund.refund_id
        # Requesting a refund does not change the payment itself
        assert entry.previous_status == entry.new_status == "completed/approved"

    def test_pending_payment_not_refundable(self, pending_payment, learner):
        with pytest.raises(errors.Precondition):
            RefundRequestManager.create(
                pending_payment.transaction_id, learner.user_id, "10.00", "Too slow"
            )
        assert RefundRequest.objects.count() == 0

    def test_rejected_payment_not_refundable(self, pending_payment, learner, admin_user):
        from coursepay.services.payment.verification import PaymentVerificationWorkflow

        PaymentVerificationWorkflow.reject(
            pending_payment.transaction_id, admin_user.user_id, "No matching deposit"
        )
        with pytest.raises(errors.Precondition):
            RefundRequestManager.create(
                pending_payment.transaction_id, learner.user_id, "10.00", "Refund please"
            )

    def test_amount_above_paid(self, approved_payment, learner):
        with pytest.raises(errors.InvalidAmount):
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, "120.00", "Refund"
            )
        assert RefundRequest.objects.count() == 0

    @pytest.mark.parametrize("amount", ["0", "0.00", "-5"])
    def test_amount_must_be_positive(self, approved_payment, learner, amount):
        with pytest.raises(errors.InvalidAmount):
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, amount, "Refund"
            )

    def test_full_amount_allowed(self, approved_payment, learner):
        refund = RefundRequestManager.create(
            approved_payment.transaction_id, learner.user_id, "100.00", "Refund all"
        )
        assert refund.refund_amount == approved_payment.amount

    def test_cumulative_requests_capped_at_paid(self, refund, approved_payment, learner):
        RefundRequestManager.create(
            approved_payment.transaction_id, learner.user_id, "60.00", "Rest of it"
        )
        with pytest.raises(errors.InvalidAmount):
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, "0.01", "One more cent"
            )
        assert RefundRequestManager.requested_total(approved_payment.transaction_id) == Decimal(
            "100.00"
        )

    def test_cap_error_reports_cents(self, refund, approved_payment, learner):
        with pytest.raises(errors.InvalidAmount) as exc_info:
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, "70", "Too much"
            )
        assert exc_info.value.details["already_requested"] == "40.00"
        assert str(RefundRequestManager.requested_total(approved_payment.transaction_id)) == "40.00"

    def test_rejected_refund_frees_amount(self, refund, approved_payment, learner, admin_user):
        RefundRequestManager.decide(refund.refund_id, "rejected", admin_user.user_id)
        again = RefundRequestManager.create(
            approved_payment.transaction_id, learner.user_id, "100.00", "Second try"
        )
        assert again.status == "pending"

    def test_other_learner_cannot_request(self, approved_payment, other_learner):
        with pytest.raises(errors.NotFound):
            RefundRequestManager.create(
                approved_payment.transaction_id, other_learner.user_id, "10.00", "Mine now"
            )

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reason_required(self, approved_payment, learner, reason):
        with pytest.raises(errors.ValidationError):
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, "10.00", reason
            )

    def test_unparseable_amount(self, approved_payment, learner):
        with pytest.raises(errors.ValidationError):
            RefundRequestManager.create(
                approved_payment.transaction_id, learner.user_id, "ten", "Refund"
            )


@pytest.mark.unit
class TestDecideRefund:
    """Tests for RefundRequestManager.decide()."""

    def test_approve_keeps_enrollment(self, refund, admin_user, learner, course, approved_payment):
        decided = RefundRequestManager.decide(
            refund.refund_id,
            "approved",
            admin_user.user_id,
            notes="Partial refund agreed",
            refund_reference="BANK-RF-881",
        )
        assert decided.status == "approved"
        assert decided.processed_by_id == admin_user.user_id
        assert decided.processed_at is not None
        assert decided.refund_reference == "BANK-RF-881"
        assert decided.is_terminal

        assert EnrollmentService.is_enrolled(learner.user_id, course.course_id)
        approved_payment.refresh_from_db()
        assert approved_payment.state == ("completed", "approved")

        actions = list(
            PaymentTransactionLedger.history(approved_payment.transaction_id).values_list(
                "action", flat=True
            )
        )
        assert actions == ["submit", "approve", "refund_request", "refund_approve"]

    def test_reject(self, refund, admin_user):
        decided = RefundRequestManager.decide(
            refund.refund_id, "rejected", admin_user.user_id, notes="Outside policy window"
        )
        assert decided.status == "rejected"
        assert decided.notes == "Outside policy window"

    def test_second_decision(self, refund, admin_user):
        RefundRequestManager.decide(refund.refund_id, "approved", admin_user.user_id)
        with pytest.raises(errors.InvalidStateTransition):
            RefundRequestManager.decide(refund.refund_id, "rejected", admin_user.user_id)
        refund.refresh_from_db()
        assert refund.status == "approved"

    @pytest.mark.parametrize("decision", ["pending", "refunded", ""])
    def test_invalid_decision(self, refund, admin_user, decision):
        with pytest.raises(errors.ValidationError):
            RefundRequestManager.decide(refund.refund_id, decision, admin_user.user_id)

    def test_missing_refund(self, admin_user):
        with pytest.raises(errors.NotFound):
            RefundRequestManager.decide(9999, "approved", admin_user.user_id)

    def test_approved_refunds_appear_in_analytics(self, refund, admin_user):
        RefundRequestManager.decide(refund.refund_id, "approved", admin_user.user_id)
        assert PaymentTransactionLedger.analytics()["refunded_total"] == "40.00"

    def test_list_refunds(self, refund, learner, other_learner):
        assert list(RefundRequestManager.list_refunds(status="pending")) == [refund]
        assert list(RefundRequestManager.list_refunds(user_id=other_learner.user_id)) == []
        assert RefundRequestManager.get(refund.refund_id, user_id=learner.user_id) == refund
