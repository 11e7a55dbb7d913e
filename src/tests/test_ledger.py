"""
Unit tests for PaymentTransactionLedger: quoting, submission, cancellation,
history and admin queries.
"""

from decimal import Decimal

import pytest

from coursepay.models import PaymentHistoryEntry, PaymentMethodConfig, PaymentTransaction
from coursepay.services.payment import errors
from coursepay.services.payment.ledger import PaymentTransactionLedger
from coursepay.services.payment.verification import PaymentVerificationWorkflow


@pytest.mark.unit
class TestQuote:
    def test_course_with_promo_and_fee(self, course, promo_code, payment_method):
        quote = PaymentTransactionLedger.quote(
            "course", course.course_id, promo_code="save20", payment_method="easypaisa"
        )
        data = quote.to_dict()
        assert data["original_amount"] == "100.00"
        assert data["discount_amount"] == "20.00"
        assert data["final_amount"] == "80.00"
        # Fee is charged after the discount
        assert data["processing_fee"] == "1.60"
        assert data["total_amount"] == "81.60"
        assert data["promo_code"] == "SAVE20"

    def test_bundle_starts_from_discounted_override(self, bundle, promo_code):
        quote = PaymentTransactionLedger.quote("bundle", bundle.bundle_id, promo_code="SAVE20")
        assert quote.breakdown.original_amount == Decimal("135.00")
        assert quote.breakdown.discount_amount == Decimal("27.00")
        assert quote.breakdown.final_amount == Decimal("108.00")
        assert quote.processing_fee == Decimal("0.00")

    def test_quote_persists_nothing(self, course, promo_code):
        PaymentTransactionLedger.quote("course", course.course_id, promo_code="SAVE20")
        assert PaymentTransaction.objects.count() == 0
        promo_code.refresh_from_db()
        assert promo_code.used_count == 0

    def test_unknown_item_type(self, course):
        with pytest.raises(errors.ValidationError):
            PaymentTransactionLedger.quote("ebook", course.course_id)

    def test_draft_course_not_purchasable(self, draft_course):
        with pytest.raises(errors.NotFound):
            PaymentTransactionLedger.quote("course", draft_course.course_id)

    def test_free_course_needs_no_payment(self, free_course):
        with pytest.raises(errors.ValidationError):
            PaymentTransactionLedger.quote("course", free_course.course_id)


@pytest.mark.unit
class TestSubmit:
    """Tests for PaymentTransactionLedger.submit()."""

    def test_creates_pending_record(self, learner, course, payment_method, promo_code):
        payment = PaymentTransactionLedger.submit(
            user_id=learner.user_id,
            item_type="course",
            item_id=course.course_id,
            payment_method="easypaisa",
            payment_reference="  EP-777  ",
            proof_ref="proofs/ep-777.png",
            promo_code="SAVE20",
            notes="Paid from my wallet",
        )

        assert payment.state == ("pending", "pending")
        assert payment.payment_reference == "EP-777"
        assert payment.original_amount == Decimal("100.00")
        assert payment.discount_amount == Decimal("20.00")
        assert payment.amount == Decimal("80.00")
        assert payment.processing_fee == Decimal("1.60")
        assert payment.total_amount == Decimal("81.60")
        assert payment.promo_code_id == promo_code.promo_code_id
        assert payment.course_id == course.course_id
        assert payment.bundle_id is None

    def test_submission_does_not_consume_promo(self, pending_payment, learner, course, submit_payment, promo_code):
        submit_payment(learner, course, reference="EP-PROMO", promo_code="SAVE20")
        promo_code.refresh_from_db()
        assert promo_code.used_count == 0

    def test_writes_submit_history(self, pending_payment, learner):
        entries = list(PaymentHistoryEntry.objects.filter(transaction=pending_payment))
        assert len(entries) == 1
        assert entries[0].action == "submit"
        assert entries[0].performed_by_id == learner.user_id
        assert entries[0].previous_status is None
        assert entries[0].new_status == "pending/pending"
        assert entries[0].metadata["payment_method"] == "easypaisa"

    def test_bundle_submission(self, learner, bundle, submit_payment):
        payment = submit_payment(learner, bundle, reference="EP-BUNDLE")
        assert payment.bundle_id == bundle.bundle_id
        assert payment.course_id is None
        assert payment.amount == Decimal("135.00")
        assert payment.processing_fee == Decimal("2.70")

    @pytest.mark.parametrize(
        "reference,proof", [("", "proofs/x.png"), ("   ", "proofs/x.png"), ("EP-1", "")]
    )
    def test_reference_and_proof_required(self, learner, course, payment_method, reference, proof):
        with pytest.raises(errors.ValidationError):
            PaymentTransactionLedger.submit(
                user_id=learner.user_id,
                item_type="course",
                item_id=course.course_id,
                payment_method="easypaisa",
                payment_reference=reference,
                proof_ref=proof,
            )
        assert PaymentTransaction.objects.count() == 0

    def test_unknown_payment_method(self, learner, course, submit_payment):
        with pytest.raises(errors.ValidationError):
            submit_payment(learner, course, method="paypal")

    def test_disabled_payment_method(self, learner, course, payment_method, submit_payment):
        payment_method.is_enabled = False
        payment_method.save()
        with pytest.raises(errors.ValidationError):
            submit_payment(learner, course)

    def test_unconfigured_payment_method(self, learner, course, submit_payment):
        with pytest.raises(errors.ValidationError):
            submit_payment(learner, course, method="jazzcash")

    def test_below_minimum_creates_nothing(self, learner, bank_transfer, submit_payment):
        from coursepay.models import Course

        cheap = Course.objects.create(title="Mini", price=Decimal("5.00"), status="published")
        with pytest.raises(errors.AmountOutOfRange):
            submit_payment(learner, cheap, method="bank_transfer")
        assert PaymentTransaction.objects.count() == 0
        assert PaymentHistoryEntry.objects.count() == 0

    def test_fee_counts_toward_maximum(self, learner, course, payment_method, submit_payment):
        # 100.00 + 2% fee = 102.00 > 101.00
        PaymentMethodConfig.objects.filter(pk=payment_method.pk).update(
            max_amount=Decimal("101.00")
        )
        with pytest.raises(errors.AmountOutOfRange):
            submit_payment(learner, course)

    def test_out_of_range_details(self, learner, course, payment_method, submit_payment):
        PaymentMethodConfig.objects.filter(pk=payment_method.pk).update(
            min_amount=Decimal("0.00"), max_amount=Decimal("0.00")
        )
        with pytest.raises(errors.AmountOutOfRange) as exc_info:
            submit_payment(learner, course)
        assert exc_info.value.details == {
            "amount": "102.00",
            "min_amount": "0.00",
            "max_amount": "0.00",
        }

    def test_out_of_range_details_without_maximum(self, learner, bank_transfer, submit_payment):
        from coursepay.models import Course

        cheap = Course.objects.create(title="Mini", price=Decimal("5.00"), status="published")
        with pytest.raises(errors.AmountOutOfRange) as exc_info:
            submit_payment(learner, cheap, method="bank_transfer")
        assert exc_info.value.details["min_amount"] == "10.00"
        assert exc_info.value.details["max_amount"] is None

    def test_discount_can_bring_total_into_range(self, learner, course, payment_method, promo_code, submit_payment):
        PaymentMethodConfig.objects.filter(pk=payment_method.pk).update(
            max_amount=Decimal("90.00")
        )
        payment = submit_payment(learner, course, promo_code="SAVE20")
        assert payment.total_amount == Decimal("81.60")

    def test_invalid_promo_blocks_submission(self, learner, course, submit_payment):
        with pytest.raises(errors.NotFound):
            submit_payment(learner, course, promo_code="GHOST")
        assert PaymentTransaction.objects.count() == 0

    def test_duplicate_pending_reference(self, pending_payment, learner, course, submit_payment):
        with pytest.raises(errors.Conflict):
            submit_payment(learner, course, reference=pending_payment.payment_reference)
        assert PaymentTransaction.objects.count() == 1

    def test_same_reference_other_learner(self, pending_payment, other_learner, course, submit_payment):
        payment = submit_payment(
            other_learner, course, reference=pending_payment.payment_reference
        )
        assert payment.transaction_id != pending_payment.transaction_id

    def test_same_reference_after_cancel(self, pending_payment, learner, course, submit_payment):
        PaymentTransactionLedger.cancel(pending_payment.transaction_id, learner.user_id)
        payment = submit_payment(learner, course, reference=pending_payment.payment_reference)
        assert payment.state == ("pending", "pending")


@pytest.mark.unit
class TestCancel:
    def test_cancel_pending(self, pending_payment, learner):
        payment = PaymentTransactionLedger.cancel(
            pending_payment.transaction_id, learner.user_id
        )
        assert payment.state == ("cancelled", "pending")
        assert payment.is_terminal

        actions = list(
            PaymentTransactionLedger.history(payment.transaction_id).values_list(
                "action", flat=True
            )
        )
        assert actions == ["submit", "cancel"]

    def test_cancel_someone_elses_payment(self, pending_payment, other_learner):
        with pytest.raises(errors.NotFound):
            PaymentTransactionLedger.cancel(
                pending_payment.transaction_id, other_learner.user_id
            )

    def test_cancel_twice(self, pending_payment, learner):
        PaymentTransactionLedger.cancel(pending_payment.transaction_id, learner.user_id)
        with pytest.raises(errors.InvalidStateTransition):
            PaymentTransactionLedger.cancel(pending_payment.transaction_id, learner.user_id)

    def test_cancel_approved(self, approved_payment, learner):
        with pytest.raises(errors.InvalidStateTransition):
            PaymentTransactionLedger.cancel(approved_payment.transaction_id, learner.user_id)

    def test_cancelled_payment_cannot_be_approved(self, pending_payment, learner, admin_user):
        PaymentTransactionLedger.cancel(pending_payment.transaction_id, learner.user_id)
        with pytest.raises(errors.InvalidStateTransition):
            PaymentVerificationWorkflow.approve(
                pending_payment.transaction_id, admin_id=admin_user.user_id
            )


@pytest.mark.unit
class TestQueries:
    def test_get_scoped_to_owner(self, pending_payment, learner, other_learner):
        assert PaymentTransactionLedger.get(
            pending_payment.transaction_id, user_id=learner.user_id
        ) == pending_payment
        with pytest.raises(errors.NotFound):
            PaymentTransactionLedger.get(
                pending_payment.transaction_id, user_id=other_learner.user_id
            )

    def test_history_of_other_learner_hidden(self, pending_payment, other_learner):
        with pytest.raises(errors.NotFound):
            PaymentTransactionLedger.history(
                pending_payment.transaction_id, user_id=other_learner.user_id
            )

    def test_list_for_user(self, pending_payment, learner, other_learner):
        assert list(PaymentTransactionLedger.list_for_user(learner.user_id)) == [
            pending_payment
        ]
        assert list(PaymentTransactionLedger.list_for_user(other_learner.user_id)) == []

    def test_list_transactions_filters(self, pending_payment, approved_payment, learner, second_course, submit_payment):
        # approved_payment is pending_payment after approval
        second = submit_payment(learner, second_course, reference="EP-0002")

        pending = PaymentTransactionLedger.list_transactions(verification_status="pending")
        assert list(pending) == [second]

        completed = PaymentTransactionLedger.list_transactions(status="completed")
        assert list(completed) == [approved_payment]

        assert PaymentTransactionLedger.list_transactions(payment_method="jazzcash").count() == 0
        assert PaymentTransactionLedger.list_transactions(user_id=learner.user_id).count() == 2

    def test_analytics(self, learner, other_learner, course, second_course, admin_user, promo_code, submit_payment):
        first = submit_payment(learner, course, reference="EP-A", promo_code="SAVE20")
        second = submit_payment(other_learner, second_course, reference="EP-B")
        submit_payment(other_learner, course, reference="EP-C")

        PaymentVerificationWorkflow.approve(first.transaction_id, admin_id=admin_user.user_id)
        PaymentVerificationWorkflow.reject(
            second.transaction_id, admin_id=admin_user.user_id, rejection_reason="Blurry proof"
        )

        stats = PaymentTransactionLedger.analytics()
        assert stats["total_transactions"] == 3
        assert stats["by_status"] == {
            "pending": 1,
            "completed": 1,
            "failed": 1,
            "cancelled": 0,
        }
        assert stats["pending_verifications"] == 1
        assert stats["approved_revenue"] == "80.00"
        assert stats["processing_fees"] == "1.60"
        assert stats["discounts_granted"] == "20.00"
        assert stats["refunded_total"] == "0.00"
        assert stats["by_payment_method"] == [
            {"payment_method": "easypaisa", "count": 3, "revenue": "80.00"}
        ]

    def test_analytics_amounts_keep_cents(self, pending_payment, admin_user, learner):
        from coursepay.services.payment.refund import RefundRequestManager

        payment = PaymentVerificationWorkflow.approve(
            pending_payment.transaction_id, admin_id=admin_user.user_id
        )
        refund = RefundRequestManager.create(
            payment.transaction_id, learner.user_id, "30", "Partial refund"
        )
        RefundRequestManager.decide(refund.refund_id, "approved", admin_user.user_id)

        stats = PaymentTransactionLedger.analytics()
        assert stats["approved_revenue"] == str(payment.amount) == "100.00"
        assert stats["processing_fees"] == "2.00"
        assert stats["discounts_granted"] == "0.00"
        assert stats["refunded_total"] == "30.00"
        assert stats["by_payment_method"][0]["revenue"] == "100.00"
