"""
Integration tests running competing decisions on real threads.

Each worker opens its own database connection, so these tests need
committed fixtures (transactional_db) and the file-backed test database.
"""

import threading

import pytest
from django.db import connection

from coursepay.models import Enrollment, PaymentHistoryEntry, PaymentTransaction, PromoCode
from coursepay.services.payment import errors
from coursepay.services.payment.promo import PromoCodeValidator
from coursepay.services.payment.verification import PaymentVerificationWorkflow


def run_concurrently(calls):
    """Start every call at once; return one outcome name per call."""
    barrier = threading.Barrier(len(calls))
    outcomes = []
    unexpected = []
    lock = threading.Lock()

    def worker(call):
        try:
            barrier.wait()
            call()
            outcome = "ok"
        except errors.PaymentError as exc:
            outcome = type(exc).__name__
        except Exception as exc:
            with lock:
                unexpected.append(exc)
            return
        finally:
            connection.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert unexpected == []
    return outcomes


@pytest.fixture
def quiet_decisions(settings):
    settings.COURSEPAY_NOTIFY_ON_DECISION = False


@pytest.mark.integration
@pytest.mark.django_db(transaction=True)
class TestConcurrentDecisions:
    def test_one_of_many_approvals_wins(
        self, transactional_db, quiet_decisions, learner, course, admin_user, promo_code,
        submit_payment,
    ):
        payment = submit_payment(learner, course, reference="EP-RACE", promo_code="SAVE20")

        outcomes = run_concurrently(
            [
                lambda: PaymentVerificationWorkflow.approve(
                    payment.transaction_id, admin_id=admin_user.user_id
                )
                for _ in range(4)
            ]
        )

        assert outcomes.count("ok") == 1
        # Losers either lost the conditional write or loaded the decided row
        assert set(outcomes) - {"ok"} <= {"Conflict", "InvalidStateTransition"}
        payment.refresh_from_db()
        assert payment.state == ("completed", "approved")
        assert PromoCode.objects.get(pk=promo_code.pk).used_count == 1
        assert Enrollment.objects.filter(user=learner, course=course).count() == 1
        assert (
            PaymentHistoryEntry.objects.filter(
                transaction_id=payment.transaction_id, action="approve"
            ).count()
            == 1
        )

    def test_approve_and_reject_race(
        self, transactional_db, quiet_decisions, learner, course, admin_user, submit_payment
    ):
        payment = submit_payment(learner, course, reference="EP-SPLIT")

        outcomes = run_concurrently(
            [
                lambda: PaymentVerificationWorkflow.approve(
                    payment.transaction_id, admin_id=admin_user.user_id
                ),
                lambda: PaymentVerificationWorkflow.reject(
                    payment.transaction_id,
                    admin_id=admin_user.user_id,
                    rejection_reason="Reference not on statement",
                ),
            ]
        )

        assert outcomes.count("ok") == 1
        payment.refresh_from_db()
        assert payment.state in {("completed", "approved"), ("failed", "rejected")}
        decisions = PaymentHistoryEntry.objects.filter(
            transaction_id=payment.transaction_id, action__in=["approve", "reject"]
        )
        assert decisions.count() == 1


@pytest.mark.integration
@pytest.mark.django_db(transaction=True)
class TestConcurrentPromoUse:
    def test_consume_stops_at_ceiling(self, transactional_db, make_promo):
        from django.utils import timezone

        promo = make_promo("RUSH", max_uses=3)
        now = timezone.now()

        outcomes = run_concurrently(
            [lambda: PromoCodeValidator.consume(promo.promo_code_id, now) for _ in range(8)]
        )

        assert outcomes.count("ok") == 3
        assert outcomes.count("MaxUsesReached") == 5
        promo.refresh_from_db()
        assert promo.used_count == 3

    def test_approvals_share_the_last_uses(
        self, transactional_db, quiet_decisions, learner, course, admin_user, make_promo,
        submit_payment,
    ):
        promo = make_promo("LASTTWO", max_uses=2)
        payments = [
            submit_payment(learner, course, reference=f"EP-LT-{n}", promo_code="LASTTWO")
            for n in range(5)
        ]

        outcomes = run_concurrently(
            [
                lambda payment=payment: PaymentVerificationWorkflow.approve(
                    payment.transaction_id, admin_id=admin_user.user_id
                )
                for payment in payments
            ]
        )

        assert outcomes.count("ok") == 2
        assert outcomes.count("MaxUsesReached") == 3
        promo.refresh_from_db()
        assert promo.used_count == 2
        states = [PaymentTransaction.objects.get(pk=p.pk).state for p in payments]
        assert states.count(("completed", "approved")) == 2
        # A failed re-check leaves the payment for the admin to reject
        assert states.count(("pending", "pending")) == 3
