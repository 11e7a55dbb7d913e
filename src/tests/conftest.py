"""
pytest configuration and shared fixtures for the course payment tests.
"""

import os
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import django
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))
os.environ.setdefault("DJANGO_ENV", "test")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "configuration.settings.test")

# Setup Django
django.setup()


@pytest.fixture(autouse=True)
def enable_db_access(db):
    """Enable database access for all tests."""
    pass


@pytest.fixture(autouse=True)
def clear_cache():
    """The JWT blacklist lives in the cache; start every test without it."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


# =============================================================================
# USERS AND CLIENTS
# =============================================================================


@pytest.fixture
def learner():
    """Create a learner account."""
    from coursepay.models import User

    return User.objects.create_user(
        email="learner@example.com",
        password="learnerpass123",
        full_name="Test Learner",
    )


@pytest.fixture
def other_learner():
    """A second learner, used to check ownership rules."""
    from coursepay.models import User

    return User.objects.create_user(
        email="other@example.com",
        password="otherpass123",
        full_name="Other Learner",
    )


@pytest.fixture
def admin_user():
    """Create an admin who can verify payments."""
    from coursepay.models import User

    return User.objects.create_superuser(
        email="admin@example.com",
        password="adminpass123",
        full_name="Admin User",
    )


def _authenticated_client(user):
    from rest_framework.test import APIClient

    from coursepay.apis.auth.auth_api import issue_tokens

    tokens = issue_tokens(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
    return {"client": client, "user": user, "token": tokens["access"]}


@pytest.fixture
def api_client():
    """Anonymous API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def learner_client(learner):
    """API client authenticated as the learner."""
    return _authenticated_client(learner)


@pytest.fixture
def other_learner_client(other_learner):
    return _authenticated_client(other_learner)


@pytest.fixture
def admin_client(admin_user):
    """API client authenticated as the admin."""
    return _authenticated_client(admin_user)


# =============================================================================
# CATALOGUE
# =============================================================================


@pytest.fixture
def course():
    """A published $100 course."""
    from coursepay.models import Course

    return Course.objects.create(
        title="Python for Data Analysis",
        price=Decimal("100.00"),
        currency="USD",
        duration_hours=Decimal("12.50"),
        status="published",
    )


@pytest.fixture
def second_course():
    """A published $80 course."""
    from coursepay.models import Course

    return Course.objects.create(
        title="Practical Statistics",
        price=Decimal("80.00"),
        currency="USD",
        duration_hours=Decimal("8.00"),
        status="published",
    )


@pytest.fixture
def draft_course():
    from coursepay.models import Course

    return Course.objects.create(
        title="Unreleased Course",
        price=Decimal("60.00"),
        status="draft",
    )


@pytest.fixture
def free_course():
    from coursepay.models import Course

    return Course.objects.create(
        title="Orientation",
        price=Decimal("0.00"),
        is_free=True,
        status="published",
    )


@pytest.fixture
def bundle(course, second_course, admin_user):
    """$150 bundle with 10% off on top, holding both published courses."""
    from coursepay.services.payment.bundles import BundleService

    return BundleService.create(
        title="Data Science Track",
        price=Decimal("150.00"),
        course_ids=[course.course_id, second_course.course_id],
        discount_percentage=Decimal("10"),
        description="Two courses, one price",
        admin_id=admin_user.user_id,
    )


# =============================================================================
# PAYMENT SETTINGS AND PROMO CODES
# =============================================================================


@pytest.fixture
def payment_method():
    """Enabled Easypaisa wallet: $10-$500, 2% processing fee."""
    from coursepay.models import PaymentMethodConfig

    return PaymentMethodConfig.objects.create(
        provider="easypaisa",
        display_name="Easypaisa",
        is_enabled=True,
        min_amount=Decimal("10.00"),
        max_amount=Decimal("500.00"),
        processing_fee=Decimal("2.00"),
        account_name="Course Payments",
        account_number="03001234567",
    )


@pytest.fixture
def bank_transfer():
    """Fee-free bank transfer with a $10 minimum and no maximum."""
    from coursepay.models import PaymentMethodConfig

    return PaymentMethodConfig.objects.create(
        provider="bank_transfer",
        display_name="Bank Transfer",
        is_enabled=True,
        min_amount=Decimal("10.00"),
        max_amount=None,
        processing_fee=Decimal("0.00"),
        bank_name="Test Bank",
        account_title="Course Payments Ltd",
        iban="PK36SCBL0000001123456702",
    )


@pytest.fixture
def promo_code():
    """20% off anything, 10 uses, valid for the next 30 days."""
    from django.utils import timezone

    from coursepay.models import PromoCode

    return PromoCode.objects.create(
        code="SAVE20",
        description="20% off",
        discount_type="percentage",
        discount_value=Decimal("20.00"),
        applicable_type="all",
        max_uses=10,
        valid_from=timezone.now() - timedelta(days=1),
        valid_until=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def make_promo():
    """Factory for promo codes with overridable fields."""
    from django.utils import timezone

    from coursepay.models import PromoCode

    def _make(code, **overrides):
        fields = {
            "discount_type": "percentage",
            "discount_value": Decimal("10.00"),
            "applicable_type": "all",
            "valid_from": timezone.now() - timedelta(days=1),
            "valid_until": timezone.now() + timedelta(days=30),
        }
        fields.update(overrides)
        return PromoCode.objects.create(code=code, **fields)

    return _make


# =============================================================================
# LEDGER
# =============================================================================


@pytest.fixture
def submit_payment(payment_method):
    """Factory submitting a course payment through the ledger."""
    from coursepay.services.payment.ledger import PaymentTransactionLedger

    def _submit(user, item, reference="EP-0001", promo_code=None, method=None, item_type=None):
        if item_type is None:
            item_type = "bundle" if hasattr(item, "bundle_id") else "course"
        item_id = item.bundle_id if item_type == "bundle" else item.course_id
        return PaymentTransactionLedger.submit(
            user_id=user.user_id,
            item_type=item_type,
            item_id=item_id,
            payment_method=method or payment_method.provider,
            payment_reference=reference,
            proof_ref=f"proofs/{reference}.png",
            promo_code=promo_code,
        )

    return _submit


@pytest.fixture
def pending_payment(learner, course, submit_payment):
    """A learner's pending $100 course payment via Easypaisa."""
    return submit_payment(learner, course)


@pytest.fixture
def approved_payment(pending_payment, admin_user):
    from coursepay.services.payment.verification import PaymentVerificationWorkflow

    return PaymentVerificationWorkflow.approve(
        pending_payment.transaction_id, admin_id=admin_user.user_id
    )


@pytest.fixture
def mock_celery(monkeypatch):
    """Replace notification task dispatch with a mock."""
    from unittest.mock import MagicMock

    mock_delay = MagicMock()
    mock_delay.return_value.id = "test-task-id"

    monkeypatch.setattr(
        "coursepay.tasks.tasks.send_payment_notification_task.delay", mock_delay
    )
    monkeypatch.setattr(
        "coursepay.tasks.tasks.send_refund_notification_task.delay", mock_delay
    )
    return mock_delay


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
