# coursepay/models/choices.py
"""
Choice field definitions for model enums and dropdowns.

Centralized choice definitions make it easier to:
- Keep the stored wire values identical across models, serializers and services
- Add new options in one place
- Document valid choices
"""

from collections.abc import Sequence as SequenceType
from enum import Enum


class DiscountType(str, Enum):
    """Types of promo-code discounts."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class ApplicableType(str, Enum):
    """Scope of items a promo code can be redeemed against."""

    ALL = "all"
    COURSE = "course"
    BUNDLE = "bundle"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class ItemType(str, Enum):
    """Kinds of priced items a learner can pay for."""

    COURSE = "course"
    BUNDLE = "bundle"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class CourseStatus(str, Enum):
    """Publication status of a course."""

    DRAFT = "draft"
    PUBLISHED = "published"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class PaymentProvider(str, Enum):
    """Payment methods an admin can configure."""

    EASYPAISA = "easypaisa"
    JAZZCASH = "jazzcash"
    BANK_TRANSFER = "bank_transfer"
    STRIPE = "stripe"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.replace("_", " ").title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class TransactionStatus(str, Enum):
    """Settlement status of a payment transaction."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class VerificationStatus(str, Enum):
    """Admin review status of a payment transaction."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]


class RefundStatus(str, Enum):
    """Status of a refund request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]

    @classmethod
    def decisions(cls) -> list[str]:
        """Statuses an admin may resolve a pending refund to."""
        return [cls.APPROVED.value, cls.REJECTED.value]


class HistoryAction(str, Enum):
    """Actions recorded in the payment audit trail."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    REFUND_REQUEST = "refund_request"
    REFUND_APPROVE = "refund_approve"
    REFUND_REJECT = "refund_reject"

    @classmethod
    def choices(cls) -> SequenceType[tuple[str, str]]:
        return [(item.value, item.name.replace("_", " ").title()) for item in cls]

    @classmethod
    def values(cls) -> SequenceType[str]:
        return [item.value for item in cls]
