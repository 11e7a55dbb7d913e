"""
Models package for the coursepay application.

Models are organized by domain:
- Base model classes and mixins
- User and authentication models
- Catalogue (courses, bundles)
- Promo codes
- Payment ledger (methods, transactions, history, refunds)
- Enrollments granted by approved payments
"""

from .base import AppendOnlyError, AppendOnlyModel, BaseModel
from .catalog import Bundle, BundleCourse, Course
from .choices import (
    ApplicableType,
    CourseStatus,
    DiscountType,
    HistoryAction,
    ItemType,
    PaymentProvider,
    RefundStatus,
    TransactionStatus,
    VerificationStatus,
)
from .enrollment import Enrollment
from .payment import (
    INITIAL_STATE,
    TERMINAL_STATES,
    PaymentHistoryEntry,
    PaymentMethodConfig,
    PaymentTransaction,
    RefundRequest,
)
from .promo import PromoCode
from .user import Role, User, UserManager

__all__ = [
    # Base models
    "AppendOnlyError",
    "AppendOnlyModel",
    "BaseModel",
    # Choices/Enums
    "ApplicableType",
    "CourseStatus",
    "DiscountType",
    "HistoryAction",
    "ItemType",
    "PaymentProvider",
    "RefundStatus",
    "TransactionStatus",
    "VerificationStatus",
    # Catalogue
    "Bundle",
    "BundleCourse",
    "Course",
    "Enrollment",
    # Payments
    "INITIAL_STATE",
    "PaymentHistoryEntry",
    "PaymentMethodConfig",
    "PaymentTransaction",
    "PromoCode",
    "RefundRequest",
    "TERMINAL_STATES",
    # Users
    "Role",
    "User",
    "UserManager",
]
