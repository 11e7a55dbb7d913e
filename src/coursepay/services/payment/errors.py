# coursepay/services/payment/errors.py
"""
Error kinds raised by the payment services.

Every failure is raised synchronously with its specific kind so the API
layer (coursepay.exceptions.custom_exception_handler) can render a precise
message and status. Nothing here is process-fatal.
"""

from typing import Any

from rest_framework import status


class PaymentError(Exception):
    """
    Base class for payment-domain failures.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Additional structured context
        http_status: Status the API layer responds with
    """

    code = "PAYMENT_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        if code:
            self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(PaymentError):
    """Malformed or missing input."""

    code = "VALIDATION_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST


class NotFound(PaymentError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class NotYetActive(PaymentError):
    """Promo code used before its valid_from."""

    code = "NOT_YET_ACTIVE"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class Expired(PaymentError):
    code = "EXPIRED"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class MaxUsesReached(PaymentError):
    code = "MAX_USES_REACHED"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotApplicable(PaymentError):
    """Promo code scope excludes the item."""

    code = "NOT_APPLICABLE"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class AmountOutOfRange(PaymentError):
    """Total falls outside the payment method's [min, max]."""

    code = "AMOUNT_OUT_OF_RANGE"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class Conflict(PaymentError):
    """Duplicate submission, or lost a race against a concurrent decision."""

    code = "CONFLICT"
    http_status = status.HTTP_409_CONFLICT


class InvalidStateTransition(PaymentError):
    """Acting on a record that is already terminal."""

    code = "INVALID_STATE_TRANSITION"
    http_status = status.HTTP_409_CONFLICT


class InvalidAmount(PaymentError):
    """Refund amount is not positive or exceeds what was paid."""

    code = "INVALID_AMOUNT"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class Precondition(PaymentError):
    """Refund against a transaction that is not settled."""

    code = "PRECONDITION_FAILED"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
