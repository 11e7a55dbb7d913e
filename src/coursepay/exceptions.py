# exceptions.py
"""
DRF exception handler for payment-domain errors.

Registered as REST_FRAMEWORK["EXCEPTION_HANDLER"]. PaymentError subclasses
are rendered as {"error", "code", "details"} with their own HTTP status;
everything else falls through to DRF's default handler.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from coursepay.models import AppendOnlyError
from coursepay.services.payment.errors import PaymentError
from coursepayutils.log_helpers import log_exception

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    if isinstance(exc, PaymentError):
        view = context.get("view")
        logger.info(
            f"{type(exc).__name__} in {type(view).__name__ if view else 'unknown view'}: "
            f"{exc.message}"
        )
        set_rollback()
        return Response(exc.to_dict(), status=exc.http_status)

    if isinstance(exc, AppendOnlyError):
        log_exception(exc, context={"view": type(context.get("view")).__name__})
        set_rollback()
        return Response(
            {"error": str(exc), "code": "AUDIT_IMMUTABLE", "details": {}},
            status=409,
        )

    return exception_handler(exc, context)
