# coursepay/apis/core/payments/apis.py

import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.payment_serializers import (
    PaymentHistoryEntrySerializer,
    PaymentSubmissionSerializer,
    PaymentTransactionSerializer,
    PriceQuoteSerializer,
    PromoValidationSerializer,
)
from coursepay.services.payment.ledger import PaymentTransactionLedger
from coursepay.services.payment.promo import PromoCodeValidator

logger = logging.getLogger(__name__)


class ValidatePromoCodeAPI(APIView):
    """
    Check a promo code against a course or bundle without redeeming it.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Validate a promo code for a course or bundle. "
        "The code's usage counter is not changed.",
        request_body=PromoValidationSerializer,
        responses={
            200: "Promo code is valid",
            404: "Unknown or inactive code",
            422: "Expired, not yet active, exhausted or not applicable",
        },
    )
    def post(self, request):
        serializer = PromoValidationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = PromoCodeValidator.validate(**serializer.validated_data)
        return Response(
            {"message": "Promo code is valid.", "data": result.to_dict()},
            status=status.HTTP_200_OK,
        )


class PriceQuoteAPI(APIView):
    """
    Price a course or bundle with an optional promo code and payment method.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Return original amount, discount, final amount, "
        "processing fee and total. Nothing is stored.",
        request_body=PriceQuoteSerializer,
        responses={200: "Price breakdown", 400: "Invalid data"},
    )
    def post(self, request):
        serializer = PriceQuoteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        quote = PaymentTransactionLedger.quote(
            item_type=data["item_type"],
            item_id=data["item_id"],
            promo_code=data.get("promo_code") or None,
            payment_method=data.get("payment_method") or None,
        )
        return Response(
            {"message": "Price calculated.", "data": quote.to_dict()},
            status=status.HTTP_200_OK,
        )


class SubmitPaymentAPI(APIView):
    """
    Submit proof of a manual payment for admin verification.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Submit a payment reference and proof for a course "
        "or bundle. The payment stays pending until an admin verifies it.",
        request_body=PaymentSubmissionSerializer,
        responses={
            201: PaymentTransactionSerializer,
            400: "Invalid data",
            409: "Same reference already pending",
            422: "Promo code or amount rejected",
        },
    )
    def post(self, request):
        serializer = PaymentSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        payment = PaymentTransactionLedger.submit(
            user_id=request.user_id,
            item_type=data["item_type"],
            item_id=data["item_id"],
            payment_method=data["payment_method"],
            payment_reference=data["payment_reference"],
            proof_ref=data["payment_proof_url"],
            promo_code=data.get("promo_code") or None,
            notes=data.get("notes") or None,
        )
        return Response(
            {
                "message": "Payment submitted for verification.",
                "data": PaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MyPaymentsAPI(APIView):
    """
    List the authenticated learner's payments.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List the authenticated learner's payments, newest first.",
        manual_parameters=[
            openapi.Parameter(
                "status",
                openapi.IN_QUERY,
                description="Filter by status",
                type=openapi.TYPE_STRING,
                required=False,
            ),
        ],
        responses={200: PaymentTransactionSerializer(many=True)},
    )
    def get(self, request):
        payments = PaymentTransactionLedger.list_for_user(request.user_id)
        status_filter = request.query_params.get("status")
        if status_filter:
            payments = payments.filter(status=status_filter)
        return Response(
            {
                "message": "Payments retrieved successfully.",
                "data": PaymentTransactionSerializer(payments, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class PaymentDetailAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Get one of the authenticated learner's payments.",
        responses={200: PaymentTransactionSerializer, 404: "Payment not found"},
    )
    def get(self, request, transaction_id):
        payment = PaymentTransactionLedger.get(transaction_id, user_id=request.user_id)
        return Response(
            {
                "message": "Payment retrieved successfully.",
                "data": PaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )


class PaymentHistoryAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Audit trail of one of the learner's payments.",
        responses={200: PaymentHistoryEntrySerializer(many=True), 404: "Payment not found"},
    )
    def get(self, request, transaction_id):
        entries = PaymentTransactionLedger.history(transaction_id, user_id=request.user_id)
        return Response(
            {
                "message": "Payment history retrieved successfully.",
                "data": PaymentHistoryEntrySerializer(entries, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class CancelPaymentAPI(APIView):
    """
    Withdraw a payment that is still awaiting verification.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Cancel a pending payment. Decided payments cannot "
        "be cancelled.",
        responses={
            200: PaymentTransactionSerializer,
            404: "Payment not found",
            409: "Payment already decided",
        },
    )
    def post(self, request, transaction_id):
        payment = PaymentTransactionLedger.cancel(transaction_id, user_id=request.user_id)
        return Response(
            {
                "message": "Payment cancelled.",
                "data": PaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )
