import logging

from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import (
    AdminPaymentTransactionSerializer,
    TransactionFilterSerializer,
    VerificationDecisionSerializer,
)
from coursepay.serializers.payment_serializers import PaymentHistoryEntrySerializer
from coursepay.services.payment.ledger import PaymentTransactionLedger
from coursepay.services.payment.verification import PaymentVerificationWorkflow

logger = logging.getLogger(__name__)


class ListTransactionsAPI(APIView):
    """
    Verification queue and transaction search for admins.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List payment transactions, newest first. Filter by "
        "status=pending to get the verification queue.",
        query_serializer=TransactionFilterSerializer,
        responses={200: AdminPaymentTransactionSerializer(many=True)},
    )
    def get(self, request):
        filters = TransactionFilterSerializer(data=request.query_params)
        if not filters.is_valid():
            return Response(filters.errors, status=status.HTTP_400_BAD_REQUEST)

        payments = PaymentTransactionLedger.list_transactions(
            **filters.validated_data
        ).order_by("-created_at")
        return Response(
            {
                "message": "Transactions retrieved successfully.",
                "data": AdminPaymentTransactionSerializer(payments, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class TransactionDetailAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Get a transaction with its proof of payment.",
        responses={200: AdminPaymentTransactionSerializer, 404: "Not found"},
    )
    def get(self, request, transaction_id):
        payment = PaymentTransactionLedger.get(transaction_id)
        return Response(
            {
                "message": "Transaction retrieved successfully.",
                "data": AdminPaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )


class TransactionHistoryAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Audit trail of a transaction, oldest first.",
        responses={200: PaymentHistoryEntrySerializer(many=True), 404: "Not found"},
    )
    def get(self, request, transaction_id):
        entries = PaymentTransactionLedger.history(transaction_id)
        return Response(
            {
                "message": "Transaction history retrieved successfully.",
                "data": PaymentHistoryEntrySerializer(entries, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class ApproveTransactionAPI(APIView):
    """
    Approve a pending payment and grant access to the purchased item.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Approve a pending payment. Issues the receipt "
        "number, redeems the promo code and enrolls the learner.",
        request_body=VerificationDecisionSerializer,
        responses={
            200: AdminPaymentTransactionSerializer,
            404: "Not found",
            409: "Already decided or changed concurrently",
            422: "Promo code can no longer be redeemed",
        },
    )
    def post(self, request, transaction_id):
        serializer = VerificationDecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        payment = PaymentVerificationWorkflow.approve(
            transaction_id,
            admin_id=request.user_id,
            notes=serializer.validated_data.get("notes"),
        )
        return Response(
            {
                "message": "Payment approved.",
                "data": AdminPaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )


class RejectTransactionAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Reject a pending payment. A rejection reason is "
        "required.",
        request_body=VerificationDecisionSerializer,
        responses={
            200: AdminPaymentTransactionSerializer,
            400: "Missing rejection reason",
            404: "Not found",
            409: "Already decided or changed concurrently",
        },
    )
    def post(self, request, transaction_id):
        serializer = VerificationDecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        payment = PaymentVerificationWorkflow.reject(
            transaction_id,
            admin_id=request.user_id,
            rejection_reason=serializer.validated_data.get("rejection_reason"),
        )
        return Response(
            {
                "message": "Payment rejected.",
                "data": AdminPaymentTransactionSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )
