# coursepay/apis/core/refunds/apis.py

import logging

from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.payment_serializers import (
    RefundCreateSerializer,
    RefundRequestSerializer,
)
from coursepay.services.payment.refund import RefundRequestManager

logger = logging.getLogger(__name__)


class RefundRequestsAPI(APIView):
    """
    List or file refund requests for the authenticated learner.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List the learner's refund requests.",
        responses={200: RefundRequestSerializer(many=True)},
    )
    def get(self, request):
        refunds = RefundRequestManager.list_refunds(user_id=request.user_id)
        return Response(
            {
                "message": "Refund requests retrieved successfully.",
                "data": RefundRequestSerializer(refunds, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @swagger_auto_schema(
        operation_description="Request a refund for an approved payment.",
        request_body=RefundCreateSerializer,
        responses={
            201: RefundRequestSerializer,
            400: "Invalid data",
            404: "Payment not found",
            422: "Payment not settled or amount not refundable",
        },
    )
    def post(self, request):
        serializer = RefundCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        refund = RefundRequestManager.create(
            transaction_id=data["transaction_id"],
            requester_id=request.user_id,
            amount=data["amount"],
            reason=data["reason"],
        )
        return Response(
            {
                "message": "Refund request submitted.",
                "data": RefundRequestSerializer(refund).data,
            },
            status=status.HTTP_201_CREATED,
        )


class RefundRequestDetailAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Get one of the learner's refund requests.",
        responses={200: RefundRequestSerializer, 404: "Refund request not found"},
    )
    def get(self, request, refund_id):
        refund = RefundRequestManager.get(refund_id, user_id=request.user_id)
        return Response(
            {
                "message": "Refund request retrieved successfully.",
                "data": RefundRequestSerializer(refund).data,
            },
            status=status.HTTP_200_OK,
        )
