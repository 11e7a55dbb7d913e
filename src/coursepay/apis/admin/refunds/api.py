from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.models.choices import RefundStatus
from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import RefundDecisionSerializer
from coursepay.serializers.payment_serializers import RefundRequestSerializer
from coursepay.services.payment.refund import RefundRequestManager


class ListRefundRequestsAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List refund requests, newest first.",
        manual_parameters=[
            openapi.Parameter(
                "status",
                openapi.IN_QUERY,
                description="Filter by refund status",
                type=openapi.TYPE_STRING,
                enum=RefundStatus.values(),
                required=False,
            ),
            openapi.Parameter(
                "user_id",
                openapi.IN_QUERY,
                description="Filter by requesting learner",
                type=openapi.TYPE_INTEGER,
                required=False,
            ),
        ],
        responses={200: RefundRequestSerializer(many=True), 400: "Invalid filter"},
    )
    def get(self, request):
        refund_status = request.query_params.get("status")
        if refund_status and refund_status not in RefundStatus.values():
            return Response(
                {"status": [f"Must be one of {', '.join(RefundStatus.values())}."]},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user_id = request.query_params.get("user_id")
        if user_id and not user_id.isdigit():
            return Response(
                {"user_id": ["A valid integer is required."]},
                status=status.HTTP_400_BAD_REQUEST,
            )
        refunds = RefundRequestManager.list_refunds(
            status=refund_status, user_id=int(user_id) if user_id else None
        ).order_by("-created_at")
        return Response(
            {
                "message": "Refund requests retrieved successfully.",
                "data": RefundRequestSerializer(refunds, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class DecideRefundAPI(APIView):
    """
    Approve or reject a pending refund request.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Approve or reject a pending refund. Decided "
        "refunds cannot be changed.",
        request_body=RefundDecisionSerializer,
        responses={
            200: RefundRequestSerializer,
            400: "Invalid decision",
            404: "Refund request not found",
            409: "Already decided",
        },
    )
    def post(self, request, refund_id):
        serializer = RefundDecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        refund = RefundRequestManager.decide(
            refund_id,
            data["decision"],
            admin_id=request.user_id,
            notes=data.get("notes"),
            refund_reference=data.get("refund_reference"),
        )
        return Response(
            {
                "message": f"Refund request {refund.status}.",
                "data": RefundRequestSerializer(refund).data,
            },
            status=status.HTTP_200_OK,
        )
