from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import AnalyticsQuerySerializer
from coursepay.services.payment.ledger import PaymentTransactionLedger
from coursepay.services.payment.promo import PromoCodeService


class PaymentAnalyticsAPI(APIView):
    """
    API for admin payment statistics.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Transaction counts, revenue, fees, discounts and "
        "refunds, optionally limited to a date range and payment method.",
        query_serializer=AnalyticsQuerySerializer,
        responses={200: "Payment analytics JSON", 400: "Invalid filters"},
    )
    def get(self, request):
        serializer = AnalyticsQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        params = serializer.validated_data
        stats = PaymentTransactionLedger.analytics(
            start=params.get("start_date"),
            end=params.get("end_date"),
            payment_method=params.get("payment_method"),
        )
        stats["promo_codes"] = PromoCodeService.stats()
        return Response(
            {"message": "Payment analytics retrieved successfully", "data": stats},
            status=status.HTTP_200_OK,
        )
