from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import PaymentMethodConfigSerializer
from coursepay.services.payment.methods import PaymentMethodService


class PaymentMethodsAPI(APIView):
    """
    List every configured payment method, or configure a new provider.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List all payment method configurations.",
        responses={200: PaymentMethodConfigSerializer(many=True)},
    )
    def get(self, request):
        methods = PaymentMethodService.list_all()
        return Response(
            {
                "message": "Payment methods retrieved successfully.",
                "data": PaymentMethodConfigSerializer(methods, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @swagger_auto_schema(
        operation_description="Configure a payment provider. One configuration "
        "per provider.",
        request_body=PaymentMethodConfigSerializer,
        responses={
            201: PaymentMethodConfigSerializer,
            400: "Validation errors",
            409: "Provider already configured",
        },
    )
    def post(self, request):
        serializer = PaymentMethodConfigSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        provider = data.pop("provider")
        config = PaymentMethodService.create(provider, admin_id=request.user_id, **data)
        return Response(
            {
                "message": "Payment method created successfully.",
                "data": PaymentMethodConfigSerializer(config).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PaymentMethodDetailAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Update limits, fee, availability or account details.",
        request_body=PaymentMethodConfigSerializer,
        responses={
            200: PaymentMethodConfigSerializer,
            400: "Validation errors",
            404: "Not found",
        },
    )
    def put(self, request, payment_method_id):
        config = PaymentMethodService.get(payment_method_id)
        serializer = PaymentMethodConfigSerializer(
            config, data=request.data, partial=True
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        data.pop("provider", None)
        config = PaymentMethodService.update(
            payment_method_id, admin_id=request.user_id, **data
        )
        return Response(
            {
                "message": "Payment method updated successfully.",
                "data": PaymentMethodConfigSerializer(config).data,
            },
            status=status.HTTP_200_OK,
        )

    @swagger_auto_schema(
        operation_description="Disable a payment method. New submissions using it "
        "are refused; pending payments can still be verified.",
        responses={200: PaymentMethodConfigSerializer, 404: "Not found"},
    )
    def delete(self, request, payment_method_id):
        config = PaymentMethodService.disable(
            payment_method_id, admin_id=request.user_id
        )
        return Response(
            {
                "message": "Payment method disabled.",
                "data": PaymentMethodConfigSerializer(config).data,
            },
            status=status.HTTP_200_OK,
        )
