from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import PromoCodeSerializer
from coursepay.services.payment.promo import PromoCodeService


### 1. Create PromoCode API ###
class CreatePromoCodeAPI(APIView):
    """
    Create a new promo code.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Create a promo code. Codes are stored upper-case "
        "and must be unique regardless of case.",
        request_body=PromoCodeSerializer,
        responses={
            201: PromoCodeSerializer,
            400: "Validation errors",
            409: "Code already exists",
        },
    )
    def post(self, request):
        serializer = PromoCodeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        promo = PromoCodeService.create(
            admin_id=request.user_id, **serializer.validated_data
        )
        return Response(
            {
                "message": "Promo code created successfully.",
                "data": PromoCodeSerializer(promo).data,
            },
            status=status.HTTP_201_CREATED,
        )


### 2. List PromoCodes API ###
class ListPromoCodesAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List promo codes.",
        manual_parameters=[
            openapi.Parameter(
                "active_only",
                openapi.IN_QUERY,
                description="Show only active codes",
                type=openapi.TYPE_BOOLEAN,
                required=False,
            ),
        ],
        responses={200: PromoCodeSerializer(many=True)},
    )
    def get(self, request):
        active_only = request.query_params.get("active_only", "").lower() in (
            "1",
            "true",
            "yes",
        )
        promos = PromoCodeService.list_codes(active_only=active_only)
        return Response(
            {
                "message": "Promo codes retrieved successfully.",
                "data": PromoCodeSerializer(promos, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


### 3. Update PromoCode API ###
class UpdatePromoCodeAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Update a promo code. used_count cannot be changed "
        "and max_uses cannot drop below it.",
        request_body=PromoCodeSerializer,
        responses={
            200: PromoCodeSerializer,
            400: "Validation errors",
            404: "Promo code not found",
        },
    )
    def put(self, request, promo_code_id):
        promo = PromoCodeService.get(promo_code_id)
        serializer = PromoCodeSerializer(promo, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        promo = PromoCodeService.update(
            promo_code_id, admin_id=request.user_id, **serializer.validated_data
        )
        return Response(
            {
                "message": "Promo code updated successfully.",
                "data": PromoCodeSerializer(promo).data,
            },
            status=status.HTTP_200_OK,
        )


### 4. Deactivate PromoCode API ###
class DeactivatePromoCodeAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Deactivate a promo code. Codes are never hard-deleted.",
        responses={200: PromoCodeSerializer, 404: "Promo code not found"},
    )
    def post(self, request, promo_code_id):
        promo = PromoCodeService.deactivate(promo_code_id, admin_id=request.user_id)
        return Response(
            {
                "message": "Promo code deactivated successfully.",
                "data": PromoCodeSerializer(promo).data,
            },
            status=status.HTTP_200_OK,
        )


### 5. PromoCode Stats API ###
class PromoCodeStatsAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Total, active and expired promo codes plus total usage.",
        responses={200: "Promo code statistics"},
    )
    def get(self, request):
        return Response(
            {"message": "Promo code statistics.", "data": PromoCodeService.stats()},
            status=status.HTTP_200_OK,
        )
