# coursepay/apis/core/catalog/apis.py

import logging

from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.payment_serializers import (
    BundleSerializer,
    CourseSerializer,
    PaymentMethodPublicSerializer,
)
from coursepay.services.course_service import CourseService
from coursepay.services.payment.bundles import BundleService
from coursepay.services.payment.methods import PaymentMethodService

logger = logging.getLogger(__name__)


class ListCoursesAPI(APIView):
    """
    List published courses with their prices.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List published courses with their prices.",
        responses={200: CourseSerializer(many=True)},
    )
    def get(self, request):
        courses = CourseService.list_courses(published_only=True)
        return Response(
            {
                "message": "Courses retrieved successfully.",
                "data": CourseSerializer(courses, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class ListBundlesAPI(APIView):
    """
    List active bundles with their courses and computed price.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List active bundles with courses, discounted price, "
        "course count and total duration.",
        responses={200: BundleSerializer(many=True)},
    )
    def get(self, request):
        bundles = BundleService.list_bundles(active_only=True)
        return Response(
            {
                "message": "Bundles retrieved successfully.",
                "data": BundleSerializer(bundles, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class BundleDetailAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Get one active bundle.",
        responses={200: BundleSerializer, 404: "Bundle not found"},
    )
    def get(self, request, bundle_id):
        bundle = BundleService.get(bundle_id, active_only=True)
        return Response(
            {"message": "Bundle retrieved successfully.", "data": BundleSerializer(bundle).data},
            status=status.HTTP_200_OK,
        )


class ListPaymentMethodsAPI(APIView):
    """
    List the payment methods learners can currently use.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List enabled payment methods with account details "
        "and limits.",
        responses={200: PaymentMethodPublicSerializer(many=True)},
    )
    def get(self, request):
        methods = PaymentMethodService.list_enabled()
        return Response(
            {
                "message": "Payment methods retrieved successfully.",
                "data": PaymentMethodPublicSerializer(methods, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
