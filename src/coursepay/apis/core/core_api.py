import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.models import Enrollment, User
from coursepay.permissions import IsUserAccess
from coursepay.serializers.auth_serializers import UserSerializer

logger = logging.getLogger(__name__)


class EnrollmentSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True, default=None)
    bundle_title = serializers.CharField(source="bundle.title", read_only=True, default=None)

    class Meta:
        model = Enrollment
        fields = [
            "enrollment_id",
            "course",
            "course_title",
            "bundle",
            "bundle_title",
            "source_transaction",
            "created_at",
        ]
        read_only_fields = fields


class GetUserAPI(APIView):
    """
    Retrieve the authenticated learner's profile.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Get the authenticated learner's profile.",
        responses={
            200: UserSerializer,
            404: openapi.Response(
                description="User not found",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        "error": openapi.Schema(
                            type=openapi.TYPE_STRING, description="Error message"
                        )
                    },
                ),
            ),
        },
    )
    def get(self, request):
        user = User.objects.filter(
            user_id=request.user_id, is_active=1, is_deleted=0
        ).first()
        if not user:
            return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)

        return Response(
            {
                "message": "User profile retrieved successfully",
                "data": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


class MyEnrollmentsAPI(APIView):
    """
    List the courses and bundles the learner has access to.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List enrollments granted by approved payments.",
        responses={200: EnrollmentSerializer(many=True)},
    )
    def get(self, request):
        enrollments = (
            Enrollment.objects.enabled()
            .filter(user_id=request.user_id)
            .select_related("course", "bundle")
        )
        return Response(
            {
                "message": "Enrollments retrieved successfully",
                "data": EnrollmentSerializer(enrollments, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
