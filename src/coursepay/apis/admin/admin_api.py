from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.models import User
from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import CoursePricingSerializer
from coursepay.serializers.auth_serializers import UserSerializer
from coursepay.serializers.payment_serializers import CourseSerializer
from coursepay.services.course_service import CourseService


class ListUsersAPI(APIView):
    """
    List learners and admins.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List users, optionally filtered by role.",
        manual_parameters=[
            openapi.Parameter(
                "user_id",
                openapi.IN_QUERY,
                description="Filter by user ID",
                type=openapi.TYPE_INTEGER,
                required=False,
            ),
            openapi.Parameter(
                "role",
                openapi.IN_QUERY,
                description="Filter by user role",
                type=openapi.TYPE_STRING,
                required=False,
            ),
            openapi.Parameter(
                "limit",
                openapi.IN_QUERY,
                description="Limit number of results",
                type=openapi.TYPE_INTEGER,
                required=False,
            ),
            openapi.Parameter(
                "offset",
                openapi.IN_QUERY,
                description="Offset for pagination",
                type=openapi.TYPE_INTEGER,
                required=False,
            ),
        ],
        responses={200: UserSerializer(many=True), 400: "Invalid pagination"},
    )
    def get(self, request):
        user_id = request.query_params.get("user_id")
        role = request.query_params.get("role")
        try:
            limit = int(request.query_params.get("limit", 50))
            offset = int(request.query_params.get("offset", 0))
        except ValueError:
            return Response(
                {"error": "limit and offset must be integers"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        filters = {"is_deleted": 0}
        if user_id:
            filters["user_id"] = user_id
        if role:
            filters["role"] = role

        users = User.objects.filter(**filters).order_by("-created_at")
        total_count = users.count()
        users = users[offset : offset + limit]

        return Response(
            {
                "message": "Users retrieved successfully",
                "data": {
                    "users": UserSerializer(users, many=True).data,
                    "total_count": total_count,
                    "limit": limit,
                    "offset": offset,
                },
            },
            status=status.HTTP_200_OK,
        )


class ListCoursesAdminAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List every course, published or not.",
        responses={200: CourseSerializer(many=True)},
    )
    def get(self, request):
        courses = CourseService.list_courses(published_only=False)
        return Response(
            {
                "message": "Courses retrieved successfully",
                "data": CourseSerializer(courses, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class UpdateCoursePricingAPI(APIView):
    """
    Change a course's price, currency, free flag or publication status.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Update course pricing. Existing transactions keep "
        "the amounts they were submitted with.",
        request_body=CoursePricingSerializer,
        responses={200: CourseSerializer, 400: "Validation error", 404: "Not found"},
    )
    def put(self, request, course_id):
        serializer = CoursePricingSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        course = CourseService.update_pricing(
            course_id, admin_id=request.user_id, **serializer.validated_data
        )
        return Response(
            {
                "message": "Course pricing updated successfully",
                "data": CourseSerializer(course).data,
            },
            status=status.HTTP_200_OK,
        )
