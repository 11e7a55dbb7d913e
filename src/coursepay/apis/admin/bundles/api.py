from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from coursepay.permissions import IsUserAccess
from coursepay.serializers.admin_serializers import (
    BundleCourseSerializer,
    BundleWriteSerializer,
)
from coursepay.serializers.payment_serializers import BundleSerializer
from coursepay.services.payment.bundles import BundleService


class CreateBundleAPI(APIView):
    """
    Create a bundle from published courses.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Create a bundle with a price override, an optional "
        "discount percentage and at least one published course.",
        request_body=BundleWriteSerializer,
        responses={201: BundleSerializer, 400: "Validation errors"},
    )
    def post(self, request):
        serializer = BundleWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        bundle = BundleService.create(
            title=data["title"],
            price=data["price"],
            course_ids=data["course_ids"],
            discount_percentage=data.get("discount_percentage"),
            description=data.get("description", ""),
            currency=data.get("currency", "USD"),
            admin_id=request.user_id,
        )
        return Response(
            {"message": "Bundle created successfully.", "data": BundleSerializer(bundle).data},
            status=status.HTTP_201_CREATED,
        )


class ListBundlesAdminAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="List all bundles, including inactive ones.",
        responses={200: BundleSerializer(many=True)},
    )
    def get(self, request):
        bundles = BundleService.list_bundles(active_only=False)
        return Response(
            {
                "message": "Bundles retrieved successfully.",
                "data": BundleSerializer(bundles, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class UpdateBundleAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Update a bundle's title, description, price, "
        "discount or active flag. Courses are managed separately.",
        request_body=BundleWriteSerializer,
        responses={200: BundleSerializer, 400: "Validation errors", 404: "Not found"},
    )
    def put(self, request, bundle_id):
        serializer = BundleWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        data.pop("course_ids", None)
        bundle = BundleService.update(bundle_id, admin_id=request.user_id, **data)
        return Response(
            {"message": "Bundle updated successfully.", "data": BundleSerializer(bundle).data},
            status=status.HTTP_200_OK,
        )


class DeactivateBundleAPI(APIView):
    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Deactivate a bundle; existing payments are unaffected.",
        responses={200: BundleSerializer, 404: "Not found"},
    )
    def post(self, request, bundle_id):
        bundle = BundleService.deactivate(bundle_id, admin_id=request.user_id)
        return Response(
            {"message": "Bundle deactivated.", "data": BundleSerializer(bundle).data},
            status=status.HTTP_200_OK,
        )


class BundleCoursesAPI(APIView):
    """
    Add a published course to a bundle, or remove one.
    """

    permission_classes = [IsUserAccess]

    @swagger_auto_schema(
        operation_description="Add a published course to the bundle.",
        request_body=BundleCourseSerializer,
        responses={201: BundleSerializer, 400: "Course not published", 409: "Already added"},
    )
    def post(self, request, bundle_id):
        serializer = BundleCourseSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        link = BundleService.add_course(bundle_id, serializer.validated_data["course_id"])
        return Response(
            {
                "message": "Course added to bundle.",
                "data": BundleSerializer(link.bundle).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @swagger_auto_schema(
        operation_description="Remove a course from the bundle. The last course "
        "cannot be removed.",
        request_body=BundleCourseSerializer,
        responses={200: BundleSerializer, 400: "Last course", 404: "Not in bundle"},
    )
    def delete(self, request, bundle_id):
        serializer = BundleCourseSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        BundleService.remove_course(bundle_id, serializer.validated_data["course_id"])
        bundle = BundleService.get(bundle_id)
        return Response(
            {"message": "Course removed from bundle.", "data": BundleSerializer(bundle).data},
            status=status.HTTP_200_OK,
        )
