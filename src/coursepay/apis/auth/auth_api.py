import logging

from django.contrib.auth.models import update_last_login
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from coursepay.models import User
from coursepay.serializers.auth_serializers import (
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
)
from coursepayutils.log_helpers import log_auth_event

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh["user_id"] = user.user_id
    refresh["role"] = user.role
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
        "user_id": user.user_id,
        "role": user.role,
    }


class RegisterUserAPI(APIView):
    """Register a learner account."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        request_body=RegisterSerializer,
        responses={201: UserSerializer, 400: "Invalid data"},
        operation_summary="Register Learner",
        operation_description="Register a new learner who can buy courses and bundles.",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = serializer.save()
        log_auth_event("register", user_id=user.user_id, email=user.email)
        return Response(
            {
                "message": "User registered successfully",
                "data": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginAPI(APIView):
    """Exchange email and password for a JWT pair."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        request_body=LoginSerializer,
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    "refresh": openapi.Schema(
                        type=openapi.TYPE_STRING, description="Refresh token"
                    ),
                    "access": openapi.Schema(
                        type=openapi.TYPE_STRING, description="Access token"
                    ),
                    "user_id": openapi.Schema(
                        type=openapi.TYPE_INTEGER, description="User ID"
                    ),
                    "role": openapi.Schema(
                        type=openapi.TYPE_STRING, description="User role"
                    ),
                },
            ),
            401: "Invalid credentials",
        },
        operation_summary="Login API",
        operation_description="Returns JWT tokens carrying user_id and role claims.",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data["email"]
        user = User.objects.filter(
            email__iexact=email, is_active=1, is_deleted=0
        ).first()
        if not user or not user.check_password(serializer.validated_data["password"]):
            log_auth_event(
                "login", email=email, success=False, failure_reason="invalid_credentials"
            )
            return Response(
                {"error": "Invalid email or password."},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        update_last_login(None, user)
        log_auth_event("login", user_id=user.user_id, email=user.email)
        return Response(
            {**issue_tokens(user), "userData": UserSerializer(user).data},
            status=status.HTTP_200_OK,
        )
