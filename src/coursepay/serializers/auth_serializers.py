from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from coursepay.models import Role, User


class RegisterSerializer(serializers.Serializer):
    fullname = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(
        max_length=20, required=False, allow_blank=True, allow_null=True
    )

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value, is_deleted=0).exists():
            raise serializers.ValidationError("This email is already in use.")
        return value.lower()

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        # Admin accounts come from createsuperuser, never from self sign-up
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            full_name=validated_data["fullname"],
            role=Role.USER,
            phone=validated_data.get("phone"),
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "user_id",
            "full_name",
            "email",
            "role",
            "phone",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields
