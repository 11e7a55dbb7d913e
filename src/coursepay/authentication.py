# authentication.py

import logging

from django.core.cache import cache
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from .models import User

logger = logging.getLogger(__name__)


class CustomJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that exposes the learner/admin claims on the request.

    After a successful authentication the request carries:
    - user_id: primary key of the caller
    - role: "User" for learners, "Admin" for payment admins
    - token_jti: token id, checked against the cache blacklist
    """

    def get_user(self, validated_token):
        """
        Load the active, non-deleted account named by the token.

        Raises:
            AuthenticationFailed: If the claim is missing, the user is gone or
                the token was blacklisted
        """
        user_id = validated_token.get("user_id")
        if not user_id:
            raise AuthenticationFailed(
                "User ID not found in token", code="user_id_missing"
            )

        try:
            user = User.objects.get(user_id=user_id, is_active=1, is_deleted=0)
        except User.DoesNotExist:
            raise AuthenticationFailed(
                "User not found", code="user_not_found"
            ) from None

        token_jti = validated_token.get("jti")
        if token_jti and cache.get(f"blacklist:{token_jti}"):
            raise AuthenticationFailed(
                "Token has been blacklisted", code="token_blacklisted"
            )

        return user

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None

        raw_token = self.get_raw_token(header)
        if raw_token is None:
            logger.debug("No raw token found in the Authorization header.")
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
        except (InvalidToken, TokenError) as e:
            logger.info("Rejected JWT: %s", e)
            raise AuthenticationFailed(str(e)) from e

        user = self.get_user(validated_token)

        # Claims used by IsUserAccess and the API views
        request.user_id = validated_token.get("user_id")
        request.role = validated_token.get("role")
        request.token_jti = validated_token.get("jti")

        return user, validated_token
