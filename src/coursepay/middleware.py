# middleware.py
"""
Request middleware for the payment API.

This module provides:
- JWT-based authentication middleware that attaches user_id and role
- Request logging with timing, through coursepayutils.log_helpers
"""

import time
from typing import Any

from django.http import HttpRequest
from rest_framework.exceptions import AuthenticationFailed

from coursepay.authentication import CustomJWTAuthentication
from coursepayutils.log_helpers import log_api_request
from coursepayutils.logging import get_logger

logger = get_logger(__name__)


class JWTAuthenticationMiddleware:
    """
    Authenticates users via JWT and attaches user_id, user, and role to request.

    Runs before the view so the logging middleware can bind the caller to
    every log line. Views still authenticate through DRF; an invalid token
    is left for DRF to reject.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> Any:
        if "Authorization" in request.headers:
            auth = CustomJWTAuthentication()
            try:
                result = auth.authenticate(request)
            except AuthenticationFailed as e:
                logger.debug("authentication_failed", reason=str(e))
            else:
                if result:
                    user, token = result
                    request.user = user
                    request.user_id = token.get("user_id")
                    request.role = token.get("role")

        return self.get_response(request)


class RequestLoggingMiddleware:
    """
    Logs every HTTP request with status code, duration and caller.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> Any:
        start_time = time.time()
        response = self.get_response(request)
        duration = time.time() - start_time

        log_api_request(
            request,
            response=response,
            duration=duration,
            request_id=getattr(request, "request_id", None),
            user_id=getattr(request, "user_id", None),
            role=getattr(request, "role", None),
        )
        return response
