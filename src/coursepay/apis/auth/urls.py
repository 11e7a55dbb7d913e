from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .auth_api import LoginAPI, RegisterUserAPI

urlpatterns = [
    path("register/", RegisterUserAPI.as_view(), name="register"),
    path("login/", LoginAPI.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
]
