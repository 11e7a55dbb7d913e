from django.urls import path

from .api import PaymentMethodDetailAPI, PaymentMethodsAPI

urlpatterns = [
    path("", PaymentMethodsAPI.as_view(), name="admin_payment_methods"),
    path(
        "<int:payment_method_id>/",
        PaymentMethodDetailAPI.as_view(),
        name="admin_payment_method_detail",
    ),
]
