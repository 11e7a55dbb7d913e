from django.urls import include, path

from coursepay.apis.core.core_api import GetUserAPI, MyEnrollmentsAPI

urlpatterns = [
    path("catalog/", include("coursepay.apis.core.catalog.urls")),
    path("payments/", include("coursepay.apis.core.payments.urls")),
    path("refunds/", include("coursepay.apis.core.refunds.urls")),
    # User
    path("user/", GetUserAPI.as_view(), name="get_user"),
    path("enrollments/", MyEnrollmentsAPI.as_view(), name="my_enrollments"),
]
