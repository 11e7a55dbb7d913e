from django.urls import include, path

from coursepay.apis.admin.admin_api import (
    ListCoursesAdminAPI,
    ListUsersAPI,
    UpdateCoursePricingAPI,
)
from coursepay.apis.admin.analytics_api import PaymentAnalyticsAPI

urlpatterns = [
    path("promocodes/", include("coursepay.apis.admin.promocodes.urls")),
    path("bundles/", include("coursepay.apis.admin.bundles.urls")),
    path("paymentmethods/", include("coursepay.apis.admin.paymentmethods.urls")),
    path("transactions/", include("coursepay.apis.admin.transactions.urls")),
    path("refunds/", include("coursepay.apis.admin.refunds.urls")),
    path("users/", ListUsersAPI.as_view(), name="list_users"),
    path("courses/", ListCoursesAdminAPI.as_view(), name="admin_list_courses"),
    path(
        "courses/<int:course_id>/pricing/",
        UpdateCoursePricingAPI.as_view(),
        name="update_course_pricing",
    ),
    # Analytics
    path(
        "analytics/payments/", PaymentAnalyticsAPI.as_view(), name="payment_analytics"
    ),
]
