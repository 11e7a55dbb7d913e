from django.urls import path

from .apis import RefundRequestDetailAPI, RefundRequestsAPI

urlpatterns = [
    path("", RefundRequestsAPI.as_view(), name="refund_requests"),
    path("<int:refund_id>/", RefundRequestDetailAPI.as_view(), name="refund_detail"),
]
