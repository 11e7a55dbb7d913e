from django.urls import path

from .api import DecideRefundAPI, ListRefundRequestsAPI

urlpatterns = [
    path("", ListRefundRequestsAPI.as_view(), name="admin_list_refunds"),
    path("<int:refund_id>/decide/", DecideRefundAPI.as_view(), name="decide_refund"),
]
