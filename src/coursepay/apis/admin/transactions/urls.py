from django.urls import path

from .api import (
    ApproveTransactionAPI,
    ListTransactionsAPI,
    RejectTransactionAPI,
    TransactionDetailAPI,
    TransactionHistoryAPI,
)

urlpatterns = [
    path("", ListTransactionsAPI.as_view(), name="admin_list_transactions"),
    path(
        "<int:transaction_id>/",
        TransactionDetailAPI.as_view(),
        name="admin_transaction_detail",
    ),
    path(
        "<int:transaction_id>/history/",
        TransactionHistoryAPI.as_view(),
        name="admin_transaction_history",
    ),
    path(
        "<int:transaction_id>/approve/",
        ApproveTransactionAPI.as_view(),
        name="approve_transaction",
    ),
    path(
        "<int:transaction_id>/reject/",
        RejectTransactionAPI.as_view(),
        name="reject_transaction",
    ),
]
