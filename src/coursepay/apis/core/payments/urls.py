from django.urls import path

from .apis import (
    CancelPaymentAPI,
    MyPaymentsAPI,
    PaymentDetailAPI,
    PaymentHistoryAPI,
    PriceQuoteAPI,
    SubmitPaymentAPI,
    ValidatePromoCodeAPI,
)

urlpatterns = [
    path("", MyPaymentsAPI.as_view(), name="my_payments"),
    path("promo/validate/", ValidatePromoCodeAPI.as_view(), name="validate_promo_code"),
    path("quote/", PriceQuoteAPI.as_view(), name="price_quote"),
    path("submit/", SubmitPaymentAPI.as_view(), name="submit_payment"),
    path("<int:transaction_id>/", PaymentDetailAPI.as_view(), name="payment_detail"),
    path(
        "<int:transaction_id>/history/",
        PaymentHistoryAPI.as_view(),
        name="payment_history",
    ),
    path(
        "<int:transaction_id>/cancel/", CancelPaymentAPI.as_view(), name="cancel_payment"
    ),
]
