from django.urls import path

from .api import (
    CreatePromoCodeAPI,
    DeactivatePromoCodeAPI,
    ListPromoCodesAPI,
    PromoCodeStatsAPI,
    UpdatePromoCodeAPI,
)

urlpatterns = [
    path("list/", ListPromoCodesAPI.as_view(), name="list_promocodes"),
    path("create/", CreatePromoCodeAPI.as_view(), name="create_promocode"),
    path(
        "<int:promo_code_id>/update/",
        UpdatePromoCodeAPI.as_view(),
        name="update_promocode",
    ),
    path(
        "<int:promo_code_id>/deactivate/",
        DeactivatePromoCodeAPI.as_view(),
        name="deactivate_promocode",
    ),
    path("stats/", PromoCodeStatsAPI.as_view(), name="promocode_stats"),
]
