"""
URL configuration for the course payment backend.

Learner endpoints live under /api/core/, admin endpoints under /api/admin/
and token issuance under /api/auth/. Interactive docs are served at
/swagger/ and /redoc/.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path, re_path
from django.views.generic import RedirectView
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

# Define URL patterns first, without Swagger URLs
api_urlpatterns = [
    path("api/admin/", include("coursepay.apis.admin.urls")),
    path("api/auth/", include("coursepay.apis.auth.urls")),
    path("api/core/", include("coursepay.apis.core.urls")),
]

# Then create schema view with the API patterns
schema_view = get_schema_view(
    openapi.Info(
        title="Course Payments API",
        default_version="v1",
        description="Pricing, promo codes, bundles, manual payment "
        "verification and refunds for the learning platform.",
        license=openapi.License(name="BSD License"),
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
    patterns=api_urlpatterns,
)

urlpatterns = [
    *api_urlpatterns,
    path("django-admin/", admin.site.urls),
    re_path(
        r"^swagger(?P<format>\.json|\.yaml)$",
        schema_view.without_ui(cache_timeout=0),
        name="schema-json",
    ),
    path(
        "swagger/",
        schema_view.with_ui("swagger", cache_timeout=0),
        name="schema-swagger-ui",
    ),
    path("redoc/", schema_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
    path("", RedirectView.as_view(url="/swagger/", permanent=False)),
]

urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
