from django.urls import path

from .apis import BundleDetailAPI, ListBundlesAPI, ListCoursesAPI, ListPaymentMethodsAPI

urlpatterns = [
    path("courses/", ListCoursesAPI.as_view(), name="list_courses"),
    path("bundles/", ListBundlesAPI.as_view(), name="list_bundles"),
    path("bundles/<int:bundle_id>/", BundleDetailAPI.as_view(), name="bundle_detail"),
    path(
        "payment-methods/", ListPaymentMethodsAPI.as_view(), name="list_payment_methods"
    ),
]
