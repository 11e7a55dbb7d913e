from django.urls import path

from .api import (
    BundleCoursesAPI,
    CreateBundleAPI,
    DeactivateBundleAPI,
    ListBundlesAdminAPI,
    UpdateBundleAPI,
)

urlpatterns = [
    path("list/", ListBundlesAdminAPI.as_view(), name="admin_list_bundles"),
    path("create/", CreateBundleAPI.as_view(), name="create_bundle"),
    path("<int:bundle_id>/update/", UpdateBundleAPI.as_view(), name="update_bundle"),
    path(
        "<int:bundle_id>/deactivate/",
        DeactivateBundleAPI.as_view(),
        name="deactivate_bundle",
    ),
    path("<int:bundle_id>/courses/", BundleCoursesAPI.as_view(), name="bundle_courses"),
]
