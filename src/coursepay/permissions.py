# permissions.py
from rest_framework.permissions import BasePermission

from coursepay.models.user import Role


class IsUserAccess(BasePermission):
    """
    Learner endpoints live under /api/core/, admin endpoints under /api/admin/.

    A learner token cannot reach admin endpoints and an admin token cannot
    act as a learner.
    """

    def has_permission(self, request, view):
        user_id = getattr(request, "user_id", None)
        role = getattr(request, "role", None)

        if not user_id:
            return False

        # Check the path to differentiate between 'core' and 'admin'
        is_core_path = request.path.startswith("/api/core/")
        is_admin_path = request.path.startswith("/api/admin/")

        if is_core_path and role == Role.USER:
            return True

        return bool(is_admin_path and role == Role.ADMIN)
