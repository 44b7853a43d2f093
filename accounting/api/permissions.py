# accounting/api/permissions.py

from rest_framework.permissions import BasePermission


class HasActionPermission(BasePermission):
    """
    Django model permission per ViewSet action.

    POLICY:
    - view.action_permissions maps action name -> "app_label.codename"
    - actions missing from the map are denied
    """

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "action_permissions", {}).get(view.action)
        if required is None:
            return False
        return user.has_perm(required)
